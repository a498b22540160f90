from datetime import datetime, timedelta

import pytest

from app.schemas.profile import (
    Progress,
    QuizDraft,
    Roadmap,
    RoadmapPlan,
    RoadmapStep,
    SkillGap,
)
from app.services import roadmap_service
from app.services.roadmap_service import StepUpdateRefused


def gap(skill, priority="medium"):
    return SkillGap(skill=skill, current_level="beginner", required_level="intermediate", priority=priority)


def roadmap_of(*skills):
    return Roadmap(steps=[RoadmapStep(skill=s, gap_skill=s, order=i + 1) for i, s in enumerate(skills)])


def quiz_draft(count=5, answer="B"):
    return QuizDraft.model_validate({"questions": [
        {
            "question": f"Question {i}",
            "options": {"A": "a", "B": "b", "C": "c", "D": "d"},
            "correctAnswer": answer,
        }
        for i in range(count)
    ]})


# ---------- plan alignment ----------

def test_alignment_follows_gap_order_and_tags_steps():
    gaps = [gap("Docker"), gap("Kubernetes"), gap("Linux")]
    plan = RoadmapPlan.model_validate({"steps": [
        {"skill": "linux", "resources": ["Linux Journey"], "estimatedTime": "2 weeks"},
        {"skill": "Docker", "resources": [{"name": "Docker Docs", "url": "https://docs.docker.com"}]},
        {"skill": "Kubernetes", "resources": []},
        {"skill": "Terraform", "resources": []},
    ], "totalDuration": "2 months"})

    roadmap = roadmap_service.align_plan_to_gaps(plan, gaps)

    assert [s.gap_skill for s in roadmap.steps] == ["Docker", "Kubernetes", "Linux"]
    assert [s.skill for s in roadmap.steps] == ["Docker", "Kubernetes", "linux"]
    assert [s.order for s in roadmap.steps] == [1, 2, 3]
    assert all(s.status == "not_started" for s in roadmap.steps)
    assert roadmap.steps[0].resources == ["Docker Docs"]
    assert roadmap.total_duration == "2 months"


def test_alignment_fills_missing_steps_from_fallback():
    gaps = [gap("Docker"), gap("Go")]
    plan = RoadmapPlan.model_validate({"steps": [{"skill": "Docker"}]})

    roadmap = roadmap_service.align_plan_to_gaps(plan, gaps)

    assert len(roadmap.steps) == len(gaps)
    assert roadmap.steps[1].skill == "Go"
    assert len(roadmap.steps[1].resources) == 3


def test_renamed_step_in_same_slot_is_kept():
    gaps = [gap("AWS/Cloud Services")]
    plan = RoadmapPlan.model_validate({"steps": [{"skill": "AWS", "description": "Learn EC2 and S3"}]})

    roadmap = roadmap_service.align_plan_to_gaps(plan, gaps)

    assert roadmap.steps[0].skill == "AWS"
    assert roadmap.steps[0].gap_skill == "AWS/Cloud Services"
    assert roadmap.steps[0].description == "Learn EC2 and S3"


def test_gap_for_step_prefers_key_over_position():
    gaps = [gap("Docker", "critical"), gap("Git", "low")]
    step = RoadmapStep(skill="Git basics", gap_skill="Git")
    assert roadmap_service.gap_for_step(step, 0, gaps).skill == "Git"

    legacy = RoadmapStep(skill="Something")
    assert roadmap_service.gap_for_step(legacy, 1, gaps).skill == "Git"
    assert roadmap_service.gap_for_step(legacy, 5, gaps) is None


# ---------- status updates ----------

@pytest.mark.parametrize("completed, total, expected", [
    (0, 3, 0), (1, 3, 33), (2, 3, 67), (3, 3, 100), (1, 2, 50), (1, 8, 13),
])
def test_overall_completion_rounds(completed, total, expected):
    roadmap = roadmap_of(*[f"skill-{i}" for i in range(total)])
    progress = Progress(total_skills=total)
    for i in range(completed):
        progress = roadmap_service.update_step_status(roadmap, progress, i, "completed")

    assert progress.overall_completion == expected
    assert progress.skills_completed == completed


def test_repeating_an_update_is_idempotent():
    roadmap = roadmap_of("Docker", "Git", "Linux")
    first = roadmap_service.update_step_status(roadmap, Progress(), 1, "completed")
    completed_at = roadmap.steps[1].completed_at
    second = roadmap_service.update_step_status(roadmap, first, 1, "completed")

    assert first.overall_completion == second.overall_completion == 33
    assert roadmap.steps[1].completed_at == completed_at


def test_leaving_completed_clears_timestamp():
    roadmap = roadmap_of("Docker")
    roadmap_service.update_step_status(roadmap, Progress(), 0, "completed")
    progress = roadmap_service.update_step_status(roadmap, Progress(), 0, "in_progress")

    assert roadmap.steps[0].completed_at is None
    assert progress.overall_completion == 0


def test_unpassed_quiz_blocks_completion_without_mutation():
    roadmap = roadmap_of("Docker")
    roadmap.steps[0].status = "in_progress"
    roadmap.steps[0].quiz = roadmap_service.new_quiz(quiz_draft())

    with pytest.raises(StepUpdateRefused):
        roadmap_service.update_step_status(roadmap, Progress(), 0, "completed")

    assert roadmap.steps[0].status == "in_progress"
    assert roadmap.steps[0].completed_at is None


def test_passed_quiz_allows_completion():
    roadmap = roadmap_of("Docker")
    quiz = roadmap_service.new_quiz(quiz_draft())
    roadmap_service.score_quiz(quiz, {i: "B" for i in range(5)})
    roadmap.steps[0].quiz = quiz

    progress = roadmap_service.update_step_status(roadmap, Progress(), 0, "completed")
    assert progress.overall_completion == 100


def test_other_statuses_ignore_quiz():
    roadmap = roadmap_of("Docker")
    roadmap.steps[0].quiz = roadmap_service.new_quiz(quiz_draft())
    roadmap_service.update_step_status(roadmap, Progress(), 0, "in_progress")
    assert roadmap.steps[0].status == "in_progress"


# ---------- quiz scoring ----------

@pytest.mark.parametrize("correct, passed", [(5, True), (4, True), (3, False), (0, False)])
def test_quiz_pass_rule_for_five_questions(correct, passed):
    quiz = roadmap_service.new_quiz(quiz_draft(5, answer="C"))
    answers = {i: ("C" if i < correct else "A") for i in range(5)}

    assert roadmap_service.score_quiz(quiz, answers) == correct
    assert quiz.passed is passed
    assert (quiz.passed_at is not None) is passed
    assert [q.is_correct for q in quiz.questions] == [i < correct for i in range(5)]


def test_failed_retake_keeps_pass_timestamp():
    quiz = roadmap_service.new_quiz(quiz_draft(5, answer="C"))
    roadmap_service.score_quiz(quiz, {i: "C" for i in range(5)})
    passed_at = quiz.passed_at

    roadmap_service.score_quiz(quiz, {i: "A" for i in range(5)})

    assert quiz.passed is False
    assert quiz.passed_at == passed_at


def test_pass_threshold():
    assert roadmap_service.pass_threshold(5) == 4
    assert roadmap_service.pass_threshold(1) == 1
    assert roadmap_service.pass_threshold(10) == 8


def test_new_quiz_clears_answers():
    draft = quiz_draft(2)
    draft.questions[0].user_answer = "A"
    quiz = roadmap_service.new_quiz(draft)
    assert quiz.questions[0].user_answer is None
    assert quiz.passed is False
    assert quiz.generated_at is not None


# ---------- accessibility & timeline ----------

def test_accessibility_without_urgent_gaps_uses_completion():
    gaps = [gap("Git", "low"), gap("Linux", "medium")]
    roadmap = roadmap_of("Git", "Linux")
    for i in range(2):
        roadmap_service.update_step_status(roadmap, Progress(), i, "completed")

    assert roadmap_service.job_accessibility(roadmap, gaps, 100) == 100
    assert roadmap_service.job_accessibility(roadmap, gaps, 50) == 50


def test_accessibility_counts_completed_urgent_gaps():
    gaps = [gap("Docker", "critical"), gap("Kubernetes", "high"), gap("Git", "low")]
    roadmap = roadmap_of("Docker", "Kubernetes", "Git")
    roadmap_service.update_step_status(roadmap, Progress(), 0, "completed")
    roadmap_service.update_step_status(roadmap, Progress(), 2, "completed")

    assert roadmap_service.job_accessibility(roadmap, gaps, 67) == 50


def test_accessibility_pairs_by_gap_key_not_position():
    gaps = [gap("Docker", "critical"), gap("Git", "low")]
    # Steps stored in the opposite order of the gaps
    roadmap = Roadmap(steps=[
        RoadmapStep(skill="Git", gap_skill="Git", status="completed"),
        RoadmapStep(skill="Docker", gap_skill="Docker"),
    ])
    assert roadmap_service.job_accessibility(roadmap, gaps, 50) == 0


def test_repeated_gap_names_pair_by_position():
    gaps = [gap("Docker", "high"), gap("Docker", "low")]
    roadmap = roadmap_of("Docker", "Docker")

    assert roadmap_service.gap_for_step(roadmap.steps[1], 1, gaps) is gaps[1]

    roadmap_service.update_step_status(roadmap, Progress(), 1, "completed")
    assert roadmap_service.job_accessibility(roadmap, gaps, 50) == 0

    roadmap_service.update_step_status(roadmap, Progress(), 0, "completed")
    accessibility = roadmap_service.job_accessibility(roadmap, gaps, 100)
    assert accessibility == 100
    Progress.model_validate(Progress(job_accessibility=accessibility).to_json())


def test_accessibility_never_exceeds_one_hundred():
    # Legacy steps tagged with the same skill, out of position
    gaps = [gap("Docker", "critical"), gap("Git", "low")]
    roadmap = Roadmap(steps=[
        RoadmapStep(skill="Docker", gap_skill="Docker", status="completed"),
        RoadmapStep(skill="Docker again", gap_skill="Docker", status="completed"),
    ])
    assert roadmap_service.job_accessibility(roadmap, gaps, 100) == 100


def test_accessibility_is_zero_without_steps():
    assert roadmap_service.job_accessibility(Roadmap(), [gap("Docker", "critical")], 0) == 0


def test_completion_timeline_buckets_by_day():
    today = datetime(2024, 3, 31, 15, 0)
    roadmap = roadmap_of("A", "B", "C", "D")
    roadmap.steps[0].completed_at = today - timedelta(hours=2)
    roadmap.steps[1].completed_at = today - timedelta(hours=3)
    roadmap.steps[2].completed_at = today - timedelta(days=3)
    roadmap.steps[3].completed_at = today - timedelta(days=45)

    timeline = roadmap_service.completion_timeline(roadmap, today=today)

    assert len(timeline) == 30
    assert timeline[0]["date"] == "2024-03-02"
    assert timeline[-1] == {"date": "2024-03-31", "completed": 2}
    assert timeline[-4] == {"date": "2024-03-28", "completed": 1}
    assert sum(day["completed"] for day in timeline) == 3
