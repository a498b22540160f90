"""
Roadmap and progress bookkeeping: pairing steps with gaps, status changes,
quiz scoring and the progress numbers derived from them.
"""
import math
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from app.schemas.profile import (
    Progress,
    Quiz,
    QuizDraft,
    Roadmap,
    RoadmapPlan,
    RoadmapStep,
    SkillGap,
)
from app.services.fallbacks import fallback_roadmap

PASS_RATIO = 0.8
TIMELINE_DAYS = 30


def percent(part: int, whole: int) -> int:
    """Whole-number percentage, halves rounded up (1 of 8 is 13)."""
    if not whole:
        return 0
    return int(math.floor(100 * part / whole + 0.5))


class StepUpdateRefused(Exception):
    """Step cannot be completed until its quiz is passed."""


def align_plan_to_gaps(plan: RoadmapPlan, gaps: List[SkillGap]) -> Roadmap:
    """One step per gap, in gap order, each tagged with its gap's skill.

    Generated steps are matched to gaps by skill name (case-insensitive),
    falling back to position; gaps without a usable step get the rule-based
    step. Extra generated steps are dropped.
    """
    def key(skill: str) -> str:
        return skill.strip().lower()

    gap_names = {key(g.skill) for g in gaps}
    by_name: Dict[str, int] = {}
    for i, draft in enumerate(plan.steps):
        by_name.setdefault(key(draft.skill), i)

    generic = fallback_roadmap(gaps).steps
    used = set()
    steps = []
    for i, gap in enumerate(gaps):
        idx = by_name.get(key(gap.skill))
        # Renamed skill in the same slot
        if idx is None and i < len(plan.steps) and key(plan.steps[i].skill) not in gap_names:
            idx = i
        if idx is not None and idx not in used:
            used.add(idx)
            draft = plan.steps[idx]
        else:
            draft = generic[i]
        steps.append(RoadmapStep(
            skill=draft.skill,
            gap_skill=gap.skill,
            resources=draft.resources,
            estimated_time=draft.estimated_time,
            description=draft.description,
            order=i + 1,
            status="not_started",
        ))

    return Roadmap(
        steps=steps,
        total_duration=plan.total_duration,
        created_at=datetime.utcnow(),
    )


def gap_for_step(step: RoadmapStep, index: int, gaps: List[SkillGap]) -> Optional[SkillGap]:
    """The gap a step was generated from.

    The gap at the step's own position wins when its skill matches the step's
    gap_skill, so repeated skill names still pair one to one. Otherwise the
    first gap with that skill, else the gap at the same position.
    """
    if step.gap_skill:
        if index < len(gaps) and gaps[index].skill == step.gap_skill:
            return gaps[index]
        for gap in gaps:
            if gap.skill == step.gap_skill:
                return gap
    if index < len(gaps):
        return gaps[index]
    return None


def overall_completion(roadmap: Roadmap) -> int:
    if not roadmap.steps:
        return 0
    completed = sum(1 for s in roadmap.steps if s.status == "completed")
    return percent(completed, len(roadmap.steps))


def update_step_status(roadmap: Roadmap, progress: Progress, index: int, status: str) -> Progress:
    """Apply a status change and recompute completion.

    Raises StepUpdateRefused, leaving the step untouched, when completing a
    step whose quiz exists but has not been passed.
    """
    step = roadmap.steps[index]

    if status == "completed":
        if step.quiz and step.quiz.has_questions and not step.quiz.passed:
            raise StepUpdateRefused(
                "Please complete and pass the quiz before marking this step as completed"
            )
        if step.status != "completed" or step.completed_at is None:
            step.completed_at = datetime.utcnow()
    else:
        step.completed_at = None

    step.status = status

    completed = sum(1 for s in roadmap.steps if s.status == "completed")
    return progress.model_copy(update={
        "skills_completed": completed,
        "overall_completion": overall_completion(roadmap),
        "last_updated": datetime.utcnow(),
    })


def job_accessibility(roadmap: Roadmap, gaps: List[SkillGap], completion: int) -> int:
    """Share of critical/high gaps whose step is completed.

    With no critical/high gaps, overall completion stands in.
    """
    if not roadmap.steps:
        return 0
    urgent = [g for g in gaps if g.priority in ("critical", "high")]
    if not urgent:
        return completion

    completed_urgent = 0
    for i, step in enumerate(roadmap.steps):
        gap = gap_for_step(step, i, gaps)
        if step.status == "completed" and gap is not None and gap.priority in ("critical", "high"):
            completed_urgent += 1
    return min(100, percent(completed_urgent, len(urgent)))


def new_quiz(draft: QuizDraft) -> Quiz:
    return Quiz(
        questions=[q.model_copy(update={"user_answer": None, "is_correct": None}) for q in draft.questions],
        generated_at=datetime.utcnow(),
        passed=False,
        passed_at=None,
    )


def pass_threshold(question_count: int) -> int:
    return math.ceil(question_count * PASS_RATIO)


def score_quiz(quiz: Quiz, answers: Dict[int, str]) -> int:
    """Record answers on the quiz, set passed/passed_at, return correct count.

    Answers must already be validated (every index present, values A-D).
    """
    correct = 0
    for index, answer in answers.items():
        question = quiz.questions[index]
        question.user_answer = answer
        question.is_correct = answer == question.correct_answer
        if question.is_correct:
            correct += 1

    quiz.passed = correct >= pass_threshold(len(quiz.questions))
    if quiz.passed:
        quiz.passed_at = datetime.utcnow()
    return correct


def completion_timeline(roadmap: Roadmap, today: datetime = None, days: int = TIMELINE_DAYS) -> List[dict]:
    """Completed-step counts per day for the last `days` days, oldest first."""
    today = (today or datetime.utcnow()).date()
    counts: Dict = {}
    for step in roadmap.steps:
        if step.completed_at:
            day = step.completed_at.date()
            counts[day] = counts.get(day, 0) + 1

    timeline = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        timeline.append({"date": day.isoformat(), "completed": counts.get(day, 0)})
    return timeline
