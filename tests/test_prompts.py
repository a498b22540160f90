from app.schemas.profile import ChatContext, JobRoleContext, LearnerProgress, SkillGap
from app.services import prompts


def test_gap_prompt_lists_required_skills():
    role = JobRoleContext(title="DevOps Engineer", description="Run infra", required_skills=["Docker", "Linux"])
    prompt = prompts.build_gap_analysis_prompt("Bash scripting", role)

    assert "Bash scripting" in prompt
    assert "Job Role: DevOps Engineer" in prompt
    assert "Required Skills: Docker, Linux" in prompt
    assert '"currentLevel"' in prompt


def test_gap_prompt_without_skills_asks_for_extraction():
    role = JobRoleContext(title="Analyst", description="Crunch numbers")
    prompt = prompts.build_gap_analysis_prompt("Excel", role)
    assert "Extract key skills from the job description" in prompt


def test_roadmap_prompt_embeds_gaps_in_order():
    gaps = [
        SkillGap(skill="Docker", current_level="not_mentioned", required_level="intermediate", priority="critical"),
        SkillGap(skill="Git", current_level="beginner", required_level="intermediate", priority="low"),
    ]
    role = JobRoleContext(title="DevOps Engineer")
    prompt = prompts.build_roadmap_prompt(gaps, role)

    assert prompt.index('"Docker"') < prompt.index('"Git"')
    assert "one step per skill gap" in prompt
    assert '"requiredLevel": "intermediate"' in prompt


def test_quiz_prompt_asks_for_five_questions():
    prompt = prompts.build_quiz_prompt("Docker", "Volumes", "beginner")
    assert f"exactly {prompts.QUIZ_QUESTION_COUNT}" in prompt
    assert '"Volumes"' in prompt
    assert '"correctAnswer"' in prompt


def test_resource_and_playlist_prompts_mention_skill_and_level():
    for build in (prompts.build_resources_prompt, prompts.build_playlists_prompt):
        prompt = build("Kubernetes", "advanced")
        assert '"Kubernetes"' in prompt
        assert '"advanced"' in prompt


def test_chat_prompts_carry_context():
    context = ChatContext(job_role="Data Scientist", progress=25, skill_gaps=4)
    assert "Job Role: Data Scientist" in prompts.build_chat_prompt("How do I start?", context)

    enhanced = prompts.build_enhanced_chat_prompt(
        "What should I build?",
        context,
        LearnerProgress(completed_skills=["SQL", "Statistics"], roadmap_step_count=4),
    )
    assert "Completed Skills: SQL, Statistics" in enhanced
    assert "Skills In Progress: None" in enhanced
    assert "4 steps" in enhanced
    assert "What should I build?" in enhanced
