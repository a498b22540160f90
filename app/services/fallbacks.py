"""
Rule-based stand-ins for each generation task, used when the service is
unreachable or out of quota. Output is derived only from the inputs.
"""
from typing import List
from urllib.parse import quote_plus

from app.schemas.profile import (
    ChatContext,
    GapAnalysisResult,
    JobRoleContext,
    LearnerProgress,
    LearningResource,
    PlaylistEntry,
    PlaylistResult,
    QuizDraft,
    QuizOptions,
    QuizQuestion,
    RequiredSkill,
    ResourceResult,
    RoadmapPlan,
    RoadmapStepDraft,
    SkillGap,
)

COMMON_TECH_SKILLS = ["JavaScript", "Python", "Java", "React", "Node.js", "SQL", "Docker", "AWS", "Git"]
MAX_INFERRED_SKILLS = 5

_ONE_TIER_BELOW = {
    "expert": "advanced",
    "advanced": "intermediate",
    "intermediate": "beginner",
}


def default_current_level(required_level: str, mentioned: bool) -> str:
    if not mentioned:
        return "not_mentioned"
    return _ONE_TIER_BELOW.get(required_level, "beginner")


def fallback_summary(gaps: List[SkillGap], job_title: str) -> str:
    if not gaps:
        return f"Great job! Your resume already covers the key skills for {job_title}."
    urgent = sum(1 for g in gaps if g.priority in ("critical", "high"))
    if urgent:
        return f"Focus on the {urgent} highest-priority skills first to become job-ready for {job_title}."
    return f"Keep strengthening the listed skills to align fully with the {job_title} role requirements."


def _infer_skills(resume_lower: str, description_lower: str) -> List[RequiredSkill]:
    found = [
        s for s in COMMON_TECH_SKILLS
        if s.lower() in resume_lower or s.lower() in description_lower
    ]
    return [RequiredSkill(skill=s) for s in found[:MAX_INFERRED_SKILLS]]


def fallback_gap_analysis(resume_text: str, job_role: JobRoleContext) -> GapAnalysisResult:
    """Keyword match of each required skill against the resume text."""
    resume_lower = (resume_text or "").lower()
    skills = job_role.required_skills or _infer_skills(resume_lower, (job_role.description or "").lower())

    gaps = []
    for req in skills:
        mentioned = req.skill.lower() in resume_lower
        if mentioned:
            description = (
                f"Strengthen your proficiency in {req.skill} to reach the "
                f"{req.level} level expected for this role."
            )
        else:
            description = (
                f"Your resume does not mention {req.skill}. Start learning the "
                f"fundamentals and highlight relevant experience."
            )
        gaps.append(SkillGap(
            skill=req.skill,
            current_level=default_current_level(req.level, mentioned),
            required_level=req.level,
            priority=req.importance,
            description=description,
        ))

    summary = fallback_summary(gaps, job_role.title)
    if not gaps:
        gaps = [SkillGap(
            skill="General Skills",
            current_level="intermediate",
            required_level="advanced",
            priority="medium",
            description="Review the job description and identify key skills to develop.",
        )]
    return GapAnalysisResult(gaps=gaps, summary=summary)


def fallback_roadmap(gaps: List[SkillGap], job_role: JobRoleContext = None) -> RoadmapPlan:
    steps = []
    for index, gap in enumerate(gaps):
        steps.append(RoadmapStepDraft(
            skill=gap.skill,
            resources=[
                f"Complete a beginner-friendly {gap.skill} course on Coursera or Udemy",
                f"Work through official {gap.skill} documentation and tutorials",
                f"Build a small project highlighting your {gap.skill} proficiency",
            ],
            estimated_time="3-4 weeks" if gap.priority in ("critical", "high") else "1-2 weeks",
            description=f"Focus on {gap.skill} to move from {gap.current_level} to {gap.required_level}.",
            order=index + 1,
        ))
    total = f"{len(steps) * 2}-week plan (estimated)" if steps else "Up to date"
    return RoadmapPlan(steps=steps, total_duration=total)


def fallback_resources(skill: str, level: str) -> ResourceResult:
    return ResourceResult(resources=[
        LearningResource(
            type="course",
            name=f"{skill} fundamentals on Codecademy",
            url="https://www.codecademy.com",
            description=f"Interactive lessons to build {skill} basics.",
        ),
        LearningResource(
            type="tutorial",
            name=f"{skill} quickstart guide",
            url="",
            description="Follow a hands-on tutorial from official documentation or a reputable blog.",
        ),
        LearningResource(
            type="project",
            name=f"{skill} portfolio project",
            url="",
            description=f"Create a mini project applying {skill} at a {level} level.",
        ),
    ])


def youtube_search_url(skill: str, level: str) -> str:
    return "https://www.youtube.com/results?search_query=" + quote_plus(f"{skill} tutorial playlist {level}")


def fallback_playlists(skill: str, level: str) -> PlaylistResult:
    return PlaylistResult(playlists=[
        PlaylistEntry(
            title=f"{skill} Tutorial Playlist",
            channel="Search on YouTube",
            url=youtube_search_url(skill, level),
            description=f'Search YouTube for "{skill} {level} tutorial playlist"',
            video_count="Various",
            duration="Varies",
        )
    ])


def fallback_quiz(skill: str, topic: str, level: str) -> QuizDraft:
    return QuizDraft(questions=[
        QuizQuestion(
            question=f"What is a key concept in {topic}?",
            options=QuizOptions(
                A="Basic understanding",
                B="Advanced technique",
                C="Common practice",
                D="All of the above",
            ),
            correct_answer="D",
            explanation=f"All options are relevant to understanding {topic}.",
        )
    ])


def fallback_chat(message: str, context: ChatContext) -> str:
    return (
        f"You're currently focusing on {context.job_role or 'exploring roles'}. "
        f"You've completed about {context.progress}% of your roadmap. "
        f"You have {context.skill_gaps} skill gaps identified. "
        "Start by reviewing your highest priority skill gaps and choose one to work on today. "
        "Let me know which skill you want resources for!"
    )


def fallback_chat_enhanced(message: str, context: ChatContext, progress: LearnerProgress) -> str:
    parts = [f"You're working on {context.job_role or 'your career goals'} and are {context.progress}% through your roadmap."]
    if progress.completed_skills:
        parts.append(f"You've completed: {', '.join(progress.completed_skills)}.")
        parts.append("Great progress! Consider building a project combining these skills.")
    if progress.in_progress_skills:
        parts.append(f"Keep going with {', '.join(progress.in_progress_skills)}.")
    if context.skill_gaps:
        parts.append(f"Focus on your highest priority skill gaps ({context.skill_gaps} identified).")
    else:
        parts.append("Run a skill gap analysis to get a personalized roadmap.")
    parts.append("Would you like project recommendations or learning resources?")
    return " ".join(parts)
