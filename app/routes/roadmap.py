"""
Learning Roadmap API Routes

Roadmap generation from the stored gap analysis, step status updates,
per-step YouTube playlists and the quiz that gates step completion.
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.models.job_role import JobRole
from app.models.user import User
from app.middleware.auth import get_current_user
from app.middleware.rate_limit import limiter, AI_LIMIT
from app.schemas.profile import (
    ANSWER_KEYS,
    STEP_STATUSES,
    JobRoleContext,
    Roadmap,
    RoadmapStep,
    SelectedJobRole,
    SkillGapAnalysis,
)
from app.services.orchestrator import GenerationOrchestrator, get_orchestrator
from app.services.profile_store import (
    load_analysis,
    load_progress,
    load_roadmap,
    load_selected_role,
    save_profile,
)
from app.services.roadmap_service import (
    StepUpdateRefused,
    align_plan_to_gaps,
    gap_for_step,
    new_quiz,
    percent,
    score_quiz,
    update_step_status,
)
from app.utils.logger import logger

router = APIRouter()


class StepStatusRequest(BaseModel):
    status: Optional[str] = None


class QuizAnswer(BaseModel):
    questionIndex: int
    answer: str


class QuizSubmission(BaseModel):
    answers: Optional[List[QuizAnswer]] = None


def _require_roadmap(user: User) -> Roadmap:
    roadmap = load_roadmap(user)
    if not roadmap or not roadmap.steps:
        raise HTTPException(status_code=404, detail="No roadmap found")
    return roadmap


def _require_step(roadmap: Roadmap, step_index: int) -> RoadmapStep:
    if step_index < 0 or step_index >= len(roadmap.steps):
        raise HTTPException(status_code=400, detail="Invalid step index")
    return roadmap.steps[step_index]


def _step_level(user: User, step: RoadmapStep, step_index: int) -> str:
    """Required level of the step's gap, intermediate when unknown"""
    analysis = load_analysis(user)
    gap = gap_for_step(step, step_index, analysis.gaps) if analysis else None
    return gap.required_level if gap else "intermediate"


async def _target_role(db: AsyncSession, user: User, analysis: SkillGapAnalysis) -> JobRoleContext:
    """Catalogue role when it still exists, else one rebuilt from the analysis"""
    selected = load_selected_role(user)
    role_id = (selected.role_id if selected else None) or analysis.job_role_id
    role = await db.get(JobRole, role_id) if role_id else None
    if role:
        return role.to_context()

    return JobRoleContext(
        id=role_id,
        title=(selected.role_name if selected else None) or "Analyzed Role",
        description=analysis.summary or "Personalized roadmap based on your analysis",
        required_skills=[
            {"skill": g.skill, "level": g.required_level, "importance": g.priority}
            for g in analysis.gaps
        ],
    )


def _roadmap_payload(roadmap: Roadmap) -> dict:
    payload = roadmap.to_json()
    for step in payload["steps"]:
        # Answer keys stay server-side until submission
        if step.get("quiz"):
            step["quiz"] = {
                "questionCount": len(step["quiz"]["questions"]),
                "passed": step["quiz"]["passed"],
                "passedAt": step["quiz"]["passedAt"],
            }
    return payload


@router.post("")
@limiter.limit(AI_LIMIT)
async def generate_roadmap(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """Generate a roadmap with one step per gap, replacing any existing one"""
    analysis = load_analysis(current_user)
    if not analysis or not analysis.gaps:
        raise HTTPException(status_code=400, detail="Please run skill gap analysis first")

    job_role = await _target_role(db, current_user, analysis)
    result = await orchestrator.generate_roadmap(analysis.gaps, job_role)
    roadmap = align_plan_to_gaps(result.value, analysis.gaps)

    # Fresh steps start over, so does completion
    progress = load_progress(current_user).model_copy(update={
        "overall_completion": 0,
        "skills_completed": 0,
        "total_skills": len(roadmap.steps),
        "job_accessibility": 0,
        "last_updated": datetime.utcnow(),
    })
    parts = {"roadmap": roadmap, "progress": progress}
    selected = load_selected_role(current_user)
    if not selected or not selected.role_id:
        parts["selected_job_role"] = SelectedJobRole(
            role_id=job_role.id,
            role_name=job_role.title,
            selected_at=datetime.utcnow(),
        )
    await save_profile(db, current_user, **parts)

    logger.info(f"[Roadmap] User {current_user.id} roadmap generated with {len(roadmap.steps)} steps ({result.source})")
    return {**_roadmap_payload(roadmap), "source": result.source}


@router.get("")
async def get_roadmap(current_user: User = Depends(get_current_user)):
    roadmap = load_roadmap(current_user)
    if not roadmap or not roadmap.steps:
        raise HTTPException(status_code=404, detail="No roadmap found. Please generate roadmap first.")
    return _roadmap_payload(roadmap)


@router.put("/step/{step_index}")
async def update_step(
    step_index: int,
    body: StepStatusRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if body.status not in STEP_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")

    roadmap = _require_roadmap(current_user)
    _require_step(roadmap, step_index)

    try:
        progress = update_step_status(roadmap, load_progress(current_user), step_index, body.status)
    except StepUpdateRefused as e:
        return JSONResponse(status_code=400, content={"detail": str(e), "requiresQuiz": True})

    await save_profile(db, current_user, roadmap=roadmap, progress=progress)
    return {"message": "Step status updated", "progress": progress.to_json()}


@router.get("/step/{step_index}/youtube")
@limiter.limit(AI_LIMIT)
async def get_step_playlists(
    request: Request,
    step_index: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """Playlists for a step, generated once and then served from the roadmap"""
    roadmap = _require_roadmap(current_user)
    step = _require_step(roadmap, step_index)

    if step.youtube_playlists:
        return {"playlists": [p.to_json() for p in step.youtube_playlists]}

    result = await orchestrator.get_youtube_playlists(step.skill, _step_level(current_user, step, step_index))
    step.youtube_playlists = result.value.playlists
    await save_profile(db, current_user, roadmap=roadmap)
    return {"playlists": [p.to_json() for p in step.youtube_playlists], "source": result.source}


@router.post("/step/{step_index}/quiz")
@limiter.limit(AI_LIMIT)
async def get_step_quiz(
    request: Request,
    step_index: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """The step's open quiz, or a fresh one when there is none or it was passed.

    Questions never include the answer key.
    """
    roadmap = _require_roadmap(current_user)
    step = _require_step(roadmap, step_index)

    if not (step.quiz and step.quiz.has_questions and not step.quiz.passed):
        result = await orchestrator.generate_quiz(step.skill, step.skill, _step_level(current_user, step, step_index))
        step.quiz = new_quiz(result.value)
        await save_profile(db, current_user, roadmap=roadmap)
        logger.info(f"[Roadmap] Quiz generated for step {step_index} ({result.source})")

    return {
        "questions": [q.public_json() for q in step.quiz.questions],
        "generatedAt": step.quiz.to_json()["generatedAt"],
        "passed": step.quiz.passed,
    }


@router.post("/step/{step_index}/quiz/submit")
async def submit_step_quiz(
    step_index: int,
    body: QuizSubmission,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if body.answers is None:
        raise HTTPException(status_code=400, detail="Answers array is required")

    roadmap = _require_roadmap(current_user)
    step = _require_step(roadmap, step_index)

    quiz = step.quiz
    if not quiz or not quiz.has_questions:
        raise HTTPException(status_code=400, detail="No quiz found for this step. Generate quiz first.")
    if quiz.passed:
        raise HTTPException(status_code=400, detail="Quiz already passed. Generate a new quiz to retake it.")

    total = len(quiz.questions)
    if len(body.answers) != total:
        raise HTTPException(
            status_code=400,
            detail=f"Please answer all {total} questions. You provided {len(body.answers)} answers."
        )

    answers = {}
    for item in body.answers:
        if item.questionIndex < 0 or item.questionIndex >= total:
            raise HTTPException(status_code=400, detail=f"Invalid question index: {item.questionIndex}")
        if item.answer not in ANSWER_KEYS:
            raise HTTPException(status_code=400, detail=f"Invalid answer: {item.answer}. Must be A, B, C, or D.")
        if item.questionIndex in answers:
            raise HTTPException(status_code=400, detail=f"Duplicate answer for question {item.questionIndex}")
        answers[item.questionIndex] = item.answer

    correct = score_quiz(quiz, answers)
    await save_profile(db, current_user, roadmap=roadmap)

    logger.info(f"[Roadmap] Quiz for step {step_index} scored {correct}/{total}, passed={quiz.passed}")
    return {
        "passed": quiz.passed,
        "correctCount": correct,
        "totalQuestions": total,
        "score": percent(correct, total),
        "questions": [
            {
                "question": q.question,
                "userAnswer": q.user_answer,
                "correctAnswer": q.correct_answer,
                "isCorrect": q.is_correct,
                "explanation": q.explanation,
            }
            for q in quiz.questions
        ],
    }
