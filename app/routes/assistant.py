"""
Career Assistant API Routes

Chat grounded in the user's role, gaps and roadmap progress
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from typing import Optional
from app.models.user import User
from app.middleware.auth import get_current_user
from app.middleware.rate_limit import limiter, AI_LIMIT
from app.schemas.profile import ChatContext, LearnerProgress
from app.services.orchestrator import GenerationOrchestrator, get_orchestrator
from app.services.profile_store import load_analysis, load_progress, load_roadmap, load_selected_role

router = APIRouter()


class ChatRequest(BaseModel):
    message: Optional[str] = None


def build_chat_context(user: User) -> ChatContext:
    selected = load_selected_role(user)
    analysis = load_analysis(user)
    return ChatContext(
        job_role=selected.role_name if selected else None,
        progress=load_progress(user).overall_completion,
        skill_gaps=len(analysis.gaps) if analysis else 0,
    )


def build_learner_progress(user: User) -> LearnerProgress:
    roadmap = load_roadmap(user)
    steps = roadmap.steps if roadmap else []
    return LearnerProgress(
        completed_skills=[s.skill for s in steps if s.status == "completed"],
        in_progress_skills=[s.skill for s in steps if s.status == "in_progress"],
        roadmap_step_count=len(steps),
    )


@router.post("/chat")
@limiter.limit(AI_LIMIT)
async def chat_with_assistant(
    request: Request,
    body: ChatRequest,
    current_user: User = Depends(get_current_user),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    if not body.message or not body.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")

    result = await orchestrator.chat_enhanced(
        body.message.strip(),
        build_chat_context(current_user),
        build_learner_progress(current_user),
    )
    return {"response": result.value, "source": result.source}
