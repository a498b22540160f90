from fastapi import APIRouter, Depends, HTTPException, Request
from app.models.user import User
from app.middleware.auth import get_current_user
from app.middleware.rate_limit import limiter, AI_LIMIT
from app.services.orchestrator import GenerationOrchestrator, get_orchestrator

router = APIRouter()


@router.get("/{skill}")
@limiter.limit(AI_LIMIT)
async def get_learning_resources(
    request: Request,
    skill: str,
    level: str = "intermediate",
    current_user: User = Depends(get_current_user),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """Courses, docs and practice material for one skill"""
    if not skill.strip():
        raise HTTPException(status_code=400, detail="Skill name is required")

    result = await orchestrator.get_learning_resources(skill.strip(), level or "intermediate")
    return {**result.value.to_json(), "source": result.source}
