from fastapi import APIRouter, Depends
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.models.user import User
from app.middleware.auth import get_current_user
from app.schemas.profile import Progress, Roadmap
from app.services.profile_store import load_analysis, load_progress, load_roadmap, save_profile
from app.services.roadmap_service import completion_timeline, gap_for_step, job_accessibility

router = APIRouter()


@router.get("")
async def get_progress(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Stored progress with job accessibility recomputed from the roadmap"""
    if not current_user.progress:
        return Progress().to_json()

    progress = load_progress(current_user)
    roadmap = load_roadmap(current_user) or Roadmap()
    analysis = load_analysis(current_user)
    gaps = analysis.gaps if analysis else []

    accessibility = job_accessibility(roadmap, gaps, progress.overall_completion)
    if accessibility != progress.job_accessibility:
        progress = progress.model_copy(update={
            "job_accessibility": accessibility,
            "last_updated": datetime.utcnow(),
        })
        await save_profile(db, current_user, progress=progress)

    return progress.to_json()


@router.get("/detailed")
async def get_detailed_progress(current_user: User = Depends(get_current_user)):
    """Per-step status with gap priority, plus completions per day for 30 days"""
    roadmap = load_roadmap(current_user) or Roadmap()
    analysis = load_analysis(current_user)
    gaps = analysis.gaps if analysis else []

    skills = []
    for i, step in enumerate(roadmap.steps):
        gap = gap_for_step(step, i, gaps)
        skills.append({
            "skill": step.skill,
            "status": step.status,
            "priority": gap.priority if gap else "medium",
            "completedAt": step.completed_at.isoformat() if step.completed_at else None,
        })

    return {
        "overall": load_progress(current_user).overall_completion,
        "skills": skills,
        "timeline": completion_timeline(roadmap),
    }
