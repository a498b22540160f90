"""
Skill Gap Analysis API Routes

Compares the stored resume against a catalogue or custom job role.
Generation errors propagate to the handlers registered in app.main.
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from typing import Optional, List, Any
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.models.job_role import JobRole
from app.models.user import User
from app.middleware.auth import get_current_user
from app.middleware.rate_limit import limiter, AI_LIMIT
from app.schemas.profile import (
    InvalidRequiredSkill,
    JobRoleContext,
    Progress,
    SelectedJobRole,
    SkillGapAnalysis,
    normalize_required_skills,
)
from app.services.orchestrator import GenerationOrchestrator, get_orchestrator
from app.services.profile_store import load_analysis, load_resume, load_selected_role, save_profile
from app.utils.logger import logger

router = APIRouter()


class CustomJobRole(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    requiredSkills: List[Any] = []


class AnalysisRequest(BaseModel):
    jobRoleId: Optional[int] = None
    customJobRole: Optional[CustomJobRole] = None


def _role_summary(role: JobRoleContext) -> dict:
    return {"id": role.id, "title": role.title, "description": role.description}


@router.post("")
@limiter.limit(AI_LIMIT)
async def analyze_skill_gaps(
    request: Request,
    body: AnalysisRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """Run gap analysis, store it and reset progress"""
    resume = load_resume(current_user)
    if not resume or not resume.text:
        raise HTTPException(status_code=400, detail="Please upload your resume first")

    if body.customJobRole:
        custom = body.customJobRole
        if not custom.title or not custom.description:
            raise HTTPException(status_code=400, detail="Custom job role must include title and description")
        try:
            required_skills = normalize_required_skills(custom.requiredSkills)
        except InvalidRequiredSkill as e:
            raise HTTPException(status_code=400, detail=str(e))
        job_role = JobRoleContext(
            title=custom.title,
            description=custom.description,
            required_skills=required_skills,
        )
    else:
        if not body.jobRoleId:
            raise HTTPException(status_code=400, detail="Please select a job role or provide custom job role")
        role = await db.get(JobRole, body.jobRoleId)
        if not role:
            raise HTTPException(status_code=404, detail="Job role not found")
        job_role = role.to_context()

    logger.info(f"[Analysis] User {current_user.id} analyzing against '{job_role.title}'")
    result = await orchestrator.analyze_gaps(resume.text, job_role)

    now = datetime.utcnow()
    analysis = SkillGapAnalysis(
        gaps=result.value.gaps,
        summary=result.value.summary,
        job_role_id=job_role.id,
        analyzed_at=now,
    )
    await save_profile(
        db,
        current_user,
        skill_gap_analysis=analysis,
        selected_job_role=SelectedJobRole(role_id=job_role.id, role_name=job_role.title, selected_at=now),
        progress=Progress(total_skills=len(analysis.gaps), last_updated=now),
    )

    payload = analysis.to_json()
    return {
        "gaps": payload["gaps"],
        "summary": payload["summary"],
        "analyzedAt": payload["analyzedAt"],
        "jobRole": _role_summary(job_role),
        "source": result.source,
    }


@router.get("")
async def get_analysis(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    analysis = load_analysis(current_user)
    if not analysis:
        raise HTTPException(status_code=404, detail="No analysis found. Please run analysis first.")

    selected = load_selected_role(current_user)
    role_id = (selected.role_id if selected else None) or analysis.job_role_id
    role = await db.get(JobRole, role_id) if role_id else None

    payload = analysis.to_json()
    return {
        "gaps": payload["gaps"],
        "summary": payload["summary"],
        "analyzedAt": payload["analyzedAt"],
        "jobRole": _role_summary(role.to_context()) if role else None,
    }
