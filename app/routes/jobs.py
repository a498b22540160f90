"""
Job Role API Routes

Catalogue of target roles the skill gap analysis runs against
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from typing import Optional, List, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.database import get_db
from app.models.job_role import JobRole
from app.models.user import User
from app.middleware.auth import get_current_user
from app.schemas.profile import InvalidRequiredSkill, normalize_required_skills
from app.utils.logger import logger

router = APIRouter()


class SalaryRange(BaseModel):
    min: Optional[int] = None
    max: Optional[int] = None
    currency: str = "USD"


class CreateJobRoleRequest(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    experienceLevel: str = "mid"
    requiredSkills: List[Any] = Field(default_factory=list)  # strings or {skill, level, importance}
    averageSalary: Optional[SalaryRange] = None


@router.get("")
async def list_job_roles(db: AsyncSession = Depends(get_db)):
    """All job roles, sorted by title"""
    result = await db.execute(select(JobRole).order_by(JobRole.title))
    return [role.to_dict() for role in result.scalars().all()]


@router.get("/{role_id}")
async def get_job_role(role_id: int, db: AsyncSession = Depends(get_db)):
    role = await db.get(JobRole, role_id)
    if not role:
        raise HTTPException(status_code=404, detail="Job role not found")
    return role.to_dict()


@router.post("", status_code=201)
async def create_job_role(
    role_data: CreateJobRoleRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Add a role to the catalogue. Required skills are normalized on the way in."""
    existing = await db.execute(select(JobRole).where(JobRole.title == role_data.title.strip()))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="A job role with this title already exists")

    try:
        required_skills = normalize_required_skills(role_data.requiredSkills)
    except InvalidRequiredSkill as e:
        raise HTTPException(status_code=400, detail=str(e))

    salary = role_data.averageSalary or SalaryRange()
    role = JobRole(
        title=role_data.title.strip(),
        description=role_data.description,
        category=role_data.category,
        experience_level=role_data.experienceLevel,
        required_skills=[s.to_json() for s in required_skills],
        salary_min=salary.min,
        salary_max=salary.max,
        salary_currency=salary.currency,
    )
    db.add(role)
    await db.commit()
    await db.refresh(role)

    logger.info(f"[Jobs] User {current_user.id} created job role {role.id}: {role.title}")
    return role.to_dict()
