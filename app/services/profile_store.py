"""
Typed access to the JSON profile columns on User.

Columns hold camelCase documents; these helpers validate them into the
records in app.schemas.profile and write them back. Saves are
last-writer-wins.
"""
from datetime import datetime
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.schemas.profile import (
    CamelModel,
    Progress,
    ResumeRecord,
    Roadmap,
    SelectedJobRole,
    SkillGapAnalysis,
)
from app.utils.logger import logger


def _load(user: User, column: str, schema: type) -> Optional[CamelModel]:
    data = getattr(user, column)
    if not data:
        return None
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        # Unreadable document counts as absent, the next write replaces it
        logger.warning(f"[Profile] Discarding invalid {column} for user {user.id}: {e.error_count()} error(s)")
        return None


def load_resume(user: User) -> Optional[ResumeRecord]:
    return _load(user, "resume", ResumeRecord)


def load_selected_role(user: User) -> Optional[SelectedJobRole]:
    return _load(user, "selected_job_role", SelectedJobRole)


def load_analysis(user: User) -> Optional[SkillGapAnalysis]:
    return _load(user, "skill_gap_analysis", SkillGapAnalysis)


def load_roadmap(user: User) -> Optional[Roadmap]:
    return _load(user, "roadmap", Roadmap)


def load_progress(user: User) -> Progress:
    return _load(user, "progress", Progress) or Progress()


async def save_profile(db: AsyncSession, user: User, **parts: Optional[CamelModel]) -> None:
    """Write the given parts (resume=..., roadmap=..., ...) and commit."""
    for column, record in parts.items():
        setattr(user, column, record.to_json() if record is not None else None)
    user.updated_at = datetime.utcnow()
    await db.commit()
