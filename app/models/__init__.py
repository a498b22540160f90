# Database models package
from app.models.user import User
from app.models.job_role import JobRole

__all__ = [
    "User",
    "JobRole",
]
