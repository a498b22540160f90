from sqlalchemy import Column, Integer, String, DateTime, Text, JSON
from datetime import datetime
from app.database import Base
from app.schemas.profile import JobRoleContext

class JobRole(Base):
    __tablename__ = "job_roles"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, unique=True, nullable=False, index=True)
    description = Column(Text, nullable=False)
    category = Column(String, nullable=False, index=True)
    experience_level = Column(String, default="mid")  # entry/mid/senior/lead

    # [{skill, level, importance}]
    required_skills = Column(JSON, default=list)

    salary_min = Column(Integer, nullable=True)
    salary_max = Column(Integer, nullable=True)
    salary_currency = Column(String, default="USD")

    created_at = Column(DateTime, default=datetime.utcnow)

    def to_context(self) -> JobRoleContext:
        return JobRoleContext(
            id=self.id,
            title=self.title,
            description=self.description or "",
            required_skills=self.required_skills or [],
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "experienceLevel": self.experience_level,
            "requiredSkills": [s.to_json() for s in self.to_context().required_skills],
            "averageSalary": {
                "min": self.salary_min,
                "max": self.salary_max,
                "currency": self.salary_currency,
            },
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
