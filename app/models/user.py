from sqlalchemy import Column, Integer, String, DateTime, JSON
from datetime import datetime
from app.database import Base
import bcrypt

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)

    # Career profile, stored as camelCase JSON documents (see app.schemas.profile)
    resume = Column(JSON, nullable=True)  # {text, fileName, uploadedAt}
    selected_job_role = Column(JSON, nullable=True)  # {roleId, roleName, selectedAt}
    skill_gap_analysis = Column(JSON, nullable=True)  # {gaps, summary, jobRoleId, analyzedAt}
    roadmap = Column(JSON, nullable=True)  # {steps, totalDuration, createdAt}
    progress = Column(JSON, nullable=True)  # {overallCompletion, skillsCompleted, ...}

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password using bcrypt"""
        return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')

    def verify_password(self, password: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))
        except ValueError:
            return False

    @classmethod
    def create_user(cls, name: str, email: str, password: str):
        return cls(
            name=name.strip(),
            email=email.strip().lower(),
            password_hash=cls.hash_password(password),
        )
