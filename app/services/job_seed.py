"""Starter job role catalogue, inserted on startup when the table is empty."""
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.job_role import JobRole


def _skill(skill: str, level: str, importance: str) -> dict:
    return {"skill": skill, "level": level, "importance": importance}


JOB_ROLES = [
    {
        "title": "Full Stack Developer",
        "description": "Develop and maintain web applications using both frontend and backend technologies",
        "category": "Software Development",
        "experience_level": "mid",
        "required_skills": [
            _skill("JavaScript", "advanced", "critical"),
            _skill("React", "intermediate", "high"),
            _skill("Node.js", "intermediate", "high"),
            _skill("Database Design", "intermediate", "medium"),
            _skill("RESTful APIs", "intermediate", "high"),
            _skill("Git", "intermediate", "medium"),
        ],
        "salary_min": 70000,
        "salary_max": 120000,
    },
    {
        "title": "Data Scientist",
        "description": "Analyze complex data sets to extract insights and build predictive models",
        "category": "Data Science",
        "experience_level": "mid",
        "required_skills": [
            _skill("Python", "advanced", "critical"),
            _skill("Machine Learning", "intermediate", "critical"),
            _skill("Statistics", "intermediate", "high"),
            _skill("SQL", "intermediate", "high"),
            _skill("Data Visualization", "intermediate", "medium"),
            _skill("TensorFlow/PyTorch", "beginner", "medium"),
        ],
        "salary_min": 90000,
        "salary_max": 150000,
    },
    {
        "title": "DevOps Engineer",
        "description": "Manage infrastructure, CI/CD pipelines, and ensure system reliability",
        "category": "DevOps",
        "experience_level": "mid",
        "required_skills": [
            _skill("Docker", "intermediate", "critical"),
            _skill("Kubernetes", "intermediate", "high"),
            _skill("AWS/Cloud Services", "intermediate", "critical"),
            _skill("Linux", "intermediate", "high"),
            _skill("CI/CD", "intermediate", "high"),
            _skill("Monitoring Tools", "beginner", "medium"),
        ],
        "salary_min": 80000,
        "salary_max": 130000,
    },
    {
        "title": "UI/UX Designer",
        "description": "Design user interfaces and create exceptional user experiences",
        "category": "Design",
        "experience_level": "mid",
        "required_skills": [
            _skill("Figma", "advanced", "critical"),
            _skill("User Research", "intermediate", "high"),
            _skill("Prototyping", "intermediate", "high"),
            _skill("Design Systems", "intermediate", "medium"),
            _skill("HTML/CSS", "beginner", "medium"),
            _skill("Accessibility", "beginner", "low"),
        ],
        "salary_min": 60000,
        "salary_max": 100000,
    },
    {
        "title": "Cloud Architect",
        "description": "Design and implement cloud infrastructure solutions",
        "category": "Cloud Computing",
        "experience_level": "senior",
        "required_skills": [
            _skill("AWS", "advanced", "critical"),
            _skill("Azure", "intermediate", "high"),
            _skill("Terraform", "intermediate", "high"),
            _skill("System Design", "advanced", "critical"),
            _skill("Security", "intermediate", "high"),
            _skill("Networking", "intermediate", "medium"),
        ],
        "salary_min": 120000,
        "salary_max": 180000,
    },
    {
        "title": "Mobile App Developer",
        "description": "Develop native or cross-platform mobile applications",
        "category": "Mobile Development",
        "experience_level": "mid",
        "required_skills": [
            _skill("React Native", "intermediate", "high"),
            _skill("Swift/Kotlin", "intermediate", "medium"),
            _skill("Mobile UI/UX", "intermediate", "high"),
            _skill("API Integration", "intermediate", "high"),
            _skill("App Store Deployment", "beginner", "medium"),
            _skill("Performance Optimization", "beginner", "medium"),
        ],
        "salary_min": 70000,
        "salary_max": 110000,
    },
]


async def seed_job_roles(db: AsyncSession) -> int:
    """Insert the starter roles if there are none yet. Returns rows inserted."""
    result = await db.execute(select(func.count(JobRole.id)))
    if result.scalar_one() > 0:
        return 0

    for data in JOB_ROLES:
        db.add(JobRole(**data))
    await db.commit()
    return len(JOB_ROLES)
