"""
Pydantic records for a user's career profile: skill gaps, roadmap, quizzes,
progress. Field names are snake_case in Python and camelCase on the wire
(and in what the model is asked to return).
"""
from typing import List, Literal, Optional, Union, Any
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel


CURRENT_LEVELS = ("beginner", "intermediate", "advanced", "expert", "not_mentioned")
REQUIRED_LEVELS = ("beginner", "intermediate", "advanced", "expert")
PRIORITIES = ("low", "medium", "high", "critical")
STEP_STATUSES = ("not_started", "in_progress", "completed")
ANSWER_KEYS = ("A", "B", "C", "D")

CurrentLevel = Literal["beginner", "intermediate", "advanced", "expert", "not_mentioned"]
RequiredLevel = Literal["beginner", "intermediate", "advanced", "expert"]
Priority = Literal["low", "medium", "high", "critical"]
StepStatus = Literal["not_started", "in_progress", "completed"]
AnswerKey = Literal["A", "B", "C", "D"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict:
        """Dict for storage and API responses (camelCase, ISO dates)."""
        return self.model_dump(mode="json", by_alias=True)


def _normalize_enum(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower().replace(" ", "_").replace("-", "_")
    return value


# ========== Job role context ==========
class RequiredSkill(CamelModel):
    """One required skill of a job role, normalized at ingestion"""
    skill: str
    level: RequiredLevel = "intermediate"
    importance: Priority = "medium"

    @field_validator("level", "importance", mode="before")
    @classmethod
    def normalize_enums(cls, v):
        return _normalize_enum(v)


class InvalidRequiredSkill(ValueError):
    """A submitted required skill has a bad name, level or importance."""


def normalize_required_skills(raw: Optional[List[Any]]) -> List[RequiredSkill]:
    """Accept plain strings or {skill, level, importance} dicts.

    Raises InvalidRequiredSkill describing every bad field of the first
    dict that fails validation.
    """
    skills = []
    for i, item in enumerate(raw or []):
        if isinstance(item, RequiredSkill):
            skills.append(item)
        elif isinstance(item, str):
            if item.strip():
                skills.append(RequiredSkill(skill=item.strip()))
        elif isinstance(item, dict) and item.get("skill"):
            try:
                skills.append(RequiredSkill.model_validate(
                    {k: v for k, v in item.items() if k in ("skill", "level", "importance") and v}
                ))
            except ValidationError as e:
                problems = [
                    f"requiredSkills[{i}].{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                    for err in e.errors()
                ]
                raise InvalidRequiredSkill("; ".join(problems)) from e
    return skills


class JobRoleContext(CamelModel):
    """What the generation tasks know about the target role"""
    id: Optional[int] = None
    title: str
    description: str = ""
    required_skills: List[RequiredSkill] = Field(default_factory=list)

    @field_validator("required_skills", mode="before")
    @classmethod
    def coerce_skills(cls, v):
        return normalize_required_skills(v)


# ========== Skill gaps ==========
class SkillGap(CamelModel):
    skill: str
    current_level: CurrentLevel
    required_level: RequiredLevel
    priority: Priority
    description: str = ""

    @field_validator("current_level", mode="before")
    @classmethod
    def coerce_current_level(cls, v):
        v = _normalize_enum(v)
        if v in ("none", "not_found", "missing", "", None):
            return "not_mentioned"
        return v

    @field_validator("required_level", "priority", mode="before")
    @classmethod
    def normalize_enums(cls, v):
        return _normalize_enum(v)


class GapAnalysisResult(CamelModel):
    gaps: List[SkillGap]
    summary: str = ""


class SkillGapAnalysis(GapAnalysisResult):
    """Stored analysis, replaced wholesale on every run"""
    job_role_id: Optional[int] = None
    analyzed_at: Optional[datetime] = None


# ========== Resources / playlists ==========
class PlaylistEntry(CamelModel):
    title: str
    channel: str = ""
    url: str = ""
    description: str = ""
    video_count: str = ""
    duration: str = ""

    @field_validator("video_count", "duration", mode="before")
    @classmethod
    def stringify(cls, v):
        return "" if v is None else str(v)


class PlaylistResult(CamelModel):
    playlists: List[PlaylistEntry] = Field(default_factory=list)


class LearningResource(CamelModel):
    type: str = "course"
    name: str
    url: Optional[str] = ""
    description: str = ""


class ResourceResult(CamelModel):
    resources: List[LearningResource] = Field(default_factory=list)


# ========== Quiz ==========
class QuizOptions(BaseModel):
    A: str
    B: str
    C: str
    D: str


class QuizQuestion(CamelModel):
    question: str
    options: QuizOptions
    correct_answer: AnswerKey
    explanation: str = ""
    user_answer: Optional[AnswerKey] = None
    is_correct: Optional[bool] = None

    @field_validator("correct_answer", mode="before")
    @classmethod
    def normalize_answer_key(cls, v):
        return v.strip().upper()[:1] if isinstance(v, str) else v

    def public_json(self) -> dict:
        """Question as shown before submission (no answer key)."""
        return {
            "question": self.question,
            "options": self.options.model_dump(),
        }


class QuizDraft(CamelModel):
    questions: List[QuizQuestion] = Field(..., min_length=1)


class Quiz(QuizDraft):
    generated_at: Optional[datetime] = None
    passed: bool = False
    passed_at: Optional[datetime] = None

    @property
    def has_questions(self) -> bool:
        return bool(self.questions)


# ========== Roadmap ==========
def _coerce_resource(item: Any) -> Any:
    """Keep strings and playlist-shaped dicts, flatten any other dict to its name."""
    if isinstance(item, dict) and "title" not in item:
        return item.get("name") or item.get("url") or ", ".join(str(v) for v in item.values())
    return item


class RoadmapStepDraft(CamelModel):
    """A step as proposed by the generator"""
    skill: str
    resources: List[Union[str, PlaylistEntry]] = Field(default_factory=list)
    estimated_time: str = ""
    description: str = ""
    order: Optional[int] = None

    @field_validator("resources", mode="before")
    @classmethod
    def coerce_resources(cls, v):
        return [_coerce_resource(item) for item in (v or [])]


class RoadmapPlan(CamelModel):
    steps: List[RoadmapStepDraft]
    total_duration: Optional[str] = None


class RoadmapStep(RoadmapStepDraft):
    gap_skill: Optional[str] = None  # Skill of the originating gap
    status: StepStatus = "not_started"
    completed_at: Optional[datetime] = None
    quiz: Optional[Quiz] = None
    youtube_playlists: List[PlaylistEntry] = Field(default_factory=list)


class Roadmap(CamelModel):
    steps: List[RoadmapStep] = Field(default_factory=list)
    total_duration: Optional[str] = None
    created_at: Optional[datetime] = None


# ========== Progress ==========
class Progress(CamelModel):
    overall_completion: int = Field(0, ge=0, le=100)
    skills_completed: int = 0
    total_skills: int = 0
    job_accessibility: int = Field(0, ge=0, le=100)
    last_updated: Optional[datetime] = None


class SelectedJobRole(CamelModel):
    role_id: Optional[int] = None
    role_name: str
    selected_at: Optional[datetime] = None


class ResumeRecord(CamelModel):
    text: str
    file_name: Optional[str] = None
    uploaded_at: Optional[datetime] = None


# ========== Assistant context ==========
class ChatContext(CamelModel):
    job_role: Optional[str] = None
    progress: int = 0
    skill_gaps: int = 0


class LearnerProgress(CamelModel):
    completed_skills: List[str] = Field(default_factory=list)
    in_progress_skills: List[str] = Field(default_factory=list)
    roadmap_step_count: int = 0
