"""
Generation orchestrator: credential rotation, model selection, prompt
dispatch, response extraction and rule-based fallback for every AI task.

Each call runs a small state machine:

    SELECT_MODEL -> SEND_PROMPT -> EXTRACT_RESPONSE -> SUCCESS
          ^               |                |
          +---- RETRY <---+----------------+--> FALLBACK | FATAL

Recoverable failures (no key, unavailable, rate limited, quota) rotate the
key and retry up to min(max_retries, key count) attempts, then fall back.
A malformed response falls back for every task except gap analysis, where
it is raised so the caller sees the real problem.

Usage:
    orchestrator = get_orchestrator()
    result = await orchestrator.analyze_gaps(resume_text, job_role)
    result.value, result.source  # GapAnalysisResult, "ai" | "fallback"
"""
import asyncio
import os
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, List, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from app.config import get_settings
from app.schemas.profile import (
    ChatContext,
    GapAnalysisResult,
    JobRoleContext,
    LearnerProgress,
    PlaylistResult,
    QuizDraft,
    ResourceResult,
    RoadmapPlan,
    SkillGap,
)
from app.services import fallbacks, prompts
from app.services.credential_pool import CredentialRotator, load_credentials
from app.services.errors import (
    CredentialRejected,
    GenerationError,
    MalformedResponse,
    QuotaExceeded,
    RateLimited,
    ServiceUnavailable,
)
from app.services.model_resolver import ModelResolver
from app.services.response_extractor import extract_json
from app.utils.logger import get_logger
from app.utils.metrics import inc, track_duration

logger = get_logger("orchestrator")

T = TypeVar("T")


class GenerationState(str, Enum):
    SELECT_MODEL = "select_model"
    SEND_PROMPT = "send_prompt"
    EXTRACT_RESPONSE = "extract_response"
    SUCCESS = "success"
    RETRY = "retry"
    FALLBACK = "fallback"
    FATAL = "fatal"


@dataclass
class Generated(Generic[T]):
    value: T
    source: str  # "ai" or "fallback"


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------

_AUTH_STATUS_CODES = {401, 403}
_UNAVAILABLE_STATUS_CODES = {500, 502, 503, 504}


def classify_error(exc: Exception) -> GenerationError:
    """Map an SDK/transport exception onto the generation error taxonomy."""
    if isinstance(exc, GenerationError):
        return exc

    message = str(exc).lower()
    status = getattr(exc, "status_code", None) or getattr(exc, "status", None)
    try:
        status = int(status) if status is not None else None
    except (TypeError, ValueError):
        status = None
    name = type(exc).__name__.lower()

    if "quota" in message or "resource exhausted" in message or "resource_exhausted" in message:
        return QuotaExceeded(str(exc))
    if status == 429 or "rate limit" in message or "ratelimit" in name or "429" in message:
        return RateLimited(str(exc))
    if status in _AUTH_STATUS_CODES or "authentication" in name or "permissiondenied" in name:
        return CredentialRejected(str(exc))
    if (
        (status is not None and status in _UNAVAILABLE_STATUS_CODES)
        or "unavailable" in message
        or isinstance(exc, (asyncio.TimeoutError, ConnectionError, httpx.TransportError))
        or any(kw in name for kw in ("timeout", "connection"))
    ):
        return ServiceUnavailable(str(exc))
    return GenerationError(str(exc))


def next_state_after_failure(
    error: GenerationError,
    attempt: int,
    max_attempts: int,
    propagate_malformed: bool,
) -> GenerationState:
    if isinstance(error, MalformedResponse):
        return GenerationState.FATAL if propagate_malformed else GenerationState.FALLBACK
    if error.recoverable:
        return GenerationState.RETRY if attempt < max_attempts else GenerationState.FALLBACK
    return GenerationState.FATAL


def _json_parser(schema: type) -> Callable[[str], BaseModel]:
    def parse(raw: str):
        payload = extract_json(raw)
        try:
            return schema.model_validate(payload)
        except ValidationError as e:
            raise MalformedResponse(
                f"Failed to parse JSON response: {e.error_count()} schema error(s) for {schema.__name__}",
                snippet=str(payload)[:200],
            ) from e
    return parse


def _text_parser(raw: str) -> str:
    text = (raw or "").strip()
    if not text:
        raise MalformedResponse("Empty response from model")
    return text


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

class GenerationOrchestrator:
    def __init__(self, rotator: CredentialRotator, resolver: ModelResolver, max_retries: int = 3):
        self.rotator = rotator
        self.resolver = resolver
        self.max_retries = max_retries

    @property
    def max_attempts(self) -> int:
        return max(1, min(self.max_retries, self.rotator.size))

    async def run(
        self,
        task: str,
        prompt: str,
        parse: Callable[[str], T],
        fallback: Callable[[], T],
        propagate_malformed: bool = False,
    ) -> Generated[T]:
        max_attempts = self.max_attempts
        state = GenerationState.SELECT_MODEL
        attempt = 0
        handle = None
        raw = None
        value = None
        error: Optional[GenerationError] = None

        while True:
            if state is GenerationState.SELECT_MODEL:
                attempt += 1
                try:
                    handle = await self.resolver.resolve(self.rotator.current())
                    state = GenerationState.SEND_PROMPT
                except Exception as e:
                    error = classify_error(e)
                    state = next_state_after_failure(error, attempt, max_attempts, propagate_malformed)

            elif state is GenerationState.SEND_PROMPT:
                try:
                    async with track_duration("openai", task):
                        raw = await handle.generate(prompt)
                    state = GenerationState.EXTRACT_RESPONSE
                except Exception as e:
                    error = classify_error(e)
                    state = next_state_after_failure(error, attempt, max_attempts, propagate_malformed)

            elif state is GenerationState.EXTRACT_RESPONSE:
                try:
                    value = parse(raw)
                    state = GenerationState.SUCCESS
                except MalformedResponse as e:
                    error = e
                    state = next_state_after_failure(error, attempt, max_attempts, propagate_malformed)

            elif state is GenerationState.SUCCESS:
                inc(f"generation.{task}.success")
                logger.info(
                    f"{task} completed with {handle.model}",
                    extra={"task": task, "state": state.value, "attempt": attempt, "model": handle.model, "source": "ai"},
                )
                return Generated(value=value, source="ai")

            elif state is GenerationState.RETRY:
                inc(f"generation.{task}.retry")
                if isinstance(error, CredentialRejected):
                    inc(f"generation.{task}.credential_rejected")
                logger.warning(
                    f"{task} attempt {attempt}/{max_attempts} failed ({type(error).__name__}: {error}); rotating API key",
                    extra={"task": task, "state": state.value, "attempt": attempt, "key_index": self.rotator.index},
                )
                self.rotator.rotate()
                state = GenerationState.SELECT_MODEL

            elif state is GenerationState.FALLBACK:
                inc(f"generation.{task}.fallback")
                if isinstance(error, CredentialRejected):
                    inc(f"generation.{task}.credential_rejected")
                logger.warning(
                    f"OpenAI unavailable for {task}, using fallback ({type(error).__name__}: {error})",
                    extra={"task": task, "state": state.value, "attempt": attempt, "source": "fallback"},
                )
                return Generated(value=fallback(), source="fallback")

            else:
                inc(f"generation.{task}.fatal")
                logger.error(
                    f"{task} failed: {type(error).__name__}: {error}",
                    extra={"task": task, "state": state.value, "attempt": attempt, "error_type": type(error).__name__},
                )
                raise error

    # ----- tasks -----

    async def analyze_gaps(self, resume_text: str, job_role: JobRoleContext) -> Generated[GapAnalysisResult]:
        return await self.run(
            "analyze_gaps",
            prompts.build_gap_analysis_prompt(resume_text, job_role),
            _json_parser(GapAnalysisResult),
            lambda: fallbacks.fallback_gap_analysis(resume_text, job_role),
            propagate_malformed=True,
        )

    async def generate_roadmap(self, gaps: List[SkillGap], job_role: JobRoleContext) -> Generated[RoadmapPlan]:
        return await self.run(
            "generate_roadmap",
            prompts.build_roadmap_prompt(gaps, job_role),
            _json_parser(RoadmapPlan),
            lambda: fallbacks.fallback_roadmap(gaps, job_role),
        )

    async def get_learning_resources(self, skill: str, level: str = "intermediate") -> Generated[ResourceResult]:
        return await self.run(
            "learning_resources",
            prompts.build_resources_prompt(skill, level),
            _json_parser(ResourceResult),
            lambda: fallbacks.fallback_resources(skill, level),
        )

    async def get_youtube_playlists(self, skill: str, level: str = "intermediate") -> Generated[PlaylistResult]:
        return await self.run(
            "youtube_playlists",
            prompts.build_playlists_prompt(skill, level),
            _json_parser(PlaylistResult),
            lambda: fallbacks.fallback_playlists(skill, level),
        )

    async def generate_quiz(self, skill: str, topic: str, level: str = "intermediate") -> Generated[QuizDraft]:
        return await self.run(
            "quiz",
            prompts.build_quiz_prompt(skill, topic, level),
            _json_parser(QuizDraft),
            lambda: fallbacks.fallback_quiz(skill, topic, level),
        )

    async def chat(self, message: str, context: ChatContext) -> Generated[str]:
        return await self.run(
            "chat",
            prompts.build_chat_prompt(message, context),
            _text_parser,
            lambda: fallbacks.fallback_chat(message, context),
        )

    async def chat_enhanced(
        self, message: str, context: ChatContext, progress: LearnerProgress
    ) -> Generated[str]:
        return await self.run(
            "chat_enhanced",
            prompts.build_enhanced_chat_prompt(message, context, progress),
            _text_parser,
            lambda: fallbacks.fallback_chat_enhanced(message, context, progress),
        )


def _credential_environ(settings) -> dict:
    """Process env, with keys from .env (via Settings) filling the gaps."""
    environ = dict(os.environ)
    if settings.openai_api_key and not environ.get("OPENAI_API_KEY"):
        environ["OPENAI_API_KEY"] = settings.openai_api_key
    if settings.openai_api_keys and not environ.get("OPENAI_API_KEYS"):
        environ["OPENAI_API_KEYS"] = settings.openai_api_keys
    return environ


# Singleton
_orchestrator: Optional[GenerationOrchestrator] = None


def get_orchestrator() -> GenerationOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        settings = get_settings()
        _orchestrator = GenerationOrchestrator(
            rotator=CredentialRotator(load_credentials(_credential_environ(settings))),
            resolver=ModelResolver(settings.preferred_models, settings.fallback_models),
            max_retries=settings.ai_max_retries,
        )
    return _orchestrator
