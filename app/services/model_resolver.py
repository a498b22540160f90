"""
Picks a usable generation model for a credential.

Discovery lists the models the key can see (hardcoded fallback list when the
listing call fails), keeps those on the preference list in preference order,
and binds the first candidate that works.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from openai import AsyncOpenAI

from app.services.errors import NoCredentialConfigured, ServiceUnavailable
from app.utils.logger import get_logger

logger = get_logger("models")

SYSTEM_PROMPT = (
    "You are a career advisor and upskilling assistant. "
    "When asked for JSON, return only valid JSON."
)


@dataclass
class ModelHandle:
    """A bound (client, model) pair ready to take prompts."""

    client: Any
    model: str
    temperature: float = 0.7
    max_tokens: int = 3000

    async def generate(self, prompt: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return response.choices[0].message.content or ""


def openai_client_factory(api_key: str) -> AsyncOpenAI:
    return AsyncOpenAI(api_key=api_key)


class ModelResolver:
    def __init__(
        self,
        preferred_models: List[str],
        fallback_models: List[str],
        client_factory: Callable[[str], Any] = openai_client_factory,
    ):
        self.preferred_models = list(preferred_models)
        self.fallback_models = list(fallback_models)
        self.client_factory = client_factory
        self._clients: Dict[str, Any] = {}

    def _client_for(self, credential: str):
        client = self._clients.get(credential)
        if client is None:
            client = self.client_factory(credential)
            self._clients[credential] = client
        return client

    async def list_supported_models(self, client) -> Optional[List[str]]:
        """Model ids visible to this client, or None when discovery failed."""
        try:
            page = await client.models.list()
            return [m.id for m in page.data]
        except Exception as e:
            logger.warning(f"Failed to list models ({type(e).__name__}: {e}); using hardcoded list")
            return None

    async def _bind(self, client, model: str, verify: bool) -> ModelHandle:
        if verify:
            await client.models.retrieve(model)
        return ModelHandle(client=client, model=model)

    async def resolve(self, credential: Optional[str]) -> ModelHandle:
        if not credential:
            raise NoCredentialConfigured()

        try:
            client = self._client_for(credential)
        except Exception as e:
            raise ServiceUnavailable(f"Failed to initialize OpenAI client: {e}") from e

        supported = await self.list_supported_models(client)
        # Unverified hardcoded ids get probed before use
        verify = supported is None
        if supported is None:
            supported = self.fallback_models

        candidates = [m for m in self.preferred_models if m in supported]
        if not candidates:
            raise ServiceUnavailable("No valid models available. Please check model availability.")

        for model in candidates:
            try:
                handle = await self._bind(client, model, verify)
                logger.info(f"Using model: {model}", extra={"model": model})
                return handle
            except Exception as e:
                logger.warning(f"Model {model} failed: {e}", extra={"model": model})

        raise ServiceUnavailable("All models failed. Please check model availability and API key configuration.")
