import os
import tempfile
from types import SimpleNamespace

# Settings and the engine are built at import time, configure them first
_tmpdir = tempfile.mkdtemp(prefix="skillgap-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_tmpdir, 'test.db')}"
os.environ["SEED_JOB_ROLES"] = "true"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from httpx import ASGITransport, AsyncClient

from app.database import Base, engine, init_db
from app.main import app
from app.services.credential_pool import CredentialRotator
from app.services.model_resolver import ModelResolver
from app.services.orchestrator import GenerationOrchestrator, get_orchestrator


class FakeCompletions:
    """chat.completions stand-in; replies are served in order, the last one repeats"""

    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    async def create(self, model, messages, **kwargs):
        self.calls.append({"model": model, "prompt": messages[-1]["content"]})
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=reply))])


class FakeModels:
    def __init__(self, model_ids, broken=()):
        self.model_ids = model_ids
        self.broken = set(broken)
        self.retrieved = []

    async def list(self):
        if isinstance(self.model_ids, Exception):
            raise self.model_ids
        return SimpleNamespace(data=[SimpleNamespace(id=m) for m in self.model_ids])

    async def retrieve(self, model):
        self.retrieved.append(model)
        if model in self.broken:
            raise RuntimeError(f"model {model} not found")
        return SimpleNamespace(id=model)


class FakeClient:
    def __init__(self, replies=("{}",), model_ids=("gpt-4o-mini",), broken=()):
        self.chat = SimpleNamespace(completions=FakeCompletions(replies))
        self.models = FakeModels(model_ids, broken)

    @property
    def calls(self):
        return self.chat.completions.calls


class StatusError(Exception):
    """SDK-style error carrying an HTTP status"""

    def __init__(self, message, status_code):
        super().__init__(message)
        self.status_code = status_code


def make_orchestrator(clients=None, max_retries=3):
    """Orchestrator over fake clients, one per key ({key: FakeClient}); no keys means no credential"""
    clients = clients or {}
    resolver = ModelResolver(
        preferred_models=["gpt-4o-mini", "gpt-4o"],
        fallback_models=["gpt-4o-mini", "gpt-4o"],
        client_factory=lambda key: clients[key],
    )
    return GenerationOrchestrator(CredentialRotator(list(clients)), resolver, max_retries=max_retries)


@pytest.fixture
def fake_client():
    return FakeClient


@pytest.fixture
def status_error():
    return StatusError


@pytest.fixture
def orchestrator_factory():
    return make_orchestrator


@pytest.fixture
def offline_orchestrator():
    """No credentials: every task resolves to its fallback"""
    return make_orchestrator()


@pytest.fixture
async def client(offline_orchestrator):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await init_db()

    app.dependency_overrides[get_orchestrator] = lambda: offline_orchestrator
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    await engine.dispose()


@pytest.fixture
def use_orchestrator():
    """Swap the orchestrator the routes receive"""
    def _use(orchestrator):
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
        return orchestrator
    return _use


@pytest.fixture
async def auth_headers(client):
    response = await client.post(
        "/api/auth/register",
        json={"name": "Test User", "email": "learner@example.com", "password": "secret123"},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
