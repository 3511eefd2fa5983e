# 📄 File: tests/conftest.py
#
# 🧭 Purpose (Layman Explanation):
# Shared setup for every SproutSync test: a throwaway database, a fake phone-notification
# service, a fake AI, and helpers to create signed-in users.
#
# 🧪 Purpose (Technical Summary):
# Environment variables are set before any sproutsync import because settings are cached
# at import time. Each test gets a fresh SQLite file (aiosqlite) with every table created,
# the global engine and session factory pointed at it, an httpx AsyncClient bound to the
# ASGI app, and in-process fakes for Firebase Cloud Messaging and Gemini.
#
# 🔗 Dependencies:
# - pytest, pytest-asyncio, httpx, SQLAlchemy (aiosqlite)
#
# 🔄 Connected Modules / Calls From:
# - every module under tests/

import os

os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "sproutsync-test-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "text"
os.environ["GEMINI_API_KEY"] = "test-gemini-key"

from typing import Any, Dict, List, Optional  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402

from sproutsync.main import app  # noqa: E402
from sproutsync.modules.ai_smart_features.domain.services.plant_image_validator import (  # noqa: E402
    VALIDATION_PROMPT,
)
from sproutsync.modules.ai_smart_features.infrastructure.external.gemini_client import (  # noqa: E402
    get_gemini_client,
)
from sproutsync.modules.notification_communication.infrastructure.external import (  # noqa: E402
    firebase_messaging,
)
from sproutsync.modules.user_management.infrastructure.database.models import (  # noqa: E402
    UserModel,
    UserSettingsModel,
)
from sproutsync.shared.core.security import TokenData, create_access_token  # noqa: E402
from sproutsync.shared.infrastructure.database.connection import close_database, init_database  # noqa: E402
from sproutsync.shared.infrastructure.database.registry import get_metadata  # noqa: E402
from sproutsync.shared.infrastructure.database.session import (  # noqa: E402
    database_session,
    initialize_sessions,
    session_manager,
)


# =============================================================================
# FAKE EXTERNAL SERVICES
# =============================================================================

class FakeMessagingClient:
    """Records push notifications instead of calling FCM."""

    def __init__(self):
        self.sent: List[Dict[str, Any]] = []

    async def send(
        self,
        token: str,
        title: str,
        body: str,
        data: Optional[Dict[str, str]] = None,
        icon: str = "/pwa-192x192.png",
        link: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> str:
        self.sent.append({"token": token, "title": title, "body": body, "data": data or {}, "tag": tag})
        return f"projects/sproutsync-test/messages/{len(self.sent)}"


class FakeGeminiClient:
    """Answers the plant validation prompt with ``verdict`` and everything else with ``answer``."""

    def __init__(self, verdict: Optional[Dict[str, Any]] = None, answer: Optional[Dict[str, Any]] = None):
        self.verdict = verdict or {"isPlant": True, "confidence": 0.95, "reason": "A single potted plant"}
        self.answer = answer or {}
        self.prompts: List[str] = []

    async def generate_json(self, prompt: str, image_part: Dict[str, Any], schema=None) -> Dict[str, Any]:
        self.prompts.append(prompt)
        if prompt == VALIDATION_PROMPT:
            return self.verdict
        return self.answer


@pytest.fixture(autouse=True)
def messaging_client(monkeypatch) -> FakeMessagingClient:
    client = FakeMessagingClient()
    monkeypatch.setattr(firebase_messaging, "_messaging_client", client)
    return client


@pytest.fixture
def gemini_client() -> FakeGeminiClient:
    client = FakeGeminiClient()
    app.dependency_overrides[get_gemini_client] = lambda: client
    yield client
    app.dependency_overrides.pop(get_gemini_client, None)


# =============================================================================
# DATABASE & HTTP CLIENT
# =============================================================================

@pytest_asyncio.fixture
async def database(tmp_path):
    """Fresh SQLite database with every table, wired into the global session manager."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'sproutsync.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(get_metadata().create_all)

    await init_database(engine)
    await initialize_sessions()
    yield engine

    await close_database()
    session_manager.reset()


@pytest_asyncio.fixture
async def client(database):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


# =============================================================================
# USERS & AUTH
# =============================================================================

@pytest.fixture
def make_user(database):
    """
    Factory for committed users.

    Extra keyword arguments become UserSettingsModel columns (fcm_token, persona, timezone...).
    """
    async def _make_user(name: str = "Fern Keeper", username: Optional[str] = None, **settings_values):
        async with database_session() as db:
            user = UserModel(
                google_id=f"google-{uuid4().hex}",
                email=f"{uuid4().hex[:10]}@example.com",
                name=name,
                username=username,
            )
            db.add(user)
            await db.flush()
            if settings_values:
                db.add(UserSettingsModel(user_id=user.id, **settings_values))
        return user

    return _make_user


def auth_headers(user: UserModel, timezone: Optional[str] = None) -> Dict[str, str]:
    token = create_access_token(TokenData(user_id=user.id, email=user.email, name=user.name))
    headers = {"Authorization": f"Bearer {token}"}
    if timezone:
        headers["X-User-Timezone"] = timezone
    return headers


async def create_plant(client: AsyncClient, user: UserModel, **overrides) -> Dict[str, Any]:
    """Create a plant through the API and return its wire payload."""
    payload = {
        "botanical_name": "Monstera deliciosa",
        "common_name": "Swiss cheese plant",
        "care_tasks": {"watering": {"frequency": 3}, "fertilizing": {"frequency": 14}},
    }
    payload.update(overrides)
    response = await client.post("/api/plants", json=payload, headers=auth_headers(user))
    assert response.status_code == 201, response.text
    return response.json()["data"]
