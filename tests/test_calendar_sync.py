# 📄 File: tests/test_calendar_sync.py
#
# 🧭 Purpose (Layman Explanation):
# Checks that plant chores only show up in Google Calendar for the plants a user picked,
# that broken events get recreated and that disconnecting Google wipes the stored access.
#
# 🧪 Purpose (Technical Summary):
# The Calendar v3 discovery client and the token revoke call are replaced by in-memory fakes
# at the google_calendar_service boundary; TaskSyncService and the /api/google-calendar
# endpoints run for real against the test database.
#
# 🔗 Dependencies:
# - pytest, httplib2 (HttpError responses), tests.conftest helpers
#
# 🔄 Connected Modules / Calls From:
# - calendar_sync.domain.services.task_sync_service
# - calendar_sync.infrastructure.external.google_calendar_service
# - calendar_sync.presentation.api.v1.google_calendar

import json
from datetime import timedelta
from typing import Any, Dict, List

import httplib2
import pytest
from googleapiclient.errors import HttpError
from sqlalchemy import select

from sproutsync.modules.calendar_sync.domain.services.task_sync_service import TaskSyncService
from sproutsync.modules.calendar_sync.infrastructure.external import google_calendar_service
from sproutsync.modules.care_management.infrastructure.database.models import PlantTaskModel
from sproutsync.modules.user_management.domain.services.user_settings_service import get_user_settings
from sproutsync.shared.infrastructure.database.connection import utc_now
from sproutsync.shared.infrastructure.database.session import database_session
from tests.conftest import auth_headers, create_plant


# =============================================================================
# FAKE GOOGLE CALENDAR
# =============================================================================

class FakeCall:
    def __init__(self, run):
        self.run = run

    def execute(self):
        return self.run()


def google_error(status: int) -> HttpError:
    content = json.dumps({"error": {"code": status, "message": "Not Found"}}).encode()
    return HttpError(httplib2.Response({"status": status}), content)


class FakeCalendarEvents:
    """In-memory primary calendar; unknown event ids answer 404 like Google does."""

    def __init__(self):
        self.events: Dict[str, Dict[str, Any]] = {}
        self.deleted: List[str] = []
        self.tokens: List[str] = []

    def insert(self, calendarId: str, body: Dict[str, Any]) -> FakeCall:
        def run():
            event_id = f"event-{len(self.events) + len(self.deleted) + 1}"
            self.events[event_id] = body
            return {"id": event_id, **body}
        return FakeCall(run)

    def update(self, calendarId: str, eventId: str, body: Dict[str, Any]) -> FakeCall:
        def run():
            if eventId not in self.events:
                raise google_error(404)
            self.events[eventId] = body
            return {"id": eventId, **body}
        return FakeCall(run)

    def delete(self, calendarId: str, eventId: str) -> FakeCall:
        def run():
            if self.events.pop(eventId, None) is None:
                raise google_error(410)
            self.deleted.append(eventId)
            return ""
        return FakeCall(run)


class FakeCalendarClient:
    def __init__(self, events: FakeCalendarEvents):
        self._events = events

    def events(self) -> FakeCalendarEvents:
        return self._events


@pytest.fixture
def calendar_events(monkeypatch) -> FakeCalendarEvents:
    events = FakeCalendarEvents()

    def fake_build(credentials):
        events.tokens.append(credentials.token)
        return FakeCalendarClient(events)

    monkeypatch.setattr(google_calendar_service, "build_calendar_client", fake_build)
    return events


@pytest.fixture
def revoked_tokens(monkeypatch) -> List[str]:
    tokens: List[str] = []

    def fake_revoke(token: str, timeout: float) -> int:
        tokens.append(token)
        return 200

    monkeypatch.setattr(google_calendar_service, "revoke_token", fake_revoke)
    return tokens


def connected_settings(**overrides) -> Dict[str, Any]:
    values = {
        "google_calendar_sync_enabled": True,
        "google_calendar_access_token": "access-token",
        "google_calendar_refresh_token": "refresh-token",
        "google_calendar_token_expiry": utc_now() + timedelta(hours=1),
        "google_calendar_reminder_minutes": 45,
        "synced_plant_ids": [],
    }
    values.update(overrides)
    return values


async def set_synced_plants(user_id: str, plant_ids: List[str]) -> None:
    async with database_session() as db:
        user_settings = await get_user_settings(db, user_id)
        user_settings.synced_plant_ids = plant_ids


async def load_task(task_id: str) -> PlantTaskModel:
    async with database_session() as db:
        result = await db.execute(select(PlantTaskModel).where(PlantTaskModel.id == task_id))
        return result.scalar_one()


# =============================================================================
# TASK SYNC SERVICE
# =============================================================================

async def test_only_selected_plants_are_mirrored(client, make_user, calendar_events):
    user = await make_user(**connected_settings())
    fern = await create_plant(client, user, pet_name="Fernando")
    cactus = await create_plant(client, user, pet_name="Spike")
    await set_synced_plants(user.id, [fern["id"]])

    async with database_session() as db:
        service = TaskSyncService(db)
        for task in fern["tasks"] + cactus["tasks"]:
            await service.sync_task_to_calendar(task["id"])

    summaries = sorted(event["summary"] for event in calendar_events.events.values())
    assert summaries == ["Fertilize Plant - Fernando", "Water Plant - Fernando"]
    for event in calendar_events.events.values():
        assert event["reminders"]["overrides"][0] == {"method": "popup", "minutes": 45}

    assert (await load_task(fern["tasks"][0]["id"])).google_calendar_event_id is not None
    assert (await load_task(cactus["tasks"][0]["id"])).google_calendar_event_id is None


async def test_empty_selection_mirrors_nothing(client, make_user, calendar_events):
    user = await make_user(**connected_settings())
    plant = await create_plant(client, user)

    async with database_session() as db:
        await TaskSyncService(db).sync_task_to_calendar(plant["tasks"][0]["id"])

    assert calendar_events.events == {}


async def test_stale_event_is_recreated_on_update(client, make_user, calendar_events):
    user = await make_user(**connected_settings())
    plant = await create_plant(client, user, pet_name="Monty")
    await set_synced_plants(user.id, [plant["id"]])
    task_id = plant["tasks"][0]["id"]

    async with database_session() as db:
        task = await db.get(PlantTaskModel, task_id)
        task.google_calendar_event_id = "deleted-in-google"

    async with database_session() as db:
        await TaskSyncService(db).update_task_in_calendar(task_id)

    event_id = (await load_task(task_id)).google_calendar_event_id
    assert event_id != "deleted-in-google"
    assert event_id in calendar_events.events


async def test_update_keeps_existing_event(client, make_user, calendar_events):
    user = await make_user(**connected_settings())
    plant = await create_plant(client, user, pet_name="Monty")
    await set_synced_plants(user.id, [plant["id"]])
    task_id = plant["tasks"][0]["id"]

    async with database_session() as db:
        await TaskSyncService(db).sync_task_to_calendar(task_id)
    event_id = (await load_task(task_id)).google_calendar_event_id

    async with database_session() as db:
        await TaskSyncService(db).update_task_in_calendar(task_id)

    assert (await load_task(task_id)).google_calendar_event_id == event_id
    assert list(calendar_events.events) == [event_id]


async def test_remove_deletes_event_and_clears_id(client, make_user, calendar_events):
    user = await make_user(**connected_settings())
    plant = await create_plant(client, user)
    await set_synced_plants(user.id, [plant["id"]])
    task_id = plant["tasks"][0]["id"]

    async with database_session() as db:
        await TaskSyncService(db).sync_task_to_calendar(task_id)
    event_id = (await load_task(task_id)).google_calendar_event_id

    async with database_session() as db:
        await TaskSyncService(db).remove_task_from_calendar(task_id)

    assert calendar_events.deleted == [event_id]
    assert (await load_task(task_id)).google_calendar_event_id is None


async def test_expired_token_is_refreshed_and_stored(client, make_user, calendar_events, monkeypatch):
    def fake_refresh(credentials, request):
        credentials.token = "fresh-token"
        credentials.expiry = (utc_now() + timedelta(hours=1)).replace(tzinfo=None)

    monkeypatch.setattr(google_calendar_service.Credentials, "refresh", fake_refresh)
    user = await make_user(**connected_settings(google_calendar_token_expiry=utc_now() - timedelta(minutes=5)))
    plant = await create_plant(client, user)
    await set_synced_plants(user.id, [plant["id"]])

    async with database_session() as db:
        await TaskSyncService(db).sync_task_to_calendar(plant["tasks"][0]["id"])

    assert calendar_events.tokens[-1] == "fresh-token"
    async with database_session() as db:
        user_settings = await get_user_settings(db, user.id)
        assert user_settings.google_calendar_access_token == "fresh-token"


# =============================================================================
# API
# =============================================================================

async def test_auth_url_requests_offline_access(client, make_user):
    user = await make_user()
    response = await client.get("/api/google-calendar/auth-url", headers=auth_headers(user))

    assert response.status_code == 200
    auth_url = response.json()["data"]["auth_url"]
    assert auth_url.startswith(google_calendar_service.GOOGLE_AUTH_URL)
    assert "access_type=offline" in auth_url
    assert f"state={user.id}" in auth_url


async def test_enabling_sync_requires_access(client, make_user):
    user = await make_user()
    response = await client.put(
        "/api/google-calendar/settings",
        json={"enabled": True, "synced_plant_ids": []},
        headers=auth_headers(user),
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_selecting_a_plant_syncs_its_tasks(client, make_user, calendar_events):
    user = await make_user(**connected_settings())
    plant = await create_plant(client, user, pet_name="Monty")

    response = await client.put(
        "/api/google-calendar/settings",
        json={"enabled": True, "reminder_minutes": 60, "synced_plant_ids": [plant["id"]]},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    assert response.json()["data"]["synced_plant_ids"] == [plant["id"]]
    assert len(calendar_events.events) == len(plant["tasks"])
    for event in calendar_events.events.values():
        assert event["reminders"]["overrides"][0]["minutes"] == 60


async def test_sync_tasks_rejects_other_users_tasks(client, make_user, calendar_events):
    owner = await make_user(name="Owner")
    stranger = await make_user(name="Stranger", **connected_settings())
    plant = await create_plant(client, owner)

    response = await client.post(
        "/api/google-calendar/sync-tasks",
        json={"task_ids": [task["id"] for task in plant["tasks"]]},
        headers=auth_headers(stranger),
    )

    assert response.status_code == 404
    assert calendar_events.events == {}


async def test_sync_tasks_creates_events_for_own_tasks(client, make_user, calendar_events):
    user = await make_user(**connected_settings())
    plant = await create_plant(client, user)

    response = await client.post(
        "/api/google-calendar/sync-tasks",
        json={"task_ids": [plant["tasks"][0]["id"]], "reminder_minutes": 15},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["success_count"] == 1
    assert data["results"][0]["event_id"] in calendar_events.events


async def test_revoke_clears_tokens_and_selection(client, make_user, revoked_tokens):
    user = await make_user(**connected_settings(synced_plant_ids=["plant-1"]))

    response = await client.delete("/api/google-calendar/revoke", headers=auth_headers(user))
    assert response.status_code == 200
    assert revoked_tokens == ["access-token"]

    status = (await client.get("/api/google-calendar/status", headers=auth_headers(user))).json()["data"]
    assert status["enabled"] is False
    assert status["has_access"] is False
    assert status["synced_plant_ids"] == []

    async with database_session() as db:
        user_settings = await get_user_settings(db, user.id)
        assert user_settings.google_calendar_access_token is None
        assert user_settings.google_calendar_refresh_token is None
        assert user_settings.google_calendar_token_expiry is None
