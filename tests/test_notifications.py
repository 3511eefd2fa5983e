# 📄 File: tests/test_notifications.py
#
# 🧭 Purpose (Layman Explanation):
# Makes sure plant owners get the right reminder wording, that the reminder robot takes
# turns between a user's overdue chores, and that only one reminder run happens at a time.
#
# 🧪 Purpose (Technical Summary):
# Covers notification copy selection, NotificationScheduler round-robin and lock handling
# with in-memory state and fake senders, a database-backed overdue cycle through
# FirebaseNotificationService, due-task notifications, and the /api/notifications routes.
#
# 🔗 Dependencies:
# - pytest, pytest-asyncio, httpx
#
# 🔄 Connected Modules / Calls From:
# - pytest

import json
from datetime import datetime, timedelta, timezone
from typing import Dict, List

from sqlalchemy import func, select

from sproutsync.modules.care_management.domain.services.overdue_task_service import OverdueTask
from sproutsync.modules.care_management.infrastructure.database.models import PlantTaskModel
from sproutsync.modules.notification_communication.domain.messages import (
    get_alternative_notification_message,
    get_notification_message,
)
from sproutsync.modules.notification_communication.domain.services.notification_scheduler import (
    NotificationScheduler,
)
from sproutsync.modules.notification_communication.domain.services.notification_service import (
    NotificationService,
)
from sproutsync.modules.notification_communication.infrastructure.database.models import NotificationLogModel
from sproutsync.modules.notification_communication.infrastructure.scheduler_state import (
    LOCK_KEY,
    InMemorySchedulerStateStore,
    RedisSchedulerStateStore,
)
from sproutsync.modules.plant_management.infrastructure.database.models import PlantModel
from sproutsync.shared.infrastructure.database.session import database_session
from tests.conftest import auth_headers, create_plant


# =============================================================================
# MESSAGE COPY
# =============================================================================

def test_primary_message_fills_plant_name():
    message = get_notification_message("Fern", "watering", "PRIMARY")
    assert message == {
        "title": "Time to water your Fern!",
        "body": "Your Fern plant needs water today. Tap to mark it done.",
    }


def test_unknown_persona_uses_primary_voice():
    assert get_notification_message("Fern", "watering", "GRUMPY") == get_notification_message(
        "Fern", "watering", "PRIMARY"
    )


def test_unknown_task_key_gets_generic_reminder():
    message = get_notification_message("Basil", "repotting", "SECONDARY")
    assert message["title"] == "Care reminder for Basil"
    assert "{plantName}" not in message["body"]


def test_alternative_messages_rotate_through_variants():
    first = get_alternative_notification_message("Fern", "watering", "PRIMARY", 0)
    second = get_alternative_notification_message("Fern", "watering", "PRIMARY", 1)
    assert first["title"] == "Hydration check for Fern"
    assert second["title"] == "Water your Fern today"
    assert get_alternative_notification_message("Fern", "watering", "PRIMARY", 3) == first


def test_alternative_message_falls_back_to_primary():
    assert get_alternative_notification_message("Basil", "repotting", "PRIMARY", 2) == get_notification_message(
        "Basil", "repotting", "PRIMARY"
    )


# =============================================================================
# SCHEDULER (in-memory)
# =============================================================================

def _overdue(task_id: str, user_id: str, task_key: str = "watering") -> OverdueTask:
    return OverdueTask(
        id=task_id,
        plant_id=f"plant-{task_id}",
        plant_name="Monty",
        task_key=task_key,
        next_due_on=datetime.now(timezone.utc) - timedelta(days=1),
        user_id=user_id,
        user_persona="PRIMARY",
        fcm_token=f"token-{user_id}",
    )


class FakeOverdueTasks:
    def __init__(self, grouped: Dict[str, List[OverdueTask]]):
        self.grouped = grouped

    async def get_overdue_tasks_grouped_by_user(self):
        return self.grouped

    async def get_overdue_task_stats(self):
        return {"total_overdue_tasks": sum(len(tasks) for tasks in self.grouped.values())}


class RecordingSender:
    def __init__(self, fail_for: str = ""):
        self.calls = []
        self.fail_for = fail_for

    async def send_care_reminder_notification(self, task: OverdueTask, notification_index: int = 0):
        self.calls.append((task.id, notification_index))
        if task.user_id == self.fail_for:
            return {"success": False, "error": "Requested entity was not found."}
        return {"success": True, "message_id": f"msg-{task.id}"}


def _scheduler(grouped, sender=None, state=None) -> NotificationScheduler:
    scheduler = NotificationScheduler(
        session=None,
        state=state or InMemorySchedulerStateStore(),
        sender=sender or RecordingSender(),
        send_delay_seconds=0,
    )
    scheduler.overdue_tasks = FakeOverdueTasks(grouped)
    return scheduler


async def test_scheduler_rotates_one_task_per_user_per_cycle():
    sender = RecordingSender()
    scheduler = _scheduler(
        {
            "user-1": [_overdue("a", "user-1"), _overdue("b", "user-1", "fertilizing")],
            "user-2": [_overdue("c", "user-2")],
        },
        sender=sender,
    )

    for _ in range(3):
        await scheduler.process_overdue_tasks()

    assert sender.calls == [
        ("a", 0), ("c", 0),
        ("b", 1), ("c", 1),
        ("a", 2), ("c", 2),
    ]
    assert await scheduler.get_notification_index() == 3


async def test_scheduler_reports_successes_and_failures():
    scheduler = _scheduler(
        {"user-1": [_overdue("a", "user-1")], "user-2": [_overdue("b", "user-2")]},
        sender=RecordingSender(fail_for="user-2"),
    )

    summary = await scheduler.process_overdue_tasks()

    assert summary == {"skipped": False, "users": 2, "successful": 1, "failed": 1}


async def test_scheduler_skips_cycle_while_locked():
    state = InMemorySchedulerStateStore()
    await state.acquire_lock()
    sender = RecordingSender()
    scheduler = _scheduler({"user-1": [_overdue("a", "user-1")]}, sender=sender, state=state)

    summary = await scheduler.process_overdue_tasks()

    assert summary["skipped"] is True
    assert sender.calls == []
    assert await state.get_index() == 0


async def test_scheduler_releases_lock_and_keeps_index_without_work():
    state = InMemorySchedulerStateStore()
    scheduler = _scheduler({}, state=state)

    summary = await scheduler.process_overdue_tasks()

    assert summary == {"skipped": False, "users": 0, "successful": 0, "failed": 0}
    assert await state.is_locked() is False
    assert await state.get_index() == 0


async def test_scheduler_index_can_be_reset():
    state = InMemorySchedulerStateStore()
    scheduler = _scheduler({"user-1": [_overdue("a", "user-1")]}, state=state)
    await scheduler.trigger_notification_process()

    await scheduler.reset_notification_index()

    assert await scheduler.get_status() == {"is_processing": False, "notification_index": 0}


class BrokenOverdueTasks:
    async def get_overdue_tasks_grouped_by_user(self):
        raise RuntimeError("database is unavailable")


async def test_scheduler_failure_is_reported_and_frees_lock():
    state = InMemorySchedulerStateStore()
    scheduler = _scheduler({}, state=state)
    scheduler.overdue_tasks = BrokenOverdueTasks()

    summary = await scheduler.process_overdue_tasks()

    assert summary == {
        "skipped": False,
        "users": 0,
        "successful": 0,
        "failed": 0,
        "error": "database is unavailable",
    }
    assert await state.is_locked() is False
    assert await state.get_index() == 0


# =============================================================================
# SCHEDULER (redis lock)
# =============================================================================

class FakeRedis:
    """Just enough of redis.asyncio for the scheduler store; ``expire`` stands in for the TTL lapsing."""

    def __init__(self):
        self.values: Dict[str, str] = {}

    async def set(self, key, value, nx=False, ex=None):
        if nx and key in self.values:
            return None
        self.values[key] = str(value)
        return True

    async def get(self, key):
        return self.values.get(key)

    async def exists(self, key):
        return int(key in self.values)

    def expire(self, key):
        self.values.pop(key, None)

    def register_script(self, script):
        async def compare_and_delete(keys, args):
            if self.values.get(keys[0]) == args[0]:
                del self.values[keys[0]]
                return 1
            return 0
        return compare_and_delete


async def test_redis_lock_is_exclusive():
    redis = FakeRedis()
    first, second = RedisSchedulerStateStore(redis), RedisSchedulerStateStore(redis)

    assert await first.acquire_lock() is True
    assert await second.acquire_lock() is False

    await first.release_lock()
    assert await second.acquire_lock() is True


async def test_expired_redis_lock_is_not_released_by_previous_holder():
    redis = FakeRedis()
    slow_cycle, next_cycle = RedisSchedulerStateStore(redis), RedisSchedulerStateStore(redis)

    assert await slow_cycle.acquire_lock(ttl_seconds=1) is True
    redis.expire(LOCK_KEY)
    assert await next_cycle.acquire_lock() is True

    await slow_cycle.release_lock()
    assert await next_cycle.is_locked() is True

    await next_cycle.release_lock()
    assert await next_cycle.is_locked() is False


# =============================================================================
# DATABASE-BACKED CYCLES
# =============================================================================

async def _add_plant_with_task(user_id: str, due_in_days: float, pet_name: str = "Monty") -> str:
    async with database_session() as db:
        plant = PlantModel(user_id=user_id, botanical_name="Monstera deliciosa", common_name="Monstera", pet_name=pet_name)
        db.add(plant)
        await db.flush()
        task = PlantTaskModel(
            plant_id=plant.id,
            task_key="watering",
            frequency_days=3,
            next_due_on=datetime.now(timezone.utc) + timedelta(days=due_in_days),
        )
        db.add(task)
        await db.flush()
        return task.id


async def _log_count() -> int:
    async with database_session() as db:
        return await db.scalar(select(func.count()).select_from(NotificationLogModel))


async def test_overdue_cycle_sends_push_and_logs_it(make_user, messaging_client):
    owner = await make_user(fcm_token="device-token-1", persona="SECONDARY")
    silent = await make_user()
    task_id = await _add_plant_with_task(owner.id, due_in_days=-2)
    await _add_plant_with_task(silent.id, due_in_days=-2, pet_name="Quiet")
    await _add_plant_with_task(owner.id, due_in_days=5, pet_name="Later")

    async with database_session() as db:
        summary = await NotificationScheduler(db, InMemorySchedulerStateStore(), send_delay_seconds=0).process_overdue_tasks()

    assert summary == {"skipped": False, "users": 1, "successful": 1, "failed": 0}
    assert len(messaging_client.sent) == 1
    push = messaging_client.sent[0]
    assert push["token"] == "device-token-1"
    assert push["title"] == "🌿 Watering time for Monty!"
    assert push["data"]["taskId"] == task_id
    assert await _log_count() == 1


async def test_due_task_notifications_are_sent_once(make_user, messaging_client):
    owner = await make_user(fcm_token="device-token-2")
    await _add_plant_with_task(owner.id, due_in_days=-1)

    async with database_session() as db:
        first = await NotificationService(db).check_and_send_due_task_notifications()
    async with database_session() as db:
        second = await NotificationService(db).check_and_send_due_task_notifications()

    assert (first, second) == (1, 0)
    assert messaging_client.sent[0]["title"] == "🌱 Task Due: Water"
    async with database_session() as db:
        log = await db.scalar(select(NotificationLogModel))
    assert json.loads(log.payload_json)["plant_name"] == "Monty"


async def test_due_tasks_older_than_opt_in_are_skipped(make_user, messaging_client):
    owner = await make_user(
        fcm_token="device-token-3",
        notifications_enabled_at=datetime.now(timezone.utc),
    )
    await _add_plant_with_task(owner.id, due_in_days=-3)

    async with database_session() as db:
        sent = await NotificationService(db).check_and_send_due_task_notifications()

    assert sent == 0
    assert messaging_client.sent == []


# =============================================================================
# API
# =============================================================================

async def test_new_plant_announces_its_tasks(client, make_user, messaging_client):
    owner = await make_user(fcm_token="device-token-4")

    await create_plant(client, owner, pet_name="Monty")

    titles = sorted(push["title"] for push in messaging_client.sent)
    assert titles == ["🌱 New Task: Fertilizing", "🌱 New Task: Water"]
    assert all(push["tag"].startswith("task-") for push in messaging_client.sent)


async def test_no_push_without_token(client, make_user, messaging_client):
    owner = await make_user()

    await create_plant(client, owner)

    assert messaging_client.sent == []


async def test_token_and_settings_endpoints(client, make_user):
    user = await make_user()
    headers = auth_headers(user)

    response = await client.get("/api/notifications/settings", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["has_token"] is False

    response = await client.post("/api/notifications/token", json={"fcm_token": "device-token-5"}, headers=headers)
    assert response.status_code == 200

    response = await client.put("/api/notifications/settings", json={"enabled": False}, headers=headers)
    assert response.status_code == 200

    data = (await client.get("/api/notifications/settings", headers=headers)).json()["data"]
    assert data["has_token"] is True
    assert data["notifications_enabled"] is False


async def test_test_notification_requires_token(client, make_user, messaging_client):
    user = await make_user()
    headers = auth_headers(user)

    response = await client.post("/api/notifications/test", headers=headers)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    await client.post("/api/notifications/token", json={"fcm_token": "device-token-6"}, headers=headers)
    response = await client.post("/api/notifications/test", headers=headers)

    assert response.json() == {"success": True, "message": "Test notification sent"}
    assert messaging_client.sent[-1]["title"] == "🌱 Test Notification"
