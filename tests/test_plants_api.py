# 📄 File: tests/test_plants_api.py
#
# 🧭 Purpose (Layman Explanation):
# Walks through what a plant owner does every day: add a plant, look at it, rename it,
# tag it, write notes, tick off chores and finally remove it.
#
# 🧪 Purpose (Technical Summary):
# HTTP-level tests for /api/plants, /api/plants/{id}/tasks|tags|notes|photos|tracking,
# /api/tags and /api/tasks, including ownership checks, timezone-aware due dates and the
# error envelope.
#
# 🔗 Dependencies:
# - pytest, pytest-asyncio, httpx
#
# 🔄 Connected Modules / Calls From:
# - pytest

from datetime import datetime, timedelta, timezone

import pytest

from sproutsync.shared.utils.timezone import start_of_day_in_timezone, start_of_day_plus_days_in_timezone
from tests.conftest import auth_headers, create_plant


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


# =============================================================================
# PLANTS
# =============================================================================

async def test_task_templates_are_seeded(client, make_user):
    user = await make_user()

    response = await client.get("/api/plants/task-templates", headers=auth_headers(user))

    body = response.json()
    assert response.status_code == 200
    assert body["count"] == 5
    watering = next(t for t in body["data"] if t["key"] == "watering")
    assert watering["label"] == "Water"
    assert watering["color_hex"] == "#3B82F6"
    assert watering["default_frequency_days"] == 3


async def test_create_plant_with_care_tasks(client, make_user):
    user = await make_user()
    last_watered = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)

    response = await client.post(
        "/api/plants",
        json={
            "botanical_name": "Ficus lyrata",
            "common_name": "Fiddle leaf fig",
            "pet_name": "Fiddle Leaf_Fig!!",
            "care_level": "Moderate",
            "pet_friendliness": {"is_friendly": False, "reason": "Mildly toxic sap"},
            "care_tasks": {
                "watering": {"frequency": 7, "last_completed_on": last_watered.isoformat()},
                "pruning": {"frequency": 30},
                "spraying": None,
            },
        },
        headers=auth_headers(user),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Plant created successfully"
    plant = body["data"]
    assert plant["slug"] == "fiddle-leaf-fig"
    assert plant["user_id"] == user.id
    assert plant["pet_friendliness"] == {"is_friendly": False, "reason": "Mildly toxic sap"}
    assert plant["_count"] == {"notes": 0, "photos": 0}
    assert [task["task_key"] for task in plant["tasks"]] == ["pruning", "watering"]

    watering = plant["tasks"][1]
    assert _parse(watering["next_due_on"]) == last_watered + timedelta(days=7)
    assert _parse(watering["last_completed_on"]) == last_watered

    pruning = plant["tasks"][0]
    assert pruning["last_completed_on"] is None
    assert _parse(pruning["next_due_on"]) > datetime.now(timezone.utc) + timedelta(days=29)


async def test_slugs_are_unique_per_owner(client, make_user):
    user = await make_user()
    other = await make_user()

    first = await create_plant(client, user, pet_name="Monty")
    second = await create_plant(client, user, pet_name="Monty")
    third = await create_plant(client, other, pet_name="Monty")

    assert (first["slug"], second["slug"], third["slug"]) == ("monty", "monty-1", "monty")


async def test_unknown_task_key_is_rejected(client, make_user):
    user = await make_user()

    response = await client.post(
        "/api/plants",
        json={
            "botanical_name": "Ficus lyrata",
            "common_name": "Fiddle leaf fig",
            "care_tasks": {"repotting": {"frequency": 90}},
        },
        headers=auth_headers(user),
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["message"].startswith("Invalid task key: repotting")

    listing = await client.get("/api/plants", headers=auth_headers(user))
    assert listing.json()["count"] == 0


async def test_create_plant_requires_names(client, make_user):
    user = await make_user()

    response = await client.post("/api/plants", json={"pet_name": "Nameless"}, headers=auth_headers(user))

    assert response.status_code == 400
    fields = {detail["field"] for detail in response.json()["error"]["details"]}
    assert {"botanical_name", "common_name"} <= fields


async def test_list_plants_only_returns_own_plants(client, make_user):
    user = await make_user()
    other = await make_user()
    await create_plant(client, user, pet_name="Monty")
    await create_plant(client, user, common_name="Snake plant", botanical_name="Dracaena trifasciata")
    await create_plant(client, other, pet_name="Not mine")

    response = await client.get("/api/plants", headers=auth_headers(user))
    body = response.json()
    assert body["count"] == 2
    assert all(plant["user_id"] == user.id for plant in body["data"])
    assert all("_count" in plant for plant in body["data"])

    search = await client.get("/api/plants", params={"search": "snake"}, headers=auth_headers(user))
    assert [plant["common_name"] for plant in search.json()["data"]] == ["Snake plant"]


async def test_update_plant_is_partial(client, make_user):
    user = await make_user()
    plant = await create_plant(client, user, pet_name="Monty", city="Lisbon")

    response = await client.put(
        f"/api/plants/{plant['id']}",
        json={"pet_name": "Monty II"},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["pet_name"] == "Monty II"
    assert updated["city"] == "Lisbon"
    assert updated["slug"] == "monty"


@pytest.mark.parametrize("field", ["botanical_name", "common_name"])
async def test_update_plant_rejects_null_names(client, make_user, field):
    user = await make_user()
    plant = await create_plant(client, user)

    response = await client.put(f"/api/plants/{plant['id']}", json={field: None}, headers=auth_headers(user))

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"][0]["field"] == field


async def test_update_plant_can_clear_optional_fields(client, make_user):
    user = await make_user()
    plant = await create_plant(client, user, city="Lisbon")

    response = await client.put(f"/api/plants/{plant['id']}", json={"city": None}, headers=auth_headers(user))

    assert response.status_code == 200
    assert response.json()["data"]["city"] is None


async def test_other_users_cannot_see_or_delete_a_plant(client, make_user):
    owner = await make_user()
    stranger = await make_user()
    plant = await create_plant(client, owner)

    assert (await client.get(f"/api/plants/{plant['id']}", headers=auth_headers(stranger))).status_code == 404
    response = await client.delete(f"/api/plants/{plant['id']}", headers=auth_headers(stranger))
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


async def test_delete_plant_removes_it(client, make_user):
    user = await make_user()
    plant = await create_plant(client, user)
    headers = auth_headers(user)
    await client.post(f"/api/plants/{plant['id']}/notes", json={"body": "Looking great"}, headers=headers)

    response = await client.delete(f"/api/plants/{plant['id']}", headers=headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Plant deleted successfully"
    assert (await client.get(f"/api/plants/{plant['id']}", headers=headers)).status_code == 404
    assert (await client.get("/api/tasks", headers=headers)).json()["count"] == 0


# =============================================================================
# PLANT TASKS
# =============================================================================

async def test_plant_task_lifecycle_uses_user_timezone(client, make_user):
    user = await make_user()
    plant = await create_plant(client, user, care_tasks=None)
    headers = auth_headers(user, timezone="Asia/Tokyo")
    base = f"/api/plants/{plant['id']}/tasks"

    response = await client.post(base, json={"task_key": "watering", "frequency_days": 3}, headers=headers)
    assert response.status_code == 201
    task = response.json()["data"]
    today_start = start_of_day_in_timezone("Asia/Tokyo")
    assert _parse(task["next_due_on"]) == today_start

    response = await client.post(f"{base}/{task['id']}/complete", headers=headers)
    assert response.json()["message"] == "Task marked as completed"
    completed = response.json()["data"]
    assert completed["last_completed_on"] is not None
    assert _parse(completed["next_due_on"]) == start_of_day_plus_days_in_timezone("Asia/Tokyo", 3)

    new_due = datetime(2030, 1, 2, 9, 30, tzinfo=timezone.utc)
    response = await client.post(
        f"{base}/{task['id']}/reschedule",
        json={"next_due_on": new_due.isoformat()},
        headers=headers,
    )
    assert _parse(response.json()["data"]["next_due_on"]) == new_due

    listing = (await client.get(base, headers=headers)).json()
    assert listing["pagination"] == {"page": 1, "limit": 20, "total": 1, "pages": 1}

    response = await client.delete(f"{base}/{task['id']}", headers=headers)
    assert response.json()["message"] == "Task deleted successfully"
    assert (await client.get(f"{base}/{task['id']}", headers=headers)).status_code == 404


async def test_reschedule_requires_a_date(client, make_user):
    user = await make_user()
    plant = await create_plant(client, user)
    task_id = plant["tasks"][0]["id"]

    response = await client.post(
        f"/api/plants/{plant['id']}/tasks/{task_id}/reschedule",
        json={},
        headers=auth_headers(user),
    )

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Next due date is required"


@pytest.mark.parametrize("field", ["active", "frequency_days", "next_due_on"])
async def test_plant_task_update_rejects_null(client, make_user, field):
    user = await make_user()
    plant = await create_plant(client, user)
    task_id = plant["tasks"][0]["id"]

    response = await client.put(
        f"/api/plants/{plant['id']}/tasks/{task_id}",
        json={field: None},
        headers=auth_headers(user),
    )

    assert response.status_code == 400
    assert response.json()["error"]["details"][0]["field"] == field


async def test_task_update_rejects_null_but_clears_completion(client, make_user):
    user = await make_user()
    plant = await create_plant(client, user)
    task_id = plant["tasks"][0]["id"]
    headers = auth_headers(user)

    rejected = await client.put(f"/api/tasks/{task_id}", json={"task_key": None}, headers=headers)
    assert rejected.status_code == 400
    assert rejected.json()["error"]["code"] == "VALIDATION_ERROR"

    cleared = await client.put(f"/api/tasks/{task_id}", json={"last_completed_on": None}, headers=headers)
    assert cleared.status_code == 200
    assert cleared.json()["data"]["last_completed_on"] is None


async def test_timezone_header_is_remembered(client, make_user):
    user = await make_user()
    plant = await create_plant(client, user, care_tasks=None)
    base = f"/api/plants/{plant['id']}/tasks"

    await client.get(base, headers=auth_headers(user, timezone="America/Chicago"))
    response = await client.post(base, json={"task_key": "pruning", "frequency_days": 30}, headers=auth_headers(user))

    assert _parse(response.json()["data"]["next_due_on"]) == start_of_day_in_timezone("America/Chicago")


async def test_plant_tasks_of_foreign_plant_are_forbidden(client, make_user):
    owner = await make_user()
    stranger = await make_user()
    plant = await create_plant(client, owner)

    response = await client.get(f"/api/plants/{plant['id']}/tasks", headers=auth_headers(stranger))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "AUTHORIZATION_ERROR"


# =============================================================================
# USER-WIDE TASKS
# =============================================================================

async def test_upcoming_and_overdue_tasks(client, make_user):
    user = await make_user()
    headers = auth_headers(user)
    plant = await create_plant(client, user, care_tasks=None)
    now = datetime.now(timezone.utc)

    for key, due in (("watering", now - timedelta(days=2)), ("fertilizing", now + timedelta(days=3))):
        response = await client.post(
            "/api/tasks",
            json={"plant_id": plant["id"], "task_key": key, "frequency_days": 7, "next_due_on": due.isoformat()},
            headers=headers,
        )
        assert response.status_code == 201
        assert response.json()["data"]["plant"]["id"] == plant["id"]

    overdue = (await client.get("/api/tasks/overdue", headers=headers)).json()
    upcoming = (await client.get("/api/tasks/upcoming", headers=headers)).json()
    assert [task["task_key"] for task in overdue["data"]] == ["watering"]
    assert [task["task_key"] for task in upcoming["data"]] == ["fertilizing"]

    watering_id = overdue["data"][0]["id"]
    response = await client.post(f"/api/tasks/{watering_id}/complete", headers=headers)
    next_due = _parse(response.json()["data"]["next_due_on"])
    assert timedelta(days=6, hours=23) < next_due - now < timedelta(days=7, minutes=5)
    assert (await client.get("/api/tasks/overdue", headers=headers)).json()["count"] == 0


async def test_create_task_on_foreign_plant_is_not_found(client, make_user):
    owner = await make_user()
    stranger = await make_user()
    plant = await create_plant(client, owner)

    response = await client.post(
        "/api/tasks",
        json={
            "plant_id": plant["id"],
            "task_key": "watering",
            "frequency_days": 3,
            "next_due_on": datetime.now(timezone.utc).isoformat(),
        },
        headers=auth_headers(stranger),
    )

    assert response.status_code == 404


# =============================================================================
# TAGS & JOURNAL
# =============================================================================

async def test_tags_can_be_assigned_and_counted(client, make_user):
    user = await make_user()
    headers = auth_headers(user)
    plant = await create_plant(client, user)

    response = await client.post("/api/tags", json={"name": "Balcony", "color_hex": "#10B981"}, headers=headers)
    assert response.status_code == 201
    tag = response.json()["data"]

    response = await client.post(f"/api/plants/{plant['id']}/tags", json={"tag_id": tag["id"]}, headers=headers)
    assert response.status_code == 201
    duplicate = await client.post(f"/api/plants/{plant['id']}/tags", json={"tag_id": tag["id"]}, headers=headers)
    assert duplicate.status_code == 400

    tags = (await client.get("/api/tags", headers=headers)).json()
    assert tags["data"][0]["plant_count"] == 1

    detail = (await client.get(f"/api/plants/{plant['id']}", headers=headers)).json()["data"]
    assert [t["name"] for t in detail["tags"]] == ["Balcony"]

    filtered = (await client.get("/api/plants", params={"tag": "Balcony"}, headers=headers)).json()
    assert filtered["count"] == 1


async def test_tag_detail_update_and_delete(client, make_user):
    user = await make_user()
    headers = auth_headers(user)
    plant = await create_plant(client, user, pet_name="Monty")
    tag = (await client.post("/api/tags", json={"name": "Office"}, headers=headers)).json()["data"]
    await client.post(f"/api/plants/{plant['id']}/tags", json={"tag_id": tag["id"]}, headers=headers)

    detail = (await client.get(f"/api/tags/{tag['id']}", headers=headers)).json()["data"]
    assert detail["plant_count"] == 1
    assert detail["plants"][0]["pet_name"] == "Monty"

    renamed = await client.put(f"/api/tags/{tag['id']}", json={"name": "Study"}, headers=headers)
    assert renamed.json()["data"]["name"] == "Study"

    cleared = await client.put(f"/api/tags/{tag['id']}", json={"name": None}, headers=headers)
    assert cleared.status_code == 400

    response = await client.delete(f"/api/tags/{tag['id']}", headers=headers)
    assert response.json()["message"] == "Tag deleted successfully"
    plant_tags = (await client.get(f"/api/plants/{plant['id']}/tags", headers=headers)).json()
    assert plant_tags["count"] == 0


async def test_invalid_tag_color_is_rejected(client, make_user):
    user = await make_user()

    response = await client.post("/api/tags", json={"name": "Office", "color_hex": "green"}, headers=auth_headers(user))

    assert response.status_code == 400
    assert response.json()["error"]["details"][0]["field"] == "color_hex"


async def test_notes_photos_and_tracking(client, make_user):
    user = await make_user()
    headers = auth_headers(user)
    plant = await create_plant(client, user)
    base = f"/api/plants/{plant['id']}"

    response = await client.post(
        f"{base}/notes",
        json={"body": "Yellow leaves", "task_key": "watering", "preset": "STRESSED"},
        headers=headers,
    )
    assert response.status_code == 201
    assert response.json()["data"]["preset"] == "STRESSED"

    response = await client.post(
        f"{base}/photos",
        json={
            "cloudinary_public_id": "plant-care/monty-1",
            "secure_url": "https://res.cloudinary.com/demo/image/upload/monty-1.jpg",
            "taken_at": "2024-06-01T10:00:00Z",
        },
        headers=headers,
    )
    assert response.status_code == 201

    response = await client.post(
        f"{base}/tracking",
        json={"date": "2024-06-01", "note": "New leaf unfurling"},
        headers=headers,
    )
    assert response.status_code == 201

    notes = (await client.get(f"{base}/notes", params={"preset": "STRESSED"}, headers=headers)).json()
    assert notes["pagination"]["total"] == 1
    tracking = (await client.get(f"{base}/tracking", headers=headers)).json()
    assert tracking["data"][0]["note"] == "New leaf unfurling"

    detail = (await client.get(base, headers=headers)).json()["data"]
    assert detail["_count"] == {"notes": 1, "photos": 1}
    assert detail["photos"][0]["cloudinary_public_id"] == "plant-care/monty-1"


async def test_invalid_note_preset_is_rejected(client, make_user):
    user = await make_user()
    plant = await create_plant(client, user)

    response = await client.post(
        f"/api/plants/{plant['id']}/notes",
        json={"body": "Hmm", "preset": "SAD"},
        headers=auth_headers(user),
    )

    assert response.status_code == 400
