# 📄 File: tests/test_community_api.py
#
# 🧭 Purpose (Layman Explanation):
# Checks the public side of SproutSync: anyone can visit a garden or plant page, and
# signed-in visitors can leave a heart or a comment.
#
# 🧪 Purpose (Technical Summary):
# HTTP-level tests for /api/public (garden and plant profiles with health score, streak and
# badge) and /api/gardens (appreciation toggles and comments on gardens and plants).
#
# 🔗 Dependencies:
# - pytest, pytest-asyncio, httpx
#
# 🔄 Connected Modules / Calls From:
# - pytest

from tests.conftest import auth_headers, create_plant


async def test_public_garden_lists_kept_plants(client, make_user):
    owner = await make_user(name="Fern Keeper", username="fern-keeper")
    await create_plant(client, owner, pet_name="Monty", city="Porto")
    gifted = await create_plant(client, owner, pet_name="Leaving Soon")
    await client.post("/api/plant-gifts", json={"plant_id": gifted["id"]}, headers=auth_headers(owner))

    response = await client.get("/api/public/garden/fern-keeper")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["owner"]["username"] == "fern-keeper"
    assert "email" not in data["owner"]
    assert [plant["pet_name"] for plant in data["plants"]] == ["Monty"]
    assert data["plants"][0]["health_score"] == 100
    assert data["plants"][0]["city"] == "Porto"
    assert data["appreciations"] == {"count": 0, "users": []}
    assert data["comments"] == []


async def test_unknown_garden_is_not_found(client):
    response = await client.get("/api/public/garden/nobody-here")

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "User not found"


async def test_public_plant_profile(client, make_user):
    owner = await make_user(username="fern-keeper")
    await create_plant(client, owner, pet_name="Monty")

    response = await client.get("/api/public/u/fern-keeper/monty")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["plant"]["slug"] == "monty"
    assert [task["task_key"] for task in data["tasks"]] == ["fertilizing", "watering"]
    assert data["health_score"] == 100
    assert data["care_streak"] == 1
    assert data["days_thriving"] == 0
    assert data["badge"]["name"] == "Sprout Starter"

    missing = await client.get("/api/public/u/fern-keeper/not-a-plant")
    assert missing.status_code == 404
    assert missing.json()["error"]["message"] == "Plant not found"


async def test_plant_appreciation_toggles(client, make_user):
    owner = await make_user(username="fern-keeper")
    visitor = await make_user(name="Visiting Violet")
    plant = await create_plant(client, owner, pet_name="Monty")
    url = f"/api/gardens/plants/{plant['id']}/appreciate"

    first = await client.post(url, headers=auth_headers(visitor))
    assert first.json()["data"] == {"appreciated": True}
    assert first.json()["message"] == "Appreciation added"

    profile = (await client.get("/api/public/u/fern-keeper/monty")).json()["data"]
    assert profile["appreciations"]["count"] == 1
    assert profile["appreciations"]["users"][0]["name"] == "Visiting Violet"

    second = await client.post(url, headers=auth_headers(visitor))
    assert second.json()["data"] == {"appreciated": False}
    assert second.json()["message"] == "Appreciation removed"


async def test_plant_comments_are_public(client, make_user):
    owner = await make_user(username="fern-keeper")
    visitor = await make_user(name="Visiting Violet")
    plant = await create_plant(client, owner, pet_name="Monty")

    response = await client.post(
        f"/api/gardens/plants/{plant['id']}/comments",
        json={"comment": "What a beauty!"},
        headers=auth_headers(visitor),
    )

    assert response.status_code == 201
    assert response.json()["data"]["user"]["name"] == "Visiting Violet"
    comments = (await client.get("/api/public/u/fern-keeper/monty")).json()["data"]["comments"]
    assert [comment["comment"] for comment in comments] == ["What a beauty!"]


async def test_empty_comment_is_rejected(client, make_user):
    owner = await make_user()
    plant = await create_plant(client, owner)

    response = await client.post(
        f"/api/gardens/plants/{plant['id']}/comments",
        json={"comment": ""},
        headers=auth_headers(owner),
    )

    assert response.status_code == 400


async def test_garden_appreciation_and_comments(client, make_user):
    owner = await make_user(username="fern-keeper")
    visitor = await make_user()
    headers = auth_headers(visitor)

    await client.post(f"/api/gardens/{owner.id}/appreciate", headers=headers)
    await client.post(f"/api/gardens/{owner.id}/comments", json={"comment": "Lovely jungle"}, headers=headers)

    data = (await client.get("/api/public/garden/fern-keeper")).json()["data"]
    assert data["appreciations"]["count"] == 1
    assert data["comments"][0]["comment"] == "Lovely jungle"


async def test_unknown_garden_owner_or_plant(client, make_user):
    visitor = await make_user()
    headers = auth_headers(visitor)

    garden = await client.post("/api/gardens/missing-user/appreciate", headers=headers)
    plant = await client.post("/api/gardens/plants/missing-plant/appreciate", headers=headers)

    assert garden.status_code == 404
    assert garden.json()["error"]["message"] == "Garden owner not found"
    assert plant.status_code == 404
