# 📄 File: tests/test_gifts_api.py
#
# 🧭 Purpose (Layman Explanation):
# Checks that plants can be handed to a friend through a gift link, that a gift can only be
# claimed once and by someone else, and that the sender can take it back before it is claimed.
#
# 🧪 Purpose (Technical Summary):
# HTTP-level tests for /api/plant-gifts: creation and the gifted lock, public token lookup,
# acceptance (plant copy with tasks due today in the receiver's timezone), sent/received
# lists, cancellation and persisted expiry.
#
# 🔗 Dependencies:
# - pytest, pytest-asyncio, httpx, SQLAlchemy
#
# 🔄 Connected Modules / Calls From:
# - pytest

from datetime import datetime, timedelta, timezone

from sqlalchemy import update

from sproutsync.modules.plant_gifting.infrastructure.database.models import PlantGiftModel
from sproutsync.shared.infrastructure.database.session import database_session
from sproutsync.shared.utils.timezone import start_of_day_in_timezone
from tests.conftest import auth_headers, create_plant


async def _gift(client, sender, plant_id: str, message: str = "Take good care of her"):
    response = await client.post(
        "/api/plant-gifts",
        json={"plant_id": plant_id, "message": message},
        headers=auth_headers(sender),
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def test_create_gift_locks_the_plant(client, make_user):
    sender = await make_user(name="Ivy Sender")
    plant = await create_plant(client, sender, pet_name="Monty")

    gift = await _gift(client, sender, plant["id"])

    assert gift["status"] == "PENDING"
    assert gift["gift_token"]
    assert gift["plant"]["id"] == plant["id"]
    assert gift["sender"]["name"] == "Ivy Sender"

    detail = (await client.get(f"/api/plants/{plant['id']}", headers=auth_headers(sender))).json()["data"]
    assert detail["is_gifted"] is True

    again = await client.post("/api/plant-gifts", json={"plant_id": plant["id"]}, headers=auth_headers(sender))
    assert again.status_code == 400
    assert again.json()["error"]["message"] == "This plant has already been gifted"


async def test_cannot_gift_someone_elses_plant(client, make_user):
    owner = await make_user()
    stranger = await make_user()
    plant = await create_plant(client, owner)

    response = await client.post("/api/plant-gifts", json={"plant_id": plant["id"]}, headers=auth_headers(stranger))

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Plant not found or you do not own this plant"


async def test_gift_link_is_public(client, make_user):
    sender = await make_user()
    plant = await create_plant(client, sender)
    gift = await _gift(client, sender, plant["id"])

    response = await client.get(f"/api/plant-gifts/gift/{gift['gift_token']}")

    assert response.status_code == 200
    assert response.json()["data"]["message"] == "Take good care of her"
    assert (await client.get("/api/plant-gifts/gift/not-a-token")).status_code == 404


async def test_accepting_copies_the_plant_to_the_receiver(client, make_user):
    sender = await make_user()
    receiver = await make_user(name="Rose Receiver")
    plant = await create_plant(client, sender, pet_name="Monty")
    tag = (
        await client.post("/api/tags", json={"name": "Gift", "color_hex": "#F97316"}, headers=auth_headers(sender))
    ).json()["data"]
    await client.post(f"/api/plants/{plant['id']}/tags", json={"tag_id": tag["id"]}, headers=auth_headers(sender))
    gift = await _gift(client, sender, plant["id"])

    response = await client.post(
        "/api/plant-gifts/accept",
        json={"gift_token": gift["gift_token"]},
        headers=auth_headers(receiver, timezone="Europe/Paris"),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Plant gift accepted successfully"
    assert body["data"]["gift"]["status"] == "ACCEPTED"
    assert body["data"]["gift"]["receiver_id"] == receiver.id

    copy = body["data"]["plant"]
    assert copy["id"] != plant["id"]
    assert copy["user_id"] == receiver.id
    assert copy["slug"] == "monty"
    assert copy["is_gifted"] is False
    assert [task["task_key"] for task in copy["tasks"]] == ["fertilizing", "watering"]
    assert [(t["name"], t["user_id"]) for t in copy["tags"]] == [("Gift", receiver.id)]
    todays_start = start_of_day_in_timezone("Europe/Paris")
    for task in copy["tasks"]:
        assert datetime.fromisoformat(task["next_due_on"].replace("Z", "+00:00")) == todays_start
        assert task["last_completed_on"] is None

    received = (await client.get("/api/plant-gifts/received", headers=auth_headers(receiver))).json()
    assert received["count"] == 1
    assert received["data"][0]["sender"]["id"] == sender.id

    sent = (await client.get("/api/plant-gifts/sent", headers=auth_headers(sender))).json()
    assert sent["data"][0]["receiver"]["name"] == "Rose Receiver"

    second = await client.post(
        "/api/plant-gifts/accept",
        json={"gift_token": gift["gift_token"]},
        headers=auth_headers(receiver),
    )
    assert second.status_code == 404


async def test_sender_cannot_accept_own_gift(client, make_user):
    sender = await make_user()
    plant = await create_plant(client, sender)
    gift = await _gift(client, sender, plant["id"])

    response = await client.post(
        "/api/plant-gifts/accept",
        json={"gift_token": gift["gift_token"]},
        headers=auth_headers(sender),
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "BUSINESS_RULE_VIOLATION"
    assert error["message"] == "You cannot accept your own gifts"


async def test_cancel_gift_unlocks_the_plant(client, make_user):
    sender = await make_user()
    plant = await create_plant(client, sender)
    gift = await _gift(client, sender, plant["id"])
    headers = auth_headers(sender)

    response = await client.delete(f"/api/plant-gifts/{gift['id']}", headers=headers)

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "CANCELLED"
    detail = (await client.get(f"/api/plants/{plant['id']}", headers=headers)).json()["data"]
    assert detail["is_gifted"] is False

    again = await client.delete(f"/api/plant-gifts/{gift['id']}", headers=headers)
    assert again.status_code == 404
    assert again.json()["error"]["message"] == "Gift not found or cannot be cancelled"

    # Unlocked plants can be offered again
    await _gift(client, sender, plant["id"])


async def test_expired_gift_is_gone_and_stays_expired(client, make_user):
    sender = await make_user()
    plant = await create_plant(client, sender)
    gift = await _gift(client, sender, plant["id"])
    async with database_session() as db:
        await db.execute(
            update(PlantGiftModel)
            .where(PlantGiftModel.id == gift["id"])
            .values(expires_at=datetime.now(timezone.utc) - timedelta(hours=1))
        )

    response = await client.get(f"/api/plant-gifts/gift/{gift['gift_token']}")
    assert response.status_code == 410
    assert response.json()["error"]["code"] == "GONE"

    # The EXPIRED status survives the failed request
    assert (await client.get(f"/api/plant-gifts/gift/{gift['gift_token']}")).status_code == 404
