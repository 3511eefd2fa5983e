# 📄 File: tests/test_ai.py
#
# 🧭 Purpose (Layman Explanation):
# Checks the "snap a photo, get plant info" feature without calling the real AI: answers are
# cleaned up sensibly, non-plant photos are turned away, and bad uploads get clear errors.
#
# 🧪 Purpose (Technical Summary):
# Unit tests for sanitize_identification, sanitize_health_analysis and validate_plant_image,
# plus HTTP tests for /api/ai/health and the identify endpoints with FakeGeminiClient and a
# monkeypatched URL fetcher.
#
# 🔗 Dependencies:
# - pytest, pytest-asyncio, httpx
#
# 🔄 Connected Modules / Calls From:
# - pytest

import pytest

from sproutsync.modules.ai_smart_features.domain.services import image_input
from sproutsync.modules.ai_smart_features.domain.services.plant_health_service import sanitize_health_analysis
from sproutsync.modules.ai_smart_features.domain.services.plant_identification_service import (
    TASK_KEYS,
    clamp_confidence,
    sanitize_identification,
)
from sproutsync.modules.ai_smart_features.domain.services.plant_image_validator import validate_plant_image
from sproutsync.shared.core.exceptions import ExternalServiceError
from tests.conftest import FakeGeminiClient, auth_headers

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64

MONSTERA_ANSWER = {
    "botanicalName": "Monstera deliciosa",
    "commonName": "Swiss cheese plant",
    "plantType": "Tropical Foliage",
    "confidence": 0.93,
    "careLevel": {"level": "Easy", "description": "Forgiving", "maintenanceTips": "Wipe leaves monthly"},
    "sunRequirements": {"level": "Part to Full", "description": "Bright indirect", "placementTips": "East window"},
    "toxicityLevel": {"level": "Medium", "description": "Calcium oxalates", "safetyTips": "Keep away from pets"},
    "petFriendliness": {"isFriendly": False, "reason": "Toxic to cats and dogs"},
    "commonPestsAndDiseases": "Spider mites, thrips",
    "preventiveMeasures": "Inspect leaves weekly",
    "care": {
        "watering": "Water when the top 2 inches are dry",
        "fertilizing": "Monthly in spring and summer",
        "pruning": "Remove yellow leaves",
        "spraying": "Mist weekly",
        "sunlightRotation": "Rotate a quarter turn weekly",
    },
    "suggestedTasks": [
        {"name": "watering", "frequencyDays": 7},
        {"name": "fertilizing", "frequencyDays": 30},
    ],
}


# =============================================================================
# SANITIZING
# =============================================================================

@pytest.mark.parametrize(
    "value, expected",
    [(0.42, 0.42), (1.7, 1.0), (-0.2, 0.0), (None, 0.5), ("high", 0.5), (True, 0.5)],
)
def test_clamp_confidence(value, expected):
    assert clamp_confidence(value) == expected


def test_sanitize_identification_maps_to_snake_case():
    identification = sanitize_identification(MONSTERA_ANSWER)

    assert identification.botanical_name == "Monstera deliciosa"
    assert identification.care_level.maintenance_tips == "Wipe leaves monthly"
    assert identification.pet_friendliness.is_friendly is False
    assert identification.care.sunlight_rotation == "Rotate a quarter turn weekly"
    assert [task.model_dump() for task in identification.suggested_tasks] == [
        {"name": "watering", "frequency_days": 7},
        {"name": "fertilizing", "frequency_days": 30},
    ]


def test_sanitize_identification_fills_defaults():
    identification = sanitize_identification({"careLevel": {"level": "Difficult", "description": ""}})

    assert identification.botanical_name == "Unknown Plant"
    assert identification.plant_type == "Unknown Type"
    assert identification.confidence == 0.5
    assert identification.care_level.level == "Difficult"
    assert identification.care_level.description == "Standard houseplant care requirements"
    assert identification.pet_friendliness.is_friendly is True
    assert [task.name for task in identification.suggested_tasks] == list(TASK_KEYS)


def test_sanitize_identification_drops_unknown_tasks():
    identification = sanitize_identification({
        "suggestedTasks": [
            {"name": "repotting", "frequencyDays": 365},
            {"name": "watering", "frequencyDays": "often"},
            {"name": "pruning", "frequencyDays": 900},
        ]
    })

    assert [task.model_dump() for task in identification.suggested_tasks] == [
        {"name": "pruning", "frequency_days": 365}
    ]


def test_sanitize_health_analysis_healthy_plant():
    analysis = sanitize_health_analysis({
        "botanicalName": "Ficus lyrata",
        "confidence": 0.8,
        "disease": {"issue": None, "description": "", "issueConfidence": None},
    })

    assert analysis.botanical_name == "Ficus lyrata"
    assert analysis.disease.issue is None
    assert analysis.disease.description is None
    assert analysis.disease.issue_confidence is None


def test_sanitize_health_analysis_with_issue():
    analysis = sanitize_health_analysis({
        "disease": {"issue": "Powdery mildew", "steps": "Remove affected leaves", "issueConfidence": 1.3},
    })

    assert analysis.botanical_name == "Unknown Plant"
    assert analysis.disease.issue == "Powdery mildew"
    assert analysis.disease.issue_confidence == 1.0


# =============================================================================
# VALIDATION
# =============================================================================

@pytest.mark.parametrize(
    "verdict, expected",
    [
        ({"isPlant": True, "confidence": 0.95}, True),
        ({"isPlant": True, "confidence": 0.6}, False),
        ({"isPlant": False, "confidence": 0.99}, False),
        ({"confidence": 0.99}, False),
    ],
)
async def test_validate_plant_image(verdict, expected):
    client = FakeGeminiClient(verdict=verdict)

    assert await validate_plant_image(client, {"mime_type": "image/png", "data": PNG_BYTES}) is expected


async def test_validation_errors_count_as_not_a_plant():
    class BrokenClient:
        async def generate_json(self, prompt, image_part, schema=None):
            raise ExternalServiceError("AI service returned an empty response", service="gemini")

    assert await validate_plant_image(BrokenClient(), {"mime_type": "image/png", "data": PNG_BYTES}) is False


# =============================================================================
# API
# =============================================================================

async def test_ai_health(client):
    response = await client.get("/api/ai/health")

    assert response.status_code == 200
    assert response.json()["api_key_configured"] is True


async def test_identify_uploaded_file(client, make_user, gemini_client):
    gemini_client.answer = MONSTERA_ANSWER
    user = await make_user()

    response = await client.post(
        "/api/ai/identify/file",
        files={"image": ("monstera.png", PNG_BYTES, "image/png")},
        headers=auth_headers(user),
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["message"] == "Plant identified successfully"
    assert body["data"]["botanical_name"] == "Monstera deliciosa"
    assert body["data"]["toxicity_level"]["safety_tips"] == "Keep away from pets"
    assert len(gemini_client.prompts) == 2


async def test_identify_rejects_non_image_upload(client, make_user, gemini_client):
    user = await make_user()

    response = await client.post(
        "/api/ai/identify/file",
        files={"image": ("notes.txt", b"just text", "text/plain")},
        headers=auth_headers(user),
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_FILE_TYPE"
    assert gemini_client.prompts == []


async def test_identify_requires_an_image(client, make_user, gemini_client):
    user = await make_user()

    response = await client.post("/api/ai/identify/file", headers=auth_headers(user))

    assert response.status_code == 400


async def test_identify_rejects_non_plant_photo(client, make_user, gemini_client):
    gemini_client.verdict = {"isPlant": False, "confidence": 0.97, "reason": "A cat on a sofa"}
    user = await make_user()

    response = await client.post(
        "/api/ai/identify/file",
        files={"image": ("cat.png", PNG_BYTES, "image/png")},
        headers=auth_headers(user),
    )

    assert response.status_code == 500
    error = response.json()["error"]
    assert error["code"] == "EXTERNAL_SERVICE_ERROR"
    assert error["message"].startswith("The uploaded image does not appear to contain a plant")
    assert len(gemini_client.prompts) == 1


async def test_health_analysis_from_url(client, make_user, gemini_client, monkeypatch):
    fetched = []

    async def fake_fetch(url):
        fetched.append(url)
        return PNG_BYTES

    monkeypatch.setattr(image_input, "fetch_image_from_url", fake_fetch)
    gemini_client.answer = {
        "botanicalName": "Ficus lyrata",
        "commonName": "Fiddle leaf fig",
        "confidence": 0.9,
        "disease": {"issue": "Root rot", "issueConfidence": 0.85},
    }
    user = await make_user()

    response = await client.post(
        "/api/ai/identify/issue/url",
        json={"image_url": "https://cdn.example.com/fig.png"},
        headers=auth_headers(user),
    )

    assert response.status_code == 200, response.text
    assert response.json()["data"]["disease"]["issue"] == "Root rot"
    assert fetched == ["https://cdn.example.com/fig.png"]


async def test_unreachable_image_url(client, make_user, gemini_client, monkeypatch):
    async def failing_fetch(url):
        raise ExternalServiceError("Failed to fetch image: 404", service="image_fetch")

    monkeypatch.setattr(image_input, "fetch_image_from_url", failing_fetch)
    user = await make_user()

    response = await client.post(
        "/api/ai/identify/url",
        json={"image_url": "https://cdn.example.com/missing.png"},
        headers=auth_headers(user),
    )

    assert response.status_code == 500
    assert response.json()["error"]["message"].startswith("Unable to access the image URL")


async def test_identify_url_must_be_a_url(client, make_user, gemini_client):
    user = await make_user()

    response = await client.post("/api/ai/identify/url", json={"image_url": "not a url"}, headers=auth_headers(user))

    assert response.status_code == 400
