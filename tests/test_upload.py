# 📄 File: tests/test_upload.py
#
# 🧭 Purpose (Layman Explanation):
# Checks plant photo uploads: good photos land in storage with a resized link, while files
# that are too big or are not images get turned away before anything is stored.
#
# 🧪 Purpose (Technical Summary):
# HTTP tests for POST /api/upload/image. The Cloudinary SDK uploader is monkeypatched, so
# CloudinaryStorage runs for real up to the SDK call.
#
# 🔗 Dependencies:
# - pytest, httpx, cloudinary (patched uploader)
#
# 🔄 Connected Modules / Calls From:
# - plant_management.presentation.api.v1.upload
# - shared.infrastructure.storage.cloudinary_storage

from typing import Any, Dict, List

import cloudinary.exceptions
import pytest

from sproutsync.main import app
from sproutsync.shared.infrastructure.storage import cloudinary_storage
from sproutsync.shared.infrastructure.storage.cloudinary_storage import (
    CloudinaryStorage,
    build_optimized_url,
    get_cloudinary_storage,
)
from tests.conftest import auth_headers

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def uploads(monkeypatch) -> List[Dict[str, Any]]:
    """Configured storage whose SDK uploader records calls instead of sending them."""
    calls: List[Dict[str, Any]] = []

    def fake_upload(file, **options):
        data = file.read()
        calls.append({"name": file.name, "size": len(data), **options})
        return {
            "public_id": f"{options['folder']}/leaf-{len(calls)}",
            "secure_url": f"https://res.cloudinary.com/demo/image/upload/v1/{options['folder']}/leaf-{len(calls)}.png",
            "width": 800,
            "height": 600,
            "format": "png",
            "bytes": len(data),
        }

    monkeypatch.setattr(cloudinary_storage.cloudinary.uploader, "upload", fake_upload)

    storage = CloudinaryStorage()
    storage.cloud_name, storage.api_key, storage.api_secret = "demo", "key", "secret"
    app.dependency_overrides[get_cloudinary_storage] = lambda: storage
    yield calls
    app.dependency_overrides.pop(get_cloudinary_storage, None)


def test_optimized_url_inserts_delivery_transformation():
    url = build_optimized_url("https://res.cloudinary.com/demo/image/upload/v1/plant.jpg")
    assert url == "https://res.cloudinary.com/demo/image/upload/w_800,h_800,c_limit,q_auto:good,f_auto/v1/plant.jpg"


async def test_upload_returns_image_and_optimized_url(client, make_user, uploads):
    user = await make_user()

    response = await client.post(
        "/api/upload/image",
        files={"image": ("leaf.png", PNG_BYTES, "image/png")},
        headers=auth_headers(user),
    )

    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["public_id"] == "plant-care/leaf-1"
    assert data["bytes"] == len(PNG_BYTES)
    assert data["optimized_url"] == build_optimized_url(data["secure_url"])
    assert "/upload/w_800,h_800,c_limit,q_auto:good,f_auto/" in data["optimized_url"]
    assert uploads[0]["name"] == "leaf.png"
    assert uploads[0]["transformation"] == cloudinary_storage.UPLOAD_TRANSFORMATION


async def test_upload_rejects_non_image(client, make_user, uploads):
    user = await make_user()

    response = await client.post(
        "/api/upload/image",
        files={"image": ("notes.pdf", b"%PDF-1.4", "application/pdf")},
        headers=auth_headers(user),
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_FILE_TYPE"
    assert uploads == []


async def test_upload_rejects_files_over_limit(client, make_user, uploads):
    user = await make_user()
    too_big = b"\x00" * (5 * 1024 * 1024 + 1)

    response = await client.post(
        "/api/upload/image",
        files={"image": ("huge.jpg", too_big, "image/jpeg")},
        headers=auth_headers(user),
    )

    assert response.status_code == 413
    assert response.json()["error"]["code"] == "FILE_TOO_LARGE"
    assert uploads == []


async def test_upload_requires_an_image(client, make_user, uploads):
    user = await make_user()

    response = await client.post("/api/upload/image", data={"caption": "no file"}, headers=auth_headers(user))

    assert response.status_code == 400
    assert uploads == []


async def test_upload_failure_maps_to_bad_gateway(client, make_user, uploads, monkeypatch):
    def broken_upload(file, **options):
        raise cloudinary.exceptions.Error("Invalid Signature")

    monkeypatch.setattr(cloudinary_storage.cloudinary.uploader, "upload", broken_upload)
    user = await make_user()

    response = await client.post(
        "/api/upload/image",
        files={"image": ("leaf.png", PNG_BYTES, "image/png")},
        headers=auth_headers(user),
    )

    assert response.status_code == 502
    assert response.json()["error"]["code"] == "EXTERNAL_SERVICE_ERROR"


async def test_upload_without_cloudinary_settings_is_a_configuration_error(client, make_user):
    user = await make_user()
    app.dependency_overrides[get_cloudinary_storage] = CloudinaryStorage
    try:
        response = await client.post(
            "/api/upload/image",
            files={"image": ("leaf.png", PNG_BYTES, "image/png")},
            headers=auth_headers(user),
        )
    finally:
        app.dependency_overrides.pop(get_cloudinary_storage, None)

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "CONFIGURATION_ERROR"
