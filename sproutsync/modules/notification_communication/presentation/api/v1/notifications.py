# 📄 File: sproutsync/modules/notification_communication/presentation/api/v1/notifications.py
# 🧭 Purpose (Layman Explanation):
# Endpoints the app uses to register a device for reminders, switch reminders on or off and
# send a test reminder.
#
# 🧪 Purpose (Technical Summary):
# FastAPI router mounted at /api/notifications over NotificationService.
#
# 🔗 Dependencies:
# - FastAPI APIRouter, pydantic request models
# - notification_communication NotificationService
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.api.v1.router

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from sproutsync.modules.notification_communication.domain.services.notification_service import (
    NotificationService,
    get_notification_service,
)
from sproutsync.modules.user_management.domain.services.user_settings_service import get_user_settings
from sproutsync.shared.core.dependencies import CurrentUser, get_current_user
from sproutsync.shared.core.exceptions import ValidationError
from sproutsync.shared.core.responses import api_response

logger = logging.getLogger(__name__)

notifications_router = APIRouter()


class SaveTokenRequest(BaseModel):
    fcm_token: str = Field(..., min_length=1, description="Firebase Cloud Messaging registration token")


class NotificationSettingsRequest(BaseModel):
    enabled: bool


@notifications_router.post("/token", summary="Save FCM token")
async def save_token(
    payload: SaveTokenRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    await service.save_user_token(current_user.user_id, payload.fcm_token)
    return api_response(message="FCM token saved successfully")


@notifications_router.put("/settings", summary="Update notification settings")
async def update_settings(
    payload: NotificationSettingsRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    await service.update_notification_settings(current_user.user_id, payload.enabled)
    return api_response(data={"enabled": payload.enabled}, message="Notification settings updated successfully")


@notifications_router.get("/settings", summary="Get notification settings")
async def get_settings(
    current_user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return api_response(data=await service.get_notification_settings(current_user.user_id))


@notifications_router.post("/prompt-shown", summary="Mark notification prompt as shown")
async def mark_prompt_shown(
    current_user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    await service.mark_prompt_shown(current_user.user_id)
    return api_response(message="Notification prompt marked as shown")


@notifications_router.post(
    "/test",
    summary="Send test notification",
    responses={400: {"description": "No FCM token registered"}},
)
async def send_test_notification(
    current_user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    user_settings = await get_user_settings(service.session, current_user.user_id)
    if user_settings is None or not user_settings.fcm_token:
        raise ValidationError("No FCM token registered for this user", field="fcm_token")

    sent = await service.send_notification(current_user.user_id, {
        "title": "🌱 Test Notification",
        "body": "This is a test notification from SproutSync!",
        "plant_id": "test",
        "plant_name": "Test Plant",
    })
    return {
        "success": sent,
        "message": "Test notification sent" if sent else "Failed to send test notification",
    }
