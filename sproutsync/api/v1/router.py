# 📄 File: sproutsync/api/v1/router.py
# 🧭 Purpose (Layman Explanation):
# The traffic director for the SproutSync API: it sends plant requests to the plant
# handlers, task requests to the care handlers, sign-in requests to the auth handlers, etc.
#
# 🧪 Purpose (Technical Summary):
# Aggregates every module router under its route prefix. main.py mounts the result under
# /api.
#
# 🔗 Dependencies:
# - FastAPI APIRouter
# - presentation routers of every module in sproutsync.modules
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.main

import logging

from fastapi import APIRouter

from sproutsync.api.v1.health import health_router
from sproutsync.modules.ai_smart_features.presentation.api.v1.ai import ai_router
from sproutsync.modules.calendar_sync.presentation.api.v1.google_calendar import google_calendar_router
from sproutsync.modules.care_management.presentation.api.v1.plant_tasks import plant_tasks_router
from sproutsync.modules.care_management.presentation.api.v1.tasks import tasks_router
from sproutsync.modules.community_social.presentation.api.v1.gardens import gardens_router
from sproutsync.modules.community_social.presentation.api.v1.public import public_router
from sproutsync.modules.notification_communication.presentation.api.v1.notifications import (
    notifications_router,
)
from sproutsync.modules.plant_gifting.presentation.api.v1.plant_gifts import plant_gifts_router
from sproutsync.modules.plant_management.presentation.api.v1.plant_journal import (
    notes_router,
    photos_router,
    tracking_router,
)
from sproutsync.modules.plant_management.presentation.api.v1.plant_tags import plant_tags_router
from sproutsync.modules.plant_management.presentation.api.v1.plants import plants_router
from sproutsync.modules.plant_management.presentation.api.v1.tags import tags_router
from sproutsync.modules.plant_management.presentation.api.v1.upload import upload_router
from sproutsync.modules.user_management.presentation.api.v1.auth import auth_router
from sproutsync.modules.user_management.presentation.api.v1.tutorial import tutorial_router
from sproutsync.modules.user_management.presentation.api.v1.user_settings import user_settings_router
from sproutsync.modules.user_management.presentation.api.v1.users import users_router

logger = logging.getLogger(__name__)

# =========================================================================
# ROUTE PREFIXES
# =========================================================================

ROUTE_PREFIXES = {
    "health": "/health",
    "auth": "/auth",
    "users": "/users",
    "user_settings": "/user-settings",
    "tutorial": "/tutorial",
    "plants": "/plants",
    "plant_notes": "/plants/{plant_id}/notes",
    "plant_photos": "/plants/{plant_id}/photos",
    "plant_tracking": "/plants/{plant_id}/tracking",
    "plant_tags": "/plants/{plant_id}/tags",
    "plant_tasks": "/plants/{plant_id}/tasks",
    "tags": "/tags",
    "tasks": "/tasks",
    "upload": "/upload",
    "google_calendar": "/google-calendar",
    "notifications": "/notifications",
    "plant_gifts": "/plant-gifts",
    "ai": "/ai",
    "public": "/public",
    "gardens": "/gardens",
}

api_v1_router = APIRouter()

# Health check
api_v1_router.include_router(health_router, prefix=ROUTE_PREFIXES["health"], tags=["Health Check"])

# User management
api_v1_router.include_router(auth_router, prefix=ROUTE_PREFIXES["auth"], tags=["Authentication"])
api_v1_router.include_router(users_router, prefix=ROUTE_PREFIXES["users"], tags=["Users"])
api_v1_router.include_router(user_settings_router, prefix=ROUTE_PREFIXES["user_settings"], tags=["User Settings"])
api_v1_router.include_router(tutorial_router, prefix=ROUTE_PREFIXES["tutorial"], tags=["Tutorial"])

# Plant management
api_v1_router.include_router(plants_router, prefix=ROUTE_PREFIXES["plants"], tags=["Plants"])
api_v1_router.include_router(notes_router, prefix=ROUTE_PREFIXES["plant_notes"], tags=["Plant Journal"])
api_v1_router.include_router(photos_router, prefix=ROUTE_PREFIXES["plant_photos"], tags=["Plant Journal"])
api_v1_router.include_router(tracking_router, prefix=ROUTE_PREFIXES["plant_tracking"], tags=["Plant Journal"])
api_v1_router.include_router(plant_tags_router, prefix=ROUTE_PREFIXES["plant_tags"], tags=["Plant Tags"])
api_v1_router.include_router(tags_router, prefix=ROUTE_PREFIXES["tags"], tags=["Tags"])
api_v1_router.include_router(upload_router, prefix=ROUTE_PREFIXES["upload"], tags=["Upload"])

# Care management
api_v1_router.include_router(plant_tasks_router, prefix=ROUTE_PREFIXES["plant_tasks"], tags=["Plant Tasks"])
api_v1_router.include_router(tasks_router, prefix=ROUTE_PREFIXES["tasks"], tags=["Tasks"])

# Integrations
api_v1_router.include_router(
    google_calendar_router, prefix=ROUTE_PREFIXES["google_calendar"], tags=["Google Calendar"]
)
api_v1_router.include_router(notifications_router, prefix=ROUTE_PREFIXES["notifications"], tags=["Notifications"])
api_v1_router.include_router(plant_gifts_router, prefix=ROUTE_PREFIXES["plant_gifts"], tags=["Plant Gifts"])
api_v1_router.include_router(ai_router, prefix=ROUTE_PREFIXES["ai"], tags=["AI"])

# Community
api_v1_router.include_router(public_router, prefix=ROUTE_PREFIXES["public"], tags=["Public"])
api_v1_router.include_router(gardens_router, prefix=ROUTE_PREFIXES["gardens"], tags=["Gardens"])
