# 📄 File: sproutsync/shared/core/rate_limiter.py
# 🧭 Purpose (Layman Explanation):
# Stops a single visitor from hammering the expensive endpoints (AI plant identification
# and photo uploads) too many times in a short period.
# 🧪 Purpose (Technical Summary):
# Shared slowapi Limiter keyed by client address; registered on app.state in main.py and
# applied per-route with @limiter.limit(...).
# 🔗 Dependencies:
# slowapi, sproutsync.shared.config.settings
# 🔄 Connected Modules / Calls From:
# main.py, ai_smart_features router, plant_management upload router

from slowapi import Limiter
from slowapi.util import get_remote_address

from sproutsync.shared.config.settings import get_settings

settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.RATE_LIMIT_ENABLED,
)
