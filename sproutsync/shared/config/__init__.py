# 📄 File: sproutsync/shared/config/__init__.py
#
# 🧭 Purpose (Layman Explanation):
# Contains the settings that tell SproutSync how to connect to its database,
# Redis, and the outside services it talks to.
#
# 🧪 Purpose (Technical Summary):
# Configuration package initialization exporting the settings factory.
#
# 🔗 Dependencies:
# - settings.py (application settings)
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.main (application startup)
# - All modules requiring configuration

"""
Configuration Management Package

Handles all application configuration including:
- Environment-based settings
- External service credentials
- Redis connection configuration
"""

from .settings import get_settings, Settings

__all__ = [
    "get_settings",
    "Settings",
]
