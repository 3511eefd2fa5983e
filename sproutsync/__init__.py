# 📄 File: sproutsync/__init__.py
#
# 🧭 Purpose (Layman Explanation):
# Marks this folder as the SproutSync backend and records which version is running.
#
# 🧪 Purpose (Technical Summary):
# Package initialization with version metadata for the SproutSync FastAPI backend.
#
# 🔗 Dependencies:
# - Python packaging system
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.main (application entry point)

"""
SproutSync - Plant Care Tracking Backend

REST API for tracking plants, recurring care tasks, journals and photos, gifting plants
between users, Google Calendar sync, push reminders and Gemini plant identification.
"""

__version__ = "1.0.0"
__title__ = "SproutSync Backend API"
