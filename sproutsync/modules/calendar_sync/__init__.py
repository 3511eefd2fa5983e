# 📄 File: sproutsync/modules/calendar_sync/__init__.py
# 🧭 Purpose (Layman Explanation):
# Copies plant chores into the person's Google Calendar.
# 🧪 Purpose (Technical Summary):
# Calendar sync module: Google Calendar OAuth, event mirroring and sync settings.
