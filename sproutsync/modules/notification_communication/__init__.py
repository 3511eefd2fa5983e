# 📄 File: sproutsync/modules/notification_communication/__init__.py
# 🧭 Purpose (Layman Explanation):
# Push reminders sent to people's devices when plants need attention.
# 🧪 Purpose (Technical Summary):
# Notification module: FCM delivery, due-task notifications and the round-robin overdue scheduler.
