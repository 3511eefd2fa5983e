# 📄 File: sproutsync/modules/care_management/__init__.py
# 🧭 Purpose (Layman Explanation):
# Care chores for each plant and working out when they are next due.
# 🧪 Purpose (Technical Summary):
# Care management module: recurring task scheduling, completion, rescheduling and overdue detection.
