# 📄 File: sproutsync/background_jobs/__init__.py
# 🧭 Purpose (Layman Explanation):
# Work that runs on a timer instead of when someone clicks something.
# 🧪 Purpose (Technical Summary):
# Celery task package scheduled by celery_config.py beat.
