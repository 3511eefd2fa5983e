# 📄 File: sproutsync/modules/user_management/__init__.py
# 🧭 Purpose (Layman Explanation):
# Everything about people using SproutSync: Google sign-in, profiles, usernames and onboarding settings.
# 🧪 Purpose (Technical Summary):
# User management module: OAuth login, JWT issuing, profile/username and user settings services and routers.
