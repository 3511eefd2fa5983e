# 📄 File: sproutsync/shared/__init__.py
# 🧭 Purpose (Layman Explanation):
# Tools and plumbing used by every feature area.
# 🧪 Purpose (Technical Summary):
# Shared kernel: configuration, core (errors, security, responses), infrastructure and utilities.
