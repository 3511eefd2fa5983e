# 📄 File: sproutsync/api/__init__.py
# 🧭 Purpose (Layman Explanation):
# The web-facing layer shared by all features: routing and request middleware.
# 🧪 Purpose (Technical Summary):
# API package: v1 router aggregation and HTTP middleware.
