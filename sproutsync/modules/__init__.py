# 📄 File: sproutsync/modules/__init__.py
# 🧭 Purpose (Layman Explanation):
# Holds the separate feature areas of SproutSync, one folder per area.
# 🧪 Purpose (Technical Summary):
# Bounded-context packages, each split into infrastructure, domain and presentation layers.
