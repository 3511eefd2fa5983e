# 📄 File: sproutsync/modules/community_social/__init__.py
# 🧭 Purpose (Layman Explanation):
# Public gardens and plant pages that others can admire and comment on.
# 🧪 Purpose (Technical Summary):
# Community module: public plant/garden views, appreciations and comments.
