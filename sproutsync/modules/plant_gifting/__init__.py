# 📄 File: sproutsync/modules/plant_gifting/__init__.py
# 🧭 Purpose (Layman Explanation):
# Passing a plant (with its whole history) on to another person through a share link.
# 🧪 Purpose (Technical Summary):
# Plant gifting module: tokenised gift lifecycle and the atomic ownership transfer.
