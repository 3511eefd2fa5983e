# 📄 File: sproutsync/modules/plant_management/__init__.py
# 🧭 Purpose (Layman Explanation):
# The plant collection itself: plants, their photos, notes, growth journal and tags.
# 🧪 Purpose (Technical Summary):
# Plant management module: plant CRUD with slugs and task templates, journal (notes/photos/tracking), tags and image upload.
