# 📄 File: sproutsync/modules/ai_smart_features/__init__.py
# 🧭 Purpose (Layman Explanation):
# Recognises plants and spots problems from a photo.
# 🧪 Purpose (Technical Summary):
# AI module: Gemini-backed plant identification and health analysis.
