# 📄 File: sproutsync/shared/infrastructure/database/registry.py
#
# 🧭 Purpose (Layman Explanation):
# Makes sure every kind of stored record (users, plants, tasks, gifts...) is known
# before the database is used, so links between them can be resolved.
#
# 🧪 Purpose (Technical Summary):
# Imports every module's ORM models so string-based relationships resolve and
# Base.metadata is complete for create_all and Alembic autogenerate.
#
# 🔗 Dependencies:
# - All module infrastructure.database.models packages
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.main (startup), migrations/env.py, tests/conftest.py, Celery tasks

from typing import List

from sproutsync.shared.infrastructure.database.connection import Base


def import_all_models() -> List[type]:
    """
    Import every ORM model and return them.

    Returns:
        list: All SQLAlchemy model classes registered on Base
    """
    from sproutsync.modules.care_management.infrastructure.database.models import get_care_management_models
    from sproutsync.modules.community_social.infrastructure.database.models import get_community_social_models
    from sproutsync.modules.notification_communication.infrastructure.database.models import get_notification_models
    from sproutsync.modules.plant_gifting.infrastructure.database.models import get_plant_gifting_models
    from sproutsync.modules.plant_management.infrastructure.database.models import get_plant_management_models
    from sproutsync.modules.user_management.infrastructure.database.models import get_user_management_models

    return [
        *get_user_management_models(),
        *get_plant_management_models(),
        *get_care_management_models(),
        *get_plant_gifting_models(),
        *get_notification_models(),
        *get_community_social_models(),
    ]


def get_metadata():
    """Metadata with every table registered."""
    import_all_models()
    return Base.metadata
