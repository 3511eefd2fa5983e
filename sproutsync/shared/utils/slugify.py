# 📄 File: sproutsync/shared/utils/slugify.py

# 🧭 Purpose (Layman Explanation):
# Turns names like "Monstera Deliciosa!" into tidy web addresses like "monstera-deliciosa",
# adding -1, -2... when the address is already used.

# 🧪 Purpose (Technical Summary):
# ASCII slug normalization plus collision-free username (global) and plant slug (per owner)
# generation against the database.

# 🔗 Dependencies:
# - re (stdlib)
# - SQLAlchemy async session
# - user_management and plant_management ORM models

# 🔄 Connected Modules / Calls From:
# user_management users router (username), auth service (first sign-in),
# plant_management plant service (create), plant_gifting gift service (receiver copy)

import re
import time

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

_SPECIAL_CHARS = re.compile(r"[^\w\s-]", re.ASCII)
_SEPARATORS = re.compile(r"[\s_-]+", re.ASCII)


def to_slug(text: str) -> str:
    """
    Convert a string to a URL-friendly slug.

    Example:
        >>> to_slug("  Fiddle Leaf_Fig!! ")
        'fiddle-leaf-fig'
    """
    slug = text.lower().strip()
    slug = _SPECIAL_CHARS.sub("", slug)
    slug = _SEPARATORS.sub("-", slug)
    return slug.strip("-")


def _epoch_ms() -> int:
    return int(time.time() * 1000)


async def generate_unique_username(session: AsyncSession, name: str) -> str:
    """
    Generate a globally unique username from a display name.

    Only the first name is used. Collisions get -1, -2, ... appended.
    """
    from sproutsync.modules.user_management.infrastructure.database.models import UserModel

    first_name = name.split(" ")[0] if name else ""
    base_username = to_slug(first_name or name or "")
    if not base_username:
        return f"user-{_epoch_ms()}"

    async def taken(candidate: str) -> bool:
        result = await session.execute(select(UserModel.id).where(UserModel.username == candidate))
        return result.first() is not None

    username = base_username
    suffix = 0
    while await taken(username):
        suffix += 1
        username = f"{base_username}-{suffix}"

    return username


async def generate_plant_slug(session: AsyncSession, plant_name: str, user_id: str) -> str:
    """
    Generate a plant slug unique among one owner's plants.
    """
    from sproutsync.modules.plant_management.infrastructure.database.models import PlantModel

    base_slug = to_slug(plant_name or "")
    if not base_slug:
        return f"plant-{_epoch_ms()}"

    async def taken(candidate: str) -> bool:
        result = await session.execute(
            select(PlantModel.id).where(PlantModel.user_id == user_id, PlantModel.slug == candidate)
        )
        return result.first() is not None

    slug = base_slug
    suffix = 0
    while await taken(slug):
        suffix += 1
        slug = f"{base_slug}-{suffix}"

    return slug
