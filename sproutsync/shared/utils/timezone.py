# 📄 File: sproutsync/shared/utils/timezone.py

# 🧭 Purpose (Layman Explanation):
# Works out "today" for each user in their own timezone, so a plant watered in Tokyo
# is due at Tokyo midnight and not at the server's midnight.

# 🧪 Purpose (Technical Summary):
# IANA timezone validation via zoneinfo and local start-of-day arithmetic that returns
# aware UTC datetimes suitable for storage.

# 🔗 Dependencies:
# - zoneinfo (stdlib) with the tzdata package for platforms without a system database
# - sproutsync.shared.config.settings (DEFAULT_TIMEZONE)

# 🔄 Connected Modules / Calls From:
# user_settings_service.resolve_user_timezone, care_management task service,
# plant_gifting gift service (receiver start of day)

import logging
from datetime import datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sproutsync.shared.config.settings import get_settings

logger = logging.getLogger(__name__)

_UTC_ALIASES = {"utc", "etc/utc", "gmt", "z"}


def default_timezone() -> str:
    """Configured fallback timezone."""
    return get_settings().DEFAULT_TIMEZONE


def try_normalize_timezone(tz: Optional[str]) -> Optional[str]:
    """
    Validate an IANA timezone name.

    Args:
        tz: Candidate timezone, possibly padded with whitespace

    Returns:
        The stripped name if it is a known zone, otherwise None
    """
    if not tz:
        return None

    normalized = tz.strip()
    if not normalized:
        return None

    try:
        ZoneInfo(normalized)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"⚠️ Invalid timezone \"{normalized}\" provided. Falling back to {default_timezone()}.")
        return None

    return normalized


def normalize_timezone(tz: Optional[str]) -> str:
    """Valid timezone name or the configured default."""
    return try_normalize_timezone(tz) or default_timezone()


def should_overwrite_stored_timezone(stored: Optional[str]) -> bool:
    """
    Whether a stored timezone is a placeholder that a client-reported zone should replace.
    """
    if not stored or not stored.strip():
        return True
    return stored.strip().lower() in _UTC_ALIASES


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Aware UTC copy of ``value``; naive values are taken to be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _as_aware(base: Optional[datetime]) -> datetime:
    if base is None:
        return datetime.now(timezone.utc)
    return as_utc(base)


def start_of_day_in_timezone(tz: Optional[str], base: Optional[datetime] = None) -> datetime:
    """
    Local midnight of ``base`` in ``tz``, expressed in UTC.

    Example:
        >>> start_of_day_in_timezone("Asia/Tokyo", datetime(2024, 5, 1, 20, 0, tzinfo=timezone.utc))
        datetime.datetime(2024, 5, 1, 15, 0, tzinfo=datetime.timezone.utc)
    """
    return start_of_day_plus_days_in_timezone(tz, 0, base)


def start_of_day_plus_days_in_timezone(
    tz: Optional[str],
    days: int,
    base: Optional[datetime] = None
) -> datetime:
    """
    Local midnight of ``base`` in ``tz`` moved ``days`` calendar days forward, in UTC.

    Days are added on the local calendar, so the result stays at local midnight
    across daylight saving transitions.
    """
    zone = ZoneInfo(normalize_timezone(tz))
    local_date = _as_aware(base).astimezone(zone).date() + timedelta(days=days)
    local_midnight = datetime.combine(local_date, time.min, tzinfo=zone)
    return local_midnight.astimezone(timezone.utc)
