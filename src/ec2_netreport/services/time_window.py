"""Resolve the previous calendar day in a reference time zone."""

from datetime import datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..errors import ConfigurationError
from ..utils.metrics import TimeWindow


def load_zone(name: str) -> ZoneInfo:
    """
    Look up an IANA time zone.

    Raises:
        ConfigurationError: If the zone database has no such zone
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        # Directory keys such as "America" surface as IsADirectoryError
        raise ConfigurationError(f"Unknown time zone {name!r}: {e}") from e


def resolve_time_window(zone_name: str, now: Optional[datetime] = None) -> TimeWindow:
    """
    Compute yesterday's bounds in the given zone.

    Args:
        zone_name: IANA time zone identifier, e.g. "America/New_York"
        now: Current instant; naive values are taken as UTC. Defaults to now.

    Returns:
        TimeWindow: start at 00:00:00.000000 and end at 23:59:59.999999 of the
        previous calendar day, both aware in ``zone_name``

    Raises:
        ConfigurationError: If ``zone_name`` cannot be resolved
    """
    zone = load_zone(zone_name)

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    yesterday = now.astimezone(zone).date() - timedelta(days=1)
    return TimeWindow(
        start=datetime.combine(yesterday, time.min, tzinfo=zone),
        end=datetime.combine(yesterday, time.max, tzinfo=zone),
    )
