# slotwise/core/timeutils.py
from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from slotwise.core.exceptions import SchedulingValidationError


def get_zone(name: str) -> ZoneInfo:
    """
    Resolve an IANA timezone name, raising SchedulingValidationError
    for unknown or malformed names.
    """
    try:
        return ZoneInfo(name)
    # Directory names inside tzdata ("America") surface as OSError.
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise SchedulingValidationError(f"Unknown timezone '{name}'.") from exc


def as_utc(value: datetime) -> datetime:
    """
    Return `value` as an aware UTC datetime. Naive values are taken to be
    UTC already (that is how instants are stored).
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_db(value: datetime) -> datetime:
    """
    Convert an instant into the naive-UTC form persisted in DateTime columns.
    """
    return as_utc(value).replace(tzinfo=None)


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)
