from __future__ import annotations

from datetime import datetime, timezone as dt_timezone
from typing import Any, Mapping
from urllib.parse import urlencode

from django.utils.dateparse import parse_datetime
from django.utils.text import slugify


# Path segments under /courses/ that are not course ids
RESERVED_SHORT_IDS = frozenset({"add"})


def ensure_aware(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC so they compare with stored values."""
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=dt_timezone.utc)
    return value


def parse_timestamp(value: Any) -> datetime | None:
    """
    Coerce a raw timestamp from a query row into an aware datetime.

    Accepts datetime instances and ISO 8601 strings (with or without
    offset, ``Z`` included).

    Returns:
        aware datetime or None if the value is absent or unparsable
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_aware(value)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = parse_datetime(value.strip())
    except ValueError:
        # Well formed but impossible, e.g. month 13
        return None
    return ensure_aware(parsed) if parsed else None


def coerce_int(value: Any, default: int = 0) -> int:
    """Convert a loosely typed number ("2", 2.0, 2) to int, or default if it is not one."""
    if isinstance(value, bool):
        return default
    try:
        return int(str(value).strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def pick_value(row: Any, *keys: str, default: Any = None) -> Any:
    """
    Pick the first present value from a row by trying multiple keys.

    Rows may be mappings (raw query results) or objects such as model
    instances, column names vary between the two.

    Args:
        row: Mapping or object to search in
        *keys: Keys or attribute names to try in order
        default: Returned when no key yields a value

    Returns:
        First value that is neither None nor a blank string
    """
    for key in keys:
        if isinstance(row, Mapping):
            value = row.get(key)
        else:
            value = getattr(row, key, None)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return default


def unique_short_id(base: str) -> str:
    """
    Generate a unique course short id from a base string.

    Appends numbers if the short id already exists.
    """
    from .models import Course

    cleaned = slugify(base)[:32].strip("-") or "course"
    candidate = cleaned
    counter = 1
    while candidate in RESERVED_SHORT_IDS or Course.objects.filter(short_id=candidate).exists():
        counter += 1
        candidate = f"{cleaned}-{counter}"
    return candidate


def build_survey_link(
    base_url: str,
    survey_id: str,
    survey_n: int,
    instructor_id: str | int | None = None,
    course_id: str | int | None = None,
) -> str:
    """Build the external survey URL handed to students and instructors."""
    params: list[tuple[str, Any]] = []
    if instructor_id:
        params.append(("instructor_id", instructor_id))
    params.append(("survey_id", survey_id))
    if course_id:
        params.append(("course_id", course_id))
    params.append(("survey_n", survey_n))
    return f"{base_url}?{urlencode(params)}"
