from datetime import datetime, timezone, date
from typing import Any, Optional


def coerce_datetime(value: Any) -> Optional[datetime]:
    """Best-effort conversion of a stored timestamp to a naive UTC datetime.

    Mongo hands back naive UTC datetimes, but records written by hand or by
    older scripts may hold ISO strings or epoch milliseconds. Anything that
    cannot be read becomes None instead of failing validation.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def stringify_id(value: Any) -> Optional[str]:
    """Render an ObjectId/reference (or populated sub-document) as an id string."""
    if value is None:
        return None
    if isinstance(value, dict):
        value = value.get("_id", value.get("id"))
        if value is None:
            return None
    return str(value)
