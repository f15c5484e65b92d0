from datetime import datetime, timezone
from typing import Optional, Union

# Layouts accepted for quiz due dates, tried in order.
DUE_DATE_LAYOUTS = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
)


def parse_due_date(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse a due date into an aware UTC datetime.

    Naive inputs are taken as UTC. ``None`` and blank strings mean "no due date".
    Raises ValueError when the text matches none of DUE_DATE_LAYOUTS.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif not isinstance(value, str):
        raise ValueError(f"due_date must be a string, got {type(value).__name__}")
    else:
        text = value.strip()
        if not text:
            return None
        # strptime's %z does not take a bare "Z"
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"

        parsed = None
        for layout in DUE_DATE_LAYOUTS:
            try:
                parsed = datetime.strptime(text, layout)
                break
            except ValueError:
                continue

        if parsed is None:
            raise ValueError(f"Unrecognised due_date format: {value!r}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def is_past_due(due_date: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """Stored due dates may come back naive (SQLite); those are UTC."""
    if due_date is None:
        return False
    if due_date.tzinfo is None:
        due_date = due_date.replace(tzinfo=timezone.utc)
    return (now or datetime.now(timezone.utc)) > due_date
