"""Best-effort timestamp parsing for graph rows.

Upstream writers stored timestamps as native temporal values, ISO-8601-ish
strings (with or without fractional seconds and zone), or Unix seconds as an
int or float.  Anything else parses to ``None``, which renders as
:data:`DATE_UNAVAILABLE`.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional

DATE_UNAVAILABLE = "Date unavailable"

_EXTRA_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%dT%H:%M:%SZ",
)


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _from_unix(seconds: float) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(int(seconds), tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _from_text(text: str) -> Optional[datetime]:
    text = text.strip()
    if not text:
        return None
    try:
        return _aware(datetime.fromisoformat(text))
    except ValueError:
        pass
    for fmt in _EXTRA_FORMATS:
        try:
            return _aware(datetime.strptime(text, fmt))
        except ValueError:
            continue
    return None


def parse_date(value: Any) -> Optional[datetime]:
    """Convert *value* to an aware ``datetime`` or ``None`` when unknown."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _aware(value)
    # neo4j.time.DateTime / Date expose to_native()
    to_native = getattr(value, "to_native", None)
    if callable(to_native):
        return parse_date(to_native())
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        return _from_text(value)
    if isinstance(value, (int, float)):
        return _from_unix(value)
    return None


def format_date(value: Optional[datetime], with_time: bool = False) -> str:
    """Render as ``January 2, 2006`` (or ``January 2, 2006 - 3:04pm``)."""
    if value is None:
        return DATE_UNAVAILABLE
    text = f"{value:%B} {value.day}, {value.year}"
    if with_time:
        hour = value.hour % 12 or 12
        suffix = "am" if value.hour < 12 else "pm"
        text += f" - {hour}:{value.minute:02d}{suffix}"
    return text
