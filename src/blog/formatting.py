"""
Display helpers for post pages: dates and reading time.

Everything here is pure. Relative dates take the reference time as an
argument so output is reproducible.
"""

import math
from datetime import date, datetime, timezone
from typing import Iterable, Optional, Union

from .errors import InvalidDate
from .richtext import as_text

WORDS_PER_MINUTE = 200

# Fixed month abbreviations so output doesn't depend on the process locale
MONTH_ABBREVIATIONS = [
    'Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
    'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec',
]

# The CMS emits offsets without a colon (+0000), which fromisoformat only
# accepts on newer interpreters
_STRPTIME_FORMATS = (
    '%Y-%m-%dT%H:%M:%S%z',
    '%Y-%m-%dT%H:%M:%S.%f%z',
)

Timestamp = Union[str, datetime, date]


def parse_timestamp(value: Optional[Timestamp]) -> datetime:
    """Parse a timestamp into an aware UTC datetime.

    Accepts ISO-8601 strings, datetimes and dates. Naive values are taken to
    be UTC. Raises InvalidDate for None, empty or unparsable input.
    """
    if value is None:
        raise InvalidDate("Timestamp is missing")

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        parsed = _parse_string(value.strip())
    else:
        raise InvalidDate(f"Unsupported timestamp type: {type(value).__name__}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _parse_string(text: str) -> datetime:
    if not text:
        raise InvalidDate("Timestamp is empty")

    if text.endswith('Z'):
        text = text[:-1] + '+00:00'

    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass

    for fmt in _STRPTIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    raise InvalidDate(f"Unparsable timestamp: {text!r}")


def format_date(timestamp: Optional[Timestamp]) -> str:
    """Format as `DD Mon YYYY`, e.g. '25 Mar 2021'."""
    dt = parse_timestamp(timestamp)
    return f"{dt.day:02d} {MONTH_ABBREVIATIONS[dt.month - 1]} {dt.year}"


def format_updated_at(timestamp: Optional[Timestamp]) -> Optional[str]:
    """The "edited" line under a post header, or None if never edited."""
    if timestamp is None:
        return None
    dt = parse_timestamp(timestamp)
    return f"* edited {format_date(dt)}, at {dt.hour:02d}:{dt.minute:02d}"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def format_relative_date(timestamp: Optional[Timestamp], now: Timestamp) -> str:
    """
    Human-readable distance between `timestamp` and `now`.

    Args:
        timestamp: The moment being described
        now: Reference time; pass the current time explicitly

    Returns:
        e.g. 'just now', '5 minutes ago', 'about 3 hours ago', 'in 2 days'
    """
    then = parse_timestamp(timestamp)
    reference = parse_timestamp(now)

    delta = (reference - then).total_seconds()
    seconds = abs(delta)
    minutes = seconds / 60
    hours = minutes / 60
    days = hours / 24

    if seconds < 45:
        return 'just now'

    if seconds < 90:
        distance = '1 minute'
    elif minutes < 45:
        distance = _plural(round(minutes), 'minute')
    elif minutes < 90:
        distance = 'about 1 hour'
    elif hours < 24:
        distance = 'about ' + _plural(round(hours), 'hour')
    elif hours < 42:
        distance = '1 day'
    elif days < 30:
        distance = _plural(round(days), 'day')
    elif days < 45:
        distance = 'about 1 month'
    elif days < 365:
        distance = _plural(round(days / 30), 'month')
    else:
        distance = 'about ' + _plural(max(1, round(days / 365)), 'year')

    if delta < 0:
        return f"in {distance}"
    return f"{distance} ago"


def count_words(text: str) -> int:
    return len(text.split())


def _block_text(block) -> str:
    if isinstance(block, str):
        return block
    if not isinstance(block, dict):
        # ContentSection and friends
        body = getattr(block, 'body', None)
        return as_text(body) if body is not None else ''
    # Post sections carry their rich text under `body`; headings aren't counted
    if 'body' in block:
        return as_text(block.get('body') or [])
    return block.get('text') or ''


def reading_time_minutes(content_blocks: Iterable) -> int:
    """Estimated minutes to read, rounded up. No words means 0 minutes."""
    words = sum(count_words(_block_text(block)) for block in content_blocks)
    return math.ceil(words / WORDS_PER_MINUTE)
