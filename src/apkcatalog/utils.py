import datetime
import logging
import re

from dateutil.parser import parse as parse_date

from apkcatalog.constants import N_ORDERED_ARCHITECTURES, ORDERED_ARCHITECTURES

logger = logging.getLogger(__name__)

_LEADING_DIGITS = re.compile(r"\s*(\d+)")


def try_parse_date(date_str: str | None) -> datetime.datetime | None:
    """Try to parse a date string into a timestamp.

    Args:
        date_str: The date string to parse (e.g., from HTTP Last-Modified header)

    Returns:
        The parsed timestamp, or None if parsing failed or date_str is None
    """

    try:
        return parse_date(date_str) if date_str else None
    except Exception as e:
        logger.debug(f"Failed to parse date '{date_str}': {e}")
        return None


def leading_int(value: str | None) -> int:
    """Parse the leading decimal digits of a string, returning 0 if there are none."""
    if not value:
        return 0
    match = _LEADING_DIGITS.match(value)
    return int(match.group(1)) if match else 0


def rfc3339_now() -> str:
    """Current UTC time as an RFC3339 timestamp with second precision."""
    return datetime.datetime.now(datetime.UTC).isoformat(timespec="seconds")


def sort_architectures(architectures: list[str]) -> list[str]:
    """Get the architectures sorted in a preferred order."""
    not_in_ordered = sorted([a for a in architectures if a not in ORDERED_ARCHITECTURES])

    def sort_fn(a):
        if a in ORDERED_ARCHITECTURES:
            return ORDERED_ARCHITECTURES.index(a)
        return N_ORDERED_ARCHITECTURES + not_in_ordered.index(a)

    return sorted(architectures, key=sort_fn)
