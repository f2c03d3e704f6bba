"""Date helpers for trip dates.

Trip dates are date-only ``YYYY-MM-DD`` strings; nothing here converts between
timezones.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Optional, Tuple

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_date(value: Any) -> Optional[date]:
    """Strict ``YYYY-MM-DD`` parser. Returns None for anything else, including impossible dates."""
    if not isinstance(value, str) or not _ISO_DATE.match(value.strip()):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def format_flight_datetime(iso_string: Optional[str]) -> Tuple[str, str]:
    """
    Split a provider timestamp into human-readable date and time.

    "2025-06-15T10:05:00" → ("June 15, 2025", "10:05 AM"). Offsets are ignored
    so the local time printed on the ticket is what the user sees.
    """
    if not iso_string:
        return ("", "")
    raw = iso_string.strip()
    try:
        moment = datetime.fromisoformat(raw[:19])
    except ValueError:
        parsed = parse_iso_date(raw[:10])
        if parsed is None:
            return (raw, "")
        return (f"{parsed:%B} {parsed.day}, {parsed.year}", "")

    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return (
        f"{moment:%B} {moment.day}, {moment.year}",
        f"{hour:02d}:{moment.minute:02d} {meridiem}",
    )
