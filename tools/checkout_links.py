"""Aviasales deep links used as the external flight checkout."""
from __future__ import annotations

import logging
from typing import Optional

from config import AVIASALES_MARKER
from tools.dates import parse_iso_date

logger = logging.getLogger(__name__)

AVIASALES_SEARCH_URL = "https://www.aviasales.com/search/"


def _day_month(date_str: Optional[str]) -> Optional[str]:
    parsed = parse_iso_date(date_str)
    if parsed is None:
        return None
    return f"{parsed.day:02d}{parsed.month:02d}"


def build_checkout_url(
    origin_code: str,
    destination_code: str,
    depart_date: str,
    return_date: Optional[str] = None,
    adults: int = 1,
    marker: str = AVIASALES_MARKER,
) -> Optional[str]:
    """
    Build the search link for a round trip.

    Format: {origin}{depDay}{depMonth}{dest}{retDay}{retMonth}{adults}
    e.g. ROM 2025-06-15 → BCN 2025-06-20, 5 adults:
        https://www.aviasales.com/search/ROM1506BCN20065?marker=byebi
    """
    if not origin_code or not destination_code:
        logger.warning("Missing origin or destination code for checkout link")
        return None

    outbound = _day_month(depart_date)
    if outbound is None:
        logger.warning("Cannot build checkout link: invalid departure date %r", depart_date)
        return None

    path = f"{origin_code.upper()}{outbound}{destination_code.upper()}"
    inbound = _day_month(return_date) if return_date else None
    if inbound:
        path += inbound
    path += str(adults)

    return f"{AVIASALES_SEARCH_URL}{path}?marker={marker}"
