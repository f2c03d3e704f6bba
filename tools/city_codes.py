# tools/city_codes.py
"""City name → IATA airport/city code lookup.

Pure and synchronous: no API calls, just a table of the departure cities and
party destinations the assistant knows about, plus a couple of fallbacks for
free text the model passes through.
"""
from __future__ import annotations

import re
from typing import Optional, Tuple

# Common city name → IATA code (lowercase keys, English and Italian spellings)
CITY_TO_IATA = {
    # Italian departure cities
    "roma": "ROM",
    "rome": "ROM",
    "milano": "MIL",
    "milan": "MIL",
    "napoli": "NAP",
    "naples": "NAP",
    "torino": "TRN",
    "turin": "TRN",
    "venezia": "VCE",
    "venice": "VCE",
    "bologna": "BLQ",
    "firenze": "FLR",
    "florence": "FLR",
    "bari": "BRI",
    "catania": "CTA",
    "palermo": "PMO",
    "verona": "VRN",
    "pisa": "PSA",
    "genova": "GOA",
    "genoa": "GOA",
    "brindisi": "BDS",
    "olbia": "OLB",
    "cagliari": "CAG",
    "alghero": "AHO",
    # Party destinations
    "ibiza": "IBZ",
    "barcellona": "BCN",
    "barcelona": "BCN",
    "praga": "PRG",
    "prague": "PRG",
    "budapest": "BUD",
    "cracovia": "KRK",
    "krakow": "KRK",
    "kraków": "KRK",
    "cracow": "KRK",
    "amsterdam": "AMS",
    "berlino": "BER",
    "berlin": "BER",
    "lisbona": "LIS",
    "lisbon": "LIS",
    "lisboa": "LIS",
    "palma de mallorca": "PMI",
    "palma": "PMI",
    "mallorca": "PMI",
    "maiorca": "PMI",
    "parigi": "PAR",
    "paris": "PAR",
}

IATA_TO_CITY = {
    "ROM": "Rome",
    "MIL": "Milan",
    "NAP": "Naples",
    "TRN": "Turin",
    "VCE": "Venice",
    "BLQ": "Bologna",
    "FLR": "Florence",
    "BRI": "Bari",
    "CTA": "Catania",
    "PMO": "Palermo",
    "VRN": "Verona",
    "PSA": "Pisa",
    "GOA": "Genoa",
    "BDS": "Brindisi",
    "OLB": "Olbia",
    "CAG": "Cagliari",
    "AHO": "Alghero",
    "IBZ": "Ibiza",
    "BCN": "Barcelona",
    "PRG": "Prague",
    "BUD": "Budapest",
    "KRK": "Krakow",
    "AMS": "Amsterdam",
    "BER": "Berlin",
    "LIS": "Lisbon",
    "PMI": "Palma de Mallorca",
    "PAR": "Paris",
}

# Destinations offered in the app, in display order
SUPPORTED_DESTINATIONS: Tuple[str, ...] = (
    "Rome",
    "Ibiza",
    "Barcelona",
    "Prague",
    "Budapest",
    "Krakow",
    "Amsterdam",
    "Berlin",
    "Lisbon",
    "Palma de Mallorca",
)

ORIGIN_CITIES: Tuple[str, ...] = (
    "Rome",
    "Milan",
    "Naples",
    "Turin",
    "Venice",
    "Bologna",
    "Florence",
    "Bari",
    "Catania",
    "Palermo",
    "Verona",
    "Pisa",
    "Genoa",
    "Brindisi",
    "Olbia",
    "Cagliari",
    "Alghero",
)

_PARENTHESIZED_CODE = re.compile(r"\(\s*([A-Za-z]{3})\s*\)")
_BARE_CODE = re.compile(r"^[A-Za-z]{3}$")


def _normalize(city: str) -> str:
    return re.sub(r"\s+", " ", city.strip().lower())


def city_to_iata(city_name: Optional[str]) -> Optional[str]:
    """Exact (case/whitespace-insensitive) table lookup; None when unknown."""
    if not city_name:
        return None
    return CITY_TO_IATA.get(_normalize(city_name))


def iata_to_city(iata_code: Optional[str]) -> Optional[str]:
    """Display name for a code, or the code itself when it is not in the table."""
    if not iata_code:
        return None
    return IATA_TO_CITY.get(iata_code.strip().upper(), iata_code)


def extract_iata(text: str) -> str:
    """
    Resolve free text from a tool call to a 3-letter code.

    1. known city name ("Rome" → "ROM")
    2. a code already present ("Fiumicino (FCO)" → "FCO", "bcn" → "BCN")
    3. first three characters uppercased ("Zzyxqville" → "ZZY")
    """
    text = (text or "").strip()
    known = city_to_iata(text)
    if known:
        return known

    match = _PARENTHESIZED_CODE.search(text)
    if match:
        return match.group(1).upper()
    if _BARE_CODE.match(text):
        return text.upper()

    return text[:3].upper()
