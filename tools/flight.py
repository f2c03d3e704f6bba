# tools/flight.py

import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

from amadeus import Client, ResponseError

from config import AMADEUS_HOSTNAME, DEFAULT_CURRENCY, get_amadeus_api_key, get_amadeus_api_secret
from tools.errors import TravelSearchError

logger = logging.getLogger(__name__)

# Airline code → display name, used when the response dictionaries lack a carrier
AIRLINE_NAMES = {
    "IB": "Iberia",
    "VY": "Vueling",
    "UX": "Air Europa",
    "AZ": "ITA Airways",
    "LH": "Lufthansa",
    "AF": "Air France",
    "KL": "KLM",
    "BA": "British Airways",
    "LX": "Swiss",
    "OS": "Austrian",
    "SN": "Brussels Airlines",
    "TP": "TAP Portugal",
    "TK": "Turkish Airlines",
    "EW": "Eurowings",
    "A3": "Aegean",
    "FR": "Ryanair",
    "U2": "easyJet",
    "W6": "Wizz Air",
}


@lru_cache(maxsize=1)
def get_amadeus_client() -> Client:
    """Shared Amadeus client, built on first use so imports never need credentials."""
    return Client(
        client_id=get_amadeus_api_key(),
        client_secret=get_amadeus_api_secret(),
        hostname=AMADEUS_HOSTNAME,
    )


def search_flight_offers(
    origin_code,
    destination_code,
    departure_date,
    return_date=None,
    adults=1,
    currency=DEFAULT_CURRENCY,
    max_results=50,
    client=None,
):
    """
    Search round-trip flights using the Amadeus Flight Offers API.

    Args:
        origin_code (str): IATA code of the departure city/airport (e.g., 'ROM')
        destination_code (str): IATA code of the destination (e.g., 'BCN')
        departure_date (str): YYYY-MM-DD
        return_date (str): Optional, for round-trip
        adults (int): Number of adult passengers
        currency (str): Currency for prices
        max_results (int): Offers requested from Amadeus (more gives variety after dedup)
        client: Amadeus client; defaults to the shared one

    Returns:
        list of dict: offers with id, price, currency, outbound/inbound segments,
        airlines, total_duration and stops, one per airline/price/stops combination

    Raises:
        TravelSearchError: when Amadeus rejects the request
    """
    client = client or get_amadeus_client()
    params = {
        "originLocationCode": origin_code,
        "destinationLocationCode": destination_code,
        "departureDate": departure_date,
        "adults": adults,
        "max": max_results,
        "currencyCode": currency,
    }
    if return_date:
        params["returnDate"] = return_date

    logger.info(
        "Amadeus flight search %s → %s (%s / %s, %s adults)",
        origin_code,
        destination_code,
        departure_date,
        return_date,
        adults,
    )
    try:
        response = client.shopping.flight_offers_search.get(**params)
    except ResponseError as error:
        status = getattr(getattr(error, "response", None), "status_code", None)
        logger.error("Amadeus flight search error (status=%s): %s", status, error)
        raise TravelSearchError(f"Flight search failed: {error}", status_code=status) from error

    offers = response.data or []
    dictionaries = (getattr(response, "result", None) or {}).get("dictionaries") or {}

    flights = [_normalize_offer(offer, dictionaries, currency) for offer in offers]

    # Collapse departure-time variants into one representative option
    seen = set()
    unique = []
    for flight in flights:
        key = (",".join(sorted(flight["airlines"])), f"{flight['price']:.2f}", flight["stops"])
        if key in seen:
            continue
        seen.add(key)
        unique.append(flight)

    logger.info("Deduplicated flight offers: %d → %d", len(flights), len(unique))
    return unique


def _carrier_name(code: str, dictionaries: Dict[str, Any]) -> str:
    return (dictionaries.get("carriers") or {}).get(code) or AIRLINE_NAMES.get(code) or code


def _normalize_segment(segment: Dict[str, Any], dictionaries: Dict[str, Any]) -> Dict[str, Any]:
    departure = segment.get("departure") or {}
    arrival = segment.get("arrival") or {}
    carrier = segment.get("carrierCode") or ""
    return {
        "departure": {"iata_code": departure.get("iataCode", ""), "at": departure.get("at", "")},
        "arrival": {"iata_code": arrival.get("iataCode", ""), "at": arrival.get("at", "")},
        "carrier_code": carrier,
        "carrier_name": _carrier_name(carrier, dictionaries),
        "flight_number": segment.get("number", ""),
        "duration": segment.get("duration", ""),
    }


def _normalize_offer(offer: Dict[str, Any], dictionaries: Dict[str, Any], currency: str) -> Dict[str, Any]:
    itineraries = offer.get("itineraries") or []
    outbound_itinerary: Optional[Dict[str, Any]] = itineraries[0] if itineraries else None
    inbound_itinerary: Optional[Dict[str, Any]] = itineraries[1] if len(itineraries) > 1 else None

    outbound = [_normalize_segment(s, dictionaries) for s in (outbound_itinerary or {}).get("segments") or []]
    inbound = [_normalize_segment(s, dictionaries) for s in (inbound_itinerary or {}).get("segments") or []]

    airline_codes: List[str] = []
    for segment in outbound + inbound:
        if segment["carrier_code"] and segment["carrier_code"] not in airline_codes:
            airline_codes.append(segment["carrier_code"])
    if not airline_codes:
        airline_codes = list(offer.get("validatingAirlineCodes") or [])

    price = offer.get("price") or {}
    return {
        "id": offer.get("id"),
        "price": float(price.get("total") or 0),
        "currency": price.get("currency") or currency,
        "outbound": outbound,
        "inbound": inbound,
        "airlines": [_carrier_name(code, dictionaries) for code in airline_codes],
        "total_duration": (outbound_itinerary or {}).get("duration", ""),
        "stops": max(0, len(outbound) - 1),
    }
