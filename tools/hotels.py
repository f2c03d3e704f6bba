# hotels.py
import logging

from amadeus import ResponseError

from config import DEFAULT_CURRENCY
from tools.errors import TravelSearchError
from tools.flight import get_amadeus_client

logger = logging.getLogger(__name__)

# Hotel Offers Search accepts a bounded list of ids per request
MAX_HOTEL_IDS = 20


def _status_of(error):
    return getattr(getattr(error, "response", None), "status_code", None)


def search_hotel_offers(city_code, check_in, check_out, adults=2, currency=DEFAULT_CURRENCY, client=None):
    """
    Search hotel offers in a city using Amadeus (Hotel List by city + Hotel Offers Search).

    Args:
        city_code (str): IATA city code (e.g., 'BCN')
        check_in (str): Check-in date YYYY-MM-DD
        check_out (str): Check-out date YYYY-MM-DD
        adults (int): Guests per room
        currency (str): Currency for prices
        client: Amadeus client; defaults to the shared one

    Returns:
        list of dict: [{hotel_id, name, stars, price_total, currency, offer_id,
                        booking_flow, payment_policy, room_description,
                        check_in_date, check_out_date}, ...]

    Raises:
        TravelSearchError: when Amadeus rejects either request
    """
    client = client or get_amadeus_client()

    try:
        listing = client.reference_data.locations.hotels.by_city.get(cityCode=city_code)
    except ResponseError as error:
        logger.error("Amadeus hotel list error for %s: %s", city_code, error)
        raise TravelSearchError(f"Hotel list failed: {error}", status_code=_status_of(error)) from error

    hotel_ids = [h.get("hotelId") for h in (listing.data or []) if h.get("hotelId")][:MAX_HOTEL_IDS]
    if not hotel_ids:
        logger.info("No hotels listed for city %s", city_code)
        return []

    try:
        response = client.shopping.hotel_offers_search.get(
            hotelIds=",".join(hotel_ids),
            checkInDate=check_in,
            checkOutDate=check_out,
            adults=adults,
            currency=currency,
        )
    except ResponseError as error:
        logger.error("Amadeus hotel offers error for %s: %s", city_code, error)
        raise TravelSearchError(f"Hotel search failed: {error}", status_code=_status_of(error)) from error

    results = []
    for item in response.data or []:
        hotel = item.get("hotel") or {}
        offer = (item.get("offers") or [{}])[0]
        price = offer.get("price") or {}
        policies = offer.get("policies") or {}
        room = offer.get("room") or {}
        results.append(
            {
                "hotel_id": hotel.get("hotelId"),
                "name": hotel.get("name"),
                "stars": hotel.get("rating"),
                "price_total": float(price.get("total") or 0),
                "currency": price.get("currency") or currency,
                "offer_id": offer.get("id"),
                # Amadeus offers are always bookable through the API
                "booking_flow": "IN_APP",
                "payment_policy": policies.get("paymentType") or "",
                "room_description": (room.get("description") or {}).get("text"),
                "check_in_date": offer.get("checkInDate") or check_in,
                "check_out_date": offer.get("checkOutDate") or check_out,
            }
        )

    logger.info("Amadeus hotel search for %s returned %d offers", city_code, len(results))
    return results
