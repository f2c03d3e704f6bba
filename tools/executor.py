"""ToolExecutor: runs validated tool calls against the travel collaborators."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from config import DEFAULT_CURRENCY, MAX_FLIGHT_RESULTS, MAX_HOTEL_RESULTS
from tools.checkout_links import build_checkout_url
from tools.city_codes import extract_iata
from tools.flight import search_flight_offers
from tools.hotels import search_hotel_offers
from workflows.state import ConversationContext

logger = logging.getLogger(__name__)

DEFAULT_HOTEL_GUESTS = 2


class ToolExecutor:
    """
    Executes one tool call at a time and always returns a JSON-serializable dict.

    Collaborator failures become ``{"error": ...}`` payloads so the model can
    apologise or retry on its next turn; nothing propagates to the chat loop.
    """

    def __init__(
        self,
        *,
        flight_search: Optional[Callable[..., List[Dict[str, Any]]]] = None,
        hotel_search: Optional[Callable[..., List[Dict[str, Any]]]] = None,
        currency: str = DEFAULT_CURRENCY,
        max_flights: int = MAX_FLIGHT_RESULTS,
        max_hotels: int = MAX_HOTEL_RESULTS,
        retry_attempts: int = 3,
    ) -> None:
        self.flight_search = flight_search or search_flight_offers
        self.hotel_search = hotel_search or search_hotel_offers
        self.currency = currency
        self.max_flights = max_flights
        self.max_hotels = max_hotels
        self.retry_attempts = retry_attempts

    @staticmethod
    def _is_retryable_error(exc: BaseException) -> bool:
        status = getattr(exc, "status_code", None)
        if status is None:
            status = getattr(getattr(exc, "response", None), "status_code", None)
        return isinstance(status, int) and status in {429, 500, 502, 503, 504}

    async def _call_with_retries(self, func, *args, **kwargs):
        async for attempt in AsyncRetrying(
            retry=retry_if_exception(self._is_retryable_error),
            wait=wait_exponential(min=0.5, max=6),
            stop=stop_after_attempt(self.retry_attempts),
            reraise=True,
        ):
            with attempt:
                return await asyncio.to_thread(func, *args, **kwargs)

    async def execute(
        self,
        name: str,
        arguments: Optional[Mapping[str, Any]] = None,
        context: Optional[ConversationContext] = None,
    ) -> Dict[str, Any]:
        args = arguments if isinstance(arguments, Mapping) else {}
        context = context or ConversationContext()
        try:
            if name == "search_flights":
                return await self._search_flights(args, context)
            if name == "search_hotels":
                return await self._search_hotels(args, context)
            if name == "select_flight":
                return {"success": True, "selected_flight": args.get("flight_number")}
            if name == "unlock_checkout":
                return {"success": True, "checkout_unlocked": True}
            return {"error": f"Unknown tool: {name}"}
        except Exception as exc:
            # Handlers already contain collaborator errors; this covers malformed arguments.
            logger.exception("Tool %s failed unexpectedly", name)
            return {"error": f"Tool {name} failed: {exc}"}

    # ---------------------------
    # Flights
    # ---------------------------
    async def _search_flights(self, args: Mapping[str, Any], context: ConversationContext) -> Dict[str, Any]:
        origin_code = extract_iata(str(args.get("origin") or context.origin or ""))
        destination_code = extract_iata(str(args.get("destination") or context.selected_destination or ""))
        departure_date = args.get("departure_date")
        return_date = args.get("return_date")
        passengers = _as_positive_int(args.get("passengers"), default=1)

        try:
            offers = await self._call_with_retries(
                self.flight_search,
                origin_code,
                destination_code,
                departure_date,
                return_date=return_date,
                adults=passengers,
                currency=self.currency,
            )
        except Exception as exc:
            logger.warning("Flight search %s → %s failed: %s", origin_code, destination_code, exc)
            return {"error": f"Flight search failed: {exc}", "flights": []}

        checkout_url = build_checkout_url(origin_code, destination_code, departure_date, return_date, passengers)
        cheapest = sorted(_offer_dicts(offers), key=_price_or_last)[: self.max_flights]
        flights = [
            _simplify_flight(offer, idx + 1, origin_code, destination_code, checkout_url)
            for idx, offer in enumerate(cheapest)
        ]

        result: Dict[str, Any] = {
            "flights": flights,
            "origin": origin_code,
            "destination": destination_code,
            "departure_date": departure_date,
            "return_date": return_date,
            "passengers": passengers,
        }
        if not flights:
            result["message"] = "No flights found for these dates."
        return result

    # ---------------------------
    # Hotels
    # ---------------------------
    async def _search_hotels(self, args: Mapping[str, Any], context: ConversationContext) -> Dict[str, Any]:
        city_code = extract_iata(str(args.get("destination") or context.selected_destination or ""))
        check_in = args.get("check_in_date")
        check_out = args.get("check_out_date")
        guests = _as_positive_int(args.get("guests"), default=DEFAULT_HOTEL_GUESTS)

        try:
            offers = await self._call_with_retries(
                self.hotel_search,
                city_code,
                check_in,
                check_out,
                adults=guests,
                currency=self.currency,
            )
        except Exception as exc:
            logger.warning("Hotel search in %s failed: %s", city_code, exc)
            return {"error": f"Hotel search failed: {exc}", "hotels": []}

        hotels = [_simplify_hotel(offer) for offer in _offer_dicts(offers)[: self.max_hotels]]
        return {
            "hotels": hotels,
            "destination": city_code,
            "check_in_date": check_in,
            "check_out_date": check_out,
            "guests": guests,
        }


def _as_positive_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int) and value > 0:
        return value
    if isinstance(value, float) and value.is_integer() and value > 0:
        return int(value)
    return default


def _offer_dicts(offers: Any) -> List[Dict[str, Any]]:
    if not isinstance(offers, list):
        return []
    dropped = sum(1 for offer in offers if not isinstance(offer, dict))
    if dropped:
        logger.warning("Ignoring %d malformed offer(s) from collaborator", dropped)
    return [offer for offer in offers if isinstance(offer, dict)]


def _price_or_last(offer: Dict[str, Any]) -> float:
    price = offer.get("price")
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        return float("inf")
    return float(price)


def _simplify_flight(
    offer: Dict[str, Any],
    option_number: int,
    origin_code: str,
    destination_code: str,
    checkout_url: Optional[str],
) -> Dict[str, Any]:
    outbound = offer.get("outbound") or []
    inbound = offer.get("inbound") or []
    first_leg = outbound[0] if outbound else {}
    airlines = offer.get("airlines") or []
    return {
        "flight_number": option_number,
        "id": offer.get("id"),
        "airline": airlines[0] if airlines else first_leg.get("carrier_name", "N/A"),
        "price": offer.get("price"),
        "currency": offer.get("currency"),
        "departure_at": (first_leg.get("departure") or {}).get("at"),
        "return_at": ((inbound[0] if inbound else {}).get("departure") or {}).get("at"),
        "stops": offer.get("stops", 0),
        "duration": offer.get("total_duration"),
        "carrier_flight": f"{first_leg.get('carrier_code', '')}{first_leg.get('flight_number', '')}" or None,
        "origin": origin_code,
        "destination": destination_code,
        "checkout_url": checkout_url,
    }


def _simplify_hotel(offer: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "hotel_id": offer.get("hotel_id"),
        "name": offer.get("name"),
        "stars": offer.get("stars"),
        "price_total": offer.get("price_total"),
        "currency": offer.get("currency"),
        "offer_id": offer.get("offer_id"),
        "booking_flow": offer.get("booking_flow"),
        "payment_policy": offer.get("payment_policy"),
        "room_description": offer.get("room_description"),
        "check_in_date": offer.get("check_in_date"),
        "check_out_date": offer.get("check_out_date"),
    }


_default_executor: Optional[ToolExecutor] = None


def get_tool_executor() -> ToolExecutor:
    """Get or create the shared executor wired to the Amadeus collaborators."""
    global _default_executor
    if _default_executor is None:
        _default_executor = ToolExecutor()
    return _default_executor

