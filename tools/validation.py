"""Screening of model-proposed tool calls before anything is executed.

Every tool has a typed argument record; parsing the raw JSON arguments into
that record either succeeds or yields the single question to put back to the
user. Nothing here raises: a bad call is a conversation problem, not an error.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from tools.dates import parse_iso_date

ASK_ORIGIN = "Which city would you like to depart from?"
ASK_DESTINATION = "Where would you like to go?"
ASK_TRAVEL_DATES = "I need your travel dates to search flights. When would you like to leave and come back?"
ASK_DATE_ORDER = "The return date seems to be before the departure date. Can you double-check your travel dates?"
ASK_PASSENGERS = "How many people are traveling?"
ASK_HOTEL_CITY = "Which city should I look for hotels in?"
ASK_STAY_DATES = "I need your check-in and check-out dates to look for hotels. When are you arriving and leaving?"
ASK_STAY_ORDER = "The check-out date seems to be before the check-in date. Can you double-check your stay dates?"
ASK_GUESTS = "How many guests will be staying?"
ASK_FLIGHT_CHOICE = "Which flight option would you like? Just tell me its number (1, 2, 3...)."
ASK_CLARIFY = "Sorry, I didn't quite get that. Can you clarify what you'd like to do?"


@dataclass(frozen=True)
class SearchFlightsArgs:
    origin: str
    destination: str
    departure_date: str
    return_date: str
    passengers: int


@dataclass(frozen=True)
class SearchHotelsArgs:
    destination: str
    check_in_date: str
    check_out_date: str
    guests: int


@dataclass(frozen=True)
class SelectFlightArgs:
    flight_number: int


@dataclass(frozen=True)
class UnlockCheckoutArgs:
    pass


ToolArgs = Union[SearchFlightsArgs, SearchHotelsArgs, SelectFlightArgs, UnlockCheckoutArgs]


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    message: Optional[str] = None
    args: Optional[ToolArgs] = None

    @property
    def arguments(self) -> Dict[str, Any]:
        """Normalised arguments (trimmed strings, real ints) of a valid call."""
        return asdict(self.args) if self.args is not None else {}


class _Clarify(Exception):
    """Internal signal carrying the clarification for the first failed check."""


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        number = int(value.strip())
    else:
        return None
    return number if number > 0 else None


def _require_text(args: Mapping[str, Any], key: str, question: str) -> str:
    text = _text(args.get(key))
    if not text:
        raise _Clarify(question)
    return text


def _require_date_pair(args: Mapping[str, Any], start_key: str, end_key: str, missing: str, order: str) -> Tuple[str, str]:
    start = parse_iso_date(args.get(start_key))
    end = parse_iso_date(args.get(end_key))
    if start is None or end is None:
        raise _Clarify(missing)
    if end < start:
        raise _Clarify(order)
    return start.isoformat(), end.isoformat()


def _require_count(args: Mapping[str, Any], key: str, question: str) -> int:
    count = _positive_int(args.get(key))
    if count is None:
        raise _Clarify(question)
    return count


def _parse_search_flights(args: Mapping[str, Any]) -> SearchFlightsArgs:
    origin = _require_text(args, "origin", ASK_ORIGIN)
    destination = _require_text(args, "destination", ASK_DESTINATION)
    departure, ret = _require_date_pair(args, "departure_date", "return_date", ASK_TRAVEL_DATES, ASK_DATE_ORDER)
    passengers = _require_count(args, "passengers", ASK_PASSENGERS)
    return SearchFlightsArgs(origin, destination, departure, ret, passengers)


def _parse_search_hotels(args: Mapping[str, Any]) -> SearchHotelsArgs:
    destination = _require_text(args, "destination", ASK_HOTEL_CITY)
    check_in, check_out = _require_date_pair(args, "check_in_date", "check_out_date", ASK_STAY_DATES, ASK_STAY_ORDER)
    guests = _require_count(args, "guests", ASK_GUESTS)
    return SearchHotelsArgs(destination, check_in, check_out, guests)


def _parse_select_flight(args: Mapping[str, Any]) -> SelectFlightArgs:
    return SelectFlightArgs(_require_count(args, "flight_number", ASK_FLIGHT_CHOICE))


def _parse_unlock_checkout(args: Mapping[str, Any]) -> UnlockCheckoutArgs:
    return UnlockCheckoutArgs()


_PARSERS = {
    "search_flights": _parse_search_flights,
    "search_hotels": _parse_search_hotels,
    "select_flight": _parse_select_flight,
    "unlock_checkout": _parse_unlock_checkout,
}


def validate_tool_call(name: Any, arguments: Any = None) -> ValidationResult:
    """Check one proposed call. Always returns; ``message`` is set whenever the call is rejected."""
    parser = _PARSERS.get(name) if isinstance(name, str) else None
    if parser is None:
        return ValidationResult(valid=False, message=ASK_CLARIFY)

    args = arguments if isinstance(arguments, Mapping) else {}
    try:
        return ValidationResult(valid=True, args=parser(args))
    except _Clarify as clarification:
        return ValidationResult(valid=False, message=str(clarification))


def validate_tool_calls(calls: Iterable[Any]) -> Tuple[List[Any], Optional[str]]:
    """
    Partition calls into the accepted ones and the first rejection's question.

    ``calls`` are objects with ``name``/``arguments`` attributes or mappings
    with those keys. Later rejections are dropped so the user is asked one
    thing at a time.
    """
    accepted: List[Any] = []
    clarification: Optional[str] = None
    for call in calls:
        if isinstance(call, Mapping):
            name, arguments = call.get("name"), call.get("arguments")
        else:
            name, arguments = getattr(call, "name", None), getattr(call, "arguments", None)
        result = validate_tool_call(name, arguments)
        if result.valid:
            accepted.append(call)
        elif clarification is None:
            clarification = result.message
    return accepted, clarification
