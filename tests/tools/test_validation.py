"""Unit tests for screening model-proposed tool calls."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from tools import validation
from tools.validation import (
    ASK_CLARIFY,
    ASK_DATE_ORDER,
    ASK_DESTINATION,
    ASK_FLIGHT_CHOICE,
    ASK_GUESTS,
    ASK_ORIGIN,
    ASK_PASSENGERS,
    ASK_STAY_DATES,
    ASK_TRAVEL_DATES,
    SearchFlightsArgs,
    validate_tool_call,
    validate_tool_calls,
)


def _flight_args(**overrides):
    args = {
        "origin": "Rome",
        "destination": "Barcelona",
        "departure_date": "2025-06-15",
        "return_date": "2025-06-20",
        "passengers": 5,
    }
    args.update(overrides)
    return args


def test_complete_flight_search_is_accepted_and_normalized():
    result = validate_tool_call("search_flights", _flight_args(origin="  Rome ", passengers=5.0))
    assert result.valid
    assert result.message is None
    assert result.args == SearchFlightsArgs("Rome", "Barcelona", "2025-06-15", "2025-06-20", 5)
    assert result.arguments["passengers"] == 5
    assert isinstance(result.arguments["passengers"], int)


@pytest.mark.parametrize(
    "overrides, question",
    [
        ({"origin": ""}, ASK_ORIGIN),
        ({"origin": None}, ASK_ORIGIN),
        ({"destination": "   "}, ASK_DESTINATION),
        ({"departure_date": None}, ASK_TRAVEL_DATES),
        ({"return_date": "June 20"}, ASK_TRAVEL_DATES),
        ({"return_date": "2025-06-10"}, ASK_DATE_ORDER),
        ({"passengers": 0}, ASK_PASSENGERS),
        ({"passengers": -2}, ASK_PASSENGERS),
        ({"passengers": True}, ASK_PASSENGERS),
        ({"passengers": 2.5}, ASK_PASSENGERS),
        ({"passengers": "five"}, ASK_PASSENGERS),
    ],
)
def test_flight_search_rejections_ask_one_question(overrides, question):
    result = validate_tool_call("search_flights", _flight_args(**overrides))
    assert not result.valid
    assert result.message == question
    assert result.arguments == {}


def test_checks_run_in_fixed_order():
    # Missing everything: the departure city is asked first.
    assert validate_tool_call("search_flights", {}).message == ASK_ORIGIN
    # Dates are checked before the passenger count.
    result = validate_tool_call("search_flights", _flight_args(departure_date="", passengers=0))
    assert result.message == ASK_TRAVEL_DATES


def test_passenger_count_accepts_digit_strings():
    assert validate_tool_call("search_flights", _flight_args(passengers="4")).arguments["passengers"] == 4


def test_hotel_search_rules():
    good = {"destination": "Ibiza", "check_in_date": "2025-07-01", "check_out_date": "2025-07-04", "guests": 6}
    assert validate_tool_call("search_hotels", good).valid
    assert validate_tool_call("search_hotels", {**good, "check_out_date": None}).message == ASK_STAY_DATES
    assert validate_tool_call("search_hotels", {**good, "guests": None}).message == ASK_GUESTS


def test_select_flight_requires_positive_option():
    assert validate_tool_call("select_flight", {"flight_number": 2}).arguments == {"flight_number": 2}
    assert validate_tool_call("select_flight", {"flight_number": 0}).message == ASK_FLIGHT_CHOICE
    assert validate_tool_call("select_flight", {}).message == ASK_FLIGHT_CHOICE


def test_unlock_checkout_needs_no_arguments():
    result = validate_tool_call("unlock_checkout", None)
    assert result.valid
    assert result.arguments == {}


def test_unknown_tool_or_non_object_arguments():
    assert validate_tool_call("book_spa", {}).message == ASK_CLARIFY
    assert validate_tool_call(None, {}).message == ASK_CLARIFY
    assert validate_tool_call("search_flights", ["Rome"]).message == ASK_ORIGIN


def test_validate_tool_calls_keeps_first_question_only():
    calls = [
        SimpleNamespace(name="select_flight", arguments={"flight_number": 1}),
        {"name": "search_flights", "arguments": _flight_args(passengers=None)},
        {"name": "search_flights", "arguments": _flight_args(origin="")},
        {"name": "unlock_checkout", "arguments": {}},
    ]
    accepted, question = validate_tool_calls(calls)
    assert accepted == [calls[0], calls[3]]
    assert question == ASK_PASSENGERS


def test_messages_are_user_facing_questions():
    for name in dir(validation):
        if name.startswith("ASK_"):
            text = getattr(validation, name)
            assert text.strip().endswith((".", "?"))
