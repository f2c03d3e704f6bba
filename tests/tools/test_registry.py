"""Unit tests for the tool catalog handed to the model."""

from __future__ import annotations

import pytest

from tools.registry import TOOL_NAMES, TOOL_REGISTRY, get_tool, tool_schemas


def test_registry_lists_the_four_tools_in_order():
    assert TOOL_NAMES == ("search_flights", "search_hotels", "select_flight", "unlock_checkout")


def test_schemas_are_function_tools_with_required_fields():
    schemas = {s["function"]["name"]: s for s in tool_schemas()}
    assert all(s["type"] == "function" for s in schemas.values())

    flights = schemas["search_flights"]["function"]["parameters"]
    assert flights["type"] == "object"
    assert flights["required"] == ["origin", "destination", "departure_date", "return_date", "passengers"]
    assert flights["properties"]["passengers"]["type"] == "integer"

    hotels = schemas["search_hotels"]["function"]["parameters"]
    assert hotels["properties"]["guests"]["nullable"] is True

    assert schemas["unlock_checkout"]["function"]["parameters"]["properties"] == {}


def test_tool_schemas_returns_fresh_copies():
    first = tool_schemas()
    first[0]["function"]["parameters"]["properties"].clear()
    assert tool_schemas()[0]["function"]["parameters"]["properties"]


def test_registry_entries_are_immutable():
    tool = get_tool("select_flight")
    assert tool is TOOL_REGISTRY[2]
    with pytest.raises(TypeError):
        tool.parameters["properties"]["extra"] = {}
    assert get_tool("book_spa") is None
