"""Pytest fixtures for offline tests: fake chat model, stub collaborators, sample offers."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

# Ensure placeholder keys exist so modules that read env succeed.
os.environ.setdefault("GOOGLE_API_KEY", "test-google-key")
os.environ.setdefault("AMADEUS_API_KEY", "test-amadeus-key")
os.environ.setdefault("AMADEUS_API_SECRET", "test-amadeus-secret")


# -----------------------
# Fake LLM for unit tests
# -----------------------
def content_chunk(text: str) -> SimpleNamespace:
    return SimpleNamespace(content=text, tool_call_chunks=[])


def tool_fragment(
    index: Optional[int] = 0,
    id: Optional[str] = None,
    name: Optional[str] = None,
    args: Optional[str] = None,
) -> SimpleNamespace:
    return SimpleNamespace(
        content="",
        tool_call_chunks=[{"index": index, "id": id, "name": name, "args": args}],
    )


class FakeChatModel:
    """
    Fakes a LangChain chat model with tools bound:
      - .bind_tools(tools) -> self (records the tool definitions)
      - .astream(messages) -> async stream of the next scripted turn
    A scripted turn is a list of chunks, or an exception to raise when streamed.
    """

    def __init__(self, turns: List[Any]):
        self.turns = list(turns)
        self.calls: List[List[Any]] = []
        self.bound_tools: Optional[List[Dict[str, Any]]] = None

    def bind_tools(self, tools):
        self.bound_tools = tools
        return self

    def astream(self, messages):
        self.calls.append(list(messages))
        turn = self.turns.pop(0) if self.turns else [content_chunk("(no more scripted turns)")]
        return self._stream(turn)

    @staticmethod
    async def _stream(turn):
        if isinstance(turn, Exception):
            raise turn
        for chunk in turn:
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk


class RecordingSearch:
    """Stand-in for a travel search collaborator that records every call."""

    def __init__(self, results=None, error: Optional[Exception] = None):
        self.results = results if results is not None else []
        self.error = error
        self.calls: List[SimpleNamespace] = []

    def __call__(self, *args, **kwargs):
        self.calls.append(SimpleNamespace(args=args, kwargs=kwargs))
        if self.error is not None:
            raise self.error
        return self.results


def make_offer(
    price: float = 150.0,
    airline: str = "Iberia",
    carrier: str = "IB",
    number: str = "123",
    depart_at: str = "2025-06-15T10:00:00",
    return_at: str = "2025-06-20T18:00:00",
    offer_id: str = "1",
) -> Dict[str, Any]:
    """A flight offer in the shape returned by ``tools.flight.search_flight_offers``."""
    return {
        "id": offer_id,
        "price": price,
        "currency": "EUR",
        "outbound": [
            {
                "departure": {"iata_code": "ROM", "at": depart_at},
                "arrival": {"iata_code": "BCN", "at": depart_at[:11] + "12:30:00"},
                "carrier_code": carrier,
                "carrier_name": airline,
                "flight_number": number,
                "duration": "PT2H30M",
            }
        ],
        "inbound": [
            {
                "departure": {"iata_code": "BCN", "at": return_at},
                "arrival": {"iata_code": "ROM", "at": return_at[:11] + "20:30:00"},
                "carrier_code": carrier,
                "carrier_name": airline,
                "flight_number": "456",
                "duration": "PT2H30M",
            }
        ],
        "airlines": [airline],
        "total_duration": "PT2H30M",
        "stops": 0,
    }


@pytest.fixture
def flight_search():
    return RecordingSearch(results=[make_offer()])


@pytest.fixture
def hotel_search():
    return RecordingSearch(results=[])
