"""Typed models shared by the chat loop and the HTTP layer."""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PartyType = Literal["bachelor", "bachelorette"]


class _ClientModel(BaseModel):
    """Accepts the browser's camelCase keys as well as snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class TripDetails(_ClientModel):
    people: int = 0
    days: int = 0
    adventure_type: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class FlightOption(_ClientModel):
    """A flight offer returned earlier in the conversation and re-sent by the client."""

    flight_number: int
    airline: Optional[str] = None
    departure_at: Optional[str] = None
    return_at: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    carrier_flight: Optional[str] = None
    checkout_url: Optional[str] = None


class ConversationContext(_ClientModel):
    selected_destination: Optional[str] = None
    trip_details: Optional[TripDetails] = None
    party_type: PartyType = "bachelor"
    origin: Optional[str] = None
    origin_city_name: Optional[str] = None
    flights: List[FlightOption] = Field(default_factory=list)


class ToolCall(BaseModel):
    id: str
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class Message(_ClientModel):
    role: Literal["system", "user", "assistant", "tool"]
    content: Optional[str] = None
    tool_call_id: Optional[str] = None
    tool_calls: List[ToolCall] = Field(default_factory=list)


# ============================================================================
# Stream chunks (wire format: serialize with by_alias=True)
# ============================================================================

class ContentChunk(BaseModel):
    type: Literal["content"] = "content"
    content: str


class ToolCallPayload(BaseModel):
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ToolCallChunk(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["tool_call"] = "tool_call"
    tool_call: ToolCallPayload = Field(alias="toolCall")


class ToolResultChunk(BaseModel):
    type: Literal["tool_result"] = "tool_result"
    name: str
    result: Dict[str, Any]


StreamChunk = Annotated[
    Union[ContentChunk, ToolCallChunk, ToolResultChunk],
    Field(discriminator="type"),
]
