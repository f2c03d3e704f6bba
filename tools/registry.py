"""Catalog of the tools the trip assistant model may call."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    parameters: Mapping[str, Any] = field(default_factory=dict)

    def as_function_tool(self) -> Dict[str, Any]:
        """OpenAI-style function tool, the format accepted by langchain ``bind_tools``."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": _thaw(self.parameters),
            },
        }


def _schema(properties: Dict[str, Any], required: List[str]) -> Mapping[str, Any]:
    return MappingProxyType(
        {
            "type": "object",
            "properties": MappingProxyType({k: MappingProxyType(v) for k, v in properties.items()}),
            "required": tuple(required),
        }
    )


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


TOOL_REGISTRY: Tuple[ToolSpec, ...] = (
    ToolSpec(
        name="search_flights",
        description=(
            "Search real round-trip flights once the departure city, destination, "
            "both travel dates and the number of travelers are known. "
            "Dates must be converted to YYYY-MM-DD."
        ),
        parameters=_schema(
            {
                "origin": {"type": "string", "description": "Departure city name or airport code"},
                "destination": {"type": "string", "description": "Destination city name or airport code"},
                "departure_date": {"type": "string", "description": "Outbound date in YYYY-MM-DD format"},
                "return_date": {"type": "string", "description": "Return date in YYYY-MM-DD format"},
                "passengers": {"type": "integer", "description": "Number of travelers"},
            },
            ["origin", "destination", "departure_date", "return_date", "passengers"],
        ),
    ),
    ToolSpec(
        name="search_hotels",
        description=(
            "Search hotel offers in the destination city for the stay dates and group size. "
            "Only use when the user explicitly asks about hotels."
        ),
        parameters=_schema(
            {
                "destination": {"type": "string", "description": "Destination city name or city code"},
                "check_in_date": {"type": "string", "description": "Check-in date in YYYY-MM-DD format"},
                "check_out_date": {"type": "string", "description": "Check-out date in YYYY-MM-DD format"},
                "guests": {"type": "integer", "nullable": True, "description": "Number of guests"},
            },
            ["destination", "check_in_date", "check_out_date", "guests"],
        ),
    ),
    ToolSpec(
        name="select_flight",
        description="Select a specific flight when the user chooses one of the numbered options",
        parameters=_schema(
            {"flight_number": {"type": "integer", "description": "The flight option number (1, 2, 3...)"}},
            ["flight_number"],
        ),
    ),
    ToolSpec(
        name="unlock_checkout",
        description="Unlock the checkout button when the user confirms they want to proceed with booking",
        parameters=_schema({}, []),
    ),
)

TOOL_NAMES: Tuple[str, ...] = tuple(spec.name for spec in TOOL_REGISTRY)

_BY_NAME = {spec.name: spec for spec in TOOL_REGISTRY}


def get_tool(name: str) -> Optional[ToolSpec]:
    return _BY_NAME.get(name)


def tool_schemas() -> List[Dict[str, Any]]:
    """Fresh, mutable copies of every tool definition for the model binding."""
    return [spec.as_function_tool() for spec in TOOL_REGISTRY]
