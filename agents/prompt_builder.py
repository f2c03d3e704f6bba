"""Builds the system prompt for one chat request from the client-held context."""
from __future__ import annotations

from typing import List

from prompts import load_prompt_template
from tools.city_codes import ORIGIN_CITIES, SUPPORTED_DESTINATIONS, iata_to_city
from tools.dates import format_flight_datetime
from workflows.state import ConversationContext, FlightOption, TripDetails

BRANDS = {
    "bachelor": ("ByeBro", "bachelor party"),
    "bachelorette": ("ByeBride", "bachelorette party"),
}

FLIGHT_CHOICE_INSTRUCTION = (
    'When the user chooses a flight (e.g., "the 2nd one", "I\'ll take the first", "flight 3"), '
    "call select_flight with that option number."
)


def build_system_prompt(context: ConversationContext) -> str:
    brand, party = BRANDS.get(context.party_type, BRANDS["bachelor"])
    prompt = load_prompt_template("persona").format(
        brand=brand,
        party=party,
        destinations=", ".join(SUPPORTED_DESTINATIONS),
        origin_cities=", ".join(ORIGIN_CITIES),
    )

    sections: List[str] = [prompt.rstrip()]

    if context.origin:
        city = context.origin_city_name or iata_to_city(context.origin)
        sections.append(f"DEPARTURE CITY: {city} (airport code: {context.origin.upper()})")
    elif context.origin_city_name:
        sections.append(f"DEPARTURE CITY: {context.origin_city_name}")

    if context.selected_destination:
        destination = f"SELECTED DESTINATION: {context.selected_destination.upper()}"
        details = _trip_detail_lines(context.trip_details)
        if details:
            destination += "\nTRIP DETAILS:\n" + "\n".join(details)
        sections.append(destination)

    if context.flights:
        sections.append(_flight_options(context))

    return "\n\n".join(sections)


def _trip_detail_lines(details: TripDetails | None) -> List[str]:
    if details is None:
        return []
    lines = []
    if details.people:
        lines.append(f"- People: {details.people}")
    if details.days:
        lines.append(f"- Days: {details.days}")
    if details.adventure_type:
        lines.append(f"- Type: {details.adventure_type}")
    if details.start_date and details.end_date:
        lines.append(f"- Dates: {details.start_date} to {details.end_date}")
    return lines


def _flight_options(context: ConversationContext) -> str:
    origin = context.origin_city_name or iata_to_city(context.origin) or "your city"
    destination = context.selected_destination or "the destination"
    lines = [
        f"AVAILABLE REAL FLIGHTS (from {origin} to {destination}):",
        "These are REAL flights with updated prices. Present them to the user and ask which one they prefer.",
        "",
    ]
    for flight in context.flights:
        lines.extend(_flight_lines(flight))
        lines.append("")
    lines.append(FLIGHT_CHOICE_INSTRUCTION)
    return "\n".join(lines)


def _flight_lines(flight: FlightOption) -> List[str]:
    dep_date, dep_time = format_flight_datetime(flight.departure_at)
    ret_date, ret_time = format_flight_datetime(flight.return_at)
    lines = [f"{flight.flight_number}. {flight.airline or 'Airline n/a'}"]
    if dep_date:
        lines.append(f"   Departure: {dep_date}" + (f" at {dep_time}" if dep_time else ""))
    if ret_date:
        lines.append(f"   Return: {ret_date}" + (f" at {ret_time}" if ret_time else ""))
    if flight.carrier_flight:
        lines.append(f"   Flight no. {flight.carrier_flight}")
    if flight.price is not None:
        lines.append(f"   Price: {flight.price:.2f} {flight.currency or ''}".rstrip())
    if flight.checkout_url:
        lines.append(f"   Checkout: {flight.checkout_url}")
    return lines
