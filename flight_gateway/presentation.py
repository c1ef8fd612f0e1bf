"""
Rendering of domain offers for the front ends: JSON-ready payloads for the
HTTP API and the MCP json format, markdown for the MCP markdown format.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Sequence, TypedDict

from .domain import FlightOffer, FlightSegment, Money
from .errors import ErrorResponse

CHARACTER_LIMIT = 25000


class ResponseFormat(str, Enum):
    """Output format for tool responses."""
    MARKDOWN = "markdown"
    JSON = "json"


class SegmentPayload(TypedDict):
    origin: str
    destination: str
    departure: str
    arrival: str
    flight_number: str
    carrier_code: str
    duration: str
    duration_minutes: int


class OfferPayload(TypedDict):
    id: str
    origin: str
    destination: str
    departure: str
    arrival: str
    total_duration: str
    total_duration_minutes: int
    price: str
    currency: str
    carrier_code: str
    carrier_name: str
    cabin: str
    stops: int
    segments: List[SegmentPayload]


def segment_to_payload(segment: FlightSegment) -> SegmentPayload:
    return SegmentPayload(
        origin=segment.origin,
        destination=segment.destination,
        departure=segment.departure.isoformat(),
        arrival=segment.arrival.isoformat(),
        flight_number=segment.flight_number,
        carrier_code=segment.carrier_code,
        duration=segment.duration.to_iso8601(),
        duration_minutes=segment.duration.total_minutes,
    )


def offer_to_payload(offer: FlightOffer) -> OfferPayload:
    """Convert an offer into a JSON-serializable dict."""
    return OfferPayload(
        id=str(offer.id),
        origin=offer.origin,
        destination=offer.destination,
        departure=offer.departure.isoformat(),
        arrival=offer.arrival.isoformat(),
        total_duration=offer.total_duration.to_iso8601(),
        total_duration_minutes=offer.total_duration.total_minutes,
        price=str(offer.total_price.amount),
        currency=offer.total_price.currency,
        carrier_code=offer.carrier_code,
        carrier_name=offer.carrier_name,
        cabin=offer.cabin,
        stops=offer.stops,
        segments=[segment_to_payload(s) for s in offer.segments],
    )


def _format_price(price: Money) -> str:
    """Format price consistently."""
    return f"{price.currency} {price.amount}"


def _format_datetime(dt: datetime) -> str:
    """Format a datetime to a human-readable form."""
    return dt.strftime("%Y-%m-%d %H:%M %Z").strip()


def truncate_if_needed(content: str, data_description: str = "results") -> str:
    """Truncate content if it exceeds CHARACTER_LIMIT."""
    if len(content) > CHARACTER_LIMIT:
        truncated = content[:CHARACTER_LIMIT]
        truncated += f"\n\n**[Truncated]** Response exceeded {CHARACTER_LIMIT} characters. Narrow the search to see more {data_description}."
        return truncated
    return content


def render_offers_json(offers: Sequence[FlightOffer]) -> str:
    payload: Dict[str, Any] = {
        "total_offers": len(offers),
        "offers": [offer_to_payload(o) for o in offers],
    }
    return truncate_if_needed(json.dumps(payload, indent=2), "offers")


def render_offers_markdown(offers: Sequence[FlightOffer]) -> str:
    lines = ["# Flight Search Results\n"]

    if not offers:
        lines.append("## No offers available")
        lines.append("No flights found matching your criteria. Try adjusting dates or cabin class.")
        return "\n".join(lines)

    lines.append(f"## Available Offers ({len(offers)} found)\n")
    for i, offer in enumerate(offers, 1):
        lines.append(f"### Offer {i}: {_format_price(offer.total_price)}")
        lines.append(f"- **Offer ID**: `{offer.id}`")
        carrier = f"{offer.carrier_name} ({offer.carrier_code})" if offer.carrier_name else offer.carrier_code
        lines.append(f"- **Carrier**: {carrier}")
        lines.append(f"- **Route**: {offer.origin} -> {offer.destination}")
        lines.append(f"- **Departure**: {_format_datetime(offer.departure)}")
        lines.append(f"- **Arrival**: {_format_datetime(offer.arrival)}")
        lines.append(f"- **Duration**: {offer.total_duration}")
        lines.append(f"- **Cabin**: {offer.cabin}")
        lines.append(f"- **Stops**: {offer.stops}")
        for segment in offer.segments:
            lines.append(
                f"  - {segment.flight_number}: {segment.origin} {_format_datetime(segment.departure)}"
                f" -> {segment.destination} {_format_datetime(segment.arrival)} ({segment.duration})"
            )
        lines.append("")

    return truncate_if_needed("\n".join(lines), "offers")


def render_error(error: ErrorResponse, response_format: ResponseFormat) -> str:
    """Render an error description for a tool response."""
    if response_format == ResponseFormat.JSON:
        return json.dumps({"error": error.to_dict()}, indent=2)
    message = f"Error ({error.code}): {error.message}"
    if error.detail:
        message += f" {error.detail}"
    return message
