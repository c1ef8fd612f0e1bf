"""
Translation between the search input, the Duffel wire format and the domain.

Both mappers are plain functions without state. The response mapper parses
each upstream item into either a domain object or a Skipped marker and then
filters the markers out, so one malformed offer never blanks a whole result.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Sequence, Tuple, Union

from .domain import CabinClass, Duration, FlightOffer, FlightSegment, Money
from .errors import ValidationError
from .search import FlightSearchInput
from .wire import (
    Airline,
    Offer,
    OfferRequest,
    OfferRequestPassenger,
    OfferRequestResponse,
    OfferRequestSlice,
    PASSENGER_TYPE_ADULT,
    Segment,
    Slice,
)

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "BRL"
DEFAULT_CABIN = CabinClass.ECONOMY
DATE_FORMAT = "%Y-%m-%d"

# Internal label (lowercased) -> provider vocabulary
_CABIN_TO_PROVIDER = {
    "economy": "economy",
    "premiumeconomy": "premium_economy",
    "business": "business",
    "first": "first",
}

# Provider vocabulary -> internal label
_CABIN_FROM_PROVIDER = {
    "economy": CabinClass.ECONOMY,
    "premium_economy": CabinClass.PREMIUM_ECONOMY,
    "business": CabinClass.BUSINESS,
    "first": CabinClass.FIRST,
}


@dataclass(frozen=True)
class Skipped:
    """Marker for an upstream item that could not be mapped."""
    reason: str


# ============================================================================
# Request Mapper
# ============================================================================

def to_provider_cabin(label: Optional[str]) -> Optional[str]:
    """Translate an internal cabin label; unknown or blank labels give None."""
    if label is None or not label.strip():
        return None
    return _CABIN_TO_PROVIDER.get(label.strip().lower())


def build_offer_request(search: FlightSearchInput) -> OfferRequest:
    """
    Build the Duffel offer request for a search.

    One slice for a one-way search, two when a return date is given. Every
    passenger is sent as an adult and at least one passenger is always sent.
    """
    slices = [
        OfferRequestSlice(
            origin=search.origin,
            destination=search.destination,
            departure_date=search.departure_date.strftime(DATE_FORMAT),
        )
    ]
    if search.return_date is not None:
        slices.append(
            OfferRequestSlice(
                origin=search.destination,
                destination=search.origin,
                departure_date=search.return_date.strftime(DATE_FORMAT),
            )
        )

    passengers = [
        OfferRequestPassenger(type=PASSENGER_TYPE_ADULT)
        for _ in range(max(search.passengers, 1))
    ]

    cabin_class = to_provider_cabin(search.cabin)
    if search.cabin and cabin_class is None:
        logger.debug("Unrecognized cabin label %r omitted from request", search.cabin)

    return OfferRequest(slices=slices, passengers=passengers, cabin_class=cabin_class)


# ============================================================================
# Response Mapper
# ============================================================================

def to_internal_cabin(provider_cabin: Optional[str]) -> str:
    """Translate a provider cabin class; anything unrecognized is Economy."""
    if provider_cabin is None or not provider_cabin.strip():
        return DEFAULT_CABIN.value
    return _CABIN_FROM_PROVIDER.get(provider_cabin.strip().lower(), DEFAULT_CABIN).value


def parse_duration_or_zero(token: Optional[str]) -> Duration:
    """Parse a duration token, falling back to zero when absent or invalid."""
    if token is None or not token.strip():
        return Duration.ZERO
    try:
        return Duration.from_iso8601(token)
    except ValidationError:
        logger.debug("Invalid duration token %r, using zero", token)
        return Duration.ZERO


def parse_price(amount: Optional[str], currency: Optional[str]) -> Money:
    """
    Build the total price defensively.

    Unparseable amounts count as zero and negative ones are clamped to zero.
    A blank currency falls back to DEFAULT_CURRENCY.
    """
    try:
        value = Decimal(amount) if amount is not None else Decimal(0)
    except InvalidOperation:
        value = Decimal(0)
    if not value.is_finite() or value < 0:
        value = Decimal(0)

    if currency is None or not currency.strip():
        currency = DEFAULT_CURRENCY

    return Money(value, currency)


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _airport_code(place) -> str:
    return (place.iata_code if place is not None else None) or ""


def _carrier_code(segment: Segment) -> str:
    for carrier in (segment.operating_carrier, segment.marketing_carrier):
        if carrier is not None and carrier.iata_code:
            return carrier.iata_code
    return ""


def _carrier_name(*carriers: Optional[Airline]) -> str:
    for carrier in carriers:
        if carrier is not None and carrier.name:
            return carrier.name
    return ""


def _flight_number(segment: Segment) -> str:
    marketing = segment.marketing_carrier
    prefix = (marketing.iata_code if marketing is not None else None) or ""
    return f"{prefix}{segment.marketing_carrier_flight_number or ''}"


def _segment_cabin(segment: Segment) -> Optional[str]:
    if segment.passengers:
        return segment.passengers[0].cabin_class
    return None


def parse_segment(segment: Segment) -> Union[FlightSegment, Skipped]:
    """Map one wire segment, or explain why it cannot be mapped."""
    departure = _parse_timestamp(segment.departing_at)
    arrival = _parse_timestamp(segment.arriving_at)
    if departure is None or arrival is None:
        return Skipped(f"segment {segment.id}: missing or malformed timestamps")

    try:
        return FlightSegment(
            origin=_airport_code(segment.origin),
            destination=_airport_code(segment.destination),
            departure=departure,
            arrival=arrival,
            flight_number=_flight_number(segment),
            carrier_code=_carrier_code(segment),
            duration=parse_duration_or_zero(segment.duration),
        )
    except ValidationError as e:
        return Skipped(f"segment {segment.id}: {e}")


def _surviving_segments(segments: Sequence[Segment]) -> List[Tuple[Segment, FlightSegment]]:
    kept = []
    for wire_segment in segments:
        result = parse_segment(wire_segment)
        if isinstance(result, Skipped):
            logger.debug("Dropping %s", result.reason)
        else:
            kept.append((wire_segment, result))
    return kept


def parse_segments(segments: Sequence[Segment]) -> List[FlightSegment]:
    """Map all segments of a slice, dropping the ones that fail validation."""
    return [segment for _, segment in _surviving_segments(segments)]


def parse_offer(offer: Offer) -> Union[FlightOffer, Skipped]:
    """
    Map one wire offer into a FlightOffer.

    Only the first slice is mapped. Any further slice (the return leg of a
    round trip) is discarded and reported in the log.
    """
    if not offer.slices:
        return Skipped(f"offer {offer.id}: no slices")

    outbound: Slice = offer.slices[0]
    if not outbound.segments:
        return Skipped(f"offer {offer.id}: first slice has no segments")

    if len(offer.slices) > 1:
        logger.info(
            "Offer %s has %d slices; only the outbound slice is mapped",
            offer.id,
            len(offer.slices),
        )

    kept = _surviving_segments(outbound.segments)
    if not kept:
        return Skipped(f"offer {offer.id}: no valid segments")

    # Fallbacks read only from segments that survived validation
    first_wire_segment = kept[0][0]
    segments = [segment for _, segment in kept]
    owner_code = offer.owner.iata_code if offer.owner is not None else None
    carrier_code = owner_code or segments[0].carrier_code
    carrier_name = _carrier_name(
        offer.owner,
        first_wire_segment.operating_carrier,
        first_wire_segment.marketing_carrier,
    )

    try:
        return FlightOffer.create(
            origin=_airport_code(outbound.origin) or segments[0].origin,
            destination=_airport_code(outbound.destination) or segments[-1].destination,
            departure=segments[0].departure,
            arrival=segments[-1].arrival,
            total_duration=parse_duration_or_zero(outbound.duration),
            total_price=parse_price(offer.total_amount, offer.total_currency),
            carrier_code=carrier_code,
            carrier_name=carrier_name,
            cabin=to_internal_cabin(_segment_cabin(first_wire_segment)),
            segments=segments,
        )
    except ValidationError as e:
        return Skipped(f"offer {offer.id}: {e}")


def map_offers(response: Optional[OfferRequestResponse]) -> List[FlightOffer]:
    """
    Map a Duffel offer request response into domain offers.

    Never returns None; an absent response or offer list gives an empty list.
    """
    if response is None or not response.offers:
        return []

    results = [parse_offer(offer) for offer in response.offers]
    skipped = [result for result in results if isinstance(result, Skipped)]
    for result in skipped:
        logger.debug("Dropping %s", result.reason)

    offers = [result for result in results if isinstance(result, FlightOffer)]
    if skipped:
        logger.info("Mapped %d offers, dropped %d", len(offers), len(skipped))
    return offers
