"""
Flight search use case: the normalized input, its validation and the
provider seam the use case dispatches to.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Protocol

from .domain import FlightOffer
from .errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlightSearchInput:
    """Normalized search parameters shared by every front end."""

    origin: str
    destination: str
    departure_date: date
    return_date: Optional[date] = None
    passengers: int = 1
    cabin: Optional[str] = None

    @property
    def is_round_trip(self) -> bool:
        return self.return_date is not None


class FlightSearchProvider(Protocol):
    async def search(self, search: FlightSearchInput) -> List[FlightOffer]:
        ...


def validate_search_input(search: Optional[FlightSearchInput]) -> None:
    """
    Check the business rules a search must satisfy before any provider call.

    Rules are checked in order and the first violation raises.

    Raises:
        ValidationError: naming the offending field.
    """
    if search is None:
        raise ValidationError("Search parameters are required", field="search")
    if not search.origin or not search.origin.strip():
        raise ValidationError("Origin IATA code cannot be empty", field="origin")
    if not search.destination or not search.destination.strip():
        raise ValidationError("Destination IATA code cannot be empty", field="destination")
    if search.origin.strip().upper() == search.destination.strip().upper():
        raise ValidationError(
            f"Origin and destination cannot be the same ({search.origin})",
            field="destination",
        )
    if search.passengers < 1:
        raise ValidationError("Passenger count must be at least 1", field="passengers")


class SearchFlights:
    """Validate a search and hand it to the configured provider."""

    def __init__(self, provider: FlightSearchProvider):
        if provider is None:
            raise ValueError("provider is required")
        self._provider = provider

    async def execute(self, search: FlightSearchInput) -> List[FlightOffer]:
        validate_search_input(search)
        logger.info(
            "Flight search: %s -> %s on %s%s, %d passengers, cabin=%s",
            search.origin,
            search.destination,
            search.departure_date.isoformat(),
            f" returning {search.return_date.isoformat()}" if search.return_date else "",
            search.passengers,
            search.cabin or "default",
        )
        offers = await self._provider.search(search)
        logger.info("Search completed: %d offers found", len(offers))
        return offers
