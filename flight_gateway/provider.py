"""Duffel-backed implementation of the flight search provider."""

import logging
from typing import List

from .client import DuffelClient
from .domain import FlightOffer
from .mappers import build_offer_request, map_offers
from .search import FlightSearchInput

logger = logging.getLogger(__name__)


class DuffelFlightSearchProvider:
    """Map the search, call Duffel once, map the answer back."""

    def __init__(self, client: DuffelClient):
        if client is None:
            raise ValueError("client is required")
        self._client = client

    async def search(self, search: FlightSearchInput) -> List[FlightOffer]:
        request = build_offer_request(search)
        response = await self._client.create_offer_request(request)
        offers = map_offers(response)
        logger.debug(
            "Provider returned %d offers, %d mapped",
            len(response.offers or []),
            len(offers),
        )
        return offers
