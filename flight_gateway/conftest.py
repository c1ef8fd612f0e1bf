"""Pytest configuration and shared fixtures."""

import copy
from typing import Any, Dict, Optional

import pytest

from .config import Settings


def _segment(
    origin: str = "GRU",
    destination: str = "EZE",
    departing_at: Optional[str] = "2025-01-10T08:55:00Z",
    arriving_at: Optional[str] = "2025-01-10T12:05:00Z",
    duration: Optional[str] = "PT3H10M",
    cabin_class: Optional[str] = "economy",
) -> Dict[str, Any]:
    return {
        "id": "seg_0001",
        "origin": {"iata_code": origin},
        "destination": {"iata_code": destination},
        "departing_at": departing_at,
        "arriving_at": arriving_at,
        "duration": duration,
        "marketing_carrier": {"iata_code": "LA", "name": "LATAM Airlines"},
        "marketing_carrier_flight_number": "8010",
        "operating_carrier": {"iata_code": "LA", "name": "LATAM Airlines"},
        "passengers": [{"passenger_id": "pas_0001", "cabin_class": cabin_class}],
    }


def _offer(**overrides: Any) -> Dict[str, Any]:
    offer = {
        "id": "off_0000AEdGRhtp5AUUdJqMxo",
        "total_amount": "1320.50",
        "total_currency": "USD",
        "expires_at": "2025-01-05T10:00:00Z",
        "owner": {"iata_code": "LA", "name": "LATAM Airlines"},
        "slices": [
            {
                "id": "sli_0001",
                "origin": {"iata_code": "GRU"},
                "destination": {"iata_code": "EZE"},
                "duration": "PT3H10M",
                "segments": [_segment()],
            }
        ],
        "passengers": [{"id": "pas_0001", "type": "adult"}],
    }
    offer.update(overrides)
    return offer


@pytest.fixture
def make_segment():
    """Factory for a raw Duffel segment dict."""
    return _segment


@pytest.fixture
def make_offer():
    """Factory for a raw Duffel offer dict (one GRU -> EZE slice, one segment)."""
    return _offer


@pytest.fixture
def offer_request_body():
    """A full POST /air/offer_requests response body with a single offer."""
    return copy.deepcopy({"data": {"id": "orq_0001", "offers": [_offer()]}})


@pytest.fixture
def settings() -> Settings:
    return Settings(
        access_token="duffel_test_token",
        base_url="https://api.duffel.test",
        api_version="v2",
        timeout=5.0,
    )
