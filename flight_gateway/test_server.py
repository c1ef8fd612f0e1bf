"""Tests for the MCP tool front end."""

import asyncio
import json
from datetime import date

import pytest
from pydantic import ValidationError as PydanticValidationError

from .config import get_settings
from .errors import InternalError, UpstreamCommunicationError
from .provider import DuffelFlightSearchProvider
from .search import SearchFlights
from .server import SearchFlightsParams, _load_settings, run_search
from .wire import OfferRequestResponse


class StaticClient:
    def __init__(self, body=None, error=None):
        self.body = body
        self.error = error
        self.calls = 0

    async def create_offer_request(self, request):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return OfferRequestResponse.from_body(self.body)


def use_case_for(client):
    return SearchFlights(DuffelFlightSearchProvider(client))


def test_params_coerce_loose_json():
    params = SearchFlightsParams.model_validate(
        {"origin": " GRU ", "destination": "EZE", "departure_date": "2025-01-10", "return_date": "2025-01-17"}
    )
    search = params.to_search_input()
    assert search.origin == "GRU"
    assert search.departure_date == date(2025, 1, 10)
    assert search.return_date == date(2025, 1, 17)
    assert search.passengers == 1
    assert search.is_round_trip


def test_params_reject_malformed_dates():
    with pytest.raises(PydanticValidationError):
        SearchFlightsParams.model_validate(
            {"origin": "GRU", "destination": "EZE", "departure_date": "next friday"}
        )


def test_markdown_results(offer_request_body):
    params = SearchFlightsParams(origin="GRU", destination="EZE", departure_date="2025-01-10")
    result = asyncio.run(run_search(params, use_case_for(StaticClient(offer_request_body))))

    assert "# Flight Search Results" in result
    assert "USD 1320.50" in result
    assert "3h 10m" in result
    assert "LA8010" in result


def test_json_results(offer_request_body):
    params = SearchFlightsParams(
        origin="GRU", destination="EZE", departure_date="2025-01-10", response_format="json"
    )
    result = json.loads(asyncio.run(run_search(params, use_case_for(StaticClient(offer_request_body)))))

    assert result["total_offers"] == 1
    assert result["offers"][0]["cabin"] == "Economy"
    assert result["offers"][0]["total_duration_minutes"] == 190


def test_no_offers_message():
    params = SearchFlightsParams(origin="GRU", destination="EZE", departure_date="2025-01-10")
    result = asyncio.run(run_search(params, use_case_for(StaticClient({"data": {"offers": []}}))))
    assert "No offers available" in result


def test_validation_error_is_rendered_without_calling_upstream():
    client = StaticClient({"data": {"offers": []}})
    params = SearchFlightsParams(
        origin="GRU", destination="GRU", departure_date="2025-01-10", response_format="json"
    )
    result = json.loads(asyncio.run(run_search(params, use_case_for(client))))

    assert result["error"]["code"] == "VALIDATION"
    assert result["error"]["correlation_id"]
    assert client.calls == 0


def test_upstream_error_is_rendered_opaquely():
    client = StaticClient(error=UpstreamCommunicationError("secret host down", status_code=503))
    params = SearchFlightsParams(origin="GRU", destination="EZE", departure_date="2025-01-10")
    result = asyncio.run(run_search(params, use_case_for(client)))

    assert result.startswith("Error (UPSTREAM)")
    assert "secret host" not in result


def test_invalid_settings_are_reported_generically(monkeypatch):
    monkeypatch.setenv("DUFFEL_ACCESS_TOKEN", "duffel_test_abc")
    monkeypatch.setenv("DUFFEL_TIMEOUT", "-1")
    get_settings.cache_clear()
    try:
        with pytest.raises(InternalError) as exc_info:
            _load_settings()
    finally:
        get_settings.cache_clear()

    assert "invalid" in str(exc_info.value)
    assert "not set" not in str(exc_info.value)
