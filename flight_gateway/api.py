"""
HTTP front end for the flight search use case.

GET /api/flights/search returns a JSON list of offers. Every error is
answered with an ErrorResponse body and a status code matching its kind.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .client import DuffelClient
from .config import Settings, get_settings
from .errors import ErrorCode, GatewayError, ValidationError, describe_error, error_code_for
from .presentation import offer_to_payload
from .provider import DuffelFlightSearchProvider
from .search import FlightSearchInput, SearchFlights

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

_STATUS_BY_CODE = {
    ErrorCode.VALIDATION: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.UPSTREAM: 502,
    ErrorCode.TIMEOUT: 504,
    ErrorCode.INTERNAL: 500,
}

_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    status: {"description": code.value} for code, status in _STATUS_BY_CODE.items()
}


def _correlation_id(request: Request) -> str:
    return request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex


def _error_response(request: Request, exc: BaseException) -> JSONResponse:
    correlation_id = _correlation_id(request)
    error = describe_error(exc, correlation_id)
    return JSONResponse(
        status_code=_STATUS_BY_CODE[error_code_for(exc)],
        content=error.to_dict(),
        headers={REQUEST_ID_HEADER: correlation_id},
    )


def create_app(settings: Optional[Settings] = None, client: Optional[DuffelClient] = None) -> FastAPI:
    """
    Build the API application.

    The lifespan owns one DuffelClient for the whole process unless a client
    is injected, in which case the caller owns it.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if client is not None:
            app.state.use_case = SearchFlights(DuffelFlightSearchProvider(client))
            yield
            return
        async with DuffelClient(settings or get_settings()) as owned:
            app.state.use_case = SearchFlights(DuffelFlightSearchProvider(owned))
            logger.info("Duffel client ready")
            yield

    app = FastAPI(
        title="Flight Gateway API",
        version="0.1.0",
        description=(
            "Flight search through the Duffel integration. Searches offers by "
            "origin, destination, dates, passenger count and cabin class."
        ),
        lifespan=lifespan,
    )

    @app.exception_handler(RequestValidationError)
    async def _request_validation_handler(request: Request, exc: RequestValidationError):
        message = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}"
            for err in exc.errors()
        )
        return _error_response(request, ValidationError(message))

    @app.exception_handler(GatewayError)
    async def _gateway_error_handler(request: Request, exc: GatewayError):
        return _error_response(request, exc)

    @app.exception_handler(Exception)
    async def _unexpected_error_handler(request: Request, exc: Exception):
        return _error_response(request, exc)

    def get_use_case(request: Request) -> SearchFlights:
        return request.app.state.use_case

    @app.get(
        "/api/flights/search",
        name="search_flights",
        summary="Search flight offers",
        responses=_ERROR_RESPONSES,
    )
    async def search_flights(
        origin: str = Query(..., description="Origin IATA code (3 letters). Required."),
        destination: str = Query(..., description="Destination IATA code (3 letters). Required."),
        departure_date: date = Query(..., description="Departure date, YYYY-MM-DD. Required."),
        return_date: Optional[date] = Query(
            None, description="Return date, YYYY-MM-DD. Optional, makes the search a round trip."
        ),
        passengers: int = Query(1, le=9, description="Number of passengers (default 1, at most 9)."),
        cabin: Optional[str] = Query(
            None, description="Cabin class: Economy, PremiumEconomy, Business or First. Optional."
        ),
        use_case: SearchFlights = Depends(get_use_case),
    ) -> List[Dict[str, Any]]:
        search = FlightSearchInput(
            origin=origin,
            destination=destination,
            departure_date=departure_date,
            return_date=return_date,
            passengers=passengers,
            cabin=cabin,
        )
        offers = await use_case.execute(search)
        return [offer_to_payload(offer) for offer in offers]

    return app


app = create_app()


def main():
    """Serve the HTTP API with uvicorn."""
    import argparse

    import uvicorn

    parser = argparse.ArgumentParser(description="Flight Gateway HTTP API")
    parser.add_argument("--host", default="127.0.0.1", help="Bind host (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8080, help="Bind port (default: 8080)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info("Starting flight gateway API on http://%s:%d", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
