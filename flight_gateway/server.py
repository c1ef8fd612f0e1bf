#!/usr/bin/env python3
"""
Flight Gateway MCP Server

Exposes the flight search use case as an MCP tool so LLM clients can search
Duffel flight offers in natural language. The tool input is loosely typed
JSON; it is validated here into a FlightSearchInput before reaching the core.

Features:
- search_flights tool with markdown or JSON output
- Cabin class vocabulary as an MCP resource
- Structured error descriptions instead of stack traces
- Multiple transport support (stdio, HTTP with SSE)
"""

import json
import logging
import sys
import uuid
from datetime import date
from typing import Optional

from fastmcp import FastMCP, Context
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .client import DuffelClient
from .config import get_settings
from .domain import CabinClass
from .errors import InternalError, describe_error
from .presentation import ResponseFormat, render_error, render_offers_json, render_offers_markdown
from .provider import DuffelFlightSearchProvider
from .search import FlightSearchInput, SearchFlights

# Configure logging to stderr (stdout is reserved for MCP protocol)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr
)
logger = logging.getLogger("flight_gateway")

# Initialize the MCP server
mcp = FastMCP("flight_gateway")


# ============================================================================
# Pydantic Models for Input Validation
# ============================================================================

class SearchFlightsParams(BaseModel):
    """Input model for searching flights."""
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    origin: str = Field(
        ...,
        description="Origin airport IATA code (3 letters, e.g. 'GRU', 'CNF', 'GIG')",
        max_length=3
    )
    destination: str = Field(
        ...,
        description="Destination airport IATA code (3 letters, e.g. 'EZE', 'LIS')",
        max_length=3
    )
    departure_date: date = Field(
        ...,
        description="Departure date in YYYY-MM-DD format (e.g., '2025-01-10')"
    )
    return_date: Optional[date] = Field(
        default=None,
        description="Return date in YYYY-MM-DD format. Optional, makes the search a round trip"
    )
    passengers: int = Field(
        default=1,
        description="Number of adult passengers (default: 1)",
        le=9
    )
    cabin: Optional[str] = Field(
        default=None,
        description="Cabin class: 'Economy', 'PremiumEconomy', 'Business' or 'First'. Optional"
    )
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format: 'markdown' or 'json'"
    )

    def to_search_input(self) -> FlightSearchInput:
        return FlightSearchInput(
            origin=self.origin,
            destination=self.destination,
            departure_date=self.departure_date,
            return_date=self.return_date,
            passengers=self.passengers,
            cabin=self.cabin,
        )


# ============================================================================
# Shared Utility Functions
# ============================================================================

def _load_settings():
    try:
        return get_settings()
    except PydanticValidationError as e:
        logger.error("Gateway settings are invalid: %s", str(e))
        raise InternalError("Gateway settings are invalid; check the DUFFEL_* environment variables") from e


async def run_search(params: SearchFlightsParams, use_case: SearchFlights) -> str:
    """Execute a search and render the result or the error description."""
    correlation_id = uuid.uuid4().hex
    try:
        offers = await use_case.execute(params.to_search_input())
    except Exception as e:
        return render_error(describe_error(e, correlation_id), params.response_format)

    if params.response_format == ResponseFormat.JSON:
        return render_offers_json(offers)
    return render_offers_markdown(offers)


# ============================================================================
# MCP Resources
# ============================================================================

@mcp.resource("flights://cabin-classes")
def cabin_classes_resource() -> str:
    """
    Cabin class labels accepted by the search_flights tool.

    Unrecognized labels are ignored and the provider default applies.
    """
    return json.dumps({"cabin_classes": [c.value for c in CabinClass]}, indent=2)


# ============================================================================
# Tool Implementations
# ============================================================================

@mcp.tool(
    name="search_flights",
    annotations={
        "title": "Search Flights",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": True
    }
)
async def search_flights(params: SearchFlightsParams, ctx: Context) -> str:
    """
    Search available flight offers by origin, destination, dates, passenger
    count and cabin class.

    Returns offers with price, duration, carrier and the itinerary segments
    of the outbound leg.

    Args:
        params (SearchFlightsParams): Validated input parameters containing:
            - origin (str): Origin IATA code
            - destination (str): Destination IATA code
            - departure_date (date): Outbound date
            - return_date (Optional[date]): Return date for round trips
            - passengers (int): Number of adult passengers (default: 1)
            - cabin (Optional[str]): Economy, PremiumEconomy, Business or First
            - response_format (ResponseFormat): 'markdown' or 'json'
        ctx (Context): MCP context for progress reporting

    Returns:
        str: Formatted flight offers, or an error description

    Examples:
        - "Find flights from GRU to EZE on 2025-01-10"
        - "Business class from GIG to LIS, returning a week later, 2 passengers"
    """
    await ctx.report_progress(progress=0.1, total=1.0)
    try:
        settings = _load_settings()
    except InternalError as e:
        return render_error(describe_error(e), params.response_format)

    async with DuffelClient(settings) as client:
        use_case = SearchFlights(DuffelFlightSearchProvider(client))
        result = await run_search(params, use_case)

    await ctx.report_progress(progress=1.0, total=1.0)
    return result


# ============================================================================
# Main Entry Point
# ============================================================================

def main():
    """Run the flight gateway MCP server with configurable transport."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Flight Gateway MCP Server - Flight search via MCP"
    )
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse"],
        default="stdio",
        help="Transport type: 'stdio' (default) for CLI, 'sse' for HTTP Server-Sent Events"
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host for SSE transport (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for SSE transport (default: 8000)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args()

    if args.debug:
        logging.getLogger("flight_gateway").setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled")

    logger.info("Starting flight gateway MCP server with transport: %s", args.transport)

    if args.transport == "stdio":
        mcp.run()
    elif args.transport == "sse":
        logger.info("SSE server starting on http://%s:%d", args.host, args.port)
        mcp.run(
            transport="sse",
            host=args.host,
            port=args.port
        )


if __name__ == "__main__":
    main()
