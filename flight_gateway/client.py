"""
Async HTTP client for the Duffel offer request endpoint.

The client performs exactly one request per call and never retries. Every
transport failure is translated into the gateway error taxonomy; task
cancellation is left to propagate untouched.
"""

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from .config import Settings
from .errors import UpstreamCommunicationError, UpstreamTimeoutError, ValidationError
from .wire import OfferRequest, OfferRequestResponse

logger = logging.getLogger(__name__)

OFFER_REQUESTS_ENDPOINT = "air/offer_requests"


def _get_http_headers(settings: Settings) -> Dict[str, str]:
    """Get headers for Duffel API requests."""
    return {
        "Authorization": f"Bearer {settings.access_token}",
        "Duffel-Version": settings.api_version,
        "Accept": "application/json",
        "Accept-Encoding": "gzip",
        "Content-Type": "application/json",
    }


def _provider_message(response: httpx.Response) -> Optional[str]:
    """Extract the first error message from a Duffel error body, if any."""
    try:
        error_data = response.json()
    except ValueError:
        return None
    if not isinstance(error_data, dict):
        return None
    errors = error_data.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        return errors[0].get("message")
    return None


def _raise_for_status(response: httpx.Response) -> None:
    """Translate a non-success response into a gateway error."""
    if response.is_success:
        return

    status = response.status_code
    provider_message = _provider_message(response)
    logger.error("Duffel API error %s: %s", status, provider_message or "no message")

    if status == 422:
        # The provider's own validation message is safe and useful to pass on
        raise ValidationError(
            provider_message or "The flight provider rejected the search parameters."
        )
    if status == 400:
        message = f"Invalid request to the Duffel API: {provider_message or 'bad request'}"
    elif status == 401:
        message = "Authentication with the Duffel API failed. Check the access token."
    elif status == 403:
        message = "Access to the Duffel API was denied. Check the token permissions."
    elif status == 404:
        message = "Resource not found on the Duffel API."
    elif status == 429:
        message = "Duffel API rate limit exceeded. Please wait before making more requests."
    elif status >= 500:
        message = f"Duffel API internal error (HTTP {status}). Please try again later."
    else:
        message = f"Duffel API request failed with status {status}"
    raise UpstreamCommunicationError(message, status_code=status)


class DuffelClient:
    """
    Transport collaborator for flight searches.

    Owns an httpx.AsyncClient unless one is injected. Use it as an async
    context manager, or call aclose() when done.
    """

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self._settings = settings
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=settings.base_url,
            timeout=settings.timeout,
        )

    async def __aenter__(self) -> "DuffelClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def create_offer_request(self, request: OfferRequest) -> OfferRequestResponse:
        """
        Create an offer request and return the offers it produced.

        Raises:
            UpstreamTimeoutError: the request timed out.
            UpstreamCommunicationError: network failure, non-success status
                or an unreadable body.
            ValidationError: the provider rejected the parameters (HTTP 422).
        """
        logger.debug("API request: POST /%s", OFFER_REQUESTS_ENDPOINT)
        try:
            response = await self._client.post(
                f"/{OFFER_REQUESTS_ENDPOINT}",
                params={"return_offers": "true"},
                headers=_get_http_headers(self._settings),
                json=request.to_payload(),
            )
        except httpx.TimeoutException as e:
            logger.error("Request timeout: %s", str(e))
            raise UpstreamTimeoutError("The Duffel API did not respond in time.") from e
        except httpx.HTTPError as e:
            logger.error("Network error talking to Duffel: %s", str(e))
            raise UpstreamCommunicationError(
                f"Could not reach the Duffel API: {type(e).__name__}"
            ) from e

        logger.debug("API response: %s %s", response.status_code, OFFER_REQUESTS_ENDPOINT)
        _raise_for_status(response)

        try:
            return OfferRequestResponse.from_body(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise UpstreamCommunicationError(
                "The Duffel API returned an unreadable response.",
                status_code=response.status_code,
            ) from e
