"""
Pydantic models for the Duffel offer request wire format.

Request models mirror the body of POST /air/offer_requests. Response models
are deliberately lenient: every field is optional so a partially filled
offer reaches the response mapper, which decides what to drop.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

PASSENGER_TYPE_ADULT = "adult"


# ============================================================================
# Request
# ============================================================================

class OfferRequestSlice(BaseModel):
    """One direction of travel in an offer request."""
    model_config = ConfigDict(frozen=True)

    origin: str
    destination: str
    departure_date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")


class OfferRequestPassenger(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str = PASSENGER_TYPE_ADULT


class OfferRequest(BaseModel):
    """Body of an offer request, before the {"data": ...} envelope."""
    model_config = ConfigDict(frozen=True)

    slices: List[OfferRequestSlice] = Field(..., min_length=1)
    passengers: List[OfferRequestPassenger] = Field(..., min_length=1)
    cabin_class: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """Wrap the request in the envelope the API expects, omitting unset cabin."""
        return {"data": self.model_dump(exclude_none=True)}


# ============================================================================
# Response
# ============================================================================

class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class Place(_WireModel):
    iata_code: Optional[str] = None
    name: Optional[str] = None


class Airline(_WireModel):
    iata_code: Optional[str] = None
    name: Optional[str] = None


class SegmentPassenger(_WireModel):
    passenger_id: Optional[str] = None
    cabin_class: Optional[str] = None


class Segment(_WireModel):
    id: Optional[str] = None
    origin: Optional[Place] = None
    destination: Optional[Place] = None
    departing_at: Optional[str] = None
    arriving_at: Optional[str] = None
    duration: Optional[str] = None
    marketing_carrier: Optional[Airline] = None
    marketing_carrier_flight_number: Optional[str] = None
    operating_carrier: Optional[Airline] = None
    passengers: Optional[List[SegmentPassenger]] = None


class Slice(_WireModel):
    id: Optional[str] = None
    origin: Optional[Place] = None
    destination: Optional[Place] = None
    duration: Optional[str] = None
    segments: Optional[List[Segment]] = None


class OfferPassenger(_WireModel):
    id: Optional[str] = None
    type: Optional[str] = None


class Offer(_WireModel):
    id: Optional[str] = None
    total_amount: Optional[str] = None
    total_currency: Optional[str] = None
    expires_at: Optional[str] = None
    owner: Optional[Airline] = None
    slices: Optional[List[Slice]] = None
    passengers: Optional[List[OfferPassenger]] = None


class OfferRequestResponse(_WireModel):
    """The "data" object returned by POST /air/offer_requests."""
    id: Optional[str] = None
    offers: Optional[List[Offer]] = None

    @classmethod
    def from_body(cls, body: Optional[Dict[str, Any]]) -> "OfferRequestResponse":
        """Unwrap the {"data": ...} envelope; a missing envelope means no offers."""
        if body is None:
            return cls()
        if not isinstance(body, dict):
            raise ValueError("Offer request response must be a JSON object")
        return cls.model_validate(body.get("data") or {})
