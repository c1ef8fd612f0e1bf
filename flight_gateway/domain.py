"""
Domain model for flight offers.

Value objects (Money, Duration) and entities (FlightSegment, FlightOffer)
validate themselves at construction time and are immutable afterwards.
Every violation raises ValidationError.
"""

import re
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from functools import total_ordering
from typing import Optional, Sequence, Tuple

from .errors import ValidationError

# Matches the PT[n]H[n]M subset of ISO 8601 durations
_ISO_DURATION_RE = re.compile(r"^PT(?:(\d+)H)?(?:(\d+)M)?$", re.IGNORECASE)


class CabinClass(str, Enum):
    """Internal cabin class labels."""
    ECONOMY = "Economy"
    PREMIUM_ECONOMY = "PremiumEconomy"
    BUSINESS = "Business"
    FIRST = "First"


# ============================================================================
# Value Objects
# ============================================================================

@dataclass(frozen=True)
class Money:
    """Non-negative amount in a given currency."""

    amount: Decimal
    currency: str

    def __post_init__(self) -> None:
        amount = self.amount
        if not isinstance(amount, Decimal):
            try:
                amount = Decimal(str(amount))
            except InvalidOperation as e:
                raise ValidationError("Money amount must be a number", field="amount") from e
            object.__setattr__(self, "amount", amount)
        if not amount.is_finite():
            raise ValidationError("Money amount must be finite", field="amount")
        if amount < 0:
            raise ValidationError("Money amount cannot be negative", field="amount")
        if not self.currency or not self.currency.strip():
            raise ValidationError("Money currency must be provided", field="currency")

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"


@total_ordering
@dataclass(frozen=True)
class Duration:
    """Elapsed time with minute granularity."""

    minutes: int

    def __post_init__(self) -> None:
        if self.minutes < 0:
            raise ValidationError("Duration cannot be negative", field="minutes")

    @classmethod
    def from_minutes(cls, total_minutes: int) -> "Duration":
        return cls(total_minutes)

    @classmethod
    def from_hours_minutes(cls, hours: int, minutes: int) -> "Duration":
        if hours < 0:
            raise ValidationError("Hours cannot be negative", field="hours")
        if minutes < 0:
            raise ValidationError("Minutes cannot be negative", field="minutes")
        return cls(hours * 60 + minutes)

    @classmethod
    def from_iso8601(cls, token: Optional[str]) -> "Duration":
        """
        Parse a PT[n]H[n]M duration token (e.g. 'PT2H30M', 'PT45M', 'PT3H').

        Raises:
            ValidationError: if the token is blank, does not match the
                pattern, or carries neither hours nor minutes.
        """
        if token is None or not token.strip():
            raise ValidationError("Duration token cannot be empty", field="duration")

        match = _ISO_DURATION_RE.match(token.strip())
        if not match:
            raise ValidationError(
                f"'{token}' is not a valid ISO 8601 duration (e.g. PT2H30M)",
                field="duration",
            )

        hours, minutes = match.group(1), match.group(2)
        if hours is None and minutes is None:
            raise ValidationError(
                f"'{token}' contains neither hours nor minutes", field="duration"
            )

        return cls.from_hours_minutes(int(hours or 0), int(minutes or 0))

    @property
    def total_minutes(self) -> int:
        return self.minutes

    @property
    def hours_part(self) -> int:
        return self.minutes // 60

    @property
    def minutes_part(self) -> int:
        return self.minutes % 60

    def to_iso8601(self) -> str:
        hours, minutes = self.hours_part, self.minutes_part
        if hours and minutes:
            return f"PT{hours}H{minutes}M"
        if hours:
            return f"PT{hours}H"
        return f"PT{minutes}M"

    def __add__(self, other: "Duration") -> "Duration":
        if not isinstance(other, Duration):
            return NotImplemented
        return Duration(self.minutes + other.minutes)

    def __lt__(self, other: "Duration") -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self.minutes < other.minutes

    def __str__(self) -> str:
        hours, minutes = self.hours_part, self.minutes_part
        if hours and minutes:
            return f"{hours}h {minutes}m"
        if hours:
            return f"{hours}h"
        return f"{minutes}m"


Duration.ZERO = Duration(0)


# ============================================================================
# Validation Helpers
# ============================================================================

def _normalize_airport_code(code: Optional[str], field_name: str) -> str:
    if code is None or not code.strip():
        raise ValidationError(f"IATA code for {field_name} cannot be empty", field=field_name)
    if len(code) != 3:
        raise ValidationError(
            f"IATA code for {field_name} must have exactly 3 characters", field=field_name
        )
    if not code.isalpha():
        raise ValidationError(
            f"IATA code for {field_name} must contain only letters", field=field_name
        )
    return code.upper()


def _require_text(value: Optional[str], field_name: str, message: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(message, field=field_name)
    return value


def _check_route(origin: str, destination: str) -> None:
    if origin == destination:
        raise ValidationError("Origin and destination cannot be the same", field="destination")


def _check_schedule(departure: datetime, arrival: datetime) -> None:
    if not isinstance(departure, datetime) or not isinstance(arrival, datetime):
        raise ValidationError("Departure and arrival must be datetimes", field="departure")
    if (departure.tzinfo is None) != (arrival.tzinfo is None):
        raise ValidationError(
            "Departure and arrival must both be timezone-aware or both naive", field="arrival"
        )
    if arrival <= departure:
        raise ValidationError("Arrival must be after departure", field="arrival")


# ============================================================================
# Entities
# ============================================================================

@dataclass(frozen=True)
class FlightSegment:
    """A single non-stop flight between two airports."""

    origin: str
    destination: str
    departure: datetime
    arrival: datetime
    flight_number: str
    carrier_code: str
    duration: Duration

    def __post_init__(self) -> None:
        origin = _normalize_airport_code(self.origin, "origin")
        destination = _normalize_airport_code(self.destination, "destination")
        _check_route(origin, destination)
        _check_schedule(self.departure, self.arrival)
        _require_text(self.flight_number, "flight_number", "Flight number cannot be empty")
        carrier = _require_text(
            self.carrier_code, "carrier_code", "Carrier code cannot be empty"
        )

        # frozen dataclass: normalized values go through object.__setattr__
        object.__setattr__(self, "origin", origin)
        object.__setattr__(self, "destination", destination)
        object.__setattr__(self, "carrier_code", carrier.upper())


@dataclass(frozen=True)
class FlightOffer:
    """
    A priced itinerary option.

    The id is generated by the gateway; the provider's own offer id is never
    used. An offer owns its segments, which are kept as an ordered tuple.
    """

    id: uuid.UUID
    origin: str
    destination: str
    departure: datetime
    arrival: datetime
    total_duration: Duration
    total_price: Money
    carrier_code: str
    segments: Tuple[FlightSegment, ...]
    carrier_name: str = ""
    cabin: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.id, uuid.UUID) or self.id.int == 0:
            raise ValidationError("Offer id must be a non-empty UUID", field="id")
        origin = _normalize_airport_code(self.origin, "origin")
        destination = _normalize_airport_code(self.destination, "destination")
        _check_route(origin, destination)
        _check_schedule(self.departure, self.arrival)
        carrier = _require_text(
            self.carrier_code, "carrier_code", "Carrier code cannot be empty"
        )
        if not self.segments:
            raise ValidationError("An offer needs at least one segment", field="segments")

        object.__setattr__(self, "origin", origin)
        object.__setattr__(self, "destination", destination)
        object.__setattr__(self, "carrier_code", carrier.upper())
        object.__setattr__(self, "segments", tuple(self.segments))
        object.__setattr__(self, "carrier_name", self.carrier_name or "")
        object.__setattr__(self, "cabin", self.cabin or "")

    @classmethod
    def create(
        cls,
        origin: str,
        destination: str,
        departure: datetime,
        arrival: datetime,
        total_duration: Duration,
        total_price: Money,
        carrier_code: str,
        segments: Sequence[FlightSegment],
        carrier_name: Optional[str] = "",
        cabin: Optional[str] = "",
    ) -> "FlightOffer":
        """Create an offer with a freshly generated id."""
        return cls(
            id=uuid.uuid4(),
            origin=origin,
            destination=destination,
            departure=departure,
            arrival=arrival,
            total_duration=total_duration,
            total_price=total_price,
            carrier_code=carrier_code,
            segments=tuple(segments),
            carrier_name=carrier_name or "",
            cabin=cabin or "",
        )

    @property
    def stops(self) -> int:
        return max(0, len(self.segments) - 1)
