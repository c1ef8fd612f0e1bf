"""Unit tests for domain value objects and entities.

These test invariants that must hold at construction time.
Run with: pytest flight_gateway/test_domain.py -v
"""

import dataclasses
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from .domain import Duration, FlightOffer, FlightSegment, Money
from .errors import ValidationError

DEPARTURE = datetime(2025, 1, 10, 8, 55, tzinfo=timezone.utc)
ARRIVAL = datetime(2025, 1, 10, 12, 5, tzinfo=timezone.utc)


def make_segment(**overrides):
    values = dict(
        origin="gru",
        destination="eze",
        departure=DEPARTURE,
        arrival=ARRIVAL,
        flight_number="LA8010",
        carrier_code="la",
        duration=Duration.from_hours_minutes(3, 10),
    )
    values.update(overrides)
    return FlightSegment(**values)


def make_offer(**overrides):
    values = dict(
        origin="gru",
        destination="eze",
        departure=DEPARTURE,
        arrival=ARRIVAL,
        total_duration=Duration.from_minutes(190),
        total_price=Money(Decimal("1320.50"), "USD"),
        carrier_code="la",
        segments=[make_segment()],
    )
    values.update(overrides)
    return FlightOffer.create(**values)


class TestMoney:
    def test_accepts_positive_amount(self):
        money = Money(Decimal("1320.50"), "USD")
        assert money.amount == Decimal("1320.50")
        assert money.currency == "USD"

    def test_accepts_zero(self):
        assert Money(Decimal("0"), "BRL").amount == 0

    def test_rejects_negative_amount(self):
        with pytest.raises(ValidationError) as exc_info:
            Money(Decimal("-0.01"), "USD")
        assert exc_info.value.field == "amount"

    @pytest.mark.parametrize("amount", [Decimal("NaN"), Decimal("Infinity"), float("nan"), float("inf")])
    def test_rejects_non_finite_amount(self, amount):
        with pytest.raises(ValidationError) as exc_info:
            Money(amount, "USD")
        assert exc_info.value.field == "amount"

    def test_coerces_plain_numbers_to_decimal(self):
        assert Money(12, "USD").amount == Decimal("12")
        assert Money(1.5, "USD").amount == Decimal("1.5")

    @pytest.mark.parametrize("currency", ["", "   ", None])
    def test_rejects_blank_currency(self, currency):
        with pytest.raises(ValidationError):
            Money(Decimal("10"), currency)

    def test_equality_by_value(self):
        assert Money(Decimal("10.00"), "USD") == Money(Decimal("10.00"), "USD")
        assert Money(Decimal("10.00"), "USD") != Money(Decimal("10.00"), "EUR")

    def test_is_immutable(self):
        money = Money(Decimal("1"), "USD")
        with pytest.raises(dataclasses.FrozenInstanceError):
            money.amount = Decimal("2")

    def test_str(self):
        assert str(Money(Decimal("1320.50"), "USD")) == "1320.50 USD"


class TestDuration:
    @pytest.mark.parametrize(
        "token, minutes",
        [
            ("PT3H10M", 190),
            ("PT2H", 120),
            ("PT45M", 45),
            ("pt1h5m", 65),
            ("PT0H90M", 90),
            ("PT0M", 0),
            ("  PT1H  ", 60),
        ],
    )
    def test_parses_iso8601(self, token, minutes):
        assert Duration.from_iso8601(token).total_minutes == minutes

    @pytest.mark.parametrize("token", ["PT3H10M", "PT2H", "PT45M", "PT0M", "PT25H59M"])
    def test_iso8601_round_trip(self, token):
        duration = Duration.from_iso8601(token)
        assert Duration.from_iso8601(duration.to_iso8601()) == duration

    @pytest.mark.parametrize("token", ["", "   ", None, "PT", "XYZ", "P1D", "PT10S", "PT1.5H", "PT-1H", "3H10M"])
    def test_rejects_invalid_tokens(self, token):
        with pytest.raises(ValidationError):
            Duration.from_iso8601(token)

    def test_error_names_offending_token(self):
        with pytest.raises(ValidationError, match="XYZ"):
            Duration.from_iso8601("XYZ")

    def test_rejects_negative_minutes(self):
        with pytest.raises(ValidationError):
            Duration.from_minutes(-1)

    def test_rejects_negative_parts(self):
        with pytest.raises(ValidationError):
            Duration.from_hours_minutes(-1, 0)
        with pytest.raises(ValidationError):
            Duration.from_hours_minutes(0, -5)

    def test_to_iso8601_normalizes_minutes(self):
        assert Duration.from_minutes(90).to_iso8601() == "PT1H30M"
        assert Duration.from_minutes(0).to_iso8601() == "PT0M"

    def test_str(self):
        assert str(Duration.from_hours_minutes(3, 10)) == "3h 10m"
        assert str(Duration.from_minutes(120)) == "2h"
        assert str(Duration.from_minutes(45)) == "45m"

    def test_ordering(self):
        assert Duration.from_minutes(30) < Duration.from_minutes(31)
        assert Duration.from_minutes(90) >= Duration.from_hours_minutes(1, 30)
        assert max(Duration.from_minutes(5), Duration.from_minutes(50)).total_minutes == 50

    def test_addition(self):
        assert Duration.from_minutes(50) + Duration.from_minutes(20) == Duration.from_minutes(70)
        assert Duration.ZERO + Duration.from_minutes(1) == Duration.from_minutes(1)


class TestFlightSegment:
    def test_normalizes_codes_to_uppercase(self):
        segment = make_segment()
        assert segment.origin == "GRU"
        assert segment.destination == "EZE"
        assert segment.carrier_code == "LA"

    @pytest.mark.parametrize("arrival", [DEPARTURE, DEPARTURE - timedelta(minutes=1)])
    def test_rejects_arrival_not_after_departure(self, arrival):
        with pytest.raises(ValidationError) as exc_info:
            make_segment(arrival=arrival)
        assert exc_info.value.field == "arrival"

    @pytest.mark.parametrize("code", ["", "GR", "GRUU", "G1U", None])
    def test_rejects_malformed_airport_codes(self, code):
        with pytest.raises(ValidationError):
            make_segment(origin=code)

    def test_rejects_same_origin_and_destination(self):
        with pytest.raises(ValidationError):
            make_segment(origin="gru", destination="GRU")

    @pytest.mark.parametrize("field_name", ["flight_number", "carrier_code"])
    def test_rejects_blank_text_fields(self, field_name):
        with pytest.raises(ValidationError) as exc_info:
            make_segment(**{field_name: "  "})
        assert exc_info.value.field == field_name

    def test_rejects_mixed_naive_and_aware_timestamps(self):
        with pytest.raises(ValidationError):
            make_segment(arrival=ARRIVAL.replace(tzinfo=None))

    def test_equality_by_attribute_values(self):
        assert make_segment() == make_segment()


class TestFlightOffer:
    def test_create_generates_unique_ids(self):
        first, second = make_offer(), make_offer()
        assert isinstance(first.id, uuid.UUID)
        assert first.id != second.id

    def test_normalizes_and_defaults(self):
        offer = make_offer(carrier_name=None, cabin=None)
        assert offer.origin == "GRU"
        assert offer.carrier_code == "LA"
        assert offer.carrier_name == ""
        assert offer.cabin == ""
        assert isinstance(offer.segments, tuple)

    def test_rejects_empty_segments(self):
        with pytest.raises(ValidationError) as exc_info:
            make_offer(segments=[])
        assert exc_info.value.field == "segments"

    def test_rejects_nil_id(self):
        with pytest.raises(ValidationError):
            FlightOffer(
                id=uuid.UUID(int=0),
                origin="GRU",
                destination="EZE",
                departure=DEPARTURE,
                arrival=ARRIVAL,
                total_duration=Duration.ZERO,
                total_price=Money(Decimal("1"), "USD"),
                carrier_code="LA",
                segments=(make_segment(),),
            )

    def test_rejects_arrival_before_departure(self):
        with pytest.raises(ValidationError):
            make_offer(arrival=DEPARTURE - timedelta(hours=1))

    def test_rejects_same_origin_and_destination(self):
        with pytest.raises(ValidationError):
            make_offer(destination="gru")

    def test_rejects_blank_carrier(self):
        with pytest.raises(ValidationError):
            make_offer(carrier_code="")

    def test_stops(self):
        second = make_segment(
            origin="EZE",
            destination="SCL",
            departure=ARRIVAL + timedelta(hours=1),
            arrival=ARRIVAL + timedelta(hours=3),
        )
        offer = make_offer(destination="SCL", arrival=second.arrival, segments=[make_segment(), second])
        assert offer.stops == 1
