from datetime import date

import pytest
from restaurant_backend.domain.capacity import SlotAvailability
from restaurant_backend.domain.errors import (
    FieldValidationError,
    InsufficientCapacityError,
    SlotUnavailableError,
)
from restaurant_backend.domain.services import validate_booking_fields, validate_capacity


def test_fields_normalized_from_strings() -> None:
    request = validate_booking_fields("2025-06-10", "19:00", "4")
    assert request.booking_date == date(2025, 6, 10)
    assert request.slot == "19:00"
    assert request.party_size == 4


def test_rejects_when_everything_missing() -> None:
    with pytest.raises(FieldValidationError) as excinfo:
        validate_booking_fields(None, None, None)
    assert len(excinfo.value.errors) == 3


@pytest.mark.parametrize("party_size", [0, -2, "abc", True])
def test_rejects_non_positive_party_size(party_size: object) -> None:
    with pytest.raises(FieldValidationError) as excinfo:
        validate_booking_fields(date(2025, 6, 10), "19:00", party_size)
    assert excinfo.value.errors == ["El número de personas debe ser mayor a 0"]


def test_rejects_malformed_date_and_slot() -> None:
    with pytest.raises(FieldValidationError) as excinfo:
        validate_booking_fields("10/06/2025", "7pm", 2)
    assert excinfo.value.errors == [
        "La fecha debe tener formato YYYY-MM-DD",
        "La hora debe tener formato HH:MM",
    ]


def test_rejects_unknown_slot() -> None:
    with pytest.raises(SlotUnavailableError) as excinfo:
        validate_capacity(None, booking_date=date(2025, 6, 10), slot="23:00", party_size=2)
    assert "23:00" in str(excinfo.value)


def test_accepts_exact_fill() -> None:
    snap = SlotAvailability(slot="19:00", max_capacity=25, already_booked=21)
    remaining_after = validate_capacity(snap, booking_date=date(2025, 6, 10), slot="19:00", party_size=4)
    assert remaining_after == 0


def test_rejects_one_over_and_reports_remaining() -> None:
    snap = SlotAvailability(slot="19:00", max_capacity=25, already_booked=22)
    with pytest.raises(InsufficientCapacityError) as excinfo:
        validate_capacity(snap, booking_date=date(2025, 6, 10), slot="19:00", party_size=4)
    assert excinfo.value.remaining == 3
    assert excinfo.value.requested == 4
    assert "Solo quedan 3 espacios" in str(excinfo.value)


def test_overbooked_slot_reports_zero_remaining() -> None:
    snap = SlotAvailability(slot="19:00", max_capacity=25, already_booked=27)
    with pytest.raises(InsufficientCapacityError) as excinfo:
        validate_capacity(snap, booking_date=date(2025, 6, 10), slot="19:00", party_size=1)
    assert excinfo.value.remaining == 0
