from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, cast

from ..utils.time import parse_slot
from .capacity import SlotAvailability
from .errors import FieldValidationError, InsufficientCapacityError, SlotUnavailableError


@dataclass(frozen=True)
class BookingRequest:
    booking_date: date
    slot: str
    party_size: int


def _coerce_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _coerce_party_size(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("boolean is not a party size")
    if isinstance(value, int):
        return value
    return int(str(value).strip())


def validate_booking_fields(booking_date: Any, slot: Optional[str], party_size: Any) -> BookingRequest:
    """First gate: presence and shape of date, slot and party size. No I/O."""
    errors: list[str] = []

    parsed_date: Optional[date] = None
    if booking_date in (None, ""):
        errors.append("La fecha es requerida")
    else:
        try:
            parsed_date = _coerce_date(booking_date)
        except ValueError:
            errors.append("La fecha debe tener formato YYYY-MM-DD")

    if not slot:
        errors.append("La hora es requerida")
    else:
        try:
            parse_slot(slot)
        except ValueError:
            errors.append("La hora debe tener formato HH:MM")

    parsed_size: Optional[int] = None
    if party_size in (None, ""):
        errors.append("El número de personas es requerido")
    else:
        try:
            parsed_size = _coerce_party_size(party_size)
        except (TypeError, ValueError):
            parsed_size = None
        if parsed_size is None or parsed_size <= 0:
            errors.append("El número de personas debe ser mayor a 0")

    if errors:
        raise FieldValidationError(errors)
    return BookingRequest(
        booking_date=cast(date, parsed_date),
        slot=cast(str, slot),
        party_size=cast(int, parsed_size),
    )


def validate_capacity(
    availability: Optional[SlotAvailability],
    *,
    booking_date: date,
    slot: str,
    party_size: int,
) -> int:
    """
    Second gate: the slot exists for the date and has room for the party.
    Returns remaining capacity after booking if OK. Raises capacity errors otherwise.
    """
    if availability is None:
        raise SlotUnavailableError(booking_date, slot)
    if not availability.fits(party_size):
        raise InsufficientCapacityError(
            booking_date,
            slot,
            remaining=max(availability.remaining, 0),
            requested=party_size,
        )
    return availability.remaining - party_size
