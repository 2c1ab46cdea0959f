import logging
from datetime import date
from typing import Any, Mapping, Optional

from ..domain.capacity import ResolvedCapacity
from ..domain.errors import FieldValidationError, NotFoundError
from ..domain.repositories import CapacityGateway, ReservationRepository
from ..domain.services import validate_booking_fields, validate_capacity
from ..models import Reservation, ReservationStatus
from ..utils.time import slot_starts_at

logger = logging.getLogger(__name__)

_BOOKING_FIELDS = ("booking_date", "slot", "party_size")
_UPDATABLE_FIELDS = frozenset({*_BOOKING_FIELDS, "status", "name", "email", "phone", "notes"})


async def create_reservation(
    gateway: CapacityGateway,
    res_repo: ReservationRepository,
    *,
    booking_date: Any,
    slot: Optional[str],
    party_size: Any,
    name: Optional[str] = None,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    notes: Optional[str] = None,
) -> tuple[Reservation, ResolvedCapacity]:
    request = validate_booking_fields(booking_date, slot, party_size)

    resolved, availability = await gateway.check(request.booking_date, request.slot, lock=True)
    validate_capacity(
        availability,
        booking_date=request.booking_date,
        slot=request.slot,
        party_size=request.party_size,
    )
    logger.info(
        "capacity pre-check passed: %s %s for %s (%s)",
        request.booking_date,
        request.slot,
        request.party_size,
        resolved.description,
    )

    reservation = await res_repo.create(
        booking_date=request.booking_date,
        slot=request.slot,
        party_size=request.party_size,
        status=ReservationStatus.PENDING,
        name=name.strip() if name else None,
        email=email.strip().lower() if email else None,
        phone=phone.strip() if phone else None,
        notes=notes,
    )
    return reservation, resolved


async def update_reservation(
    res_repo: ReservationRepository,
    *,
    reservation_id: int,
    changes: Mapping[str, Any],
) -> tuple[Reservation, ReservationStatus]:
    """Patch a reservation. Capacity is re-checked by the flush hook when the booking moves or grows."""
    unknown = sorted(set(changes) - _UPDATABLE_FIELDS)
    if unknown:
        raise FieldValidationError([f"Campo no modificable: {name}" for name in unknown])
    if "status" in changes and changes["status"] is None:
        raise FieldValidationError(["El estado no puede ser nulo"])

    reservation = await res_repo.get(reservation_id)
    if reservation is None:
        raise NotFoundError("reservation not found")
    status_from = reservation.status

    if any(field in changes for field in _BOOKING_FIELDS):
        request = validate_booking_fields(
            changes.get("booking_date", reservation.booking_date),
            changes.get("slot", reservation.slot),
            changes.get("party_size", reservation.party_size),
        )
        reservation.booking_date = request.booking_date
        reservation.slot = request.slot
        reservation.party_size = request.party_size
        reservation.starts_at = slot_starts_at(request.booking_date, request.slot)

    for field in ("status", "name", "email", "phone", "notes"):
        if field in changes:
            setattr(reservation, field, changes[field])

    updated = await res_repo.save(reservation)
    return updated, status_from


async def cancel_reservation(
    res_repo: ReservationRepository,
    *,
    reservation_id: int,
) -> tuple[Reservation, ReservationStatus]:
    reservation = await res_repo.get(reservation_id)
    if reservation is None:
        raise NotFoundError("reservation not found")
    status_from = reservation.status
    # Idempotent: already cancelled returns as-is
    if status_from == ReservationStatus.CANCELLED:
        return reservation, status_from

    reservation.status = ReservationStatus.CANCELLED
    updated = await res_repo.save(reservation)
    return updated, status_from


def confirmation_message(*, party_size: int, booking_date: date, slot: str) -> str:
    return (
        f"¡Reserva confirmada! Tu mesa para {party_size} personas está reservada el {booking_date} "
        f"a las {slot}. Por favor revisa tu email (incluyendo la carpeta de spam) para ver los "
        "detalles de tu reserva."
    )
