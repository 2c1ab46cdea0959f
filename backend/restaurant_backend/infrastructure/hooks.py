"""Session events that guard reservation writes.

``before_flush`` re-runs the booking gates for every reservation about to be
inserted, and for stored reservations whose date, slot, party size or status
changed. The check runs against the same session that performs the write,
whichever code path created the object. Reservations inserted by a
transaction are announced once it commits.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

from ..domain.availability import check_availability
from ..domain.errors import DomainError
from ..domain.services import validate_booking_fields, validate_capacity
from ..models import Reservation, ReservationStatus
from ..utils.audit_log import emit_audit_log
from .ledger import SessionLedger

logger = logging.getLogger(__name__)

_CREATED_KEY = "restaurant_backend.created_reservations"
_GUARDED_ATTRS = ("booking_date", "slot", "party_size", "status")


def _changed_booking(reservation: Reservation) -> bool:
    if reservation.status == ReservationStatus.CANCELLED:
        return False
    state = inspect(reservation)
    return any(state.attrs[name].history.has_changes() for name in _GUARDED_ATTRS)


def guard_reservations(session: Session) -> None:
    """Validate pending reservation writes of ``session``. Raises DomainError subclasses."""
    created = [obj for obj in session.new if isinstance(obj, Reservation)]
    changed = [
        obj
        for obj in session.dirty
        if isinstance(obj, Reservation) and session.is_modified(obj) and _changed_booking(obj)
    ]
    if not created and not changed:
        return

    ledger = SessionLedger(session)
    exclude_ids = {obj.id for obj in changed if obj.id is not None}
    pending: dict[tuple[date, str], int] = {}

    for reservation in [*created, *changed]:
        request = validate_booking_fields(reservation.booking_date, reservation.slot, reservation.party_size)
        if reservation.status == ReservationStatus.CANCELLED:
            continue
        key = (request.booking_date, request.slot)
        resolved, availability = check_availability(
            ledger,
            request.booking_date,
            request.slot,
            exclude_ids=exclude_ids,
        )
        if availability is not None:
            availability = availability.with_pending(pending.get(key, 0))
        validate_capacity(
            availability,
            booking_date=request.booking_date,
            slot=request.slot,
            party_size=request.party_size,
        )
        pending[key] = pending.get(key, 0) + request.party_size
        logger.info(
            "reservation accepted at write: %s %s for %s (%s)",
            request.booking_date,
            request.slot,
            request.party_size,
            resolved.description,
        )


@event.listens_for(Session, "before_flush")
def _before_flush(session: Session, flush_context: Any, instances: Any) -> None:
    try:
        guard_reservations(session)
    except DomainError as exc:
        logger.info("reservation rejected at write: %s", exc)
        raise


def _current_transaction(session: Session) -> Any:
    return session.get_nested_transaction() or session.get_transaction()


def _within(transaction: Any, ancestor: Any) -> bool:
    while transaction is not None:
        if transaction is ancestor:
            return True
        transaction = transaction.parent
    return False


@event.listens_for(Session, "after_flush")
def _collect_created(session: Session, flush_context: Any) -> None:
    created = [obj for obj in session.new if isinstance(obj, Reservation)]
    if not created:
        return
    transaction = _current_transaction(session)
    bucket = session.info.setdefault(_CREATED_KEY, [])
    for reservation in created:
        bucket.append(
            (
                transaction,
                {
                    "entity_id": reservation.id,
                    "booking_date": reservation.booking_date,
                    "slot": reservation.slot,
                    "party_size": reservation.party_size,
                    "status_to": reservation.status,
                },
            )
        )


@event.listens_for(Session, "after_commit")
def _announce_created(session: Session) -> None:
    # releasing a savepoint also fires after_commit; wait for the outer commit
    if session.get_nested_transaction() is not None:
        return
    for _, entry in session.info.pop(_CREATED_KEY, []):
        logger.info("reservation %s created: %s %s", entry["entity_id"], entry["booking_date"], entry["slot"])
        try:
            emit_audit_log(action="reservation.created", initiator="system", **entry)
        except RuntimeError:
            logger.exception("audit log failed for reservation %s", entry["entity_id"])


@event.listens_for(Session, "after_soft_rollback")
def _discard_created(session: Session, previous_transaction: Any) -> None:
    """Drop announcements written inside the rolled-back transaction or savepoint only."""
    if not previous_transaction.nested:
        session.info.pop(_CREATED_KEY, None)
        return
    bucket = session.info.get(_CREATED_KEY)
    if bucket:
        bucket[:] = [item for item in bucket if not _within(item[0], previous_transaction)]
