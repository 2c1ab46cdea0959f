"""Query builders shared by the async repositories and the flush hook."""
from __future__ import annotations

from datetime import date
from typing import Any, Collection, Tuple

from sqlalchemy import Select, func, select

from ..models import CapacityConfig, Reservation, ReservationStatus


def specific_date_config(booking_date: date) -> Select[Tuple[CapacityConfig]]:
    return (
        select(CapacityConfig)
        .where(CapacityConfig.specific_date == booking_date, CapacityConfig.active.is_(True))
        .order_by(CapacityConfig.id)
        .limit(2)
    )


def weekday_config(day_of_week: int) -> Select[Tuple[CapacityConfig]]:
    return (
        select(CapacityConfig)
        .where(
            CapacityConfig.day_of_week == day_of_week,
            CapacityConfig.specific_date.is_(None),
            CapacityConfig.active.is_(True),
        )
        .order_by(CapacityConfig.id)
        .limit(2)
    )


def booked_party_sizes(
    booking_date: date,
    slot: str,
    *,
    exclude_ids: Collection[int] = (),
    lock: bool = False,
) -> Select[Tuple[int]]:
    stmt = select(Reservation.party_size).where(
        Reservation.booking_date == booking_date,
        Reservation.slot == slot,
        Reservation.status != ReservationStatus.CANCELLED,
    )
    if exclude_ids:
        stmt = stmt.where(Reservation.id.not_in(list(exclude_ids)))
    if lock:
        stmt = stmt.with_for_update()
    return stmt


def booked_by_slot(booking_date: date) -> Select[Tuple[str, Any]]:
    return (
        select(Reservation.slot, func.coalesce(func.sum(Reservation.party_size), 0))
        .where(
            Reservation.booking_date == booking_date,
            Reservation.status != ReservationStatus.CANCELLED,
        )
        .group_by(Reservation.slot)
    )
