"""Capacity resolution and slot availability over a CapacityLedger.

Both the HTTP use cases (through ``AsyncSession.run_sync``) and the flush hook
call these functions, so a booking is judged by the same rules at the edge
and at write time.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Collection, Optional, Sequence

from ..models import CapacityConfig
from ..utils.time import day_of_week
from .capacity import (
    CapacityTier,
    ResolvedCapacity,
    SlotAvailability,
    day_availability,
    default_capacity,
    from_record,
    slot_availability,
)
from .repositories import CapacityLedger

logger = logging.getLogger(__name__)


def _lookup_tier(
    lookup: Callable[[], Sequence[CapacityConfig]],
    tier: CapacityTier,
    label: object,
) -> tuple[Optional[ResolvedCapacity], bool]:
    """Run one tier lookup. Returns (resolved or None, lookup_failed)."""
    try:
        records = list(lookup())
    except Exception:
        logger.warning("capacity lookup failed for tier %s (%s); falling through", tier, label, exc_info=True)
        return None, True
    if not records:
        return None, False
    record = records[0]
    if len(records) > 1:
        logger.warning(
            "several active %s capacity configs match %s; using id=%s",
            tier,
            label,
            record.id,
        )
    try:
        resolved = from_record(record, tier)
    except (TypeError, ValueError):
        logger.warning(
            "malformed %s capacity config id=%s for %s; falling through",
            tier,
            record.id,
            label,
            exc_info=True,
        )
        return None, True
    logger.info("capacity tier %s for %s: %s", tier, label, record.description)
    return resolved, False


def resolve_capacity(ledger: CapacityLedger, booking_date: date) -> ResolvedCapacity:
    """Date-specific config, then weekday config, then the built-in table. Never raises."""
    resolved, date_failed = _lookup_tier(
        lambda: ledger.configs_for_date(booking_date),
        CapacityTier.SPECIFIC_DATE,
        booking_date,
    )
    if resolved is not None:
        return resolved

    weekday = day_of_week(booking_date)
    resolved, weekday_failed = _lookup_tier(
        lambda: ledger.configs_for_weekday(weekday),
        CapacityTier.WEEKDAY,
        weekday,
    )
    if resolved is not None:
        return resolved

    logger.info("default capacity for %s", booking_date)
    return default_capacity(fallback=date_failed and weekday_failed)


def check_availability(
    ledger: CapacityLedger,
    booking_date: date,
    slot: str,
    *,
    exclude_ids: Collection[int] = (),
    lock: bool = False,
) -> tuple[ResolvedCapacity, Optional[SlotAvailability]]:
    resolved = resolve_capacity(ledger, booking_date)
    if resolved.capacity_for(slot) is None:
        return resolved, None
    sizes = ledger.booked_party_sizes(booking_date, slot, exclude_ids=exclude_ids, lock=lock)
    return resolved, slot_availability(resolved, slot, sizes)


def day_overview(ledger: CapacityLedger, booking_date: date) -> tuple[ResolvedCapacity, list[SlotAvailability]]:
    resolved = resolve_capacity(ledger, booking_date)
    return resolved, day_availability(resolved, ledger.booked_by_slot(booking_date))
