"""Capacity tables, tier selection and per-slot occupancy math.

Everything here is pure: callers fetch configuration records and booked party
sizes, this module decides which table applies and what is left in a slot.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Protocol

DEFAULT_CAPACITY: Mapping[str, int] = MappingProxyType(
    {
        "10:00": 20,
        "10:30": 20,
        "11:00": 20,
        "11:30": 20,
        "12:00": 20,
        "12:30": 20,
        "13:00": 25,
        "13:30": 25,
        "14:00": 30,
        "14:30": 30,
        "15:00": 25,
        "19:00": 25,
        "19:30": 25,
        "20:00": 30,
        "20:30": 30,
        "21:00": 25,
        "21:30": 20,
    }
)
DEFAULT_DESCRIPTION = "Configuración estándar"
FALLBACK_DESCRIPTION = "Configuración estándar (fallback)"


class CapacityTier(StrEnum):
    SPECIFIC_DATE = "fecha_especifica"
    WEEKDAY = "dia_semana"
    DEFAULT = "default"


class CapacityRecord(Protocol):
    capacity_by_slot: Mapping[str, Any]
    description: str


@dataclass(frozen=True)
class ResolvedCapacity:
    table: Mapping[str, int]
    tier: CapacityTier
    description: str

    def capacity_for(self, slot: str) -> Optional[int]:
        """Capacity of ``slot``, or None when the slot is not offered on this date."""
        value = self.table.get(slot)
        if not value or value <= 0:
            return None
        return value


def _merge_over_default(table: Any) -> Mapping[str, int]:
    """Stored slots over the default table. A missing or null slot keeps its default, 0 closes it."""
    if not isinstance(table, Mapping):
        raise TypeError(f"capacity table must be a mapping, got {type(table).__name__}")
    merged = dict(DEFAULT_CAPACITY)
    for slot, value in table.items():
        if value is None:
            continue
        if isinstance(value, bool):
            raise TypeError(f"invalid capacity for {slot}: {value!r}")
        merged[str(slot)] = int(value)
    return MappingProxyType(merged)


def default_capacity(*, fallback: bool = False) -> ResolvedCapacity:
    return ResolvedCapacity(
        table=DEFAULT_CAPACITY,
        tier=CapacityTier.DEFAULT,
        description=FALLBACK_DESCRIPTION if fallback else DEFAULT_DESCRIPTION,
    )


def from_record(record: CapacityRecord, tier: CapacityTier) -> ResolvedCapacity:
    return ResolvedCapacity(
        table=_merge_over_default(record.capacity_by_slot or {}),
        tier=tier,
        description=record.description or DEFAULT_DESCRIPTION,
    )


@dataclass(frozen=True)
class SlotAvailability:
    slot: str
    max_capacity: int
    already_booked: int

    @property
    def remaining(self) -> int:
        return self.max_capacity - self.already_booked

    @property
    def occupancy_percentage(self) -> float:
        return round(self.already_booked / self.max_capacity * 100, 1)

    def with_pending(self, party_size: int) -> "SlotAvailability":
        """Count party sizes written in the same unit of work but not yet stored."""
        if not party_size:
            return self
        return replace(self, already_booked=self.already_booked + party_size)

    def fits(self, party_size: int) -> bool:
        return self.remaining >= party_size

    def status(self, party_size: int) -> str:
        if self.remaining <= 0:
            return "lleno"
        if self.remaining < party_size:
            return "insuficiente"
        return "disponible"


def slot_availability(
    resolved: ResolvedCapacity,
    slot: str,
    booked_party_sizes: Iterable[int],
) -> Optional[SlotAvailability]:
    max_capacity = resolved.capacity_for(slot)
    if max_capacity is None:
        return None
    already_booked = sum(int(size or 0) for size in booked_party_sizes)
    return SlotAvailability(slot=slot, max_capacity=max_capacity, already_booked=already_booked)


def day_availability(
    resolved: ResolvedCapacity,
    booked_by_slot: Mapping[str, int],
) -> list[SlotAvailability]:
    """Availability of every offered slot of the day, in slot order."""
    items: list[SlotAvailability] = []
    for slot in sorted(resolved.table):
        max_capacity = resolved.capacity_for(slot)
        if max_capacity is None:
            continue
        items.append(
            SlotAvailability(
                slot=slot,
                max_capacity=max_capacity,
                already_booked=int(booked_by_slot.get(slot, 0)),
            )
        )
    return items
