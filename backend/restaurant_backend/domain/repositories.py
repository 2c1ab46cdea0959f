from __future__ import annotations

from datetime import date
from typing import Collection, Optional, Protocol, Sequence

from ..models import CapacityConfig, ContactMessage, ContactStatus, Reservation, ReservationStatus
from .capacity import ResolvedCapacity, SlotAvailability


class CapacityLedger(Protocol):
    """Synchronous read access to capacity configuration and bookings."""

    def configs_for_date(self, booking_date: date) -> Sequence[CapacityConfig]: ...

    def configs_for_weekday(self, day_of_week: int) -> Sequence[CapacityConfig]: ...

    def booked_party_sizes(
        self,
        booking_date: date,
        slot: str,
        *,
        exclude_ids: Collection[int] = (),
        lock: bool = False,
    ) -> list[int]: ...

    def booked_by_slot(self, booking_date: date) -> dict[str, int]: ...


class CapacityGateway(Protocol):
    async def resolve(self, booking_date: date) -> ResolvedCapacity: ...

    async def check(
        self,
        booking_date: date,
        slot: str,
        *,
        lock: bool = False,
    ) -> tuple[ResolvedCapacity, SlotAvailability | None]: ...

    async def day(self, booking_date: date) -> tuple[ResolvedCapacity, list[SlotAvailability]]: ...


class CapacityConfigRepository(Protocol):
    async def list_configs(self, active: bool | None = None) -> list[CapacityConfig]: ...

    async def get(self, config_id: int) -> CapacityConfig | None: ...

    async def has_active_for(
        self,
        *,
        specific_date: date | None,
        day_of_week: int | None,
    ) -> bool: ...

    async def create(
        self,
        *,
        specific_date: date | None,
        day_of_week: int | None,
        capacity_by_slot: dict[str, int],
        description: str,
        active: bool,
    ) -> CapacityConfig: ...

    async def save(self, config: CapacityConfig) -> CapacityConfig: ...


class ReservationRepository(Protocol):
    async def create(
        self,
        *,
        booking_date: date,
        slot: str,
        party_size: int,
        status: ReservationStatus,
        name: Optional[str],
        email: Optional[str],
        phone: Optional[str],
        notes: Optional[str],
    ) -> Reservation: ...

    async def get(self, reservation_id: int) -> Reservation | None: ...

    async def save(self, reservation: Reservation) -> Reservation: ...


class ContactRepository(Protocol):
    async def create(
        self,
        *,
        name: str,
        email: str,
        phone: Optional[str],
        subject: str,
        message: str,
        origin_ip: str,
    ) -> ContactMessage: ...

    async def list_messages(
        self,
        *,
        status: ContactStatus | None,
        limit: int,
        offset: int,
    ) -> list[ContactMessage]: ...

    async def get(self, message_id: int) -> ContactMessage | None: ...

    async def save(self, message: ContactMessage) -> ContactMessage: ...
