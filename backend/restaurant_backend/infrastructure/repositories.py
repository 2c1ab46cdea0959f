from __future__ import annotations

from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from ..domain import availability
from ..domain.capacity import ResolvedCapacity, SlotAvailability
from ..domain.repositories import (
    CapacityConfigRepository,
    CapacityGateway,
    ContactRepository,
    ReservationRepository,
)
from ..models import CapacityConfig, ContactMessage, ContactStatus, Reservation, ReservationStatus
from ..utils.time import slot_starts_at, utc_now_naive
from .ledger import SessionLedger


class SqlAlchemyCapacityGateway(CapacityGateway):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def resolve(self, booking_date: date) -> ResolvedCapacity:
        def _run(sync_session: Session) -> ResolvedCapacity:
            return availability.resolve_capacity(SessionLedger(sync_session), booking_date)

        return await self.session.run_sync(_run)

    async def check(
        self,
        booking_date: date,
        slot: str,
        *,
        lock: bool = False,
    ) -> tuple[ResolvedCapacity, SlotAvailability | None]:
        def _run(sync_session: Session) -> tuple[ResolvedCapacity, SlotAvailability | None]:
            return availability.check_availability(SessionLedger(sync_session), booking_date, slot, lock=lock)

        return await self.session.run_sync(_run)

    async def day(self, booking_date: date) -> tuple[ResolvedCapacity, list[SlotAvailability]]:
        def _run(sync_session: Session) -> tuple[ResolvedCapacity, list[SlotAvailability]]:
            return availability.day_overview(SessionLedger(sync_session), booking_date)

        return await self.session.run_sync(_run)


class SqlAlchemyCapacityConfigRepository(CapacityConfigRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_configs(self, active: bool | None = None) -> List[CapacityConfig]:
        stmt = select(CapacityConfig).order_by(CapacityConfig.id)
        if active is not None:
            stmt = stmt.where(CapacityConfig.active.is_(active))
        return list((await self.session.scalars(stmt)).all())

    async def get(self, config_id: int) -> CapacityConfig | None:
        return await self.session.get(CapacityConfig, config_id)

    async def has_active_for(
        self,
        *,
        specific_date: date | None,
        day_of_week: int | None,
    ) -> bool:
        stmt = select(CapacityConfig.id).where(CapacityConfig.active.is_(True))
        if specific_date is not None:
            stmt = stmt.where(CapacityConfig.specific_date == specific_date)
        else:
            stmt = stmt.where(
                CapacityConfig.day_of_week == day_of_week,
                CapacityConfig.specific_date.is_(None),
            )
        return await self.session.scalar(stmt.limit(1)) is not None

    async def create(
        self,
        *,
        specific_date: date | None,
        day_of_week: int | None,
        capacity_by_slot: dict[str, int],
        description: str,
        active: bool,
    ) -> CapacityConfig:
        now = utc_now_naive()
        config = CapacityConfig(
            specific_date=specific_date,
            day_of_week=day_of_week,
            capacity_by_slot=dict(capacity_by_slot),
            description=description,
            active=active,
            created_at=now,
            updated_at=now,
        )
        self.session.add(config)
        await self.session.flush()
        return config

    async def save(self, config: CapacityConfig) -> CapacityConfig:
        config.updated_at = utc_now_naive()
        self.session.add(config)
        await self.session.flush()
        return config


class SqlAlchemyReservationRepository(ReservationRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

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
    ) -> Reservation:
        now = utc_now_naive()
        reservation = Reservation(
            booking_date=booking_date,
            slot=slot,
            starts_at=slot_starts_at(booking_date, slot),
            party_size=party_size,
            status=status,
            name=name,
            email=email,
            phone=phone,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        self.session.add(reservation)
        await self.session.flush()
        return reservation

    async def get(self, reservation_id: int) -> Reservation | None:
        return await self.session.get(Reservation, reservation_id)

    async def save(self, reservation: Reservation) -> Reservation:
        reservation.updated_at = utc_now_naive()
        self.session.add(reservation)
        await self.session.flush()
        return reservation


class SqlAlchemyContactRepository(ContactRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self,
        *,
        name: str,
        email: str,
        phone: Optional[str],
        subject: str,
        message: str,
        origin_ip: str,
    ) -> ContactMessage:
        contact = ContactMessage(
            name=name,
            email=email,
            phone=phone,
            subject=subject,
            message=message,
            status=ContactStatus.NEW,
            origin_ip=origin_ip,
            created_at=utc_now_naive(),
        )
        self.session.add(contact)
        await self.session.flush()
        return contact

    async def list_messages(
        self,
        *,
        status: ContactStatus | None,
        limit: int,
        offset: int,
    ) -> List[ContactMessage]:
        stmt = select(ContactMessage).order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc())
        if status is not None:
            stmt = stmt.where(ContactMessage.status == status)
        rows = await self.session.scalars(stmt.limit(limit).offset(offset))
        return list(rows.all())

    async def get(self, message_id: int) -> ContactMessage | None:
        return await self.session.get(ContactMessage, message_id)

    async def save(self, message: ContactMessage) -> ContactMessage:
        self.session.add(message)
        await self.session.flush()
        return message
