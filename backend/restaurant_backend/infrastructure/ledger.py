from __future__ import annotations

from datetime import date
from typing import Collection, Sequence

from sqlalchemy.orm import Session

from ..domain.repositories import CapacityLedger
from ..models import CapacityConfig
from . import statements


class SessionLedger(CapacityLedger):
    """CapacityLedger over a synchronous ORM session.

    Used directly inside flush events, and through ``AsyncSession.run_sync``
    by the async capacity gateway.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def configs_for_date(self, booking_date: date) -> Sequence[CapacityConfig]:
        return self.session.scalars(statements.specific_date_config(booking_date)).all()

    def configs_for_weekday(self, day_of_week: int) -> Sequence[CapacityConfig]:
        return self.session.scalars(statements.weekday_config(day_of_week)).all()

    def booked_party_sizes(
        self,
        booking_date: date,
        slot: str,
        *,
        exclude_ids: Collection[int] = (),
        lock: bool = False,
    ) -> list[int]:
        stmt = statements.booked_party_sizes(booking_date, slot, exclude_ids=exclude_ids, lock=lock)
        return [int(size) for size in self.session.scalars(stmt).all()]

    def booked_by_slot(self, booking_date: date) -> dict[str, int]:
        rows = self.session.execute(statements.booked_by_slot(booking_date))
        return {slot: int(total) for slot, total in rows.all()}
