from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_session
from ..infrastructure.repositories import SqlAlchemyCapacityGateway
from ..schemas import AvailabilityRead, AvailabilitySummary, ConfigurationInfo, SlotStatusRead
from ..usecases import availability as availability_usecase
from .errors import bad_request, upstream_error

router = APIRouter(prefix="", tags=["availability"])


@router.get("/availability", response_model=AvailabilityRead)
async def get_availability(
    fecha: Optional[date] = Query(default=None, description="Booking date (YYYY-MM-DD)"),
    personas: Optional[int] = Query(default=None, description="Party size, defaults to 1"),
    session: AsyncSession = Depends(get_session),
) -> AvailabilityRead:
    if fecha is None:
        raise bad_request("Parámetro fecha es requerido")
    party_size = personas if personas and personas > 0 else 1

    gateway = SqlAlchemyCapacityGateway(session)
    try:
        resolved, items = await availability_usecase.day_availability(gateway, booking_date=fecha)
    except SQLAlchemyError as exc:
        raise upstream_error(exc, context="Error al verificar disponibilidad")

    return AvailabilityRead(
        booking_date=fecha,
        party_size=party_size,
        configuration=ConfigurationInfo.from_resolved(resolved),
        slots={item.slot: SlotStatusRead.from_availability(item, party_size=party_size) for item in items},
        summary=AvailabilitySummary(**availability_usecase.summarize(items, party_size=party_size)),
    )
