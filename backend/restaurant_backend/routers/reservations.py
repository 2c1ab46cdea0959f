from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_session
from ..domain.errors import FieldValidationError, InsufficientCapacityError, NotFoundError, SlotUnavailableError
from ..infrastructure.repositories import SqlAlchemyCapacityGateway, SqlAlchemyReservationRepository
from ..models import ReservationStatus
from ..schemas import (
    AvailableSlot,
    AvailableSlotsRead,
    ConfigurationInfo,
    ReservationChanged,
    ReservationCreate,
    ReservationCreated,
    ReservationRead,
    ReservationUpdate,
)
from ..usecases import availability as availability_usecase
from ..usecases import reservations as reservation_usecase
from ..utils.audit_log import emit_audit_log
from .errors import audit_failure, bad_request, error_detail, invalid_fields, not_found, upstream_error

router = APIRouter(prefix="", tags=["reservations"])


def _capacity_http_error(exc: SlotUnavailableError | InsufficientCapacityError) -> HTTPException:
    if isinstance(exc, InsufficientCapacityError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=error_detail("Capacidad insuficiente", str(exc), remaining=exc.remaining),
        )
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=error_detail("Horario no disponible", str(exc)),
    )


@router.get("/reservations", response_model=AvailableSlotsRead)
async def list_available_slots(
    fecha: Optional[date] = Query(default=None, description="Booking date (YYYY-MM-DD)"),
    session: AsyncSession = Depends(get_session),
) -> AvailableSlotsRead:
    if fecha is None:
        raise bad_request("Parámetro fecha requerido")
    gateway = SqlAlchemyCapacityGateway(session)
    try:
        resolved, items = await availability_usecase.list_open_slots(gateway, booking_date=fecha)
    except SQLAlchemyError as exc:
        raise upstream_error(exc, context="Error al consultar disponibilidad")

    slots = [
        AvailableSlot(
            slot=item.slot,
            max_capacity=item.max_capacity,
            already_booked=item.already_booked,
            remaining=item.remaining,
        )
        for item in items
    ]
    return AvailableSlotsRead(
        booking_date=fecha,
        configuration=ConfigurationInfo.from_resolved(resolved),
        slots=slots,
        total=len(slots),
    )


@router.post("/reservations", response_model=ReservationCreated)
async def create_reservation(
    payload: ReservationCreate,
    session: AsyncSession = Depends(get_session),
) -> ReservationCreated:
    gateway = SqlAlchemyCapacityGateway(session)
    res_repo = SqlAlchemyReservationRepository(session)
    try:
        async with session.begin():
            reservation, resolved = await reservation_usecase.create_reservation(
                gateway,
                res_repo,
                booking_date=payload.booking_date,
                slot=payload.slot,
                party_size=payload.party_size,
                name=payload.name,
                email=payload.email,
                phone=payload.phone,
                notes=payload.notes,
            )
    except FieldValidationError as exc:
        raise invalid_fields(exc, error="Datos incompletos")
    except (SlotUnavailableError, InsufficientCapacityError) as exc:
        raise _capacity_http_error(exc)
    except SQLAlchemyError as exc:
        raise upstream_error(exc, context="Error al procesar la reserva")

    return ReservationCreated(
        data=ReservationRead.from_db(reservation=reservation),
        configuration=ConfigurationInfo.from_resolved(resolved),
        message=reservation_usecase.confirmation_message(
            party_size=reservation.party_size,
            booking_date=reservation.booking_date,
            slot=reservation.slot,
        ),
    )


@router.put("/reservations", response_model=ReservationChanged)
async def update_reservation(
    payload: ReservationUpdate,
    session: AsyncSession = Depends(get_session),
) -> ReservationChanged:
    if payload.id is None:
        raise bad_request("ID de reserva requerido")
    res_repo = SqlAlchemyReservationRepository(session)
    try:
        async with session.begin():
            updated, status_from = await reservation_usecase.update_reservation(
                res_repo,
                reservation_id=payload.id,
                changes=payload.changes(),
            )
            cancelled = status_from != ReservationStatus.CANCELLED and updated.status == ReservationStatus.CANCELLED
            try:
                emit_audit_log(
                    action="reservation.cancelled" if cancelled else "reservation.updated",
                    initiator="staff",
                    entity_id=updated.id,
                    status_from=status_from,
                    status_to=updated.status,
                    booking_date=updated.booking_date,
                    slot=updated.slot,
                    party_size=updated.party_size,
                )
            except RuntimeError:
                raise audit_failure()
    except NotFoundError:
        raise not_found("Reserva no encontrada")
    except FieldValidationError as exc:
        raise invalid_fields(exc)
    except (SlotUnavailableError, InsufficientCapacityError) as exc:
        raise _capacity_http_error(exc)
    except SQLAlchemyError as exc:
        raise upstream_error(exc, context="Error al actualizar la reserva")

    return ReservationChanged(
        data=ReservationRead.from_db(reservation=updated),
        message="Reserva actualizada exitosamente",
    )


@router.delete("/reservations", response_model=ReservationChanged)
async def cancel_reservation(
    id: Optional[int] = Query(default=None, ge=1),
    session: AsyncSession = Depends(get_session),
) -> ReservationChanged:
    if id is None:
        raise bad_request("ID de reserva requerido")
    res_repo = SqlAlchemyReservationRepository(session)
    try:
        async with session.begin():
            updated, status_from = await reservation_usecase.cancel_reservation(res_repo, reservation_id=id)
            if status_from != ReservationStatus.CANCELLED:
                try:
                    emit_audit_log(
                        action="reservation.cancelled",
                        initiator="guest",
                        entity_id=updated.id,
                        status_from=status_from,
                        status_to=updated.status,
                        booking_date=updated.booking_date,
                        slot=updated.slot,
                        party_size=updated.party_size,
                    )
                except RuntimeError:
                    raise audit_failure()
    except NotFoundError:
        raise not_found("Reserva no encontrada")
    except SQLAlchemyError as exc:
        raise upstream_error(exc, context="Error al cancelar la reserva")

    return ReservationChanged(
        data=ReservationRead.from_db(reservation=updated),
        message="Reserva cancelada exitosamente",
    )
