from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_session
from ..domain.errors import DuplicateConfigurationError, FieldValidationError, NotFoundError
from ..infrastructure.repositories import SqlAlchemyCapacityConfigRepository
from ..schemas import CapacityConfigCreate, CapacityConfigRead
from ..usecases import capacity_configs as config_usecase
from ..utils.audit_log import emit_audit_log
from .errors import audit_failure, error_detail, invalid_fields, not_found, upstream_error

router = APIRouter(prefix="/capacity-configs", tags=["capacity"])


@router.get("", response_model=List[CapacityConfigRead])
async def list_capacity_configs(
    activo: Optional[bool] = Query(default=None),
    session: AsyncSession = Depends(get_session),
) -> list[CapacityConfigRead]:
    repo = SqlAlchemyCapacityConfigRepository(session)
    try:
        configs = await config_usecase.list_configs(repo, active=activo)
    except SQLAlchemyError as exc:
        raise upstream_error(exc, context="Error al consultar configuraciones")
    return [CapacityConfigRead.from_db(config=config) for config in configs]


@router.post("", response_model=CapacityConfigRead, status_code=status.HTTP_201_CREATED)
async def create_capacity_config(
    payload: CapacityConfigCreate,
    session: AsyncSession = Depends(get_session),
) -> CapacityConfigRead:
    repo = SqlAlchemyCapacityConfigRepository(session)
    try:
        async with session.begin():
            config = await config_usecase.create_config(
                repo,
                specific_date=payload.specific_date,
                day_of_week=payload.day_of_week,
                capacity_by_slot=payload.capacity_by_slot,
                description=payload.description,
                active=payload.active,
            )
            try:
                emit_audit_log(
                    action="capacity_config.created",
                    initiator="staff",
                    entity_id=config.id,
                    booking_date=config.specific_date,
                    message=config.description,
                    extra={"day_of_week": config.day_of_week},
                )
            except RuntimeError:
                raise audit_failure()
    except FieldValidationError as exc:
        raise invalid_fields(exc)
    except DuplicateConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=error_detail("Configuración duplicada", str(exc)),
        )
    except SQLAlchemyError as exc:
        raise upstream_error(exc, context="Error al guardar la configuración")
    return CapacityConfigRead.from_db(config=config)


@router.delete("/{config_id}", response_model=CapacityConfigRead)
async def deactivate_capacity_config(
    config_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
) -> CapacityConfigRead:
    repo = SqlAlchemyCapacityConfigRepository(session)
    try:
        async with session.begin():
            config = await config_usecase.deactivate_config(repo, config_id=config_id)
            try:
                emit_audit_log(
                    action="capacity_config.deactivated",
                    initiator="staff",
                    entity_id=config.id,
                )
            except RuntimeError:
                raise audit_failure()
    except NotFoundError:
        raise not_found("Configuración no encontrada")
    except SQLAlchemyError as exc:
        raise upstream_error(exc, context="Error al desactivar la configuración")
    return CapacityConfigRead.from_db(config=config)
