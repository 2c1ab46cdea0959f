from datetime import date
from typing import Mapping, Optional

from ..domain.errors import DuplicateConfigurationError, FieldValidationError, NotFoundError
from ..domain.repositories import CapacityConfigRepository
from ..models import CapacityConfig
from ..utils.time import parse_slot


def _validate_table(capacity_by_slot: Mapping[str, int]) -> list[str]:
    errors: list[str] = []
    if not capacity_by_slot:
        errors.append("capacidadPorHorario no puede estar vacío")
    for slot, value in capacity_by_slot.items():
        try:
            parse_slot(slot)
        except ValueError:
            errors.append(f"Horario inválido: {slot}")
            continue
        if value < 0:
            errors.append(f"La capacidad de {slot} no puede ser negativa")
    return errors


async def create_config(
    repo: CapacityConfigRepository,
    *,
    specific_date: Optional[date],
    day_of_week: Optional[int],
    capacity_by_slot: Mapping[str, int],
    description: str,
    active: bool,
) -> CapacityConfig:
    """Store a date or weekday override; at most one active override per date or weekday."""
    errors: list[str] = []
    if (specific_date is None) == (day_of_week is None):
        errors.append("Indica exactamente uno de fechaEspecifica o diaSemana")
    if day_of_week is not None and not 0 <= day_of_week <= 6:
        errors.append("diaSemana debe estar entre 0 (domingo) y 6 (sábado)")
    errors.extend(_validate_table(capacity_by_slot))
    if errors:
        raise FieldValidationError(errors)

    if active and await repo.has_active_for(specific_date=specific_date, day_of_week=day_of_week):
        target = specific_date if specific_date is not None else f"día {day_of_week}"
        raise DuplicateConfigurationError(f"Ya existe una configuración activa para {target}")

    return await repo.create(
        specific_date=specific_date,
        day_of_week=day_of_week,
        capacity_by_slot=dict(capacity_by_slot),
        description=description.strip(),
        active=active,
    )


async def list_configs(repo: CapacityConfigRepository, *, active: Optional[bool]) -> list[CapacityConfig]:
    return await repo.list_configs(active)


async def deactivate_config(repo: CapacityConfigRepository, *, config_id: int) -> CapacityConfig:
    config = await repo.get(config_id)
    if config is None:
        raise NotFoundError("capacity config not found")
    if not config.active:
        return config
    config.active = False
    return await repo.save(config)
