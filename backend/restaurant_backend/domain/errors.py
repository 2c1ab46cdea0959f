from __future__ import annotations

from typing import Sequence


class DomainError(Exception):
    """Base for every business-rule failure the API reports to callers."""


class FieldValidationError(DomainError):
    def __init__(self, errors: Sequence[str]) -> None:
        self.errors = list(errors)
        super().__init__(", ".join(self.errors))


class CapacityError(DomainError):
    pass


class SlotUnavailableError(CapacityError):
    def __init__(self, booking_date: object, slot: str) -> None:
        self.booking_date = booking_date
        self.slot = slot
        super().__init__(f"Horario {slot} no está disponible para la fecha {booking_date}")


class InsufficientCapacityError(CapacityError):
    def __init__(self, booking_date: object, slot: str, *, remaining: int, requested: int) -> None:
        self.booking_date = booking_date
        self.slot = slot
        self.remaining = remaining
        self.requested = requested
        super().__init__(
            f"Capacidad insuficiente para {booking_date}. Solo quedan {remaining} espacios "
            f"disponibles para el horario de las {slot}, pero solicitas {requested} personas."
        )


class NotFoundError(DomainError):
    pass


class DuplicateConfigurationError(DomainError):
    pass
