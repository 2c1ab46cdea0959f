import logging
from typing import Any, Optional

from fastapi import HTTPException, status

from ..config import get_settings
from ..domain.errors import FieldValidationError

logger = logging.getLogger(__name__)


def error_detail(error: str, message: str, **extra: Any) -> dict[str, Any]:
    detail: dict[str, Any] = {"success": False, "error": error, "message": message}
    detail.update({k: v for k, v in extra.items() if v is not None})
    return detail


def bad_request(error: str, message: Optional[str] = None) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=error_detail(error, message or error),
    )


def invalid_fields(exc: FieldValidationError, *, error: str = "Datos inválidos") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=error_detail(error, str(exc), errors=exc.errors),
    )


def not_found(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail("No encontrado", message))


def upstream_error(exc: Exception, *, context: str) -> HTTPException:
    """500 for a failed storage call; the original error is only shown in development."""
    logger.error("%s: %s", context, exc, exc_info=exc)
    details = str(exc) if get_settings().is_development else None
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=error_detail(
            context,
            "Ocurrió un error inesperado. Por favor intenta nuevamente.",
            details=details,
        ),
    )


def audit_failure() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=error_detail("Error interno", "audit log failed"),
    )
