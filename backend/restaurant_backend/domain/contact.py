import re
from dataclasses import dataclass
from typing import Optional

from .errors import FieldValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_SEPARATORS = re.compile(r"[\s\-()]")


@dataclass(frozen=True)
class ContactSubmission:
    name: str
    email: str
    phone: Optional[str]
    subject: str
    message: str


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def validate_contact(
    *,
    name: Optional[str],
    email: Optional[str],
    phone: Optional[str],
    subject: Optional[str],
    message: Optional[str],
) -> ContactSubmission:
    """Check every field and collect all failures before raising."""
    errors: list[str] = []

    if len(_clean(name)) < 2:
        errors.append("El nombre debe tener al menos 2 caracteres")
    if not email or not EMAIL_PATTERN.match(email.strip()):
        errors.append("Por favor ingresa un email válido")
    if _clean(phone):
        if len(_PHONE_SEPARATORS.sub("", phone or "")) < 10:
            errors.append("El teléfono debe tener al menos 10 dígitos")
    if len(_clean(subject)) < 3:
        errors.append("El asunto debe tener al menos 3 caracteres")
    if len(_clean(message)) < 10:
        errors.append("El mensaje debe tener al menos 10 caracteres")

    if errors:
        raise FieldValidationError(errors)
    return ContactSubmission(
        name=_clean(name),
        email=_clean(email).lower(),
        phone=_clean(phone) or None,
        subject=_clean(subject),
        message=_clean(message),
    )
