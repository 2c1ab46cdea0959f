from typing import Optional

from ..domain.contact import validate_contact
from ..domain.errors import FieldValidationError, NotFoundError
from ..domain.repositories import ContactRepository
from ..models import ContactMessage, ContactStatus
from ..utils.time import utc_now_naive


async def submit_contact(
    repo: ContactRepository,
    *,
    name: Optional[str],
    email: Optional[str],
    phone: Optional[str],
    subject: Optional[str],
    message: Optional[str],
    origin_ip: str,
) -> ContactMessage:
    submission = validate_contact(name=name, email=email, phone=phone, subject=subject, message=message)
    return await repo.create(
        name=submission.name,
        email=submission.email,
        phone=submission.phone,
        subject=submission.subject,
        message=submission.message,
        origin_ip=origin_ip,
    )


def parse_status(value: Optional[str]) -> Optional[ContactStatus]:
    if value is None or value == "":
        return None
    try:
        return ContactStatus(value)
    except ValueError as exc:
        valid = ", ".join(s.value for s in ContactStatus)
        raise FieldValidationError([f"El estado debe ser uno de: {valid}"]) from exc


async def list_messages(
    repo: ContactRepository,
    *,
    status: Optional[str],
    page: int,
    limit: int,
) -> list[ContactMessage]:
    if page < 1 or limit < 1:
        raise FieldValidationError(["pagina y limite deben ser mayores a 0"])
    return await repo.list_messages(status=parse_status(status), limit=limit, offset=(page - 1) * limit)


async def update_message(
    repo: ContactRepository,
    *,
    message_id: int,
    status: Optional[str],
    admin_notes: Optional[str],
) -> tuple[ContactMessage, ContactStatus]:
    new_status = parse_status(status)
    contact = await repo.get(message_id)
    if contact is None:
        raise NotFoundError("contact message not found")
    status_from = contact.status

    if new_status is not None:
        contact.status = new_status
        if new_status == ContactStatus.REPLIED:
            contact.replied_at = utc_now_naive()
        elif new_status == ContactStatus.ARCHIVED:
            contact.archived_at = utc_now_naive()
    if admin_notes:
        contact.admin_notes = admin_notes.strip()

    return await repo.save(contact), status_from


async def archive_message(repo: ContactRepository, *, message_id: int) -> tuple[ContactMessage, ContactStatus]:
    contact = await repo.get(message_id)
    if contact is None:
        raise NotFoundError("contact message not found")
    status_from = contact.status
    contact.status = ContactStatus.ARCHIVED
    contact.archived_at = utc_now_naive()
    return await repo.save(contact), status_from


def thank_you_message(contact: ContactMessage) -> str:
    return (
        f"¡Gracias por contactarnos, {contact.name}! Hemos recibido tu mensaje y te "
        f"responderemos pronto a {contact.email}."
    )
