import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_client_ip, get_session
from ..domain.errors import FieldValidationError, NotFoundError
from ..infrastructure.repositories import SqlAlchemyContactRepository
from ..models import ContactStatus
from ..schemas import (
    ContactChanged,
    ContactCreate,
    ContactCreated,
    ContactList,
    ContactListMeta,
    ContactRead,
    ContactReceipt,
    ContactUpdate,
)
from ..usecases import contact as contact_usecase
from ..utils.audit_log import emit_audit_log
from .errors import audit_failure, bad_request, invalid_fields, not_found, upstream_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["contact"])


@router.post("/contact", response_model=ContactCreated)
async def submit_contact(
    payload: ContactCreate,
    session: AsyncSession = Depends(get_session),
    client_ip: str = Depends(get_client_ip),
) -> ContactCreated:
    repo = SqlAlchemyContactRepository(session)
    try:
        async with session.begin():
            contact = await contact_usecase.submit_contact(
                repo,
                name=payload.name,
                email=payload.email,
                phone=payload.phone,
                subject=payload.subject,
                message=payload.message,
                origin_ip=client_ip,
            )
            try:
                emit_audit_log(
                    action="contact.created",
                    initiator="guest",
                    entity_id=contact.id,
                    status_to=contact.status,
                    extra={"origin_ip": client_ip},
                )
            except RuntimeError:
                raise audit_failure()
    except FieldValidationError as exc:
        logger.info("contact submission rejected: %s", exc.errors)
        raise invalid_fields(exc)
    except SQLAlchemyError as exc:
        raise upstream_error(exc, context="Error al enviar el mensaje")

    return ContactCreated(
        data=ContactReceipt(message_id=contact.id, status=str(ContactStatus.NEW)),
        message=contact_usecase.thank_you_message(contact),
    )


@router.get("/contact", response_model=ContactList)
async def list_contact_messages(
    limite: int = Query(default=10),
    pagina: int = Query(default=1),
    estado: Optional[str] = Query(default=None),
    session: AsyncSession = Depends(get_session),
) -> ContactList:
    repo = SqlAlchemyContactRepository(session)
    try:
        messages = await contact_usecase.list_messages(repo, status=estado, page=pagina, limit=limite)
    except FieldValidationError as exc:
        raise invalid_fields(exc)
    except SQLAlchemyError as exc:
        raise upstream_error(exc, context="Error al consultar mensajes de contacto")

    return ContactList(
        data=[ContactRead.from_db(message=message) for message in messages],
        meta=ContactListMeta(total=len(messages), page=pagina, limit=limite),
    )


@router.put("/contact", response_model=ContactChanged)
async def update_contact_message(
    payload: ContactUpdate,
    session: AsyncSession = Depends(get_session),
) -> ContactChanged:
    if payload.id is None:
        raise bad_request("ID de mensaje requerido")
    repo = SqlAlchemyContactRepository(session)
    try:
        async with session.begin():
            updated, status_from = await contact_usecase.update_message(
                repo,
                message_id=payload.id,
                status=payload.status,
                admin_notes=payload.admin_notes,
            )
            try:
                emit_audit_log(
                    action="contact.updated",
                    initiator="staff",
                    entity_id=updated.id,
                    status_from=status_from,
                    status_to=updated.status,
                )
            except RuntimeError:
                raise audit_failure()
    except FieldValidationError as exc:
        raise invalid_fields(exc, error="Estado inválido")
    except NotFoundError:
        raise not_found("Mensaje no encontrado")
    except SQLAlchemyError as exc:
        raise upstream_error(exc, context="Error al actualizar el mensaje")

    return ContactChanged(
        data=ContactRead.from_db(message=updated),
        message="Mensaje actualizado exitosamente",
    )


@router.delete("/contact", response_model=ContactChanged)
async def archive_contact_message(
    id: Optional[int] = Query(default=None, ge=1),
    session: AsyncSession = Depends(get_session),
) -> ContactChanged:
    if id is None:
        raise bad_request("ID de mensaje requerido")
    repo = SqlAlchemyContactRepository(session)
    try:
        async with session.begin():
            archived, status_from = await contact_usecase.archive_message(repo, message_id=id)
            try:
                emit_audit_log(
                    action="contact.archived",
                    initiator="staff",
                    entity_id=archived.id,
                    status_from=status_from,
                    status_to=archived.status,
                )
            except RuntimeError:
                raise audit_failure()
    except NotFoundError:
        raise not_found("Mensaje no encontrado")
    except SQLAlchemyError as exc:
        raise upstream_error(exc, context="Error al archivar el mensaje")

    return ContactChanged(
        data=ContactRead.from_db(message=archived),
        message="Mensaje archivado exitosamente",
    )
