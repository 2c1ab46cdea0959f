from datetime import datetime
from typing import Any, Optional

import pytest
from restaurant_backend.domain.errors import FieldValidationError, NotFoundError
from restaurant_backend.models import ContactMessage, ContactStatus
from restaurant_backend.usecases import contact as uc


class FakeContactRepo:
    def __init__(self, message: Optional[ContactMessage] = None) -> None:
        self.message = message
        self.created: dict[str, Any] | None = None
        self.list_args: dict[str, Any] | None = None

    async def create(self, **fields: Any) -> ContactMessage:
        self.created = fields
        return ContactMessage(id=1, status=ContactStatus.NEW, created_at=datetime(2025, 6, 1), **fields)

    async def list_messages(self, **kwargs: Any) -> list[ContactMessage]:
        self.list_args = kwargs
        return []

    async def get(self, message_id: int) -> Optional[ContactMessage]:
        return self.message

    async def save(self, message: ContactMessage) -> ContactMessage:
        return message


def _message(status: ContactStatus = ContactStatus.NEW) -> ContactMessage:
    return ContactMessage(
        id=3,
        name="Ana",
        email="ana@example.com",
        subject="Hola",
        message="Un mensaje suficientemente largo",
        status=status,
        origin_ip="10.0.0.1",
        created_at=datetime(2025, 6, 1),
    )


@pytest.mark.asyncio
async def test_submit_stores_normalized_fields_and_ip() -> None:
    repo = FakeContactRepo()
    contact = await uc.submit_contact(
        repo,
        name=" Ana ",
        email="ANA@example.com",
        phone=None,
        subject="Reserva",
        message="Quisiera información sobre eventos",
        origin_ip="203.0.113.9",
    )
    assert repo.created is not None
    assert repo.created["email"] == "ana@example.com"
    assert repo.created["origin_ip"] == "203.0.113.9"
    assert "Ana" in uc.thank_you_message(contact)
    assert "ana@example.com" in uc.thank_you_message(contact)


@pytest.mark.asyncio
async def test_submit_invalid_does_not_store() -> None:
    repo = FakeContactRepo()
    with pytest.raises(FieldValidationError):
        await uc.submit_contact(
            repo, name="Al", email="al@example.com", phone=None, subject="Hi!", message="short", origin_ip="x"
        )
    assert repo.created is None


@pytest.mark.asyncio
async def test_list_translates_page_to_offset() -> None:
    repo = FakeContactRepo()
    await uc.list_messages(repo, status="leido", page=3, limit=10)
    assert repo.list_args == {"status": ContactStatus.READ, "limit": 10, "offset": 20}


@pytest.mark.asyncio
async def test_list_rejects_unknown_status() -> None:
    with pytest.raises(FieldValidationError) as excinfo:
        await uc.list_messages(FakeContactRepo(), status="borrado", page=1, limit=10)
    assert "nuevo, leido, respondido, archivado" in excinfo.value.errors[0]


@pytest.mark.asyncio
async def test_reply_sets_timestamp() -> None:
    message = _message()
    updated, status_from = await uc.update_message(
        FakeContactRepo(message), message_id=3, status="respondido", admin_notes="  llamado  "
    )
    assert status_from == ContactStatus.NEW
    assert updated.status == ContactStatus.REPLIED
    assert updated.replied_at is not None
    assert updated.admin_notes == "llamado"


@pytest.mark.asyncio
async def test_archive_keeps_record() -> None:
    message = _message(ContactStatus.READ)
    archived, status_from = await uc.archive_message(FakeContactRepo(message), message_id=3)
    assert archived is message
    assert status_from == ContactStatus.READ
    assert archived.status == ContactStatus.ARCHIVED
    assert archived.archived_at is not None


@pytest.mark.asyncio
async def test_archive_unknown_message() -> None:
    with pytest.raises(NotFoundError):
        await uc.archive_message(FakeContactRepo(None), message_id=3)
