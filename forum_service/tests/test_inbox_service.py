from __future__ import annotations

from datetime import timedelta

import pytest

from forum_service.app.exceptions import ForbiddenError, NotFoundError
from forum_service.app.models.inbox import InboxMessage, InboxMessageType
from forum_service.app.services.inbox_service import InboxService
from forum_service.tests.fakes import DEFAULT_NOW, FakeInboxRepository


def _message(user_id: str, text: str, minutes_ago: int = 0) -> InboxMessage:
    created_at = DEFAULT_NOW - timedelta(minutes=minutes_ago)
    return InboxMessage(
        user_id=user_id,
        message=text,
        type=InboxMessageType.SYSTEM,
        created_at=created_at,
        updated_at=created_at,
    )


def _build_service() -> tuple[InboxService, FakeInboxRepository]:
    repo = FakeInboxRepository()
    return InboxService(repo), repo


def test_list_messages_is_newest_first_and_scoped_to_user() -> None:
    service, repo = _build_service()
    repo.create(_message("u1", "old", minutes_ago=10))
    repo.create(_message("u1", "new", minutes_ago=1))
    repo.create(_message("u2", "other"))

    items, total = service.list_messages("u1", page=1, page_size=20)

    assert total == 2
    assert [m.message for m in items] == ["new", "old"]


def test_unread_count_and_mark_read() -> None:
    service, repo = _build_service()
    first = repo.create(_message("u1", "a"))
    repo.create(_message("u1", "b"))
    assert first.id is not None

    assert service.unread_count("u1") == 2

    updated = service.mark_read("u1", first.id)

    assert updated.is_read is True
    assert service.unread_count("u1") == 1


def test_mark_read_is_idempotent() -> None:
    service, repo = _build_service()
    message = repo.create(_message("u1", "a"))
    assert message.id is not None

    service.mark_read("u1", message.id)
    again = service.mark_read("u1", message.id)

    assert again.is_read is True
    assert repo.mark_read_calls == [message.id]


def test_mark_read_of_other_users_message_is_forbidden() -> None:
    service, repo = _build_service()
    message = repo.create(_message("u2", "private"))
    assert message.id is not None

    with pytest.raises(ForbiddenError):
        service.mark_read("u1", message.id)

    assert repo.count_unread("u2") == 1


def test_mark_read_of_missing_message_raises_not_found() -> None:
    service, _ = _build_service()

    with pytest.raises(NotFoundError):
        service.mark_read("u1", "m-404")
