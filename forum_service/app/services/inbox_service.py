from __future__ import annotations

from fastapi import Depends

from ..exceptions import ForbiddenError, NotFoundError
from ..models.inbox import InboxMessage
from ..repositories.interfaces import InboxRepositoryInterface
from .dependencies import get_inbox_repository


class InboxService:
    """수신함 조회 / 읽음 처리.

    메시지 생성은 CreditService, ViolationService 가 각자의 트랜잭션 안에서 한다.
    """

    def __init__(self, inbox_repo: InboxRepositoryInterface) -> None:
        self._inbox_repo = inbox_repo

    def list_messages(
        self, user_id: str, page: int = 1, page_size: int = 20
    ) -> tuple[list[InboxMessage], int]:
        return self._inbox_repo.list_by_user(user_id, page, page_size)

    def unread_count(self, user_id: str) -> int:
        return self._inbox_repo.count_unread(user_id)

    def mark_read(self, user_id: str, message_id: str) -> InboxMessage:
        """본인 메시지만 읽음 처리할 수 있다. 이미 읽은 메시지는 그대로 반환한다."""
        message = self._inbox_repo.find_by_id(message_id)
        if message is None:
            raise NotFoundError(f"inbox message not found (id={message_id})")
        if message.user_id != user_id:
            raise ForbiddenError("cannot modify another user's inbox message")
        if message.is_read:
            return message

        updated = self._inbox_repo.mark_read(message_id)
        if updated is None:
            raise NotFoundError(f"inbox message not found (id={message_id})")
        return updated


def get_inbox_service(
    inbox_repo: InboxRepositoryInterface = Depends(get_inbox_repository),
) -> InboxService:
    """FastAPI DI용 InboxService 팩토리."""

    return InboxService(inbox_repo)
