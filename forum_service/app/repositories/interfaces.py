from __future__ import annotations

from datetime import datetime
from typing import Callable, Protocol, TypeVar

from pymongo.client_session import ClientSession

from ..models.content import ContentItem, ContentType
from ..models.inbox import InboxMessage
from ..models.user import ForumUser
from ..models.violation import Violation


T = TypeVar("T")


class TransactionManagerInterface(Protocol):
    """여러 레포지토리 쓰기를 하나의 원자적 단위로 묶는 계약.

    fn 에 세션을 넘겨 실행하고, 예외가 나면 전부 롤백한 뒤 그대로 전파한다.
    """

    def run(
        self, fn: Callable[[ClientSession | None], T]
    ) -> T:  # pragma: no cover - Protocol
        ...


class UserRepositoryInterface(Protocol):
    """UserRepository가 따라야 할 최소한의 계약.

    Service 레이어는 이 인터페이스에만 의존하고, 구체 구현(Mongo 등)은 몰라도 된다.
    """

    def find_by_id(
        self, user_id: str, *, session: ClientSession | None = None
    ) -> ForumUser | None:  # pragma: no cover - Protocol
        ...

    def update_credit(
        self,
        user_id: str,
        credit_score: int,
        ban_until: datetime | None,
        *,
        session: ClientSession | None = None,
    ) -> ForumUser:  # pragma: no cover - Protocol
        ...

    def set_ban_if_inactive(
        self,
        user_id: str,
        ban_until: datetime,
        now: datetime,
        *,
        session: ClientSession | None = None,
    ) -> bool:  # pragma: no cover - Protocol
        """진행 중인 정지가 없을 때만 ban_until 을 기록한다. 기록했으면 True."""
        ...

    def list_expired_bans(
        self, now: datetime
    ) -> list[ForumUser]:  # pragma: no cover - Protocol
        ...

    def rehabilitate(
        self,
        user_id: str,
        expected_ban_until: datetime,
        credit_score: int,
        now: datetime,
        *,
        session: ClientSession | None = None,
    ) -> bool:  # pragma: no cover - Protocol
        """ban_until 이 읽었던 값 그대로일 때만 점수를 맞추고 정지를 해제한다."""
        ...

    def reset_scores(
        self, credit_score: int, *, session: ClientSession | None = None
    ) -> int:  # pragma: no cover - Protocol
        """정지 중이 아닌(ban_until 이 null) 유저의 점수를 일괄 설정하고 변경 수를 반환한다."""
        ...


class ContentRepositoryInterface(Protocol):
    """posts / comments 를 ContentItem 으로 다루는 계약."""

    def find(
        self,
        content_type: ContentType,
        content_id: str,
        *,
        session: ClientSession | None = None,
    ) -> ContentItem | None:  # pragma: no cover - Protocol
        ...

    def mark_violation(
        self,
        content_type: ContentType,
        content_id: str,
        *,
        session: ClientSession | None = None,
    ) -> bool:  # pragma: no cover - Protocol
        ...


class ViolationRepositoryInterface(Protocol):
    """위반 기록 계약.

    - (content_type, content_id, moderator_id) 조합은 유니크하며, 중복 생성 시 ConflictError.
    """

    def exists(
        self,
        content_type: ContentType,
        content_id: str,
        moderator_id: str,
        *,
        session: ClientSession | None = None,
    ) -> bool:  # pragma: no cover - Protocol
        ...

    def create(
        self, violation: Violation, *, session: ClientSession | None = None
    ) -> Violation:  # pragma: no cover - Protocol
        ...

    def list_by_content(
        self, content_type: ContentType, content_id: str
    ) -> list[Violation]:  # pragma: no cover - Protocol
        ...


class InboxRepositoryInterface(Protocol):
    def create(
        self, message: InboxMessage, *, session: ClientSession | None = None
    ) -> InboxMessage:  # pragma: no cover - Protocol
        ...

    def find_by_id(
        self, message_id: str
    ) -> InboxMessage | None:  # pragma: no cover - Protocol
        ...

    def list_by_user(
        self, user_id: str, page: int, page_size: int
    ) -> tuple[list[InboxMessage], int]:  # pragma: no cover - Protocol
        ...

    def count_unread(self, user_id: str) -> int:  # pragma: no cover - Protocol
        ...

    def mark_read(
        self, message_id: str
    ) -> InboxMessage | None:  # pragma: no cover - Protocol
        ...


class ScheduledJobRepositoryInterface(Protocol):
    """주기 작업의 마지막 실행 슬롯을 저장해 같은 슬롯이 두 번 실행되지 않게 한다."""

    def ensure_job(self, job_name: str) -> None:  # pragma: no cover - Protocol
        ...

    def claim_slot(
        self,
        job_name: str,
        slot: datetime,
        now: datetime,
        *,
        session: ClientSession | None = None,
    ) -> bool:  # pragma: no cover - Protocol
        """last_slot < slot 인 경우에만 slot 을 기록하고 True 를 반환한다."""
        ...
