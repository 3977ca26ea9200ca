"""위반 처리 서비스.

관리자가 게시글/댓글을 위반으로 표시하면, 관리자별로 한 번만 기록하고 작성자 점수를 차감한 뒤
작성자에게 알림을 보낸다. 모든 쓰기는 하나의 트랜잭션으로 묶인다.
"""

from __future__ import annotations

import logging

from fastapi import Depends
from pymongo.client_session import ClientSession

from common.mongo.types import parse_object_id

from ..constants import CREDIT_THRESHOLD
from ..exceptions import ConflictError, NotFoundError, ValidationError
from ..models.content import ContentItem, ContentType
from ..models.credit import DeductionResult
from ..models.inbox import InboxMessage, InboxMessageType
from ..models.violation import MarkViolationResult, Violation
from ..repositories.interfaces import (
    ContentRepositoryInterface,
    InboxRepositoryInterface,
    TransactionManagerInterface,
    ViolationRepositoryInterface,
)
from .credit_service import CreditService, get_credit_service
from .dependencies import (
    get_content_repository,
    get_inbox_repository,
    get_transaction_manager,
    get_violation_repository,
)


logger = logging.getLogger(__name__)

_CONTENT_LABELS: dict[ContentType, str] = {
    ContentType.POST: "게시글",
    ContentType.COMMENT: "댓글",
}

_MESSAGE_TYPES: dict[ContentType, InboxMessageType] = {
    ContentType.POST: InboxMessageType.POST_VIOLATION,
    ContentType.COMMENT: InboxMessageType.COMMENT_VIOLATION,
}


def parse_content_type(value: str | ContentType) -> ContentType:
    try:
        return ContentType(value)
    except ValueError as exc:
        raise ValidationError(f"unknown content type: {value!r}") from exc


def canonical_content_id(content_type: ContentType, content_id: str) -> str:
    """콘텐츠 id 를 저장 형식(소문자 ObjectId hex)으로 맞춘다.

    ObjectId 는 대문자 hex 도 받으므로 같은 글이 여러 문자열로 들어올 수 있다.
    중복 검사, 기록, 조회는 모두 이 값으로 한다. 형식이 틀리면 NotFoundError.
    """
    oid = parse_object_id(content_id)
    if oid is None:
        raise NotFoundError(f"{content_type} not found (id={content_id})")
    return str(oid)


def build_violation_message(
    content: ContentItem, reason: str, points: int, deduction: DeductionResult
) -> str:
    label = _CONTENT_LABELS[content.content_type]
    message = (
        f"회원님의 {label} 「{content.display_name()}」이(가) '{reason}' 사유로 위반 처리되어 "
        f"신용 점수 {points}점이 차감되었습니다. (현재 {deduction.credit_score}점)"
    )
    if deduction.newly_banned:
        message += (
            f" 신용 점수가 {CREDIT_THRESHOLD}점 미만이 되어 24시간 동안 글/댓글 작성이 제한됩니다."
        )
    return message


class ViolationService:
    """관리자 위반 처리 비즈니스 로직."""

    def __init__(
        self,
        violation_repo: ViolationRepositoryInterface,
        content_repo: ContentRepositoryInterface,
        inbox_repo: InboxRepositoryInterface,
        credit_service: CreditService,
        tx_manager: TransactionManagerInterface,
    ) -> None:
        self._violation_repo = violation_repo
        self._content_repo = content_repo
        self._inbox_repo = inbox_repo
        self._credit_service = credit_service
        self._tx = tx_manager

    def mark_violation(
        self,
        content_id: str,
        content_type: str | ContentType,
        moderator_id: str,
        reason: str,
    ) -> MarkViolationResult:
        """콘텐츠를 위반으로 표시한다.

        - 같은 관리자가 같은 콘텐츠를 다시 표시하면 ConflictError
        - 콘텐츠가 없으면 NotFoundError
        - 다른 관리자가 각각 표시하면 각각 기록되고 각각 차감된다.
        """

        ctype = parse_content_type(content_type)
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("reason must not be blank")
        content_id = canonical_content_id(ctype, content_id)

        def _mark(session: ClientSession | None) -> MarkViolationResult:
            if self._violation_repo.exists(
                ctype, content_id, moderator_id, session=session
            ):
                raise ConflictError(
                    f"already flagged by this moderator (content={ctype}:{content_id})"
                )

            content = self._content_repo.find(ctype, content_id, session=session)
            if content is None:
                raise NotFoundError(f"{ctype} not found (id={content_id})")

            points = ctype.violation_points
            now = self._credit_service.now()

            violation = self._violation_repo.create(
                Violation(
                    content_type=ctype,
                    content_id=content_id,
                    moderator_id=moderator_id,
                    author_id=content.author_id,
                    reason=reason,
                    points_deducted=points,
                    created_at=now,
                    updated_at=now,
                ),
                session=session,
            )

            if not self._content_repo.mark_violation(
                ctype, content_id, session=session
            ):
                raise NotFoundError(f"{ctype} not found (id={content_id})")

            deduction = self._credit_service.deduct(
                content.author_id, points, session=session
            )

            self._inbox_repo.create(
                InboxMessage(
                    user_id=content.author_id,
                    message=build_violation_message(content, reason, points, deduction),
                    type=_MESSAGE_TYPES[ctype],
                    related_post_id=content.related_post_id or None,
                    related_comment_id=(
                        content.id if ctype is ContentType.COMMENT else None
                    ),
                    created_at=now,
                    updated_at=now,
                ),
                session=session,
            )
            return MarkViolationResult(violation=violation, deduction=deduction)

        result = self._tx.run(_mark)
        logger.info(
            "content marked as violation content=%s:%s moderator_id=%s author_id=%s points=%d",
            ctype,
            content_id,
            moderator_id,
            result.violation.author_id,
            result.violation.points_deducted,
        )
        return result

    def list_violations(
        self, content_type: str | ContentType, content_id: str
    ) -> list[Violation]:
        """콘텐츠에 대한 위반 기록 (최신순)."""
        ctype = parse_content_type(content_type)
        content_id = canonical_content_id(ctype, content_id)
        return self._violation_repo.list_by_content(ctype, content_id)


def get_violation_service(
    violation_repo: ViolationRepositoryInterface = Depends(get_violation_repository),
    content_repo: ContentRepositoryInterface = Depends(get_content_repository),
    inbox_repo: InboxRepositoryInterface = Depends(get_inbox_repository),
    credit_service: CreditService = Depends(get_credit_service),
    tx_manager: TransactionManagerInterface = Depends(get_transaction_manager),
) -> ViolationService:
    """FastAPI DI용 ViolationService 팩토리."""

    return ViolationService(
        violation_repo=violation_repo,
        content_repo=content_repo,
        inbox_repo=inbox_repo,
        credit_service=credit_service,
        tx_manager=tx_manager,
    )
