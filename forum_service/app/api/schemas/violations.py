from __future__ import annotations

from pydantic import BaseModel, Field

from common.types.datetime import OptionalUtcDateTime, UtcDateTime

from ...constants import DEFAULT_VIOLATION_REASON
from ...models.content import ContentType
from ...models.violation import MarkViolationResult, Violation


class MarkViolationRequest(BaseModel):
    """관리자 위반 처리 요청. reason 을 생략하면 기본 사유를 쓴다."""

    reason: str = Field(default=DEFAULT_VIOLATION_REASON, max_length=500)


class ViolationResponse(BaseModel):
    id: str | None
    content_type: ContentType
    content_id: str
    moderator_id: str
    author_id: str
    reason: str
    points_deducted: int
    created_at: UtcDateTime

    @classmethod
    def from_domain(cls, violation: Violation) -> "ViolationResponse":
        return cls.model_validate(violation.model_dump())


class MarkViolationResponse(BaseModel):
    author_id: str
    credit_score: int
    banned: bool
    ban_until: OptionalUtcDateTime = None
    violation: ViolationResponse

    @classmethod
    def from_domain(cls, result: MarkViolationResult) -> "MarkViolationResponse":
        return cls(
            author_id=result.deduction.user_id,
            credit_score=result.deduction.credit_score,
            banned=result.deduction.newly_banned,
            ban_until=result.deduction.ban_until,
            violation=ViolationResponse.from_domain(result.violation),
        )
