from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator

from .content import ContentType
from .credit import DeductionResult


class Violation(BaseModel):
    """관리자 1명이 콘텐츠 1건을 위반으로 표시한 감사 기록.

    - (content_type, content_id, moderator_id) 조합당 하나만 존재한다.
    - 생성 후에는 수정/삭제하지 않는다.
    """

    id: str | None = None
    content_type: ContentType
    content_id: str
    moderator_id: str
    author_id: str  # 점수가 차감된 콘텐츠 작성자
    reason: str
    points_deducted: int
    created_at: datetime
    updated_at: datetime

    @field_validator("reason")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be blank")
        return value.strip()


class MarkViolationResult(BaseModel):
    """위반 처리 결과 (기록 + 작성자 점수 변화)."""

    violation: Violation
    deduction: DeductionResult
