from __future__ import annotations

from pydantic import BaseModel

from common.types.datetime import OptionalUtcDateTime

from ...models.credit import (
    AdmissionDecision,
    AdmissionDenialCode,
    CreditState,
    CreditStatus,
)


class CreditStatusResponse(BaseModel):
    user_id: str
    credit_score: int
    ban_until: OptionalUtcDateTime = None
    state: CreditState

    @classmethod
    def from_domain(cls, status: CreditStatus) -> "CreditStatusResponse":
        return cls.model_validate(status.model_dump())


class AdmissionResponse(BaseModel):
    """작성 허용 응답. 거부는 403 + AdmissionDeniedDetail 로 내려간다."""

    allowed: bool
    credit_score: int


class AdmissionDeniedDetail(BaseModel):
    code: AdmissionDenialCode
    message: str
    credit_score: int
    ban_until: OptionalUtcDateTime = None
    remaining_hours: int | None = None

    @classmethod
    def from_decision(cls, decision: AdmissionDecision) -> "AdmissionDeniedDetail":
        assert decision.code is not None
        return cls(
            code=decision.code,
            message=denial_message(decision),
            credit_score=decision.credit_score,
            ban_until=decision.ban_until,
            remaining_hours=decision.remaining_hours,
        )


def denial_message(decision: AdmissionDecision) -> str:
    hours = decision.remaining_hours or 0
    if decision.code is AdmissionDenialCode.BANNED:
        return f"작성이 제한된 상태입니다. 약 {hours}시간 후에 다시 시도해 주세요."
    return (
        f"신용 점수가 부족하여({decision.credit_score}점) 24시간 동안 작성이 제한됩니다."
    )
