"""신용 점수 / 정지 엔진의 결과 모델."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel


class CreditState(StrEnum):
    NORMAL = "normal"  # 점수 >= 80, 정지 없음
    LOW_SCORE = "low_score"  # 점수 < 80, 아직 정지 전
    BANNED = "banned"  # ban_until 이 미래


class AdmissionDenialCode(StrEnum):
    BANNED = "posting_banned"
    LOW_SCORE = "credit_score_too_low"


class CreditStatus(BaseModel):
    user_id: str
    credit_score: int
    ban_until: datetime | None
    state: CreditState


class DeductionResult(BaseModel):
    user_id: str
    previous_score: int
    credit_score: int
    ban_until: datetime | None
    newly_banned: bool  # 이번 차감으로 정지가 새로 걸렸는지


class AdmissionDecision(BaseModel):
    allowed: bool
    credit_score: int
    code: AdmissionDenialCode | None = None
    ban_until: datetime | None = None
    remaining_hours: int | None = None  # 올림 처리한 남은 정지 시간


class SweepResult(BaseModel):
    unbanned_users: int
    reset_users: int
