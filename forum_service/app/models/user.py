from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from ..constants import INITIAL_CREDIT_SCORE


class ForumUser(BaseModel):
    """포럼 유저 도메인 모델.

    - 가입/프로필 수정은 외부 서비스가 담당하고, 이 서비스는 credit_score / ban_until 만 바꾼다.
    - ban_until 이 미래 시각이면 정지 상태다.
    """

    id: str | None = None
    email: str
    username: str
    password_hash: str = ""
    is_admin: bool = False
    credit_score: int = Field(default=INITIAL_CREDIT_SCORE)
    ban_until: datetime | None = None
    rehabilitated_at: datetime | None = None  # 마지막 정지 해제 처리 시각
    created_at: datetime
    updated_at: datetime

    def is_banned(self, now: datetime) -> bool:
        return self.ban_until is not None and self.ban_until > now
