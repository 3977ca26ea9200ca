from __future__ import annotations

from pydantic import BaseModel


class SweepResponse(BaseModel):
    """정기 스윕 실행 결과."""

    unbanned_users: int
    reset_users: int
