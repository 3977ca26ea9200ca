from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel


class InboxMessageType(StrEnum):
    POST_VIOLATION = "post_violation"
    COMMENT_VIOLATION = "comment_violation"
    SYSTEM = "system"
    ADMIN = "admin"
    USER_REPLY = "user_reply"


class InboxMessage(BaseModel):
    """유저 수신함 메시지 도메인 모델.

    생성 이후에는 is_read 만 true 로 바뀐다.
    """

    id: str | None = None
    user_id: str
    message: str
    type: InboxMessageType
    related_post_id: str | None = None
    related_comment_id: str | None = None
    is_read: bool = False
    created_at: datetime
    updated_at: datetime
