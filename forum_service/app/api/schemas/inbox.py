from __future__ import annotations

from pydantic import BaseModel

from common.types.datetime import UtcDateTime

from ...models.inbox import InboxMessage, InboxMessageType


class InboxMessageResponse(BaseModel):
    id: str | None
    message: str
    type: InboxMessageType
    related_post_id: str | None = None
    related_comment_id: str | None = None
    is_read: bool
    created_at: UtcDateTime

    @classmethod
    def from_domain(cls, message: InboxMessage) -> "InboxMessageResponse":
        return cls.model_validate(message.model_dump())


class UnreadCountResponse(BaseModel):
    unread: int
