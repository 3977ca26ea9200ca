from __future__ import annotations

from common.mongo.types import (
    BaseDocument,
    build_document_data_from_domain,
    from_object_id,
)

from ...models.inbox import InboxMessage, InboxMessageType


class InboxMessageDocument(BaseDocument):
    """MongoDB inbox_messages 컬렉션 도큐먼트 모델."""

    user_id: str
    message: str
    type: InboxMessageType
    related_post_id: str | None = None
    related_comment_id: str | None = None
    is_read: bool = False

    @classmethod
    def from_domain(cls, message: InboxMessage) -> "InboxMessageDocument":
        data = build_document_data_from_domain(message)
        return cls.model_validate(data)

    def to_mongo_record(self) -> dict:
        record = super().to_mongo_record()
        record["type"] = str(self.type)
        return record

    def to_domain(self) -> InboxMessage:
        return InboxMessage(
            id=from_object_id(self.id),
            user_id=self.user_id,
            message=self.message,
            type=self.type,
            related_post_id=self.related_post_id,
            related_comment_id=self.related_comment_id,
            is_read=self.is_read,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
