from __future__ import annotations

from common.mongo.types import (
    BaseDocument,
    build_document_data_from_domain,
    from_object_id,
)

from ...models.content import ContentType
from ...models.violation import Violation


class ViolationDocument(BaseDocument):
    """MongoDB violations 컬렉션 도큐먼트 모델 (게시글/댓글 공용)."""

    content_type: ContentType
    content_id: str
    moderator_id: str
    author_id: str
    reason: str
    points_deducted: int

    @classmethod
    def from_domain(cls, violation: Violation) -> "ViolationDocument":
        data = build_document_data_from_domain(violation)
        return cls.model_validate(data)

    def to_mongo_record(self) -> dict:
        record = super().to_mongo_record()
        # Mongo 에는 enum 이 아니라 문자열로 저장한다.
        record["content_type"] = str(self.content_type)
        return record

    def to_domain(self) -> Violation:
        return Violation(
            id=from_object_id(self.id),
            content_type=self.content_type,
            content_id=self.content_id,
            moderator_id=self.moderator_id,
            author_id=self.author_id,
            reason=self.reason,
            points_deducted=self.points_deducted,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
