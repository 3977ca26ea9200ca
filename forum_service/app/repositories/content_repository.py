from __future__ import annotations

from datetime import datetime, timezone

from pymongo.client_session import ClientSession
from pymongo.collection import Collection
from pymongo.database import Database

from common.mongo.types import parse_object_id

from ..models.content import ContentItem, ContentType
from .documents.content_document import CommentDocument, PostDocument
from .interfaces import ContentRepositoryInterface


class ContentRepository(ContentRepositoryInterface):
    """posts / comments 컬렉션에 대한 MongoDB 접근 레이어."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._posts = database["posts"]
        self._comments = database["comments"]

    def _collection(self, content_type: ContentType) -> Collection:
        if content_type is ContentType.POST:
            return self._posts
        return self._comments

    def find(
        self,
        content_type: ContentType,
        content_id: str,
        *,
        session: ClientSession | None = None,
    ) -> ContentItem | None:
        oid = parse_object_id(content_id)
        if oid is None:
            return None
        doc = self._collection(content_type).find_one({"_id": oid}, session=session)
        if not doc:
            return None
        if content_type is ContentType.POST:
            return PostDocument.model_validate(doc).to_domain()
        return CommentDocument.model_validate(doc).to_domain()

    def mark_violation(
        self,
        content_type: ContentType,
        content_id: str,
        *,
        session: ClientSession | None = None,
    ) -> bool:
        oid = parse_object_id(content_id)
        if oid is None:
            return False
        result = self._collection(content_type).update_one(
            {"_id": oid},
            {
                "$set": {
                    "is_violation": True,
                    "updated_at": datetime.now(timezone.utc),
                }
            },
            session=session,
        )
        # 이미 true 인 경우(다른 관리자가 먼저 표시)도 성공으로 본다.
        return result.matched_count == 1
