from __future__ import annotations

from datetime import datetime, timezone

from pymongo import ReturnDocument
from pymongo.client_session import ClientSession
from pymongo.database import Database

from common.mongo.types import parse_object_id

from ..models.inbox import InboxMessage
from .documents.inbox_document import InboxMessageDocument
from .interfaces import InboxRepositoryInterface


class InboxRepository(InboxRepositoryInterface):
    """inbox_messages 컬렉션에 대한 MongoDB 접근 레이어."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database["inbox_messages"]

    def create(
        self, message: InboxMessage, *, session: ClientSession | None = None
    ) -> InboxMessage:
        payload = InboxMessageDocument.from_domain(message).to_mongo_record()
        result = self._col.insert_one(payload, session=session)
        payload["_id"] = result.inserted_id
        return InboxMessageDocument.model_validate(payload).to_domain()

    def find_by_id(self, message_id: str) -> InboxMessage | None:
        oid = parse_object_id(message_id)
        if oid is None:
            return None
        doc = self._col.find_one({"_id": oid})
        if not doc:
            return None
        return InboxMessageDocument.model_validate(doc).to_domain()

    def list_by_user(
        self, user_id: str, page: int, page_size: int
    ) -> tuple[list[InboxMessage], int]:
        if page <= 0:
            page = 1
        if page_size <= 0 or page_size > 100:
            page_size = 20

        skip = (page - 1) * page_size

        total = self._col.count_documents({"user_id": user_id})
        cursor = self._col.find(
            {"user_id": user_id},
            sort=[("created_at", -1), ("_id", -1)],
            skip=skip,
            limit=page_size,
        )

        items: list[InboxMessage] = []
        for raw in cursor:
            items.append(InboxMessageDocument.model_validate(raw).to_domain())

        return items, total

    def count_unread(self, user_id: str) -> int:
        return self._col.count_documents({"user_id": user_id, "is_read": False})

    def mark_read(self, message_id: str) -> InboxMessage | None:
        oid = parse_object_id(message_id)
        if oid is None:
            return None
        doc = self._col.find_one_and_update(
            {"_id": oid},
            {"$set": {"is_read": True, "updated_at": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            return None
        return InboxMessageDocument.model_validate(doc).to_domain()
