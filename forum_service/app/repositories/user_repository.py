from __future__ import annotations

from datetime import datetime, timezone

from pymongo import ReturnDocument
from pymongo.client_session import ClientSession
from pymongo.database import Database

from common.mongo.types import parse_object_id

from ..exceptions import NotFoundError
from ..models.user import ForumUser
from .documents.user_document import UserDocument
from .interfaces import UserRepositoryInterface


class UserRepository(UserRepositoryInterface):
    """users 컬렉션에 대한 MongoDB 접근 레이어."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database["users"]

    @staticmethod
    def _from_document(doc: dict) -> ForumUser:
        return UserDocument.model_validate(doc).to_domain()

    def find_by_id(
        self, user_id: str, *, session: ClientSession | None = None
    ) -> ForumUser | None:
        oid = parse_object_id(user_id)
        if oid is None:
            return None
        doc = self._col.find_one({"_id": oid}, session=session)
        if not doc:
            return None
        return self._from_document(doc)

    def update_credit(
        self,
        user_id: str,
        credit_score: int,
        ban_until: datetime | None,
        *,
        session: ClientSession | None = None,
    ) -> ForumUser:
        oid = parse_object_id(user_id)
        if oid is None:
            raise NotFoundError(f"user not found (user_id={user_id})")
        doc = self._col.find_one_and_update(
            {"_id": oid},
            {
                "$set": {
                    "credit_score": credit_score,
                    "ban_until": ban_until,
                    "updated_at": datetime.now(timezone.utc),
                }
            },
            return_document=ReturnDocument.AFTER,
            session=session,
        )
        if not doc:
            raise NotFoundError(f"user not found (user_id={user_id})")
        return self._from_document(doc)

    def set_ban_if_inactive(
        self,
        user_id: str,
        ban_until: datetime,
        now: datetime,
        *,
        session: ClientSession | None = None,
    ) -> bool:
        oid = parse_object_id(user_id)
        if oid is None:
            return False
        # 미래의 ban_until 이 이미 있으면 매칭되지 않으므로 기존 정지를 줄이거나 재시작하지 않는다.
        result = self._col.update_one(
            {
                "_id": oid,
                "$or": [{"ban_until": None}, {"ban_until": {"$lte": now}}],
            },
            {"$set": {"ban_until": ban_until, "updated_at": now}},
            session=session,
        )
        return result.modified_count == 1

    def list_expired_bans(self, now: datetime) -> list[ForumUser]:
        cursor = self._col.find(
            {"ban_until": {"$ne": None, "$lt": now}},
            sort=[("ban_until", 1), ("_id", 1)],
        )
        return [self._from_document(doc) for doc in cursor]

    def rehabilitate(
        self,
        user_id: str,
        expected_ban_until: datetime,
        credit_score: int,
        now: datetime,
        *,
        session: ClientSession | None = None,
    ) -> bool:
        oid = parse_object_id(user_id)
        if oid is None:
            return False
        # 같은 스윕이 동시에 돌아도 ban_until 을 먼저 비운 쪽만 성공한다.
        result = self._col.update_one(
            {"_id": oid, "ban_until": expected_ban_until},
            {
                "$set": {
                    "credit_score": credit_score,
                    "ban_until": None,
                    "rehabilitated_at": now,
                    "updated_at": now,
                }
            },
            session=session,
        )
        return result.modified_count == 1

    def reset_scores(
        self, credit_score: int, *, session: ClientSession | None = None
    ) -> int:
        result = self._col.update_many(
            {"ban_until": None, "credit_score": {"$ne": credit_score}},
            {
                "$set": {
                    "credit_score": credit_score,
                    "updated_at": datetime.now(timezone.utc),
                }
            },
            session=session,
        )
        return result.modified_count
