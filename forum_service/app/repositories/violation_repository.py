from __future__ import annotations

from pymongo.client_session import ClientSession
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from ..exceptions import ConflictError
from ..models.content import ContentType
from ..models.violation import Violation
from .documents.violation_document import ViolationDocument
from .interfaces import ViolationRepositoryInterface


class ViolationRepository(ViolationRepositoryInterface):
    """violations 컬렉션에 대한 MongoDB 접근 레이어.

    (content_type, content_id, moderator_id) 유니크 인덱스는 common.mongo.client.ensure_indexes 에서 만든다.
    """

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database["violations"]

    def exists(
        self,
        content_type: ContentType,
        content_id: str,
        moderator_id: str,
        *,
        session: ClientSession | None = None,
    ) -> bool:
        doc = self._col.find_one(
            {
                "content_type": str(content_type),
                "content_id": content_id,
                "moderator_id": moderator_id,
            },
            {"_id": 1},
            session=session,
        )
        return doc is not None

    def create(
        self, violation: Violation, *, session: ClientSession | None = None
    ) -> Violation:
        payload = ViolationDocument.from_domain(violation).to_mongo_record()
        try:
            result = self._col.insert_one(payload, session=session)
        except DuplicateKeyError as exc:
            # exists() 검사와 insert 사이에 같은 관리자의 요청이 먼저 들어온 경우
            raise ConflictError(
                f"violation already recorded (content={violation.content_type}:{violation.content_id}, moderator={violation.moderator_id})"
            ) from exc
        payload["_id"] = result.inserted_id
        return ViolationDocument.model_validate(payload).to_domain()

    def list_by_content(
        self, content_type: ContentType, content_id: str
    ) -> list[Violation]:
        cursor = self._col.find(
            {"content_type": str(content_type), "content_id": content_id},
            sort=[("created_at", -1), ("_id", -1)],
        )
        return [ViolationDocument.model_validate(raw).to_domain() for raw in cursor]
