from __future__ import annotations

import logging

from pymongo import ASCENDING, DESCENDING, IndexModel, MongoClient
from pymongo.database import Database

from .config import get_mongo_db_name, get_mongo_uri


logger = logging.getLogger(__name__)


def create_client(uri: str | None = None) -> MongoClient:
    """MongoClient 를 생성하고 ping 으로 연결을 검증한다.

    - uri 가 없으면 MONGO_URI 에서 읽어온다.
    - 전역 싱글톤으로 보관하지 않는다. 호출 측(FastAPI app.state 등)이 소유하고 닫는다.
    """

    client: MongoClient = MongoClient(uri or get_mongo_uri())

    try:
        client.admin.command("ping")
    except Exception as exc:  # noqa: BLE001
        client.close()
        raise RuntimeError(f"failed to connect to MongoDB: {exc}") from exc

    return client


def open_database(client: MongoClient, db_name: str | None = None) -> Database:
    """사용할 Database 를 결정한다.

    db_name 인자 > MONGO_DB_NAME > URI 의 기본 DB 순서로 사용한다.
    """

    name = db_name or get_mongo_db_name()
    try:
        if name:
            return client[name]
        return client.get_default_database()
    except Exception as exc:  # noqa: BLE001
        raise RuntimeError(
            "MongoDB database name must be specified via MONGO_DB_NAME or in MONGO_URI (mongodb://.../db_name)",
        ) from exc


def ensure_indexes(db: Database) -> None:
    """포럼 서비스가 의존하는 인덱스를 생성한다.

    중복 생성해도 MongoDB 가 처리하므로 idempotent 하다. 실패는 치명적 오류로 간주한다.
    """

    try:
        users = db["users"]
        users.create_indexes(
            [
                IndexModel([("email", ASCENDING)], name="uniq_email", unique=True),
                IndexModel(
                    [("username", ASCENDING)], name="uniq_username", unique=True
                ),
                IndexModel([("ban_until", ASCENDING)], name="idx_ban_until"),
            ]
        )

        # 같은 관리자가 같은 콘텐츠를 두 번 표시하지 못하도록 저장소 레벨에서 강제한다.
        violations = db["violations"]
        violations.create_indexes(
            [
                IndexModel(
                    [
                        ("content_type", ASCENDING),
                        ("content_id", ASCENDING),
                        ("moderator_id", ASCENDING),
                    ],
                    name="uniq_content_moderator",
                    unique=True,
                ),
                IndexModel(
                    [
                        ("content_type", ASCENDING),
                        ("content_id", ASCENDING),
                        ("created_at", DESCENDING),
                    ],
                    name="idx_content_created_at",
                ),
            ]
        )

        inbox = db["inbox_messages"]
        inbox.create_indexes(
            [
                IndexModel(
                    [("user_id", ASCENDING), ("created_at", DESCENDING)],
                    name="idx_user_created_at",
                ),
                IndexModel(
                    [("user_id", ASCENDING), ("is_read", ASCENDING)],
                    name="idx_user_is_read",
                ),
            ]
        )

        db["posts"].create_index([("author_id", ASCENDING)], name="idx_author")
        db["comments"].create_index([("author_id", ASCENDING)], name="idx_author")
    except Exception as exc:  # noqa: BLE001
        logger.error("failed to ensure MongoDB indexes: %s", exc)
        raise

    logger.info("MongoDB indexes ensured (db=%s)", db.name)
