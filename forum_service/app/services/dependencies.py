"""FastAPI DI용 저장소 / 설정 팩토리.

Database 핸들과 설정은 create_app() 이 app.state 에 올려 두고, 요청마다 여기서 꺼내 쓴다.
전역 싱글톤 클라이언트를 두지 않으므로 테스트에서 앱마다 다른 저장소를 주입할 수 있다.
"""

from __future__ import annotations

from fastapi import Depends, Request
from pymongo.database import Database

from common.mongo.config import transactions_enabled

from ..config import AppConfig, CreditConfig
from ..repositories.content_repository import ContentRepository
from ..repositories.inbox_repository import InboxRepository
from ..repositories.interfaces import (
    ContentRepositoryInterface,
    InboxRepositoryInterface,
    ScheduledJobRepositoryInterface,
    TransactionManagerInterface,
    UserRepositoryInterface,
    ViolationRepositoryInterface,
)
from ..repositories.scheduled_job_repository import ScheduledJobRepository
from ..repositories.transaction import MongoTransactionManager
from ..repositories.user_repository import UserRepository
from ..repositories.violation_repository import ViolationRepository


def get_database(request: Request) -> Database:
    database: Database | None = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("database is not initialised on app.state")
    return database


def get_app_config(request: Request) -> AppConfig:
    config: AppConfig | None = getattr(request.app.state, "config", None)
    if config is None:
        raise RuntimeError("config is not initialised on app.state")
    return config


def get_credit_config(config: AppConfig = Depends(get_app_config)) -> CreditConfig:
    return config.credit


def get_user_repository(
    db: Database = Depends(get_database),
) -> UserRepositoryInterface:
    return UserRepository(db)


def get_content_repository(
    db: Database = Depends(get_database),
) -> ContentRepositoryInterface:
    return ContentRepository(db)


def get_violation_repository(
    db: Database = Depends(get_database),
) -> ViolationRepositoryInterface:
    return ViolationRepository(db)


def get_inbox_repository(
    db: Database = Depends(get_database),
) -> InboxRepositoryInterface:
    return InboxRepository(db)


def get_scheduled_job_repository(
    db: Database = Depends(get_database),
) -> ScheduledJobRepositoryInterface:
    return ScheduledJobRepository(db)


def get_transaction_manager(
    db: Database = Depends(get_database),
) -> TransactionManagerInterface:
    return MongoTransactionManager(db.client, enabled=transactions_enabled())
