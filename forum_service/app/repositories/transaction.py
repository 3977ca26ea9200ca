"""MongoDB 멀티 도큐먼트 트랜잭션 래퍼.

서비스 레이어는 TransactionManagerInterface.run(fn) 만 알고, 세션 관리/에러 변환은 여기서 한다.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from pymongo import MongoClient
from pymongo.client_session import ClientSession
from pymongo.errors import PyMongoError

from ..exceptions import TransientStoreError
from .interfaces import TransactionManagerInterface


logger = logging.getLogger(__name__)

T = TypeVar("T")


class MongoTransactionManager(TransactionManagerInterface):
    """start_session / start_transaction 으로 fn 을 원자적으로 실행한다.

    - fn 이 정상 반환하면 커밋, 예외가 나면 abort 후 예외를 전파한다.
    - PyMongoError 는 TransientStoreError 로 감싼다. 도메인 예외(ConflictError 등)는 그대로 둔다.
    - 내부 재시도는 하지 않는다 (with_transaction 을 쓰지 않는 이유). 재시도는 호출 측의 몫이다.
    - enabled=False 이면 세션 없이 fn(None) 을 실행한다. replica set 이 없는 개발 환경용.
    """

    def __init__(self, client: MongoClient, *, enabled: bool = True) -> None:
        self._client = client
        self._enabled = enabled

    def run(self, fn: Callable[[ClientSession | None], T]) -> T:
        try:
            if not self._enabled:
                return fn(None)
            with self._client.start_session() as session:
                with session.start_transaction():
                    return fn(session)
        except PyMongoError as exc:
            logger.exception("record store transaction aborted")
            raise TransientStoreError(f"record store transaction failed: {exc}") from exc
