from __future__ import annotations

from datetime import datetime, timezone

from pymongo.client_session import ClientSession
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from .interfaces import ScheduledJobRepositoryInterface


# 아직 한 번도 실행되지 않은 작업의 last_slot
NEVER_RUN = datetime(1970, 1, 1, tzinfo=timezone.utc)


class ScheduledJobRepository(ScheduledJobRepositoryInterface):
    """scheduled_jobs 컬렉션에 대한 MongoDB 접근 레이어.

    작업 이름을 _id 로 쓰고, 마지막으로 실행한 슬롯(예: 이번 주 월요일 00:00)을 last_slot 에 남긴다.
    """

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database["scheduled_jobs"]

    def ensure_job(self, job_name: str) -> None:
        """작업 도큐먼트가 없으면 만든다.

        claim_slot 은 트랜잭션 안에서 돌기 때문에 upsert 충돌(DuplicateKeyError)로 트랜잭션이
        abort 되지 않도록, 도큐먼트 생성은 트랜잭션 밖에서 미리 해 둔다.
        """

        now = datetime.now(timezone.utc)
        try:
            self._col.update_one(
                {"_id": job_name},
                {
                    "$setOnInsert": {
                        "last_slot": NEVER_RUN,
                        "created_at": now,
                        "updated_at": now,
                    }
                },
                upsert=True,
            )
        except DuplicateKeyError:
            # 동시에 다른 프로세스가 먼저 만든 경우
            return

    def claim_slot(
        self,
        job_name: str,
        slot: datetime,
        now: datetime,
        *,
        session: ClientSession | None = None,
    ) -> bool:
        result = self._col.update_one(
            {"_id": job_name, "last_slot": {"$lt": slot}},
            {"$set": {"last_slot": slot, "last_run_at": now, "updated_at": now}},
            session=session,
        )
        return result.modified_count == 1
