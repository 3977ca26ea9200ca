from __future__ import annotations

import logging
import threading

from pymongo.database import Database

from common.mongo.config import transactions_enabled

from ..config import AppConfig
from ..repositories.inbox_repository import InboxRepository
from ..repositories.scheduled_job_repository import ScheduledJobRepository
from ..repositories.transaction import MongoTransactionManager
from ..repositories.user_repository import UserRepository
from ..services.credit_service import CreditService


logger = logging.getLogger(__name__)


_SWEEP_SCHEDULER_THREAD: threading.Thread | None = None
_SWEEP_SCHEDULER_STOP_EVENT: threading.Event | None = None


def build_credit_service(db: Database, config: AppConfig) -> CreditService:
    return CreditService(
        user_repo=UserRepository(db),
        inbox_repo=InboxRepository(db),
        job_repo=ScheduledJobRepository(db),
        tx_manager=MongoTransactionManager(db.client, enabled=transactions_enabled()),
        config=config.credit,
    )


def _run_sweeps(service: CreditService, label: str) -> None:
    logger.info("credit sweeps starting (%s)", label)
    try:
        result = service.run_all_sweeps()
        logger.info(
            "credit sweeps completed (%s) unbanned=%d reset=%d",
            label,
            result.unbanned_users,
            result.reset_users,
        )
    except Exception:  # noqa: BLE001
        logger.exception("credit sweeps failed (%s)", label)


def _run_scheduler_loop(
    stop_event: threading.Event, service: CreditService, interval: float
) -> None:
    logger.info("sweep scheduler thread started (interval=%.0f seconds)", interval)

    try:
        _run_sweeps(service, "initial run")

        while not stop_event.wait(interval):
            _run_sweeps(service, "scheduled run")
    finally:
        logger.info("sweep scheduler thread stopped")


def start_sweep_scheduler(db: Database, config: AppConfig) -> bool:
    """정지 해제 / 주간 리셋 스윕 스레드를 시작한다.

    FastAPI lifespan 에서 호출된다. FORUM_SWEEP_INTERVAL_SECONDS 가 0 이면 아무것도 하지 않고
    False 를 반환한다.
    """

    global _SWEEP_SCHEDULER_THREAD, _SWEEP_SCHEDULER_STOP_EVENT

    interval = config.tasks.sweep_interval_seconds
    if interval <= 0:
        logger.info("sweep scheduler disabled (interval=%s)", interval)
        return False

    if _SWEEP_SCHEDULER_THREAD and _SWEEP_SCHEDULER_THREAD.is_alive():
        return True

    stop_event = threading.Event()
    thread = threading.Thread(
        target=_run_scheduler_loop,
        args=(stop_event, build_credit_service(db, config), interval),
        name="credit-sweep-scheduler",
        daemon=True,
    )

    _SWEEP_SCHEDULER_STOP_EVENT = stop_event
    _SWEEP_SCHEDULER_THREAD = thread

    thread.start()
    logger.info("sweep scheduler thread launched")
    return True


def stop_sweep_scheduler() -> None:
    """스윕 스레드를 정지한다. FastAPI lifespan 종료 시 호출된다."""

    global _SWEEP_SCHEDULER_THREAD, _SWEEP_SCHEDULER_STOP_EVENT

    if _SWEEP_SCHEDULER_THREAD is None or _SWEEP_SCHEDULER_STOP_EVENT is None:
        return

    _SWEEP_SCHEDULER_STOP_EVENT.set()
    _SWEEP_SCHEDULER_THREAD.join(timeout=10.0)

    _SWEEP_SCHEDULER_THREAD = None
    _SWEEP_SCHEDULER_STOP_EVENT = None

    logger.info("sweep scheduler thread stopped by shutdown")
