from __future__ import annotations

import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


FORUM_TIMEZONE = "FORUM_TIMEZONE"
FORUM_TASKS_API_KEY = "FORUM_TASKS_API_KEY"
FORUM_SWEEP_INTERVAL_SECONDS = "FORUM_SWEEP_INTERVAL_SECONDS"
FORUM_SERVICE_PORT = "FORUM_SERVICE_PORT"

DEFAULT_TIMEZONE = "Asia/Shanghai"
DEFAULT_PORT = 8010


@dataclass(slots=True)
class CreditConfig:
    """신용 점수/정지 엔진 설정."""

    timezone: ZoneInfo


@dataclass(slots=True)
class TasksConfig:
    """정기 작업(스윕) 설정.

    - api_key 가 None 이면 HTTP 트리거 엔드포인트는 비활성화된다.
    - sweep_interval_seconds 가 0 이면 프로세스 내 스케줄러 스레드를 띄우지 않는다.
    """

    api_key: str | None
    sweep_interval_seconds: float


@dataclass(slots=True)
class AppConfig:
    """forum-service 전체 설정."""

    credit: CreditConfig
    tasks: TasksConfig
    port: int


def load_credit_config() -> CreditConfig:
    tz_name = os.getenv(FORUM_TIMEZONE, "").strip() or DEFAULT_TIMEZONE
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise RuntimeError(
            f"{FORUM_TIMEZONE} must be an IANA timezone name, got: {tz_name!r}"
        ) from exc
    return CreditConfig(timezone=tz)


def load_tasks_config() -> TasksConfig:
    api_key = os.getenv(FORUM_TASKS_API_KEY, "").strip() or None

    interval_raw = os.getenv(FORUM_SWEEP_INTERVAL_SECONDS, "").strip()
    if not interval_raw:
        interval = 0.0
    else:
        try:
            interval = float(interval_raw)
        except ValueError as exc:
            raise RuntimeError(
                f"{FORUM_SWEEP_INTERVAL_SECONDS} must be a number if set, got: {interval_raw!r}"
            ) from exc
        if interval < 0:
            raise RuntimeError(
                f"{FORUM_SWEEP_INTERVAL_SECONDS} must be >= 0, got: {interval}"
            )

    return TasksConfig(api_key=api_key, sweep_interval_seconds=interval)


def load_port() -> int:
    port_raw = os.getenv(FORUM_SERVICE_PORT, "").strip()
    if not port_raw:
        return DEFAULT_PORT
    try:
        port = int(port_raw)
    except ValueError as exc:
        raise RuntimeError(
            f"{FORUM_SERVICE_PORT} must be an integer, got: {port_raw!r}"
        ) from exc
    if port <= 0:
        raise RuntimeError(f"{FORUM_SERVICE_PORT} must be > 0, got: {port}")
    return port


def load_config() -> AppConfig:
    """forum-service 설정을 로드하여 AppConfig로 반환한다."""

    return AppConfig(
        credit=load_credit_config(),
        tasks=load_tasks_config(),
        port=load_port(),
    )
