"""신용 점수 / 정지 엔진.

유저별 credit_score 와 ban_until 을 관리하고, 글/댓글 작성 전 입장 검사와
정기 스윕(정지 해제 복구, 주간 리셋)을 처리한다.

상태 전이 (점수/정지 기준):
    NORMAL(>=80) --차감--> LOW_SCORE(<80) --차감 트랜잭션 또는 입장 검사--> BANNED(24h)
    BANNED --만료 후 sweep_unban--> NORMAL(정확히 80점)
    NORMAL/LOW_SCORE --주간 리셋--> NORMAL(100점)   (정지 중인 유저는 제외)
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Callable
from zoneinfo import ZoneInfo

from fastapi import Depends
from pymongo.client_session import ClientSession

from ..config import CreditConfig
from ..constants import (
    ADMIN_RESTORED_CREDIT_SCORE,
    BAN_DURATION,
    CREDIT_SCORE_FLOOR,
    CREDIT_THRESHOLD,
    REHABILITATED_CREDIT_SCORE,
    WEEKLY_RESET_CREDIT_SCORE,
    WEEKLY_RESET_JOB_NAME,
    WEEKLY_RESET_WEEKDAY,
    WEEKLY_RESET_WINDOW_HOURS,
)
from ..exceptions import NotFoundError, ValidationError
from ..models.credit import (
    AdmissionDecision,
    AdmissionDenialCode,
    CreditState,
    CreditStatus,
    DeductionResult,
    SweepResult,
)
from ..models.inbox import InboxMessage, InboxMessageType
from ..models.user import ForumUser
from ..repositories.interfaces import (
    InboxRepositoryInterface,
    ScheduledJobRepositoryInterface,
    TransactionManagerInterface,
    UserRepositoryInterface,
)
from .dependencies import (
    get_credit_config,
    get_inbox_repository,
    get_scheduled_job_repository,
    get_transaction_manager,
    get_user_repository,
)


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

UNBAN_MESSAGE = (
    f"계정 정지가 해제되었고 신용 점수가 {REHABILITATED_CREDIT_SCORE}점으로 조정되었습니다. "
    "커뮤니티 규칙을 지켜 주세요."
)
ADMIN_RESTORE_MESSAGE = (
    f"관리자가 신용 점수를 {ADMIN_RESTORED_CREDIT_SCORE}점으로 조정하고 작성 제한을 해제했습니다. "
    "커뮤니티 규칙을 지켜 주세요."
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def remaining_ban_hours(ban_until: datetime, now: datetime) -> int:
    """남은 정지 시간을 시간 단위로 올림한다 (23h 59m -> 24)."""
    seconds = (ban_until - now).total_seconds()
    return max(0, math.ceil(seconds / 3600))


class CreditService:
    """신용 점수 / 정지 관련 비즈니스 로직."""

    def __init__(
        self,
        user_repo: UserRepositoryInterface,
        inbox_repo: InboxRepositoryInterface,
        job_repo: ScheduledJobRepositoryInterface,
        tx_manager: TransactionManagerInterface,
        config: CreditConfig,
        clock: Clock | None = None,
    ) -> None:
        self._user_repo = user_repo
        self._inbox_repo = inbox_repo
        self._job_repo = job_repo
        self._tx = tx_manager
        self._tz: ZoneInfo = config.timezone
        self._clock = clock or _utc_now

    def now(self) -> datetime:
        return self._clock()

    # -------- 조회 --------

    def get_status(self, user_id: str) -> CreditStatus:
        user = self._require_user(user_id)
        return CreditStatus(
            user_id=user_id,
            credit_score=user.credit_score,
            ban_until=user.ban_until,
            state=self._state_of(user, self.now()),
        )

    # -------- 차감 --------

    def apply_deduction(self, user_id: str, points: int) -> DeductionResult:
        """점수를 차감하고 필요하면 24시간 정지를 건다. 자체 트랜잭션으로 실행한다."""
        return self._tx.run(lambda session: self.deduct(user_id, points, session=session))

    def deduct(
        self,
        user_id: str,
        points: int,
        *,
        session: ClientSession | None,
    ) -> DeductionResult:
        """apply_deduction 의 본체. 호출 측 트랜잭션(위반 기록, 알림 생성과 같은 단위)에 참여한다.

        - 점수는 0 아래로 내려가지 않는다.
        - 80 미만이 되고 진행 중인 정지가 없으면 now + 24h 로 정지한다.
        """

        if points <= 0:
            raise ValidationError(f"points must be positive, got: {points}")

        user = self._require_user(user_id, session=session)
        now = self.now()

        new_score = max(CREDIT_SCORE_FLOOR, user.credit_score - points)
        ban_until, newly_banned = self._resolve_ban(user, new_score, now)

        self._user_repo.update_credit(user_id, new_score, ban_until, session=session)

        logger.info(
            "credit deducted user_id=%s points=%d score=%d->%d newly_banned=%s",
            user_id,
            points,
            user.credit_score,
            new_score,
            newly_banned,
        )
        return DeductionResult(
            user_id=user_id,
            previous_score=user.credit_score,
            credit_score=new_score,
            ban_until=ban_until,
            newly_banned=newly_banned,
        )

    # -------- 입장 검사 --------

    def check_admission(self, user_id: str) -> AdmissionDecision:
        """글/댓글 생성 직전에 호출한다.

        1. 정지 중이면 남은 시간과 함께 거부
        2. 점수가 기준 미만이면 이 시점에 24시간 정지를 걸고 거부
        3. 그 외에는 허용
        """

        user = self._require_user(user_id)
        now = self.now()

        if user.is_banned(now):
            return self._deny(user, AdmissionDenialCode.BANNED, user.ban_until, now)

        if user.credit_score < CREDIT_THRESHOLD:
            ban_until, newly_banned = self._resolve_ban(user, user.credit_score, now)
            if newly_banned and ban_until is not None:
                applied = self._user_repo.set_ban_if_inactive(user_id, ban_until, now)
                if applied:
                    logger.info(
                        "ban imposed at admission user_id=%s score=%d ban_until=%s",
                        user_id,
                        user.credit_score,
                        ban_until.isoformat(),
                    )
                else:
                    # 동시에 다른 요청이 먼저 정지를 걸었다. 저장된 값을 기준으로 응답한다.
                    current = self._require_user(user_id)
                    ban_until = current.ban_until
            return self._deny(user, AdmissionDenialCode.LOW_SCORE, ban_until, now)

        return AdmissionDecision(allowed=True, credit_score=user.credit_score)

    # -------- 관리자 복구 --------

    def restore_credit(self, user_id: str) -> CreditStatus:
        """관리자가 점수를 90점으로 올리고 정지를 해제한다."""

        def _restore(session: ClientSession | None) -> ForumUser:
            self._require_user(user_id, session=session)
            updated = self._user_repo.update_credit(
                user_id, ADMIN_RESTORED_CREDIT_SCORE, None, session=session
            )
            self._notify(user_id, ADMIN_RESTORE_MESSAGE, session=session)
            return updated

        updated = self._tx.run(_restore)
        logger.info("credit restored by admin user_id=%s", user_id)
        return CreditStatus(
            user_id=user_id,
            credit_score=updated.credit_score,
            ban_until=updated.ban_until,
            state=self._state_of(updated, self.now()),
        )

    # -------- 정기 스윕 --------

    def sweep_unban(self) -> int:
        """정지 기간이 끝난 유저를 80점으로 복구하고 정지를 해제한다.

        선택 조건은 "ban_until 이 null 이 아니고 현재보다 과거"이며, ban_until 을 비우는 것이
        처리 완료 표시다. 여러 번 / 동시에 호출해도 한 유저는 한 번만 처리된다.
        """

        now = self.now()
        count = 0
        for user in self._user_repo.list_expired_bans(now):
            expected = user.ban_until
            if expected is None or user.id is None:
                continue
            user_id = user.id

            def _rehabilitate(
                session: ClientSession | None,
                user_id: str = user_id,
                expected: datetime = expected,
            ) -> bool:
                if not self._user_repo.rehabilitate(
                    user_id,
                    expected,
                    REHABILITATED_CREDIT_SCORE,
                    now,
                    session=session,
                ):
                    return False
                self._notify(user_id, UNBAN_MESSAGE, session=session)
                return True

            if self._tx.run(_rehabilitate):
                count += 1
                logger.info(
                    "user rehabilitated user_id=%s previous_score=%d",
                    user_id,
                    user.credit_score,
                )

        logger.info("unban sweep finished rehabilitated=%d", count)
        return count

    def sweep_weekly_reset(self) -> int:
        """주간 점수 리셋. 월요일 00:00~01:00 (포럼 타임존) 에만 동작한다.

        창 안에서도 이번 주 슬롯을 이미 가져간 호출이 있으면 0 을 반환한다.
        정지 중인(ban_until 이 있는) 유저는 리셋하지 않는다.
        """

        now = self.now()
        slot = self.weekly_reset_slot(now)
        if slot is None:
            logger.info(
                "weekly reset skipped: outside window (local=%s)",
                now.astimezone(self._tz).isoformat(),
            )
            return 0

        self._job_repo.ensure_job(WEEKLY_RESET_JOB_NAME)

        def _reset(session: ClientSession | None) -> int:
            if not self._job_repo.claim_slot(
                WEEKLY_RESET_JOB_NAME, slot, now, session=session
            ):
                return 0
            return self._user_repo.reset_scores(
                WEEKLY_RESET_CREDIT_SCORE, session=session
            )

        count = self._tx.run(_reset)
        logger.info(
            "weekly reset finished slot=%s reset=%d", slot.isoformat(), count
        )
        return count

    def run_all_sweeps(self) -> SweepResult:
        unbanned = self.sweep_unban()
        reset = self.sweep_weekly_reset()
        return SweepResult(unbanned_users=unbanned, reset_users=reset)

    def weekly_reset_slot(self, now: datetime) -> datetime | None:
        """now 가 주간 리셋 창 안이면 해당 주 월요일 00:00(UTC 로 변환)을, 아니면 None."""
        local = now.astimezone(self._tz)
        if local.weekday() != WEEKLY_RESET_WEEKDAY:
            return None
        if local.hour >= WEEKLY_RESET_WINDOW_HOURS:
            return None
        midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
        return midnight.astimezone(timezone.utc)

    # -------- 내부 헬퍼 --------

    def _resolve_ban(
        self, user: ForumUser, score: int, now: datetime
    ) -> tuple[datetime | None, bool]:
        """score 기준으로 저장할 ban_until 과 새 정지 여부를 정한다.

        진행 중인 정지가 있으면 그대로 둔다 (연장/재시작하지 않음).
        """
        if user.is_banned(now):
            return user.ban_until, False
        if score < CREDIT_THRESHOLD:
            return now + BAN_DURATION, True
        return user.ban_until, False

    def _deny(
        self,
        user: ForumUser,
        code: AdmissionDenialCode,
        ban_until: datetime | None,
        now: datetime,
    ) -> AdmissionDecision:
        return AdmissionDecision(
            allowed=False,
            credit_score=user.credit_score,
            code=code,
            ban_until=ban_until,
            remaining_hours=(
                remaining_ban_hours(ban_until, now) if ban_until is not None else None
            ),
        )

    def _state_of(self, user: ForumUser, now: datetime) -> CreditState:
        if user.is_banned(now):
            return CreditState.BANNED
        if user.credit_score < CREDIT_THRESHOLD:
            return CreditState.LOW_SCORE
        return CreditState.NORMAL

    def _require_user(
        self, user_id: str, *, session: ClientSession | None = None
    ) -> ForumUser:
        user = self._user_repo.find_by_id(user_id, session=session)
        if user is None:
            raise NotFoundError(f"user not found (user_id={user_id})")
        return user

    def _notify(
        self, user_id: str, message: str, *, session: ClientSession | None
    ) -> None:
        now = self.now()
        self._inbox_repo.create(
            InboxMessage(
                user_id=user_id,
                message=message,
                type=InboxMessageType.SYSTEM,
                created_at=now,
                updated_at=now,
            ),
            session=session,
        )


def get_credit_service(
    user_repo: UserRepositoryInterface = Depends(get_user_repository),
    inbox_repo: InboxRepositoryInterface = Depends(get_inbox_repository),
    job_repo: ScheduledJobRepositoryInterface = Depends(get_scheduled_job_repository),
    tx_manager: TransactionManagerInterface = Depends(get_transaction_manager),
    config: CreditConfig = Depends(get_credit_config),
) -> CreditService:
    """FastAPI DI용 CreditService 팩토리."""

    return CreditService(
        user_repo=user_repo,
        inbox_repo=inbox_repo,
        job_repo=job_repo,
        tx_manager=tx_manager,
        config=config,
    )
