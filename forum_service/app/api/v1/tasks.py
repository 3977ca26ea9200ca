"""정기 작업 트리거 API.

외부 cron 이 Bearer 토큰으로 호출한다. 두 스윕 모두 멱등이라 여러 번 호출해도 안전하다.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from ...services.credit_service import CreditService, get_credit_service
from ..identity import require_tasks_token
from ..schemas.tasks import SweepResponse


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
    dependencies=[Depends(require_tasks_token)],
)


@router.api_route("/credit-score", methods=["GET", "POST"])
def run_credit_score_tasks(
    credit_service: Annotated[CreditService, Depends(get_credit_service)],
) -> SweepResponse:
    """정지 해제 스윕 후 주간 리셋 스윕을 실행한다."""
    result = credit_service.run_all_sweeps()
    logger.info(
        "credit score tasks finished unbanned=%d reset=%d",
        result.unbanned_users,
        result.reset_users,
    )
    return SweepResponse(
        unbanned_users=result.unbanned_users,
        reset_users=result.reset_users,
    )
