"""신용 점수 API 라우터.

글/댓글 작성 서비스가 작성 직전에 admission 을 호출해 허용 여부를 확인한다.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from ...services.credit_service import CreditService, get_credit_service
from ..identity import Identity, ensure_can_access, get_current_identity, require_admin
from ..schemas.credits import (
    AdmissionDeniedDetail,
    AdmissionResponse,
    CreditStatusResponse,
)


router = APIRouter(prefix="/credits", tags=["credits"])


@router.get("/{user_id}")
def get_credit_status(
    user_id: str,
    identity: Annotated[Identity, Depends(get_current_identity)],
    credit_service: Annotated[CreditService, Depends(get_credit_service)],
) -> CreditStatusResponse:
    """유저의 신용 점수와 정지 상태 조회."""
    ensure_can_access(identity, user_id)
    return CreditStatusResponse.from_domain(credit_service.get_status(user_id))


@router.post(
    "/{user_id}/admission",
    responses={status.HTTP_403_FORBIDDEN: {"model": AdmissionDeniedDetail}},
)
def check_admission(
    user_id: str,
    identity: Annotated[Identity, Depends(get_current_identity)],
    credit_service: Annotated[CreditService, Depends(get_credit_service)],
) -> AdmissionResponse:
    """글/댓글 작성 가능 여부 검사. 거부 시 403 과 남은 정지 시간을 반환한다."""
    ensure_can_access(identity, user_id)

    decision = credit_service.check_admission(user_id)
    if not decision.allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=AdmissionDeniedDetail.from_decision(decision).model_dump(
                mode="json"
            ),
        )
    return AdmissionResponse(allowed=True, credit_score=decision.credit_score)


@router.post("/{user_id}/restore")
def restore_credit(
    user_id: str,
    _admin: Annotated[Identity, Depends(require_admin)],
    credit_service: Annotated[CreditService, Depends(get_credit_service)],
) -> CreditStatusResponse:
    """관리자 수동 복구: 점수 90점, 정지 해제."""
    return CreditStatusResponse.from_domain(credit_service.restore_credit(user_id))
