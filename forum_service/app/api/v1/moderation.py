"""관리자 위반 처리 API 라우터."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from ...services.violation_service import ViolationService, get_violation_service
from ..identity import Identity, require_admin
from ..schemas.violations import (
    MarkViolationRequest,
    MarkViolationResponse,
    ViolationResponse,
)


router = APIRouter(prefix="/moderation", tags=["moderation"])


@router.post(
    "/{content_type}/{content_id}/violation",
    status_code=status.HTTP_201_CREATED,
)
def mark_violation(
    content_type: str,
    content_id: str,
    admin: Annotated[Identity, Depends(require_admin)],
    violation_service: Annotated[ViolationService, Depends(get_violation_service)],
    req: MarkViolationRequest | None = None,
) -> MarkViolationResponse:
    """게시글/댓글 위반 처리. 같은 관리자가 같은 콘텐츠를 다시 처리하면 409."""
    payload = req or MarkViolationRequest()
    result = violation_service.mark_violation(
        content_id=content_id,
        content_type=content_type,
        moderator_id=admin.user_id,
        reason=payload.reason,
    )
    return MarkViolationResponse.from_domain(result)


@router.get("/{content_type}/{content_id}/violations")
def list_violations(
    content_type: str,
    content_id: str,
    _admin: Annotated[Identity, Depends(require_admin)],
    violation_service: Annotated[ViolationService, Depends(get_violation_service)],
) -> list[ViolationResponse]:
    violations = violation_service.list_violations(content_type, content_id)
    return [ViolationResponse.from_domain(v) for v in violations]
