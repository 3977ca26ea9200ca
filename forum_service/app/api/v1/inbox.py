"""로그인 유저 본인의 수신함 API 라우터."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from ...services.inbox_service import InboxService, get_inbox_service
from ..identity import Identity, get_current_identity
from ..schemas.common import PaginatedResponse
from ..schemas.inbox import InboxMessageResponse, UnreadCountResponse


router = APIRouter(prefix="/inbox", tags=["inbox"])


@router.get("")
def list_messages(
    identity: Annotated[Identity, Depends(get_current_identity)],
    inbox_service: Annotated[InboxService, Depends(get_inbox_service)],
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedResponse[InboxMessageResponse]:
    """수신함 목록 (최신순)."""
    items, total = inbox_service.list_messages(identity.user_id, page, page_size)
    return PaginatedResponse(
        items=[InboxMessageResponse.from_domain(m) for m in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/unread-count")
def unread_count(
    identity: Annotated[Identity, Depends(get_current_identity)],
    inbox_service: Annotated[InboxService, Depends(get_inbox_service)],
) -> UnreadCountResponse:
    return UnreadCountResponse(unread=inbox_service.unread_count(identity.user_id))


@router.put("/{message_id}/read")
def mark_read(
    message_id: str,
    identity: Annotated[Identity, Depends(get_current_identity)],
    inbox_service: Annotated[InboxService, Depends(get_inbox_service)],
) -> InboxMessageResponse:
    message = inbox_service.mark_read(identity.user_id, message_id)
    return InboxMessageResponse.from_domain(message)
