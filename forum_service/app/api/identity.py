"""요청 주체(identity) 추출 의존성.

세션 검증은 앞단 게이트웨이가 하고, 검증된 사용자 정보를 헤더로 넘겨 준다.

- X-User-Id: 로그인한 사용자 id (없으면 401)
- X-User-Admin: "true"/"1" 이면 관리자

정기 작업 엔드포인트는 사용자 세션 대신 FORUM_TASKS_API_KEY Bearer 토큰으로 인증한다.
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from ..config import AppConfig
from ..exceptions import ForbiddenError, UnauthorizedError
from ..services.dependencies import get_app_config


_TRUE_VALUES = {"1", "true", "yes"}


@dataclass(frozen=True, slots=True)
class Identity:
    user_id: str
    is_admin: bool = False

    def can_access(self, user_id: str) -> bool:
        """본인 또는 관리자만 해당 유저의 데이터에 접근할 수 있다."""
        return self.is_admin or self.user_id == user_id


def get_current_identity(
    x_user_id: Annotated[str | None, Header(alias="X-User-Id")] = None,
    x_user_admin: Annotated[str | None, Header(alias="X-User-Admin")] = None,
) -> Identity:
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise UnauthorizedError("로그인이 필요합니다.")
    is_admin = (x_user_admin or "").strip().lower() in _TRUE_VALUES
    return Identity(user_id=user_id, is_admin=is_admin)


def require_admin(
    identity: Annotated[Identity, Depends(get_current_identity)],
) -> Identity:
    if not identity.is_admin:
        raise ForbiddenError("관리자만 사용할 수 있습니다.")
    return identity


def ensure_can_access(identity: Identity, user_id: str) -> None:
    if not identity.can_access(user_id):
        raise ForbiddenError("다른 사용자의 정보에는 접근할 수 없습니다.")


def require_tasks_token(
    config: Annotated[AppConfig, Depends(get_app_config)],
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Authorization: Bearer <FORUM_TASKS_API_KEY> 검사.

    키가 설정되지 않았으면 엔드포인트 자체를 비활성화(503)한다.
    """

    expected = config.tasks.api_key
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="scheduled tasks are not configured",
        )

    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not hmac.compare_digest(token.strip().encode(), expected.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
