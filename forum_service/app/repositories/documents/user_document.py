from __future__ import annotations

from common.mongo.types import BaseDocument, OptionalMongoDateTime, from_object_id

from ...constants import INITIAL_CREDIT_SCORE
from ...models.user import ForumUser


class UserDocument(BaseDocument):
    """MongoDB users 컬렉션 도큐먼트 모델.

    가입/프로필 필드는 외부 서비스가 쓰고, 이 서비스는 점수/정지 필드만 갱신한다.
    """

    email: str
    username: str
    password_hash: str = ""
    is_admin: bool = False
    credit_score: int = INITIAL_CREDIT_SCORE
    ban_until: OptionalMongoDateTime = None
    rehabilitated_at: OptionalMongoDateTime = None

    def to_domain(self) -> ForumUser:
        return ForumUser(
            id=from_object_id(self.id),
            email=self.email,
            username=self.username,
            password_hash=self.password_hash,
            is_admin=self.is_admin,
            credit_score=self.credit_score,
            ban_until=self.ban_until,
            rehabilitated_at=self.rehabilitated_at,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
