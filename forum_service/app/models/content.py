from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel

from ..constants import COMMENT_VIOLATION_POINTS, POST_VIOLATION_POINTS


class ContentType(StrEnum):
    POST = "post"
    COMMENT = "comment"

    @property
    def violation_points(self) -> int:
        """위반 처리 시 작성자에게서 차감할 점수."""
        return VIOLATION_POINTS[self]


VIOLATION_POINTS: dict[ContentType, int] = {
    ContentType.POST: POST_VIOLATION_POINTS,
    ContentType.COMMENT: COMMENT_VIOLATION_POINTS,
}


class ContentItem(BaseModel):
    """게시글/댓글의 공통 조회 모델.

    - 게시글이면 title 이 있고, 댓글이면 post_id(소속 게시글)가 있다.
    - is_violation 은 위반 처리로만 false -> true 로 바뀌며 되돌리지 않는다.
    """

    id: str
    content_type: ContentType
    author_id: str
    title: str | None = None
    content: str = ""
    post_id: str | None = None
    edit_count: int = 0
    is_violation: bool = False

    @property
    def related_post_id(self) -> str:
        if self.content_type is ContentType.POST:
            return self.id
        return self.post_id or ""

    def display_name(self, max_length: int = 20) -> str:
        """알림 메시지에 넣을 짧은 이름 (게시글 제목 또는 댓글 앞부분)."""
        text = self.title if self.title else self.content
        text = " ".join(text.split())
        if len(text) > max_length:
            return text[:max_length] + "…"
        return text
