"""posts / comments 컬렉션 도큐먼트.

두 컬렉션 모두 콘텐츠 서비스가 쓰고, 이 서비스는 조회와 is_violation 설정만 한다.
"""

from __future__ import annotations

from common.mongo.types import BaseDocument, from_object_id

from ...models.content import ContentItem, ContentType


class PostDocument(BaseDocument):
    """MongoDB posts 컬렉션 도큐먼트 모델."""

    title: str
    content: str = ""
    author_id: str
    category_id: str | None = None
    edit_count: int = 0
    is_violation: bool = False

    def to_domain(self) -> ContentItem:
        return ContentItem(
            id=from_object_id(self.id) or "",
            content_type=ContentType.POST,
            author_id=self.author_id,
            title=self.title,
            content=self.content,
            edit_count=self.edit_count,
            is_violation=self.is_violation,
        )


class CommentDocument(BaseDocument):
    """MongoDB comments 컬렉션 도큐먼트 모델."""

    content: str
    author_id: str
    post_id: str
    edit_count: int = 0
    is_violation: bool = False

    def to_domain(self) -> ContentItem:
        return ContentItem(
            id=from_object_id(self.id) or "",
            content_type=ContentType.COMMENT,
            author_id=self.author_id,
            content=self.content,
            post_id=self.post_id,
            edit_count=self.edit_count,
            is_violation=self.is_violation,
        )
