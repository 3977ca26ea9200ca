from __future__ import annotations


class ForumServiceError(Exception):
    """Base exception for all forum-service errors."""


class NotFoundError(ForumServiceError):
    """A user or content item does not exist."""


class ConflictError(ForumServiceError):
    """The same moderator already flagged the same content item."""


class ForbiddenError(ForumServiceError):
    """The caller is authenticated but not allowed to perform the action."""


class UnauthorizedError(ForumServiceError):
    """No identity (or an invalid one) was supplied by the session provider."""


class ValidationError(ForumServiceError):
    """Malformed input such as a blank reason or an unknown content type."""


class TransientStoreError(ForumServiceError):
    """The record store aborted the transaction; safe to retry from outside."""
