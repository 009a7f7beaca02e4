"""Pure conversions between wire models and stored documents."""

from .comment import (
    comment_deletion_update,
    comment_to_document,
    comment_to_model,
    comment_update_document,
)
from .user import is_blocked, user_to_document, user_to_model

__all__ = [
    "comment_deletion_update",
    "comment_to_document",
    "comment_to_model",
    "comment_update_document",
    "is_blocked",
    "user_to_document",
    "user_to_model",
]
