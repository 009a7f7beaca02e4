"""Shapes of the documents stored in MongoDB."""

from .comment import (
    DELETED_USER_ID,
    IMMUTABLE_COMMENT_FIELDS,
    CommentDocument,
    EditDocument,
    LocatorDocument,
)
from .site import PostDocument, SiteDocument
from .user import USER_DETAIL_FIELDS, UserDocument

__all__ = [
    "CommentDocument",
    "EditDocument",
    "LocatorDocument",
    "DELETED_USER_ID",
    "IMMUTABLE_COMMENT_FIELDS",
    "PostDocument",
    "SiteDocument",
    "UserDocument",
    "USER_DETAIL_FIELDS",
]
