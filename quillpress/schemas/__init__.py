from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from quillpress.errors import ValidationError

# Re-export common schema classes for convenient imports
from .auth import LoginRequest, RegisterRequest  # noqa: F401
from .categories import CategoryCreate, CategoryUpdate  # noqa: F401
from .posts import PostCreate, PostUpdate  # noqa: F401
from .comments import CommentCreate  # noqa: F401

M = TypeVar("M", bound=BaseModel)


def validate_payload(schema: type[M], data: Any) -> M:
    """Validate request data, raising the API's ValidationError on failure."""
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e


__all__ = [
    "validate_payload",
    # auth
    "LoginRequest",
    "RegisterRequest",
    # categories
    "CategoryCreate",
    "CategoryUpdate",
    # posts
    "PostCreate",
    "PostUpdate",
    # comments
    "CommentCreate",
]
