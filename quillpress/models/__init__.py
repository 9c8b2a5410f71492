from __future__ import annotations

import secrets


def generate_hex_id(length: int = 32) -> str:
    """Generate a secure random hex string of specified length."""
    return secrets.token_hex(length // 2)


# Import all models so metadata is complete for migrations
from quillpress.models.user import User
from quillpress.models.blog import Category, Post, PostTag, Comment

__all__ = [
    "generate_hex_id",
    "User",
    "Category",
    "Post",
    "PostTag",
    "Comment",
]
