"""Wire representations for API responses.

Field names are camelCase on the wire. Public ids are the models'
``hex_id`` values.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from flask import current_app

from quillpress.models.blog import Category, Comment, Post
from quillpress.models.user import User


def _iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    # SQLite drops the offset; stored times are UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def _avatar(user: User) -> str:
    return user.avatar or current_app.config.get("DEFAULT_AVATAR", "/default-avatar.jpg")


def derive_excerpt(content: str, length: int = 100) -> str:
    text = (content or "").strip()
    if len(text) <= length:
        return text
    return text[:length].rstrip() + "..."


def user_to_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.hex_id,
        "name": user.name,
        "email": user.email,
        "avatar": _avatar(user),
        "role": user.role,
        "createdAt": _iso(user.created_at),
    }


def category_to_dict(cat: Category) -> dict[str, Any]:
    return {
        "id": cat.hex_id,
        "name": cat.name,
        "slug": cat.slug,
        "description": cat.description,
        "postCount": cat.post_count,
        "createdAt": _iso(cat.created_at),
        "updatedAt": _iso(cat.updated_at),
    }


def comment_to_dict(comment: Comment) -> dict[str, Any]:
    return {
        "id": comment.hex_id,
        "content": comment.content,
        "createdAt": _iso(comment.created_at),
        "user": {
            "id": comment.user.hex_id,
            "name": comment.user.name,
            "avatar": _avatar(comment.user),
        },
    }


def post_to_dict(post: Post, *, with_comments: bool = False) -> dict[str, Any]:
    """Serialize a post with its author and category populated.

    ``with_comments`` embeds every comment with its author; otherwise only
    ``commentCount`` is included.
    """
    length = current_app.config.get("EXCERPT_LENGTH", 100)
    data: dict[str, Any] = {
        "id": post.hex_id,
        "title": post.title,
        "content": post.content,
        "excerpt": post.excerpt or derive_excerpt(post.content, length),
        "tags": list(post.tags),
        "viewCount": post.view_count,
        "commentCount": len(post.comments),
        "createdAt": _iso(post.created_at),
        "updatedAt": _iso(post.updated_at),
        "author": {
            "id": post.author.hex_id,
            "name": post.author.name,
            "email": post.author.email,
            "avatar": _avatar(post.author),
        },
        "category": {
            "id": post.category.hex_id,
            "name": post.category.name,
            "slug": post.category.slug,
        },
    }
    if with_comments:
        data["comments"] = [comment_to_dict(c) for c in post.comments]
    return data
