"""Blog operations: authorization, existence checks and post_count upkeep.

Route handlers call into this module with validated payloads and the
current user; every failure is raised as an :mod:`quillpress.errors` type.

``Category.post_count`` is bookkeeping. It moves by one in the same
transaction as each post create, move or delete, and a decrement never
takes it below zero. ``flask recount-posts`` rebuilds it from the posts
table when it drifts.
"""
from __future__ import annotations

from typing import Any

import structlog

from quillpress.errors import Conflict, NotFound, Unauthorized, ValidationError
from quillpress.models.blog import Category, Comment, Post
from quillpress.models.user import User
from quillpress.repositories import blog as repo
from quillpress.schemas import (
    CategoryCreate,
    CategoryUpdate,
    CommentCreate,
    PostCreate,
    PostUpdate,
    validate_payload,
)
from quillpress.utils.slug import slugify

log = structlog.get_logger(__name__)


# Categories
def get_category(hex_id: str) -> Category:
    cat = repo.get_category_by_hex_id(hex_id)
    if not cat:
        raise NotFound("Category not found")
    return cat


def _category_slug(name: str) -> str:
    slug = slugify(name)
    if not slug:
        raise ValidationError(
            "Category name must contain letters or numbers",
            [{"msg": "Category name must contain letters or numbers", "path": "name", "location": "body"}],
        )
    return slug


def create_category(data: Any) -> Category:
    payload = validate_payload(CategoryCreate, data)
    slug = _category_slug(payload.name)
    if repo.get_category_by_slug(slug):
        raise Conflict("A category with this name already exists")
    try:
        cat = repo.create_category(
            name=payload.name,
            slug=slug,
            description=payload.description,
        )
    except ValueError:
        raise Conflict("A category with this name already exists")
    log.info("category_created", category=cat.hex_id, slug=cat.slug)
    return cat


def update_category(hex_id: str, data: Any) -> Category:
    cat = get_category(hex_id)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    # Patch over the stored document, then validate the result as a whole
    merged = {
        "name": data.get("name", cat.name),
        "description": data.get("description", cat.description),
    }
    payload = validate_payload(CategoryUpdate, merged)
    slug = cat.slug if payload.name == cat.name else _category_slug(payload.name)
    if slug != cat.slug and repo.get_category_by_slug(slug):
        raise Conflict("A category with this name already exists")
    try:
        repo.update_category(cat, name=payload.name, slug=slug, description=payload.description)
    except ValueError:
        raise Conflict("A category with this name already exists")
    log.info("category_updated", category=cat.hex_id)
    return cat


def delete_category(hex_id: str) -> None:
    cat = get_category(hex_id)
    if cat.post_count > 0 or repo.count_posts_in_category(cat.id) > 0:
        raise Conflict("Cannot delete category with existing posts")
    repo.delete_category(cat)
    log.info("category_deleted", category=hex_id)


# Posts
def get_post(hex_id: str) -> Post:
    post = repo.get_post_by_hex_id(hex_id)
    if not post:
        raise NotFound("Post not found")
    return post


def view_post(hex_id: str) -> Post:
    post = repo.record_post_view(hex_id)
    if not post:
        raise NotFound("Post not found")
    return post


def search_posts(query: str | None) -> list[Post]:
    if not query:
        raise ValidationError("Please provide a search query")
    return repo.search_posts(query)


def _ensure_can_modify(post: Post, user: User) -> None:
    if post.author_id != user.id and not user.is_admin:
        raise Unauthorized("Not authorized to modify this post")


def create_post(data: Any, author: User) -> Post:
    payload = validate_payload(PostCreate, data)
    category = repo.get_category_by_hex_id(payload.category)
    if not category:
        raise NotFound("Category not found")
    post = repo.create_post(
        title=payload.title,
        content=payload.content,
        excerpt=payload.excerpt,
        tags=payload.tags,
        category=category,
        author_id=author.id,
    )
    log.info("post_created", post=post.hex_id, category=category.hex_id, author=author.hex_id)
    return post


def update_post(hex_id: str, data: Any, user: User) -> Post:
    post = get_post(hex_id)
    _ensure_can_modify(post, user)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    merged = {
        "title": data.get("title", post.title),
        "content": data.get("content", post.content),
        "excerpt": data.get("excerpt", post.excerpt),
        "tags": data.get("tags", list(post.tags)),
        "category": data.get("category", post.category.hex_id),
    }
    payload = validate_payload(PostUpdate, merged)
    if payload.category == post.category.hex_id:
        category = post.category
    else:
        category = repo.get_category_by_hex_id(payload.category)
        if not category:
            raise NotFound("Category not found")
    repo.update_post(
        post,
        title=payload.title,
        content=payload.content,
        excerpt=payload.excerpt,
        tags=payload.tags,
        category=category,
    )
    log.info("post_updated", post=post.hex_id, user=user.hex_id)
    return post


def delete_post(hex_id: str, user: User) -> None:
    post = get_post(hex_id)
    _ensure_can_modify(post, user)
    category = post.category.hex_id
    repo.delete_post(post)
    log.info("post_deleted", post=hex_id, category=category, user=user.hex_id)


def add_comment(hex_id: str, data: Any, user: User) -> Comment:
    payload = validate_payload(CommentCreate, data)
    post = get_post(hex_id)
    comment = repo.add_comment(post, content=payload.content, user_id=user.id)
    log.info("comment_added", post=hex_id, comment=comment.hex_id, user=user.hex_id)
    return comment


def recount_post_counts() -> list[tuple[Category, int, int]]:
    drifted = repo.recount_post_counts()
    for cat, stored, actual in drifted:
        log.warning("post_count_resynced", category=cat.hex_id, stored=stored, actual=actual)
    return drifted
