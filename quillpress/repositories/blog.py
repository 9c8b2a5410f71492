from __future__ import annotations

from typing import Iterable, Optional

import structlog
from sqlalchemy import case, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload

from quillpress.extensions import db
from quillpress.models.blog import Category, Comment, Post, PostTag

log = structlog.get_logger(__name__)


# Category repositories
def list_categories() -> list[Category]:
    return list(db.session.execute(db.select(Category).order_by(Category.name)).scalars())


def get_category_by_hex_id(hex_id: str) -> Optional[Category]:
    return db.session.execute(db.select(Category).filter_by(hex_id=hex_id)).scalar_one_or_none()


def get_category_by_slug(slug: str) -> Optional[Category]:
    return db.session.execute(db.select(Category).filter_by(slug=slug)).scalar_one_or_none()


def create_category(*, name: str, slug: str, description: str | None) -> Category:
    cat = Category(name=name, slug=slug, description=description, post_count=0)
    db.session.add(cat)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValueError("slug_conflict")
    return cat


def update_category(cat: Category, *, name: str, slug: str, description: str | None) -> Category:
    cat.name = name
    cat.slug = slug
    cat.description = description
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValueError("slug_conflict")
    return cat


def delete_category(cat: Category) -> None:
    db.session.delete(cat)
    db.session.commit()


def count_posts_in_category(category_id: int) -> int:
    return db.session.execute(
        db.select(db.func.count(Post.id)).filter_by(category_id=category_id)
    ).scalar_one()


# post_count bookkeeping. Both helpers issue a single UPDATE and leave the
# commit to the caller so the counter moves in the same transaction as the
# post write.
def _increment_post_count(category_id: int) -> None:
    db.session.execute(
        db.update(Category)
        .where(Category.id == category_id)
        .values(post_count=Category.post_count + 1, updated_at=Category.updated_at)
        .execution_options(synchronize_session=False)
    )


def _decrement_post_count(category: Category) -> None:
    if category.post_count <= 0:
        # The stored count had drifted below the real number of posts
        log.warning("post_count_clamped", category=category.hex_id, stored=category.post_count)
    db.session.execute(
        db.update(Category)
        .where(Category.id == category.id)
        .values(
            post_count=case((Category.post_count > 0, Category.post_count - 1), else_=0),
            updated_at=Category.updated_at,
        )
        .execution_options(synchronize_session=False)
    )


def recount_post_counts() -> list[tuple[Category, int, int]]:
    """Recompute post_count for every category from the posts table.

    Returns (category, stored, actual) for each category that had drifted.
    """
    actual = dict(
        db.session.execute(
            db.select(Post.category_id, db.func.count(Post.id)).group_by(Post.category_id)
        ).all()
    )
    drifted = []
    for cat in list_categories():
        real = actual.get(cat.id, 0)
        if cat.post_count != real:
            drifted.append((cat, cat.post_count, real))
            cat.post_count = real
    db.session.commit()
    return drifted


# Post repositories
def _post_summary_options():
    return (
        selectinload(Post.author),
        selectinload(Post.category),
        selectinload(Post.tag_rows),
        selectinload(Post.comments),
    )


def get_post_by_hex_id(hex_id: str) -> Optional[Post]:
    return db.session.execute(db.select(Post).filter_by(hex_id=hex_id)).scalar_one_or_none()


def get_post_detail(hex_id: str) -> Optional[Post]:
    stmt = (
        db.select(Post)
        .filter_by(hex_id=hex_id)
        .options(
            selectinload(Post.author),
            selectinload(Post.category),
            selectinload(Post.tag_rows),
            selectinload(Post.comments).selectinload(Comment.user),
        )
    )
    return db.session.execute(stmt).scalar_one_or_none()


def record_post_view(hex_id: str) -> Optional[Post]:
    """Increment view_count and return the fully loaded post."""
    result = db.session.execute(
        db.update(Post)
        .where(Post.hex_id == hex_id)
        .values(view_count=Post.view_count + 1, updated_at=Post.updated_at)
        .execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        db.session.rollback()
        return None
    db.session.commit()
    return get_post_detail(hex_id)


def list_posts() -> list[Post]:
    stmt = db.select(Post).options(*_post_summary_options()).order_by(Post.created_at.desc(), Post.id.desc())
    return list(db.session.execute(stmt).scalars())


def search_posts(query: str) -> list[Post]:
    stmt = (
        db.select(Post)
        .options(*_post_summary_options())
        .where(
            or_(
                Post.title.icontains(query, autoescape=True),
                Post.content.icontains(query, autoescape=True),
                Post.tag_rows.any(PostTag.name.icontains(query, autoescape=True)),
            )
        )
        .order_by(Post.created_at.desc(), Post.id.desc())
    )
    return list(db.session.execute(stmt).scalars())


def create_post(
    *,
    title: str,
    content: str,
    excerpt: str | None,
    tags: Iterable[str],
    category: Category,
    author_id: int,
) -> Post:
    p = Post(
        title=title,
        content=content,
        excerpt=excerpt,
        category_id=category.id,
        author_id=author_id,
    )
    p.set_tags(tags)
    db.session.add(p)
    try:
        db.session.flush()
        _increment_post_count(category.id)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    return p


def update_post(
    p: Post,
    *,
    title: str,
    content: str,
    excerpt: str | None,
    tags: Iterable[str],
    category: Category,
) -> Post:
    previous = p.category
    p.title = title
    p.content = content
    p.excerpt = excerpt
    p.set_tags(tags)
    moved = previous is None or previous.id != category.id
    if moved:
        p.category = category
    try:
        db.session.flush()
        if moved:
            if previous is not None:
                _decrement_post_count(previous)
            _increment_post_count(category.id)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    return p


def delete_post(p: Post) -> None:
    category = p.category
    db.session.delete(p)
    try:
        db.session.flush()
        if category is not None:
            _decrement_post_count(category)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


def add_comment(p: Post, *, content: str, user_id: int) -> Comment:
    comment = Comment(content=content, user_id=user_id)
    p.comments.append(comment)
    db.session.commit()
    return comment
