from __future__ import annotations

from datetime import datetime
from typing import Iterable

from sqlalchemy import func, Index, UniqueConstraint
from sqlalchemy.ext.associationproxy import AssociationProxy, association_proxy
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quillpress.extensions import db
from quillpress.models import generate_hex_id


class Category(db.Model):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    hex_id: Mapped[str] = mapped_column(db.String(32), unique=True, nullable=False, index=True, default=generate_hex_id)
    name: Mapped[str] = mapped_column(db.String(50), unique=True, nullable=False)
    slug: Mapped[str] = mapped_column(db.String(80), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(db.String(200), nullable=True)
    # Denormalized; adjusted incrementally by the post repository
    post_count: Mapped[int] = mapped_column(db.Integer, default=0, server_default="0", nullable=False)
    created_at: Mapped[datetime] = mapped_column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(db.DateTime(timezone=True), onupdate=func.now())

    posts: Mapped[list["Post"]] = relationship(back_populates="category")


class Post(db.Model):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(primary_key=True)
    hex_id: Mapped[str] = mapped_column(db.String(32), unique=True, nullable=False, index=True, default=generate_hex_id)
    title: Mapped[str] = mapped_column(db.String(100), nullable=False)
    content: Mapped[str] = mapped_column(db.Text, nullable=False)
    excerpt: Mapped[str | None] = mapped_column(db.String(200), nullable=True)
    view_count: Mapped[int] = mapped_column(db.Integer, default=0, server_default="0", nullable=False)
    category_id: Mapped[int] = mapped_column(db.ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True)
    author_id: Mapped[int] = mapped_column(db.ForeignKey("users.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(db.DateTime(timezone=True), onupdate=func.now())

    author: Mapped["User"] = relationship(back_populates="posts")
    category: Mapped[Category] = relationship(back_populates="posts")
    comments: Mapped[list["Comment"]] = relationship(
        back_populates="post", cascade="all, delete-orphan", order_by="Comment.id"
    )
    tag_rows: Mapped[list["PostTag"]] = relationship(
        back_populates="post", cascade="all, delete-orphan", order_by="PostTag.id"
    )

    tags: AssociationProxy[list[str]] = association_proxy(
        "tag_rows", "name", creator=lambda name: PostTag(name=name)
    )

    __table_args__ = (
        Index("ix_posts_created_at", "created_at"),
    )

    def set_tags(self, names: Iterable[str]) -> None:
        """Replace the tag set, keeping rows for names that survive."""
        wanted = list(dict.fromkeys(names))
        for row in list(self.tag_rows):
            if row.name not in wanted:
                self.tag_rows.remove(row)
        existing = {row.name for row in self.tag_rows}
        for name in wanted:
            if name not in existing:
                self.tag_rows.append(PostTag(name=name))


class PostTag(db.Model):
    __tablename__ = "post_tags"

    id: Mapped[int] = mapped_column(primary_key=True)
    post_id: Mapped[int] = mapped_column(db.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(db.String(50), nullable=False)

    post: Mapped[Post] = relationship(back_populates="tag_rows")

    __table_args__ = (
        UniqueConstraint("post_id", "name", name="uq_post_tags_post_name"),
    )


class Comment(db.Model):
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(primary_key=True)
    hex_id: Mapped[str] = mapped_column(db.String(32), unique=True, nullable=False, index=True, default=generate_hex_id)
    post_id: Mapped[int] = mapped_column(db.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("users.id"), nullable=False, index=True)
    content: Mapped[str] = mapped_column(db.Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)

    post: Mapped[Post] = relationship(back_populates="comments")
    user: Mapped["User"] = relationship(back_populates="comments")
