"""Fetch-render views for the command line client.

Each view moves through loading -> loaded, or loading -> error with the
server's message, and renders its data as plain text.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from quillpress.client.api import ApiError, BlogApiClient
from quillpress.client.session import AuthSession


class ViewStatus(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    LOADED = "loaded"


def _date(value: str | None) -> str:
    if not value:
        return ""
    try:
        return datetime.fromisoformat(value).strftime("%Y-%m-%d")
    except ValueError:
        return value


class FetchView:
    loading_text = "Loading..."

    def __init__(self, api: BlogApiClient):
        self.api = api
        self.status = ViewStatus.LOADING
        self.data: Any = None
        self.error: str | None = None

    def fetch(self) -> Any:
        raise NotImplementedError

    def load(self) -> "FetchView":
        self.status = ViewStatus.LOADING
        self.error = None
        try:
            self.data = self.fetch()
        except ApiError as e:
            self.status = ViewStatus.ERROR
            self.error = e.message or "An error occurred"
        else:
            self.status = ViewStatus.LOADED
        return self

    def render(self) -> str:
        if self.status is ViewStatus.LOADING:
            return self.loading_text
        if self.status is ViewStatus.ERROR:
            return f"Error: {self.error}"
        return self.render_loaded()

    def render_loaded(self) -> str:
        raise NotImplementedError


def _post_summary(post: dict) -> str:
    author = (post.get("author") or {}).get("name", "")
    category = (post.get("category") or {}).get("name", "")
    lines = [
        post["title"],
        f"  by {author} on {_date(post.get('createdAt'))}  [{category}]",
        f"  {post.get('excerpt', '')}",
        f"  id: {post['id']}",
    ]
    return "\n".join(lines)


class PostListView(FetchView):
    loading_text = "Loading posts..."
    empty_text = "No posts found. Check back later!"

    def fetch(self) -> list[dict]:
        return self.api.get_all_posts()

    def render_loaded(self) -> str:
        if not self.data:
            return self.empty_text
        return "\n\n".join(_post_summary(p) for p in self.data)


class SearchView(PostListView):
    loading_text = "Searching..."

    def __init__(self, api: BlogApiClient, query: str):
        super().__init__(api)
        self.query = query
        self.empty_text = f"No posts match '{query}'."

    def fetch(self) -> list[dict]:
        return self.api.search_posts(self.query)


class CategoryListView(FetchView):
    loading_text = "Loading categories..."

    def fetch(self) -> list[dict]:
        return self.api.get_categories()

    def render_loaded(self) -> str:
        if not self.data:
            return "No categories yet."
        return "\n".join(
            f"{c['name']} ({c['postCount']} posts)  id: {c['id']}" for c in self.data
        )


class PostDetailView(FetchView):
    loading_text = "Loading post..."

    def __init__(self, api: BlogApiClient, post_id: str, session: AuthSession):
        super().__init__(api)
        self.post_id = post_id
        self.session = session
        self.comment_error: str | None = None

    def fetch(self) -> dict:
        return self.api.get_post(self.post_id)

    def add_comment(self, content: str) -> dict | None:
        """Post a comment and append the server's copy to the loaded post."""
        self.comment_error = None
        if not content or not content.strip():
            self.comment_error = "Comment cannot be empty"
            return None
        if not self.session.is_authenticated:
            self.comment_error = "You must be logged in to comment"
            return None
        try:
            comment = self.api.add_comment(self.post_id, content)
        except ApiError as e:
            self.comment_error = e.message or "Failed to add comment"
            return None
        if self.status is ViewStatus.LOADED and self.data is not None:
            self.data = {
                **self.data,
                "comments": [*self.data.get("comments", []), comment],
                "commentCount": self.data.get("commentCount", 0) + 1,
            }
        return comment

    def render_loaded(self) -> str:
        if not self.data:
            return "Post not found"
        post = self.data
        comments = post.get("comments", [])
        lines = [
            post["title"],
            f"By {post['author']['name']} • {_date(post.get('createdAt'))} • {post.get('viewCount', 0)} views",
            f"Category: {post['category']['name']}",
            "",
            post["content"],
        ]
        if post.get("tags"):
            lines += ["", "Tags: " + " ".join(f"#{t}" for t in post["tags"])]
        lines += ["", f"Comments ({len(comments)})"]
        if not comments:
            lines.append("No comments yet. Be the first to comment!")
        for c in comments:
            lines.append(f"- {c['user']['name']} ({_date(c.get('createdAt'))}): {c['content']}")
        if self.comment_error:
            lines += ["", f"! {self.comment_error}"]
        return "\n".join(lines)
