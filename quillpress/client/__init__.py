from quillpress.client.api import ApiError, BlogApiClient
from quillpress.client.session import (
    AuthSession,
    SessionEvent,
    SessionState,
    SessionStatus,
    SessionStore,
    SessionTransitionError,
    transition,
)
from quillpress.client.views import (
    CategoryListView,
    PostDetailView,
    PostListView,
    SearchView,
    ViewStatus,
)

__all__ = [
    "ApiError",
    "BlogApiClient",
    "AuthSession",
    "SessionEvent",
    "SessionState",
    "SessionStatus",
    "SessionStore",
    "SessionTransitionError",
    "transition",
    "CategoryListView",
    "PostDetailView",
    "PostListView",
    "SearchView",
    "ViewStatus",
]
