from __future__ import annotations

from functools import wraps
from typing import Callable, Any

from flask_login import current_user

from quillpress.errors import Forbidden, Unauthenticated


def protect(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Require a logged-in session user."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            raise Unauthenticated()
        return fn(*args, **kwargs)

    return wrapper


def authorize(*roles: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Require the session user's role to be one of ``roles``.

    Stack below ``protect``; an anonymous caller still gets Unauthenticated.
    """
    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                raise Unauthenticated()
            if current_user.role not in roles:
                raise Forbidden(f"User role {current_user.role} is not authorized to access this route")
            return fn(*args, **kwargs)

        return wrapper
    return decorator
