from __future__ import annotations

from typing import Tuple

import structlog

from quillpress.errors import Conflict
from quillpress.models.user import User, ROLE_USER
from quillpress.repositories.user import create_user, get_user_by_email
from quillpress.utils.crypto import hash_password, verify_password

log = structlog.get_logger(__name__)


def find_user_by_email(email: str) -> User | None:
    return get_user_by_email(email)


def authenticate(email: str, password: str) -> Tuple[User | None, str | None]:
    """
    Check an email/password pair.
    Returns (user, error_message) tuple.
    """
    user = find_user_by_email(email)
    if not user or not verify_password(password, user.password_hash):
        log.info("login_failed", email=email)
        return None, "Invalid credentials"
    log.info("login_succeeded", user=user.hex_id)
    return user, None


def register_user(*, name: str, email: str, password: str, role: str = ROLE_USER) -> User:
    if find_user_by_email(email):
        raise Conflict("Email already registered")
    try:
        user = create_user(name=name, email=email, password_hash=hash_password(password), role=role)
    except ValueError:
        # Lost a race with a concurrent registration
        raise Conflict("Email already registered")
    log.info("user_registered", user=user.hex_id, role=role)
    return user
