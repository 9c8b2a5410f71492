from __future__ import annotations

from typing import Optional

from sqlalchemy.exc import IntegrityError

from quillpress.extensions import db
from quillpress.models.user import User, ROLE_USER


def get_user_by_email(email: str) -> Optional[User]:
    return db.session.execute(db.select(User).filter_by(email=email.strip().lower())).scalar_one_or_none()


def create_user(*, name: str, email: str, password_hash: str, role: str = ROLE_USER, avatar: str | None = None) -> User:
    user = User(name=name, email=email.strip().lower(), password_hash=password_hash, role=role, avatar=avatar)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValueError("email_conflict")
    return user


def count_admins() -> int:
    return db.session.execute(
        db.select(db.func.count(User.id)).filter_by(role="admin")
    ).scalar_one()
