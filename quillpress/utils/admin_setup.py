from __future__ import annotations

from typing import Optional

from flask import current_app
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from quillpress.extensions import db
from quillpress.repositories.user import count_admins


def ensure_admin_user() -> Optional[str]:
    """
    Check whether an admin account exists and log the result.

    Admins are created with ``flask create-admin``; a missing admin never
    blocks startup because categories and posts can only be written by one.

    Returns:
        Status message if no admin user exists, None otherwise
    """
    try:
        # Skip check if the users table doesn't exist yet (e.g., during initial migrations)
        if not inspect(db.engine).has_table("users"):
            current_app.logger.info("Users table not found yet; skipping admin check")
            return None

        if count_admins() > 0:
            return None
    except SQLAlchemyError as e:
        current_app.logger.error(f"Error checking for admin user: {str(e)}")
        return None

    current_app.logger.warning("No admin user exists. Create one using: flask create-admin")
    return "No admin user found. Use 'flask create-admin' to create one."
