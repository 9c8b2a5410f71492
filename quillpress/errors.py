"""Error taxonomy for the REST API.

Every error raised from a route or service is an :class:`ApiError`; the
application factory serialises it into the response envelope::

    {"success": false, "error": "<message>", "errors": [...]}
"""
from __future__ import annotations

from typing import Any

from pydantic import ValidationError as PydanticValidationError


class ApiError(Exception):
    status_code: int = 500
    default_message: str = "Server Error"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "error": self.message}


class ValidationError(ApiError):
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, message: str | None = None, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        if self.errors:
            body["errors"] = self.errors
        return body

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> "ValidationError":
        errors = []
        for err in exc.errors():
            msg = err["msg"]
            # Custom validator messages arrive as "Value error, <text>"
            if err["type"] == "value_error" and "error" in err.get("ctx", {}):
                msg = str(err["ctx"]["error"])
            errors.append({
                "msg": msg,
                "path": ".".join(str(p) for p in err["loc"]) or None,
                "location": "body",
            })
        message = errors[0]["msg"] if errors else cls.default_message
        return cls(message, errors)


class NotFound(ApiError):
    status_code = 404
    default_message = "Resource not found"


class Unauthenticated(ApiError):
    status_code = 401
    default_message = "Not authorized to access this route"


class Forbidden(ApiError):
    status_code = 401
    default_message = "Not authorized to access this route"


class Unauthorized(ApiError):
    """Caller is authenticated but does not own the resource."""

    status_code = 401
    default_message = "Not authorized to modify this resource"


class Conflict(ApiError):
    status_code = 400
    default_message = "Conflict"
