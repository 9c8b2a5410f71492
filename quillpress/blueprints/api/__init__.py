from __future__ import annotations

from flask import Blueprint

bp = Blueprint("api", __name__)

# Route modules register themselves on bp
import quillpress.blueprints.api.auth  # noqa: E402,F401
import quillpress.blueprints.api.categories  # noqa: E402,F401
import quillpress.blueprints.api.posts  # noqa: E402,F401
