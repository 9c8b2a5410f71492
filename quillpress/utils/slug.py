"""Slug generation utilities."""
from __future__ import annotations

import re
import unicodedata


def slugify(text: str) -> str:
    """
    Convert a category or post name to a URL-friendly slug.

    Accented characters are folded to their ASCII base letter, so
    "Café Culture" becomes "cafe-culture". Returns an empty string when
    nothing slug-worthy remains.
    """
    if not text:
        return ""

    # Fold accents: decompose, then drop the combining marks
    text = unicodedata.normalize("NFKD", text)
    text = text.encode("ascii", "ignore").decode("ascii")

    text = text.lower()
    text = re.sub(r"[\s_]+", "-", text)
    text = re.sub(r"[^a-z0-9\-]", "", text)
    text = re.sub(r"-+", "-", text)

    return text.strip("-")
