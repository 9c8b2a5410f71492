# Re-export repository functions for convenient imports
from quillpress.repositories.user import (
    get_user_by_email,
    create_user,
    count_admins,
)
from quillpress.repositories.blog import (
    get_category_by_hex_id,
    get_category_by_slug,
    list_categories,
    get_post_by_hex_id,
    list_posts,
    search_posts,
)

__all__ = [
    # User repositories
    "get_user_by_email",
    "create_user",
    "count_admins",
    # Blog repositories
    "get_category_by_hex_id",
    "get_category_by_slug",
    "list_categories",
    "get_post_by_hex_id",
    "list_posts",
    "search_posts",
]
