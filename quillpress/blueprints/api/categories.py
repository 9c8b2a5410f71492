from __future__ import annotations

from flask import jsonify, request

from quillpress.decorators import authorize, protect
from quillpress.extensions import limiter
from quillpress.repositories.blog import list_categories
from quillpress.services import blog as blog_svc
from quillpress.utils.serializers import category_to_dict

from quillpress.blueprints.api import bp


@bp.get("/categories")
def categories_index():
    categories = list_categories()
    return jsonify({
        "success": True,
        "count": len(categories),
        "data": [category_to_dict(c) for c in categories],
    })


@bp.get("/categories/<string:category_id>")
def category_show(category_id: str):
    cat = blog_svc.get_category(category_id)
    return jsonify({"success": True, "data": category_to_dict(cat)})


@bp.post("/categories")
@limiter.limit("10 per minute; 150 per hour")
@protect
@authorize("admin")
def category_create():
    cat = blog_svc.create_category(request.get_json(silent=True))
    return jsonify({"success": True, "data": category_to_dict(cat)}), 201


@bp.put("/categories/<string:category_id>")
@limiter.limit("10 per minute; 150 per hour")
@protect
@authorize("admin")
def category_update(category_id: str):
    cat = blog_svc.update_category(category_id, request.get_json(silent=True))
    return jsonify({"success": True, "data": category_to_dict(cat)})


@bp.delete("/categories/<string:category_id>")
@limiter.limit("10 per minute; 150 per hour")
@protect
@authorize("admin")
def category_delete(category_id: str):
    blog_svc.delete_category(category_id)
    return jsonify({"success": True, "data": {}})
