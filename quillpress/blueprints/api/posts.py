from __future__ import annotations

from flask import jsonify, request
from flask_login import current_user

from quillpress.decorators import authorize, protect
from quillpress.extensions import limiter
from quillpress.repositories.blog import list_posts
from quillpress.services import blog as blog_svc
from quillpress.utils.serializers import comment_to_dict, post_to_dict

from quillpress.blueprints.api import bp


@bp.get("/posts")
def posts_index():
    posts = list_posts()
    return jsonify({
        "success": True,
        "count": len(posts),
        "data": [post_to_dict(p) for p in posts],
    })


@bp.get("/posts/search")
@limiter.limit("60 per minute")
def posts_search():
    posts = blog_svc.search_posts(request.args.get("q"))
    return jsonify({
        "success": True,
        "count": len(posts),
        "data": [post_to_dict(p) for p in posts],
    })


@bp.get("/posts/<string:post_id>")
def post_show(post_id: str):
    post = blog_svc.view_post(post_id)
    return jsonify({"success": True, "data": post_to_dict(post, with_comments=True)})


@bp.post("/posts")
@limiter.limit("10 per minute; 150 per hour")
@protect
@authorize("admin")
def post_create():
    post = blog_svc.create_post(request.get_json(silent=True), current_user)
    return jsonify({"success": True, "data": post_to_dict(post)}), 201


@bp.put("/posts/<string:post_id>")
@limiter.limit("10 per minute; 150 per hour")
@protect
def post_update(post_id: str):
    post = blog_svc.update_post(post_id, request.get_json(silent=True), current_user)
    return jsonify({"success": True, "data": post_to_dict(post)})


@bp.delete("/posts/<string:post_id>")
@limiter.limit("10 per minute; 150 per hour")
@protect
def post_delete(post_id: str):
    blog_svc.delete_post(post_id, current_user)
    return jsonify({"success": True, "data": {}})


@bp.post("/posts/<string:post_id>/comments")
@limiter.limit("20 per minute")
@protect
def comment_create(post_id: str):
    comment = blog_svc.add_comment(post_id, request.get_json(silent=True), current_user)
    return jsonify({"success": True, "data": comment_to_dict(comment)}), 201
