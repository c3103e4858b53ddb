"""
Blog API endpoints.

- GET  /api/posts     all posts, ?id= for a 0-1 element list (404 when missing),
                      ?q= / ?tag= to search
- POST /api/posts     create a post (id = slug of title, date stamped now)
- PUT  /api/posts     merge fields into an existing post
- POST /api/upload    multipart upload of a single "file" field
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from depman.blog import service
from depman.core.store import DocumentStore
from depman.uploads import save_upload

blog_bp = Blueprint("posts", __name__)
upload_bp = Blueprint("upload", __name__)


def blog_store() -> DocumentStore:
    return service.open_blog(current_app.config["DEPMAN_PATHS"])


@blog_bp.route("", methods=["GET"])
def get_posts():
    post_id = request.args.get("id")
    posts = service.list_posts(
        blog_store(),
        post_id=post_id,
        query=request.args.get("q"),
        tag=request.args.get("tag"),
    )
    if post_id and not posts:
        return jsonify([]), 404
    return jsonify(posts)


@blog_bp.route("", methods=["POST"])
def create_post():
    post = service.create_post(blog_store(), request.get_json(silent=True))
    return jsonify(post), 201


@blog_bp.route("", methods=["PUT"])
def update_post():
    return jsonify(service.update_post(blog_store(), request.get_json(silent=True)))


@upload_bp.route("", methods=["POST"])
def upload_file():
    upload = request.files.get("file")
    result = save_upload(
        upload.filename if upload else None,
        upload.read() if upload else None,
        current_app.config["DEPMAN_PATHS"].uploads,
    )
    return jsonify(result.to_dict())
