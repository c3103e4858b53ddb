"""
Flask application factory for the depman JSON API.

Blueprints:
- catalog: /api/categories, /api/dependencies, /api/guides
- blog: /api/posts, /api/upload
Uploaded files are served back from /uploads/<name>.
"""

from __future__ import annotations

from typing import Any

from flask import Flask, current_app, jsonify, send_from_directory
from flask_cors import CORS

from depman.config.commands import get_setting
from depman.core.config import SitePaths, get_paths
from depman.web.errors import register_handlers


def create_app(paths: SitePaths | None = None, config: dict[str, Any] | None = None) -> Flask:
    """Create the API app for the data root described by *paths*."""
    if paths is None:
        paths = get_paths()

    app = Flask(__name__)
    app.config.from_mapping(
        DEPMAN_PATHS=paths,
        MAX_CONTENT_LENGTH=int(get_setting("uploads.max_bytes", paths.config_file)),
    )
    app.json.sort_keys = False
    if config:
        app.config.update(config)

    CORS(app, methods=["GET", "POST", "PUT", "OPTIONS"])

    from depman.web.blog import blog_bp, upload_bp
    from depman.web.catalog import categories_bp, dependencies_bp, guides_bp

    app.register_blueprint(categories_bp, url_prefix="/api/categories")
    app.register_blueprint(dependencies_bp, url_prefix="/api/dependencies")
    app.register_blueprint(guides_bp, url_prefix="/api/guides")
    app.register_blueprint(blog_bp, url_prefix="/api/posts")
    app.register_blueprint(upload_bp, url_prefix="/api/upload")

    register_handlers(app)

    @app.route("/uploads/<path:filename>")
    def uploaded_file(filename: str):
        return send_from_directory(current_app.config["DEPMAN_PATHS"].uploads, filename)

    @app.route("/api/health")
    def health():
        return jsonify({"status": "ok"})

    app.logger.debug("depman API configured for %s", paths.root)
    return app
