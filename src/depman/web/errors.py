"""Translate exceptions into JSON error responses.

Every failure ends up as one of: client error (400), not found (404) or
server error (500). Nothing raised by a request handler stops the server.
"""

from __future__ import annotations

from flask import Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from depman.core.errors import DepmanError


def register_handlers(app: Flask) -> None:
    """Register the error handlers on *app*."""

    @app.errorhandler(DepmanError)
    def handle_depman_error(e: DepmanError):
        if e.status_code >= 500:
            current_app.logger.error("%s %s failed: %s", request.method, request.path, e.message)
        else:
            current_app.logger.info("%s %s rejected: %s", request.method, request.path, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        current_app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Internal Server Error"}), 500
