"""
Catalog API endpoints.

- GET  /api/categories      all categories, or ?id= for a 0-1 element list,
                            ?q= / ?platform= to search
- POST /api/categories      create a category (id = slug of name)
- GET  /api/dependencies    all dependencies, or ?categoryId= for one category
- POST /api/dependencies    create a dependency (id = slug of name unless given)
- PUT  /api/dependencies    merge fields into an existing dependency
- GET  /api/guides          all guides, or ?categoryId= for one category
- PUT  /api/guides          merge into a guide, creating it when categoryId is given
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from depman.catalog import service
from depman.core.store import DocumentStore

categories_bp = Blueprint("categories", __name__)
dependencies_bp = Blueprint("dependencies", __name__)
guides_bp = Blueprint("guides", __name__)


def catalog_store() -> DocumentStore:
    return service.open_catalog(current_app.config["DEPMAN_PATHS"])


@categories_bp.route("", methods=["GET"])
def get_categories():
    return jsonify(
        service.list_categories(
            catalog_store(),
            category_id=request.args.get("id"),
            query=request.args.get("q"),
            platform=request.args.get("platform"),
        )
    )


@categories_bp.route("", methods=["POST"])
def create_category():
    category = service.create_category(catalog_store(), request.get_json(silent=True))
    return jsonify(category), 201


@dependencies_bp.route("", methods=["GET"])
def get_dependencies():
    return jsonify(
        service.list_dependencies(catalog_store(), category_id=request.args.get("categoryId"))
    )


@dependencies_bp.route("", methods=["POST"])
def create_dependency():
    dependency = service.create_dependency(catalog_store(), request.get_json(silent=True))
    return jsonify(dependency), 201


@dependencies_bp.route("", methods=["PUT"])
def update_dependency():
    return jsonify(service.update_dependency(catalog_store(), request.get_json(silent=True)))


@guides_bp.route("", methods=["GET"])
def get_guides():
    return jsonify(service.list_guides(catalog_store(), category_id=request.args.get("categoryId")))


@guides_bp.route("", methods=["PUT"])
def update_guide():
    return jsonify(service.update_guide(catalog_store(), request.get_json(silent=True)))
