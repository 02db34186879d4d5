"""
Public category endpoints.

- GET /api/categories
- GET /api/categories/<slug>
- GET /api/categories/<slug>/articles?limit=
"""
from flask import Blueprint, jsonify

from yourbuzzfeed.storage import storage
from yourbuzzfeed.utils.errors import NotFoundError
from yourbuzzfeed.utils.validation import get_limit

categories_bp = Blueprint('categories', __name__)


@categories_bp.route('', methods=['GET'])
def get_categories():
    categories = storage.get_categories()
    return jsonify([category.to_dict() for category in categories])


@categories_bp.route('/<string:slug>', methods=['GET'])
def get_category(slug):
    category = storage.get_category_by_slug(slug)
    if category is None:
        raise NotFoundError("Category not found")
    return jsonify(category.to_dict())


@categories_bp.route('/<string:slug>/articles', methods=['GET'])
def get_category_articles(slug):
    """Newest articles of a category; an unknown slug yields an empty list."""
    articles = storage.get_articles_by_category_slug(slug, get_limit(10))
    return jsonify([article.to_dict() for article in articles])
