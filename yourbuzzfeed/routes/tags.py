"""
Public tag endpoints.

- GET /api/tags
- GET /api/tags/<slug>
- GET /api/tags/<slug>/articles
"""
from flask import Blueprint, jsonify

from yourbuzzfeed.storage import storage
from yourbuzzfeed.utils.errors import NotFoundError

tags_bp = Blueprint('tags', __name__)


@tags_bp.route('', methods=['GET'])
def get_tags():
    return jsonify([tag.to_dict() for tag in storage.get_tags()])


@tags_bp.route('/<string:slug>', methods=['GET'])
def get_tag(slug):
    tag = storage.get_tag_by_slug(slug)
    if tag is None:
        raise NotFoundError("Tag not found")
    return jsonify(tag.to_dict())


@tags_bp.route('/<string:slug>/articles', methods=['GET'])
def get_tag_articles(slug):
    articles = storage.get_articles_by_tag_slug(slug)
    return jsonify([article.to_dict() for article in articles])
