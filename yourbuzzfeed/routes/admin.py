"""
Admin content creation (login required).

- POST /api/admin/articles
- POST /api/admin/categories
- POST /api/admin/tags
- POST /api/admin/articles/<id>/tags  {tagIds}
"""
from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user

from yourbuzzfeed.models import Article
from yourbuzzfeed.storage import storage
from yourbuzzfeed.utils.article_utils import from_wire, ARTICLE_WIRE_FIELDS, CATEGORY_WIRE_FIELDS
from yourbuzzfeed.utils.errors import ValidationError
from yourbuzzfeed.utils.slug_generator import slugify, generate_unique_slug
from yourbuzzfeed.utils.validation import (
    get_json_body, raise_for_body,
    INSERT_ARTICLE_SCHEMA, INSERT_CATEGORY_SCHEMA, INSERT_TAG_SCHEMA, ARTICLE_TAGS_SCHEMA,
)

admin_bp = Blueprint('admin', __name__)


def _slug_for(body, source_field):
    slug = body.get('slug') or slugify(body[source_field])
    if not slug:
        raise ValidationError(f"Cannot derive a slug from {source_field}")
    return slug


@admin_bp.route('/admin/articles', methods=['POST'])
@login_required
def create_article():
    body = get_json_body()
    raise_for_body(body, INSERT_ARTICLE_SCHEMA)

    data = from_wire(body, ARTICLE_WIRE_FIELDS)
    if not data.get('slug'):
        data['slug'] = generate_unique_slug(data['title'], Article)
    data.setdefault('author_id', current_user.id)

    article = storage.create_article(data)
    current_app.logger.info(f"Admin {current_user.username} created article {article.id}")
    return jsonify(article.to_dict()), 201


@admin_bp.route('/admin/categories', methods=['POST'])
@login_required
def create_category():
    body = get_json_body()
    raise_for_body(body, INSERT_CATEGORY_SCHEMA)

    data = from_wire(body, CATEGORY_WIRE_FIELDS)
    data['slug'] = _slug_for(body, 'name')
    category = storage.create_category(data)
    return jsonify(category.to_dict()), 201


@admin_bp.route('/admin/tags', methods=['POST'])
@login_required
def create_tag():
    body = get_json_body()
    raise_for_body(body, INSERT_TAG_SCHEMA)

    tag = storage.create_tag({'name': body['name'], 'slug': _slug_for(body, 'name')})
    return jsonify(tag.to_dict()), 201


@admin_bp.route('/admin/articles/<int:article_id>/tags', methods=['POST'])
@login_required
def add_article_tags(article_id):
    body = get_json_body()
    raise_for_body(body, ARTICLE_TAGS_SCHEMA)

    storage.add_tags_to_article(article_id, body['tagIds'])
    tags = storage.get_tags_for_article(article_id)
    return jsonify({'articleId': article_id, 'tags': [tag.to_dict() for tag in tags]})
