"""
Article endpoints.

Public:
- GET /api/articles?limit=&offset=
- GET /api/articles/featured?limit=, GET /api/articles/popular?limit=
- GET /api/articles/<slug> (counts a view)
- POST /api/articles/<id>/share (counts a share)
- GET /api/articles/<id>/related?limit=, GET /api/articles/<id>/tags

Login required:
- PATCH /api/articles/<id>, DELETE /api/articles/<id>
- POST /api/articles/bulk-delete
"""
from flask import Blueprint, jsonify, current_app
from flask_login import login_required

from yourbuzzfeed import db
from yourbuzzfeed.storage import storage
from yourbuzzfeed.utils.article_utils import from_wire, ARTICLE_WIRE_FIELDS
from yourbuzzfeed.utils.errors import NotFoundError
from yourbuzzfeed.utils.validation import (
    get_json_body, raise_for_body, get_limit, get_offset,
    ARTICLE_PATCH_SCHEMA, BULK_DELETE_SCHEMA,
)

articles_bp = Blueprint('articles', __name__)


def _serialize(articles):
    return jsonify([article.to_dict() for article in articles])


@articles_bp.route('', methods=['GET'])
def get_articles():
    return _serialize(storage.get_articles(get_limit(20), get_offset()))


@articles_bp.route('/featured', methods=['GET'])
def get_featured_articles():
    return _serialize(storage.get_featured_articles(get_limit(1)))


@articles_bp.route('/popular', methods=['GET'])
def get_popular_articles():
    return _serialize(storage.get_popular_articles(get_limit(5)))


@articles_bp.route('/<string:slug>', methods=['GET'])
def get_article(slug):
    """Fetch an article by slug; every successful fetch counts as a view."""
    article = storage.get_article_by_slug(slug)
    if article is None:
        raise NotFoundError("Article not found")
    data = article.to_dict()
    storage.increment_article_views(article.id)
    return jsonify(data)


@articles_bp.route('/<int:article_id>/share', methods=['POST'])
def share_article(article_id):
    storage.increment_article_shares(article_id)
    return jsonify({'success': True})


@articles_bp.route('/<int:article_id>/related', methods=['GET'])
def get_related_articles(article_id):
    return _serialize(storage.get_related_articles(article_id, get_limit(3)))


@articles_bp.route('/<int:article_id>/tags', methods=['GET'])
def get_article_tags(article_id):
    return jsonify([tag.to_dict() for tag in storage.get_tags_for_article(article_id)])


@articles_bp.route('/<int:article_id>', methods=['PATCH'])
@login_required
def update_article(article_id):
    body = get_json_body()
    raise_for_body(body, ARTICLE_PATCH_SCHEMA)
    article = storage.update_article(article_id, from_wire(body, ARTICLE_WIRE_FIELDS))
    current_app.logger.info(f"Article {article_id} updated: {sorted(body.keys())}")
    return jsonify(article.to_dict())


@articles_bp.route('/<int:article_id>', methods=['DELETE'])
@login_required
def delete_article(article_id):
    storage.delete_article(article_id)
    return jsonify({'success': True, 'message': "Article deleted successfully"})


@articles_bp.route('/bulk-delete', methods=['POST'])
@login_required
def bulk_delete_articles():
    """Delete several articles; one failing id does not stop the others."""
    body = get_json_body()
    raise_for_body(body, BULK_DELETE_SCHEMA, message="Invalid article IDs")

    results = []
    for article_id in body['ids']:
        try:
            storage.delete_article(article_id)
            results.append({'id': article_id, 'success': True})
        except NotFoundError:
            results.append({'id': article_id, 'success': False, 'error': "Failed to delete"})
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"Bulk delete failed for article {article_id}: {e}", exc_info=True)
            results.append({'id': article_id, 'success': False, 'error': "Failed to delete"})

    successful = sum(1 for result in results if result['success'])
    failed = len(results) - successful
    message = f"Deleted {successful} articles"
    if failed:
        message += f", failed to delete {failed} articles"
    current_app.logger.info(f"Bulk delete: {message}")
    return jsonify({
        'message': message,
        'successful': successful,
        'failed': failed,
        'results': results,
    })
