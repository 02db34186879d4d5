"""
Image search endpoints (login required), backed by Unsplash.
"""
from flask import Blueprint, jsonify, request
from flask_login import login_required

from yourbuzzfeed.services import unsplash
from yourbuzzfeed.utils.errors import NotFoundError, ValidationError
from yourbuzzfeed.utils.validation import get_int_arg

images_bp = Blueprint('images', __name__)


def _require_query():
    query = (request.args.get('query') or '').strip()
    if not query:
        raise ValidationError("Search query is required")
    return query


@images_bp.route('/search', methods=['GET'])
@login_required
def search_images():
    query = _require_query()
    images = unsplash.search_images(
        query,
        get_int_arg('page', 1, minimum=1),
        get_int_arg('perPage', 10, minimum=1, maximum=30),
    )
    return jsonify({'images': images})


@images_bp.route('/random', methods=['GET'])
@login_required
def random_image():
    image = unsplash.get_random_image(_require_query())
    if not image:
        raise NotFoundError("No image found")
    return jsonify({'image': image})
