"""
Generation pipelines triggered by hand (login required).

- POST /api/news/scrape
- POST /api/entertainment/generate
- POST /api/entertainment/generate-article
- POST /api/entertainment/generate-listicle

Each runs synchronously within the request.
"""
from flask import Blueprint, jsonify, current_app
from flask_login import login_required

from yourbuzzfeed.services import entertainment
from yourbuzzfeed.services.news_scraper import scrape_and_generate_news
from yourbuzzfeed.utils.errors import UpstreamError
from yourbuzzfeed.utils.validation import get_json_body, raise_for_body, ENTERTAINMENT_BATCH_SCHEMA

pipelines_bp = Blueprint('pipelines', __name__)


@pipelines_bp.route('/news/scrape', methods=['POST'])
@login_required
def scrape_news():
    current_app.logger.info("Manual news scraping initiated")
    count = scrape_and_generate_news()
    return jsonify({
        'success': True,
        'count': count,
        'message': f"Successfully created {count} news articles",
    }), 201


@pipelines_bp.route('/entertainment/generate', methods=['POST'])
@login_required
def generate_entertainment():
    body = get_json_body()
    raise_for_body(body, ENTERTAINMENT_BATCH_SCHEMA)
    ids = entertainment.generate_entertainment_batch(body.get('count', 5), body.get('listiclePercentage', 60))
    return jsonify({
        'success': True,
        'count': len(ids),
        'ids': ids,
        'message': f"Successfully created {len(ids)} entertainment content pieces",
    }), 201


@pipelines_bp.route('/entertainment/generate-article', methods=['POST'])
@login_required
def generate_entertainment_article():
    article_id = entertainment.generate_entertainment_article()
    if not article_id:
        raise UpstreamError("Failed to generate entertainment article")
    return jsonify({
        'success': True,
        'articleId': article_id,
        'message': "Successfully created entertainment article",
    }), 201


@pipelines_bp.route('/entertainment/generate-listicle', methods=['POST'])
@login_required
def generate_entertainment_listicle():
    article_id = entertainment.generate_entertainment_listicle()
    if not article_id:
        raise UpstreamError("Failed to generate entertainment listicle")
    return jsonify({
        'success': True,
        'articleId': article_id,
        'message': "Successfully created entertainment listicle",
    }), 201
