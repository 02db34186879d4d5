"""
AI content endpoints (login required).

generate-* return generated text only; create-* and batch-generate also store the
result as articles.
"""
from flask import Blueprint, jsonify, current_app
from flask_login import login_required

from yourbuzzfeed.services import openai_service
from yourbuzzfeed.services.batch import run_bounded
from yourbuzzfeed.services.content_pipeline import resolve_category, persist_generated_article
from yourbuzzfeed.utils.errors import UpstreamError
from yourbuzzfeed.utils.validation import (
    get_json_body, raise_for_body,
    GENERATE_CONTENT_SCHEMA, GENERATE_IDEAS_SCHEMA, GENERATE_LISTICLE_SCHEMA,
    CREATE_ARTICLE_SCHEMA, CREATE_LISTICLE_SCHEMA, BATCH_GENERATE_SCHEMA,
)

ai_bp = Blueprint('ai', __name__)


@ai_bp.route('/generate-content', methods=['POST'])
@login_required
def generate_content():
    body = get_json_body()
    raise_for_body(body, GENERATE_CONTENT_SCHEMA, message="Topic is required")
    generated = openai_service.generate_article_content(body['topic'], body.get('targetLength', 800))
    return jsonify(generated)


@ai_bp.route('/generate-ideas', methods=['POST'])
@login_required
def generate_ideas():
    body = get_json_body()
    raise_for_body(body, GENERATE_IDEAS_SCHEMA, message="Category is required")
    ideas = openai_service.generate_article_ideas(body['category'], body.get('count', 5))
    return jsonify({'ideas': ideas})


@ai_bp.route('/generate-listicle', methods=['POST'])
@login_required
def generate_listicle():
    body = get_json_body()
    raise_for_body(body, GENERATE_LISTICLE_SCHEMA, message="Topic is required")
    generated = openai_service.generate_listicle_content(
        body['topic'], body.get('numItems', 10), body.get('targetLength', 1000)
    )
    return jsonify(generated)


@ai_bp.route('/create-article', methods=['POST'])
@login_required
def create_article():
    body = get_json_body()
    raise_for_body(body, CREATE_ARTICLE_SCHEMA, message="Topic and categoryId are required")

    category = resolve_category(category_id=body['categoryId'])
    generated = openai_service.generate_article_content(body['topic'], body.get('targetLength', 800))
    article = persist_generated_article(
        generated,
        content_type='article',
        category_id=category.id,
        image_query=body.get('imageKeyword') or body['topic'],
    )
    return jsonify({'article': article.to_dict(), 'message': "Article created successfully"}), 201


@ai_bp.route('/create-listicle', methods=['POST'])
@login_required
def create_listicle():
    body = get_json_body()
    raise_for_body(body, CREATE_LISTICLE_SCHEMA, message="Topic and categoryId are required")

    category = resolve_category(category_id=body['categoryId'])
    generated = openai_service.generate_listicle_content(
        body['topic'], body.get('numItems', 10), body.get('targetLength', 1000)
    )
    article = persist_generated_article(
        generated,
        content_type='listicle',
        category_id=category.id,
        image_query=body.get('imageKeyword') or body['topic'],
    )
    return jsonify({'article': article.to_dict(), 'message': "Listicle created successfully"}), 201


def _persist_batch_item(item):
    content = item['content']
    image_query = f"{content['category']} {' '.join(content['title'].split()[:4])}"
    article = persist_generated_article(
        content,
        content_type=content['contentType'],
        category_id=item['category_id'],
        image_query=image_query,
    )
    return article.id


@ai_bp.route('/batch-generate', methods=['POST'])
@login_required
def batch_generate():
    body = get_json_body()
    raise_for_body(body, BATCH_GENERATE_SCHEMA)
    count = body.get('count', 10)
    listicle_percentage = body.get('listiclePercentage', 40)

    current_app.logger.info(f"Starting batch generation: count={count} listiclePercentage={listicle_percentage}")
    batch_content = openai_service.batch_generate_content(count, listicle_percentage)

    # Categories are resolved up front so concurrent items never race to create one
    items = []
    for content in batch_content:
        category = resolve_category(category_name=content.get('category'))
        items.append({'content': content, 'category_id': category.id if category is not None else None})

    outcomes = run_bounded(items, _persist_batch_item, label='ai-batch-persist')
    results = []
    for outcome in outcomes:
        entry = {'title': outcome.item['content']['title'], 'success': outcome.success}
        if outcome.success:
            entry['id'] = outcome.value
        else:
            entry['error'] = "Failed to create article"
        results.append(entry)

    created = sum(1 for outcome in outcomes if outcome.success)
    current_app.logger.info(f"Batch generation complete, created {created} articles")
    return jsonify({
        'success': True,
        'count': created,
        'message': f"Successfully created {created} articles",
        'results': results,
    }), 201


@ai_bp.route('/test-connection', methods=['GET'])
@login_required
def test_connection():
    try:
        ideas = openai_service.generate_article_ideas('Technology', 1)
    except UpstreamError:
        return jsonify({'success': False, 'message': "Failed to connect to OpenAI API"}), 500
    return jsonify({
        'success': True,
        'message': "OpenAI connection is working correctly!",
        'sample': ideas[0] if ideas else None,
    })
