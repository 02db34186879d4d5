import json
import time
from types import SimpleNamespace

import pytest
import requests

from yourbuzzfeed.models import Article
from yourbuzzfeed.routes import ai as ai_routes
from yourbuzzfeed.services import content_pipeline, openai_service, unsplash
from yourbuzzfeed.utils.errors import UpstreamError

from conftest import ArticleFixtures, CategoryFixtures


class FakeCompletions:
    def __init__(self, payload):
        self.payload = payload
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if isinstance(self.payload, Exception):
            raise self.payload
        content = self.payload if isinstance(self.payload, str) else json.dumps(self.payload)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def fake_openai(monkeypatch):
    def install(payload):
        completions = FakeCompletions(payload)
        client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
        monkeypatch.setattr(openai_service, 'get_client', lambda: client)
        return completions
    return install


def generated(title):
    return {'title': title, 'content': '<p>' + 'word ' * 200 + '</p>', 'excerpt': f"About {title}"}


# --- openai_service ---

def test_article_content_requests_json_object(app, fake_openai):
    completions = fake_openai({'title': 'T', 'content': '<p>c</p>', 'excerpt': 'e'})
    assert openai_service.generate_article_content('cats') == {'title': 'T', 'content': '<p>c</p>', 'excerpt': 'e'}
    call = completions.calls[0]
    assert call['response_format'] == {'type': 'json_object'}
    assert 'cats' in call['messages'][1]['content']


def test_missing_fields_fall_back_to_defaults(app, fake_openai):
    fake_openai({})
    result = openai_service.generate_article_content('cats')
    assert result == {
        'title': 'Generated Article',
        'content': '<p>Content could not be generated</p>',
        'excerpt': 'Generated excerpt',
    }


def test_listicle_item_count_is_clamped(app, fake_openai):
    completions = fake_openai({})
    result = openai_service.generate_listicle_content('dogs', num_items=50)
    assert result['title'] == '20 Amazing Facts About dogs'
    assert 'exactly 20 items' in completions.calls[0]['messages'][0]['content']


def test_provider_failure_raises_upstream_error(app, fake_openai):
    fake_openai(RuntimeError('connection reset'))
    with pytest.raises(UpstreamError) as excinfo:
        openai_service.generate_article_ideas('Health')
    assert excinfo.value.message == 'Failed to generate article ideas'


def test_non_json_reply_raises_upstream_error(app, fake_openai):
    fake_openai('not json')
    with pytest.raises(UpstreamError):
        openai_service.generate_article_content('cats')


def test_missing_api_key(app):
    app.config['OPENAI_API_KEY'] = None
    with pytest.raises(UpstreamError):
        openai_service.get_client()


def test_batch_generate_content_drops_failed_items(app, monkeypatch):
    monkeypatch.setattr(openai_service, 'generate_batch_topics', lambda count, pct: [
        {'topic': 'ok one', 'category': 'Health', 'contentType': 'article'},
        {'topic': 'broken', 'category': 'Health', 'contentType': 'article'},
        {'topic': 'ok two', 'category': 'Travel', 'contentType': 'listicle'},
    ])

    def fake_article(topic, target_length=800):
        if topic == 'broken':
            raise UpstreamError('Failed to generate article content')
        return generated(topic)

    monkeypatch.setattr(openai_service, 'generate_article_content', fake_article)
    monkeypatch.setattr(openai_service, 'generate_listicle_content',
                        lambda topic, num_items=10, target_length=1000: generated(topic))

    results = openai_service.batch_generate_content(3, 40)

    assert [r['title'] for r in results] == ['ok one', 'ok two']
    assert results[1]['contentType'] == 'listicle'
    assert results[1]['category'] == 'Travel'


# --- /api/ai ---

def test_ai_routes_require_login(client):
    assert client.post('/api/ai/generate-content', json={'topic': 'x'}).status_code == 401
    assert client.get('/api/ai/test-connection').status_code == 401


def test_generate_content_requires_topic(auth_client):
    response = auth_client.post('/api/ai/generate-content', json={})
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Topic is required'


def test_generate_content(auth_client, monkeypatch):
    monkeypatch.setattr(openai_service, 'generate_article_content', lambda topic, target_length=800: generated(topic))
    response = auth_client.post('/api/ai/generate-content', json={'topic': 'Budget travel'})
    assert response.status_code == 200
    assert response.get_json()['title'] == 'Budget travel'


def test_generate_ideas(auth_client, monkeypatch):
    monkeypatch.setattr(openai_service, 'generate_article_ideas', lambda category, count=5: ['a', 'b'][:count])
    response = auth_client.post('/api/ai/generate-ideas', json={'category': 'Health', 'count': 2})
    assert response.get_json() == {'ideas': ['a', 'b']}

    missing = auth_client.post('/api/ai/generate-ideas', json={})
    assert missing.get_json()['message'] == 'Category is required'


def test_upstream_failure_is_generic_500(auth_client, monkeypatch):
    def fail(topic, target_length=800):
        raise UpstreamError('Failed to generate article content')

    monkeypatch.setattr(openai_service, 'generate_article_content', fail)
    response = auth_client.post('/api/ai/generate-content', json={'topic': 'x'})
    assert response.status_code == 500
    assert response.get_json() == {'message': 'Failed to generate article content'}


def test_create_article_stores_generated_content(auth_client, admin, monkeypatch, no_images):
    category = CategoryFixtures[1]
    monkeypatch.setattr(openai_service, 'generate_article_content',
                        lambda topic, target_length=800: generated('Why Cats Rule'))

    response = auth_client.post('/api/ai/create-article', json={'topic': 'cats', 'categoryId': category.id})

    assert response.status_code == 201
    article = response.get_json()['article']
    assert article['slug'] == 'why-cats-rule'
    assert article['categoryId'] == category.id
    assert article['authorId'] == admin.id
    assert article['contentType'] == 'article'
    assert article['featuredImage'] == ''
    assert Article.query.count() == 1


def test_create_article_uses_image_when_found(auth_client, monkeypatch):
    category = CategoryFixtures[1]
    monkeypatch.setattr(openai_service, 'generate_article_content',
                        lambda topic, target_length=800: generated('Sunny Beaches'))
    monkeypatch.setattr(unsplash, 'get_random_image', lambda query: {'urls': {'regular': 'https://img/1.jpg'}})

    response = auth_client.post('/api/ai/create-article', json={'topic': 'beach', 'categoryId': category.id})
    assert response.get_json()['article']['featuredImage'] == 'https://img/1.jpg'


def test_generated_titles_get_unique_slugs(auth_client, monkeypatch, no_images):
    category = CategoryFixtures[1]
    monkeypatch.setattr(openai_service, 'generate_listicle_content',
                        lambda topic, num_items=10, target_length=1000: generated('Ten Tips'))

    slugs = [
        auth_client.post('/api/ai/create-listicle', json={'topic': 't', 'categoryId': category.id})
        .get_json()['article']['slug']
        for _ in range(2)
    ]
    assert slugs == ['ten-tips', 'ten-tips-1']


def test_create_article_unknown_category(auth_client, monkeypatch):
    monkeypatch.setattr(openai_service, 'generate_article_content', lambda topic, target_length=800: generated('x'))
    response = auth_client.post('/api/ai/create-article', json={'topic': 'cats', 'categoryId': 999})
    assert response.status_code == 404
    assert response.get_json() == {'message': 'Category not found'}
    assert Article.query.count() == 0


def test_batch_generate_reports_per_item_results(auth_client, monkeypatch, no_images):
    monkeypatch.setattr(openai_service, 'batch_generate_content', lambda count, pct: [
        dict(generated('First Story'), contentType='article', category='Health'),
        dict(generated('Broken Story'), contentType='article', category='Health'),
        dict(generated('Third Story'), contentType='listicle', category='Brand New'),
    ])
    original = ai_routes.persist_generated_article

    def persist(content, **kwargs):
        if content['title'] == 'Broken Story':
            raise RuntimeError('disk full')
        return original(content, **kwargs)

    monkeypatch.setattr(ai_routes, 'persist_generated_article', persist)

    response = auth_client.post('/api/ai/batch-generate', json={'count': 3})

    assert response.status_code == 201
    body = response.get_json()
    assert body['count'] == 2
    assert body['message'] == 'Successfully created 2 articles'
    assert [r['success'] for r in body['results']] == [True, False, True]
    assert body['results'][1] == {'title': 'Broken Story', 'success': False, 'error': 'Failed to create article'}
    assert Article.query.count() == 2
    created = Article.query.filter_by(slug='third-story').one()
    assert created.content_type == 'listicle'
    assert created.category_id is not None


def test_batch_generate_validates_count(auth_client):
    response = auth_client.post('/api/ai/batch-generate', json={'count': 500})
    assert response.status_code == 400


def test_connection_check(auth_client, monkeypatch):
    monkeypatch.setattr(openai_service, 'generate_article_ideas', lambda category, count=5: ['Sample idea'])
    response = auth_client.get('/api/ai/test-connection')
    assert response.get_json()['success'] is True

    def fail(category, count=5):
        raise UpstreamError('Failed to generate article ideas')

    monkeypatch.setattr(openai_service, 'generate_article_ideas', fail)
    response = auth_client.get('/api/ai/test-connection')
    assert response.status_code == 500
    assert response.get_json() == {'success': False, 'message': 'Failed to connect to OpenAI API'}


# --- /api/images ---

class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        return self.payload


def test_image_search(auth_client, monkeypatch):
    calls = []

    def fake_get(url, params=None, headers=None, timeout=None):
        calls.append((url, params, headers))
        return FakeResponse({'results': [{'id': 'a'}, {'id': 'b'}]})

    monkeypatch.setattr(unsplash.requests, 'get', fake_get)
    response = auth_client.get('/api/images/search?query=cats&perPage=100')

    assert response.get_json() == {'images': [{'id': 'a'}, {'id': 'b'}]}
    url, params, headers = calls[0]
    assert url.endswith('/search/photos')
    assert params['per_page'] == 30
    assert headers['Authorization'] == 'Client-ID test-unsplash-key'


def test_image_search_requires_query(auth_client):
    response = auth_client.get('/api/images/search')
    assert response.status_code == 400
    assert response.get_json()['message'] == 'Search query is required'


def test_image_search_failure_is_500(auth_client, monkeypatch):
    monkeypatch.setattr(unsplash.requests, 'get', lambda *args, **kwargs: FakeResponse({}, status=503))
    response = auth_client.get('/api/images/search?query=cats')
    assert response.status_code == 500
    assert response.get_json() == {'message': 'Failed to search for images'}


def test_random_image_not_found(auth_client, monkeypatch):
    def boom(*args, **kwargs):
        raise requests.ConnectionError('offline')

    monkeypatch.setattr(unsplash.requests, 'get', boom)
    response = auth_client.get('/api/images/random?query=cats')
    assert response.status_code == 404
    assert response.get_json() == {'message': 'No image found'}


# --- generate-then-persist ---

def test_persist_retries_when_slug_is_taken_before_insert(app, monkeypatch, no_images):
    ArticleFixtures.add_extra(slug='same-title')[1]
    real_slug = content_pipeline.generate_unique_slug
    stale = iter(['same-title'])
    monkeypatch.setattr(content_pipeline, 'generate_unique_slug',
                        lambda text, model: next(stale, None) or real_slug(text, model))

    article = content_pipeline.persist_generated_article(generated('Same Title'))

    assert article.slug == 'same-title-1'


def test_batch_items_sharing_a_title_are_all_stored(auth_client, monkeypatch, no_images):
    monkeypatch.setattr(openai_service, 'batch_generate_content', lambda count, pct: [
        dict(generated('Same Title'), contentType='article', category='Health'),
        dict(generated('Same Title'), contentType='article', category='Health'),
    ])
    real_slug = content_pipeline.generate_unique_slug

    def slow_slug(text, model):
        # Both workers pick a slug before either inserts
        slug = real_slug(text, model)
        time.sleep(0.1)
        return slug

    monkeypatch.setattr(content_pipeline, 'generate_unique_slug', slow_slug)

    response = auth_client.post('/api/ai/batch-generate', json={'count': 2})

    body = response.get_json()
    assert body['count'] == 2
    assert [r['success'] for r in body['results']] == [True, True]
    assert sorted(a.slug for a in Article.query.all()) == ['same-title', 'same-title-1']
