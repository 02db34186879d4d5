import itertools

import pytest
import requests

from yourbuzzfeed.celery_utils import celery_app
from yourbuzzfeed.models import Article
from yourbuzzfeed.routes import pipelines as pipeline_routes
from yourbuzzfeed.services import entertainment, news_scraper
from yourbuzzfeed.storage import storage
from yourbuzzfeed.utils.errors import UpstreamError

HACKER_NEWS = news_scraper.NEWS_SOURCES[1]
SAMPLE_SOURCE = news_scraper.NEWS_SOURCES[0]

HN_PAGE = """
<html><body><table>
  <tr><td><span class="titleline"><a href="https://example.com/rust">Show HN: A new database written in Rust</a></span></td></tr>
  <tr><td><span class="titleline"><a href="item?id=42">Ask HN: What are you working on this month?</a></span></td></tr>
  <tr><td><span class="titleline"><a href="https://example.com/short">Too short</a></span></td></tr>
  <tr><td><span class="titleline"><a href="https://example.com/dup">Show HN: A new database written in Rust</a></span></td></tr>
  <tr><td><span class="other"><a href="https://example.com/nav">Not a headline at all, skip</a></span></td></tr>
</table></body></html>
"""


@pytest.fixture
def titled_content(monkeypatch):
    """Unique generated titles so concurrent items never collide on slugs."""
    counter = itertools.count(1)

    def fake(topic, *args, **kwargs):
        n = next(counter)
        return {'title': f"Generated story {n}", 'content': '<p>' + 'text ' * 100 + '</p>', 'excerpt': 'Excerpt'}
    return fake


def test_parse_headlines():
    headlines = news_scraper.parse_headlines(HN_PAGE, HACKER_NEWS)
    assert headlines == [
        {'title': 'Show HN: A new database written in Rust', 'url': 'https://example.com/rust'},
        {'title': 'Ask HN: What are you working on this month?', 'url': 'https://news.ycombinator.com/item?id=42'},
    ]


def test_fetch_headlines_swallows_source_failures(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.Timeout('too slow')

    monkeypatch.setattr(news_scraper.requests, 'get', boom)
    assert news_scraper.fetch_headlines(HACKER_NEWS) == []


def test_sample_source_needs_no_network(monkeypatch):
    monkeypatch.setattr(news_scraper.requests, 'get', lambda *a, **k: pytest.fail('network used'))
    assert len(news_scraper.fetch_headlines(SAMPLE_SOURCE)) == 5


def test_determine_category():
    assert news_scraper.determine_category('New Technology Law Passes') == 'Technology'
    assert news_scraper.determine_category('Health officials warn') == 'Health'
    assert news_scraper.determine_category('Local bakery wins prize') == 'News'


def test_scrape_and_generate_news(app, admin, monkeypatch, no_images, titled_content):
    prompts = []

    def fake(topic, *args, **kwargs):
        prompts.append(topic)
        return titled_content(topic)

    monkeypatch.setattr(news_scraper, 'generate_article_content', fake)

    count = news_scraper.scrape_and_generate_news(sources=[SAMPLE_SOURCE])

    assert count == 5
    articles = Article.query.all()
    assert len(articles) == 5
    category = storage.get_category_by_slug('news')
    assert category is not None
    for article in articles:
        assert article.content_type == 'news'
        assert article.is_featured is True
        assert article.category_id == category.id
        assert article.author_id == admin.id
    assert all('FORMAT REQUIREMENTS' in prompt for prompt in prompts)


def test_scrape_skips_failed_headlines(app, monkeypatch, no_images, titled_content):
    def flaky(topic, *args, **kwargs):
        if 'Climate Summit' in topic:
            raise UpstreamError('Failed to generate article content')
        return titled_content(topic)

    monkeypatch.setattr(news_scraper, 'generate_article_content', flaky)

    assert news_scraper.scrape_and_generate_news(sources=[SAMPLE_SOURCE]) == 4
    assert Article.query.count() == 4


def test_scrape_with_no_headlines_creates_nothing(app, monkeypatch):
    def offline(*args, **kwargs):
        raise requests.ConnectionError('offline')

    monkeypatch.setattr(news_scraper.requests, 'get', offline)
    assert news_scraper.scrape_and_generate_news(sources=[HACKER_NEWS]) == 0
    assert storage.get_category_by_slug('news') is None


def test_listicle_item_count():
    assert entertainment.listicle_item_count('12 Most Anticipated Movies') == 12
    assert 7 <= entertainment.listicle_item_count('Celebrity Moments') <= 11


def test_entertainment_article(app, monkeypatch, no_images, titled_content):
    category = storage.create_category({'name': 'Entertainment'})
    monkeypatch.setattr(entertainment, 'generate_article_content', titled_content)

    article_id = entertainment.generate_entertainment_article()

    article = storage.get_article(article_id)
    assert article.category_id == category.id
    assert article.content_type == 'article'


def test_entertainment_falls_back_to_celebrity(app, monkeypatch, no_images, titled_content):
    category = storage.create_category({'name': 'Celebrity'})
    seen = []

    def fake(topic, num_items=10, target_length=1000):
        seen.append((topic, num_items))
        return titled_content(topic)

    monkeypatch.setattr(entertainment, 'generate_listicle_content', fake)

    article_id = entertainment.generate_entertainment_listicle()

    assert storage.get_article(article_id).category_id == category.id
    topic, num_items = seen[0]
    if topic[0].isdigit():
        assert num_items == int(topic.split()[0])


def test_entertainment_failure_returns_none(app, monkeypatch):
    def fail(*args, **kwargs):
        raise UpstreamError('Failed to generate article content')

    monkeypatch.setattr(entertainment, 'generate_article_content', fail)
    assert entertainment.generate_entertainment_article() is None


def test_entertainment_batch(app, monkeypatch, no_images, titled_content):
    monkeypatch.setattr(entertainment, 'generate_article_content', titled_content)
    monkeypatch.setattr(entertainment, 'generate_listicle_content', titled_content)

    ids = entertainment.generate_entertainment_batch(count=4, listicle_percentage=100)

    assert len(ids) == 4
    assert {storage.get_article(i).content_type for i in ids} == {'listicle'}


def test_pipeline_routes(auth_client, monkeypatch):
    monkeypatch.setattr(pipeline_routes, 'scrape_and_generate_news', lambda: 3)
    response = auth_client.post('/api/news/scrape')
    assert response.status_code == 201
    assert response.get_json() == {'success': True, 'count': 3, 'message': 'Successfully created 3 news articles'}

    monkeypatch.setattr(entertainment, 'generate_entertainment_batch', lambda count, pct: [7, 8])
    response = auth_client.post('/api/entertainment/generate', json={'count': 2})
    assert response.get_json()['ids'] == [7, 8]

    monkeypatch.setattr(entertainment, 'generate_entertainment_article', lambda: None)
    response = auth_client.post('/api/entertainment/generate-article')
    assert response.status_code == 500
    assert response.get_json() == {'message': 'Failed to generate entertainment article'}

    monkeypatch.setattr(entertainment, 'generate_entertainment_listicle', lambda: 12)
    response = auth_client.post('/api/entertainment/generate-listicle')
    assert response.get_json()['articleId'] == 12


def test_pipeline_routes_require_login(client):
    assert client.post('/api/news/scrape').status_code == 401


def test_beat_schedule():
    schedule = celery_app.conf.beat_schedule
    assert schedule['scrape-news']['task'] == 'yourbuzzfeed.tasks.scrape_news_task'
    assert set(schedule) == {'scrape-news'}
