"""
News scraper.

Collects headlines from the configured sources, then turns a handful of them into
featured news articles. A source that fails yields no headlines instead of stopping
the run, and a headline whose generation fails is skipped.
"""
import logging
import random
from collections import namedtuple
from functools import partial

import requests
from bs4 import BeautifulSoup

from yourbuzzfeed.storage import storage
from .batch import run_bounded
from .content_pipeline import persist_generated_article
from .openai_service import generate_article_content

logger = logging.getLogger(__name__)

MAX_HEADLINES_PER_SOURCE = 5
MAX_HEADLINES_PER_RUN = 5
MIN_TITLE_LENGTH = 10
REQUEST_TIMEOUT = 10

NewsSource = namedtuple('NewsSource', ['name', 'url', 'selector', 'base_url', 'sample_headlines'])

NEWS_SOURCES = [
    NewsSource(
        name='Sample Headlines',
        url=None,
        selector=None,
        base_url='',
        sample_headlines=[
            {'title': "Global Markets React to New Economic Policies", 'url': "https://example.com/markets"},
            {'title': "Scientists Discover Breakthrough in Renewable Energy", 'url': "https://example.com/science"},
            {'title': "Major Tech Companies Announce New Privacy Features", 'url': "https://example.com/tech"},
            {'title': "Climate Summit Results in Historic Agreement", 'url': "https://example.com/climate"},
            {'title': "New Health Study Reveals Benefits of Mediterranean Diet", 'url': "https://example.com/health"},
        ],
    ),
    NewsSource(
        name='Hacker News',
        url='https://news.ycombinator.com',
        selector='.titleline > a',
        base_url='https://news.ycombinator.com/',
        sample_headlines=None,
    ),
]

# keyword -> category name, first match wins
NEWS_CATEGORIES = {
    'politics': 'News',
    'world': 'News',
    'business': 'News',
    'technology': 'Technology',
    'science': 'Health',
    'health': 'Health',
    'sports': 'Entertainment',
    'entertainment': 'Entertainment',
}

BROWSER_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
    'Cache-Control': 'no-cache',
}

NEWS_PROMPT = """Write a detailed news article based on this headline: "{title}".

FORMAT REQUIREMENTS (VERY IMPORTANT):
- Structure the article with a clear introduction, body, and conclusion
- Start with an attention-grabbing intro paragraph using <p> tags
- Use 4-5 informative subheadings (<h2> tags) to organize the content
- Include <strong> tags for emphasis on key statistics or important facts
- Add <blockquote> elements for analysis or expert opinions
- Include at least one bulleted list (<ul> with <li> items) for key points
- Insert a <div class="ad-break"></div> tag after every 2-3 paragraphs for ad placement
- Keep paragraphs short (3-4 sentences maximum)
- End with a conclusion paragraph summarizing the key implications

The article should be factual, informative, and read like a professional news piece.
Include contextual background and analysis. Don't make up specific quotes or statistics
unless they are common knowledge."""


def parse_headlines(html, source):
    """Extract ``{title, url}`` dicts from a source page."""
    soup = BeautifulSoup(html, 'html.parser')
    headlines = []
    seen = set()
    for element in soup.select(source.selector):
        title = ' '.join(element.get_text().split())
        url = element.get('href')
        if url and url.startswith('/'):
            url = source.base_url.rstrip('/') + url
        elif url and '://' not in url:
            url = source.base_url + url
        if not title or not url or len(title) <= MIN_TITLE_LENGTH or title in seen:
            continue
        seen.add(title)
        headlines.append({'title': title, 'url': url})
    return headlines[:MAX_HEADLINES_PER_SOURCE]


def fetch_headlines(source):
    """Headlines from one source; any failure yields an empty list."""
    logger.info(f"Fetching headlines from {source.name}")
    if source.sample_headlines:
        return list(source.sample_headlines[:MAX_HEADLINES_PER_SOURCE])
    try:
        response = requests.get(source.url, headers=BROWSER_HEADERS, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        headlines = parse_headlines(response.text, source)
    except Exception as e:
        logger.error(f"Error fetching headlines from {source.name}: {e}", exc_info=True)
        return []
    logger.info(f"Found {len(headlines)} headlines from {source.name}")
    return headlines


def determine_category(headline):
    """Category name suggested by keywords in the headline; 'News' by default."""
    lowered = headline.lower()
    for keyword, category in NEWS_CATEGORIES.items():
        if keyword in lowered:
            return category
    return 'News'


def _news_category():
    return storage.get_category_by_slug('news') or storage.get_or_create_category('News')


def generate_news_article(headline, category_id=None):
    generated = generate_article_content(NEWS_PROMPT.format(title=headline['title']), 800)
    topic = determine_category(headline['title'])
    image_query = f"{topic} {' '.join(generated['title'].split()[:4])}"
    article = persist_generated_article(
        generated,
        content_type='news',
        category_id=category_id,
        image_query=image_query,
        is_featured=True,
    )
    return article.id


def scrape_and_generate_news(sources=None):
    """Run one scrape; returns the number of news articles created."""
    sources = NEWS_SOURCES if sources is None else sources
    logger.info("Starting news scraping run")

    fetched = run_bounded(sources, fetch_headlines, label='news-sources')
    headlines = [headline for result in fetched if result.success for headline in result.value]
    random.shuffle(headlines)
    selected = headlines[:MAX_HEADLINES_PER_RUN]
    logger.info(f"Selected {len(selected)} headlines for article generation")
    if not selected:
        return 0

    category_id = _news_category().id

    created = run_bounded(selected, partial(generate_news_article, category_id=category_id), label='news-articles')
    count = sum(1 for result in created if result.success)
    logger.info(f"News scraping run complete, {count} articles created")
    return count
