"""
Shared generate-then-persist step.

Every flow that turns generated text into a stored article (AI routes, batch
generation, news scraping, entertainment content) goes through
persist_generated_article(), so category resolution, image lookup, slug and read
time are decided in one place.
"""
import logging

from yourbuzzfeed.models import Article
from yourbuzzfeed.storage import storage
from yourbuzzfeed.utils.article_utils import calculate_read_time
from yourbuzzfeed.utils.errors import NotFoundError, ValidationError
from yourbuzzfeed.utils.slug_generator import generate_unique_slug
from . import unsplash

logger = logging.getLogger(__name__)

# Concurrent items with the same title can pick the same slug before either commits
SLUG_ATTEMPTS = 5


def resolve_category(category_id=None, category_name=None):
    """Find the category by id, else by name (creating it); None when neither is given."""
    if category_id is not None:
        category = storage.get_category(category_id)
        if category is None:
            raise NotFoundError("Category not found")
        return category
    if category_name:
        return storage.get_or_create_category(category_name)
    return None


def persist_generated_article(generated, content_type='article', category_id=None,
                              image_query=None, is_featured=False):
    """
    Store a generated ``{title, content, excerpt}`` dict as a published article.

    ``category_id`` may be None; ``image_query`` drives the Unsplash lookup.
    """
    title = generated['title']
    content = generated['content']

    photo = unsplash.get_random_image(image_query) if image_query else None
    author = storage.get_first_admin()

    data = {
        'title': title,
        'content': content,
        'excerpt': generated.get('excerpt') or '',
        'featured_image': unsplash.image_url(photo),
        'category_id': category_id,
        'author_id': author.id if author is not None else None,
        'is_published': True,
        'is_featured': bool(is_featured),
        'content_type': content_type,
        'read_time': calculate_read_time(content, content_type),
    }
    for attempt in range(1, SLUG_ATTEMPTS + 1):
        data['slug'] = generate_unique_slug(title, Article)
        try:
            article = storage.create_article(data)
            break
        except ValidationError:
            if attempt == SLUG_ATTEMPTS:
                raise
            logger.warning(f"Slug {data['slug']!r} was taken before insert, retrying ({attempt}/{SLUG_ATTEMPTS})")
    logger.info(f"Generated {content_type} stored: id={article.id} title={title!r}")
    return article
