"""
Entertainment content generation: single articles, listicles and mixed batches.
"""
import logging
import random
import re

from yourbuzzfeed.storage import storage
from .batch import run_bounded
from .content_pipeline import persist_generated_article
from .openai_service import generate_article_content, generate_listicle_content

logger = logging.getLogger(__name__)

ENTERTAINMENT_TOPICS = [
    'celebrity gossip',
    'movie reviews',
    'television shows',
    'music releases',
    'celebrity fashion',
    'entertainment awards',
    'streaming platforms',
    'viral videos',
    'celebrity interviews',
    'box office results',
]

ENTERTAINMENT_LISTICLES = [
    'Top 10 Celebrity Fashion Moments This Month',
    '12 Most Anticipated Movies Coming This Year',
    '7 TV Shows You Need to Watch Right Now',
    '15 Celebrity Couples Who Called It Quits',
    '8 Music Videos That Broke the Internet',
    '10 Most Shocking Celebrity Transformations',
    '6 Rising Stars to Watch This Year',
    '9 Celebrity Social Media Moments That Went Viral',
    '11 Biggest Entertainment Scandals of the Year',
    "7 Upcoming Album Releases You Can't Miss",
]

ARTICLE_FEATURE_CHANCE = 0.2
LISTICLE_FEATURE_CHANCE = 0.3

ARTICLE_PROMPT = """Write an engaging entertainment article about {topic}.
Focus on recent events, trends, or news. Make it feel current and relevant.
The tone should be light, entertaining, and gossip-like. Include interesting facts or
industry insights where appropriate."""


def _entertainment_category_id():
    category = storage.get_category_by_slug('entertainment')
    if category is None:
        logger.info("Entertainment category not found, falling back to celebrity")
        category = storage.get_category_by_slug('celebrity')
    return category.id if category is not None else None


def listicle_item_count(topic):
    """Leading number of a listicle title, or a random 7..11 when it has none."""
    match = re.match(r'^\d+', topic)
    return int(match.group(0)) if match else random.randint(7, 11)


def generate_entertainment_article():
    """Generate and store one entertainment article; returns its id or None."""
    topic = random.choice(ENTERTAINMENT_TOPICS)
    try:
        generated = generate_article_content(ARTICLE_PROMPT.format(topic=topic), 800)
        article = persist_generated_article(
            generated,
            content_type='article',
            category_id=_entertainment_category_id(),
            image_query=f"entertainment {topic} {' '.join(generated['title'].split()[:3])}",
            is_featured=random.random() < ARTICLE_FEATURE_CHANCE,
        )
    except Exception as e:
        logger.error(f"Error generating entertainment article about '{topic}': {e}", exc_info=True)
        return None
    return article.id


def generate_entertainment_listicle():
    """Generate and store one entertainment listicle; returns its id or None."""
    topic = random.choice(ENTERTAINMENT_LISTICLES)
    try:
        generated = generate_listicle_content(topic, listicle_item_count(topic))
        article = persist_generated_article(
            generated,
            content_type='listicle',
            category_id=_entertainment_category_id(),
            image_query=f"entertainment {' '.join(topic.split()[:3])}",
            is_featured=random.random() < LISTICLE_FEATURE_CHANCE,
        )
    except Exception as e:
        logger.error(f"Error generating entertainment listicle '{topic}': {e}", exc_info=True)
        return None
    return article.id


def _generate_piece(is_listicle):
    if is_listicle:
        return generate_entertainment_listicle()
    return generate_entertainment_article()


def generate_entertainment_batch(count=5, listicle_percentage=60):
    """Generate ``count`` pieces, roughly ``listicle_percentage``% listicles; returns created ids."""
    kinds = [random.random() * 100 < listicle_percentage for _ in range(count)]
    logger.info(f"Generating {count} entertainment pieces ({listicle_percentage}% listicles)")
    results = run_bounded(kinds, _generate_piece, label='entertainment')
    ids = [result.value for result in results if result.success and result.value]
    logger.info(f"Created {len(ids)}/{count} entertainment pieces")
    return ids
