"""
Slug helpers.

Builds URL-friendly identifiers and makes sure a generated slug is unique within a
model's table.
"""
import re
import time
import unicodedata


def slugify(text):
    """
    Convert text to a lowercase, hyphen separated slug.

    "Health & Wellness" becomes "health-wellness".
    """
    text = unicodedata.normalize('NFKD', text or '').encode('ascii', 'ignore').decode('ascii')
    text = text.lower().strip()
    text = re.sub(r'\s+', '-', text)
    text = re.sub(r'[^\w-]+', '', text, flags=re.ASCII)
    text = re.sub(r'-{2,}', '-', text)
    return text.strip('-')


def generate_unique_slug(text, model, exclude_id=None):
    """
    Generate a slug for ``text`` that no other row of ``model`` uses yet,
    appending -1, -2, ... on collision.
    """
    base_slug = slugify(text) or model.__tablename__
    slug = base_slug
    counter = 1

    while True:
        query = model.query.filter(model.slug == slug)
        if exclude_id is not None:
            query = query.filter(model.id != exclude_id)

        if query.first() is None:
            break

        slug = f"{base_slug}-{counter}"
        counter += 1

        # Give up on counters after a while and fall back to a timestamp
        if counter > 100:
            slug = f"{base_slug}-{int(time.time())}"
            break

    return slug
