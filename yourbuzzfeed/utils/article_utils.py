"""
Article helpers.

- read time estimation from content length
- translating camelCase request payloads into Article column values
"""
import math
from datetime import datetime, timezone

from .errors import ValidationError

CHARS_PER_MINUTE = 400
LISTICLE_CHARS_PER_MINUTE = 600

# wire name -> column name
ARTICLE_WIRE_FIELDS = {
    'title': 'title',
    'slug': 'slug',
    'excerpt': 'excerpt',
    'content': 'content',
    'featuredImage': 'featured_image',
    'publishDate': 'publish_date',
    'authorId': 'author_id',
    'categoryId': 'category_id',
    'isPublished': 'is_published',
    'isFeatured': 'is_featured',
    'contentType': 'content_type',
    'readTime': 'read_time',
}

CATEGORY_WIRE_FIELDS = {
    'name': 'name',
    'slug': 'slug',
    'description': 'description',
    'color': 'color',
    'bgColor': 'bg_color',
}


def calculate_read_time(content, content_type='article'):
    """Minutes to read ``content``; listicles skim faster. Never less than 1."""
    per_minute = LISTICLE_CHARS_PER_MINUTE if content_type == 'listicle' else CHARS_PER_MINUTE
    return max(1, math.ceil(len(content or '') / per_minute))


def parse_datetime(value):
    """Parse an ISO-8601 timestamp into a naive UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
        except ValueError:
            raise ValidationError(f"Invalid date: {value}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def from_wire(body, fields):
    """Rename the known camelCase keys of ``body`` to column names; unknown keys are dropped."""
    data = {column: body[key] for key, column in fields.items() if key in body}
    if data.get('publish_date') is not None:
        data['publish_date'] = parse_datetime(data['publish_date'])
    return data
