"""
Unsplash image lookup.

search_images() raises UpstreamError on any failure; get_random_image() is used while
persisting generated articles and returns None instead, so a missing image never
blocks an article.
"""
import logging

import requests
from flask import current_app

from yourbuzzfeed.utils.errors import UpstreamError

logger = logging.getLogger(__name__)

API_BASE_URL = 'https://api.unsplash.com'
REQUEST_TIMEOUT = 10


def _headers():
    access_key = current_app.config.get('UNSPLASH_ACCESS_KEY')
    if not access_key:
        raise UpstreamError("Unsplash API key is not configured")
    return {'Authorization': f"Client-ID {access_key}", 'Accept-Version': 'v1'}


def search_images(query, page=1, per_page=10):
    try:
        response = requests.get(
            f"{API_BASE_URL}/search/photos",
            params={'query': query, 'page': page, 'per_page': per_page},
            headers=_headers(),
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        return response.json().get('results', [])
    except (requests.RequestException, ValueError, UpstreamError) as e:
        logger.error(f"Unsplash search failed for '{query}': {e}", exc_info=True)
        raise UpstreamError("Failed to search for images")


def get_random_image(query):
    try:
        response = requests.get(
            f"{API_BASE_URL}/photos/random",
            params={'query': query, 'orientation': 'landscape'},
            headers=_headers(),
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        return response.json()
    except (requests.RequestException, ValueError, UpstreamError) as e:
        logger.warning(f"Unsplash random image failed for '{query}': {e}", exc_info=True)
        return None


def image_url(photo):
    """Featured-image URL of an Unsplash photo payload, or '' when there is none."""
    if not photo:
        return ''
    return (photo.get('urls') or {}).get('regular', '')
