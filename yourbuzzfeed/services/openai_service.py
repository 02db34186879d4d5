"""
Content generation through the OpenAI chat completions API.

Every call asks for a JSON object response; missing fields fall back to defaults.
Provider failures are logged and re-raised as UpstreamError so routes answer with a
generic 500.
"""
import json
import logging
import random

from flask import current_app
from openai import OpenAI

from yourbuzzfeed.utils.errors import UpstreamError
from .batch import run_bounded

logger = logging.getLogger(__name__)

SITE_NAME = 'yourbuzzfeed'
BATCH_CATEGORIES = ('Health', 'Finance', 'Technology', 'Celebrity', 'Travel', 'Home')


def get_client():
    api_key = current_app.config.get('OPENAI_API_KEY')
    if not api_key:
        logger.error("OPENAI_API_KEY is not configured")
        raise UpstreamError("Content generation is not configured")
    return OpenAI(api_key=api_key)


def _chat_json(system_prompt, user_prompt, temperature=0.7, failure_message="Failed to generate content"):
    """Send one chat completion and parse its JSON object reply."""
    client = get_client()
    try:
        response = client.chat.completions.create(
            model=current_app.config.get('OPENAI_MODEL_NAME', 'gpt-4o'),
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            response_format={"type": "json_object"},
        )
        content = response.choices[0].message.content or '{}'
        result = json.loads(content)
    except Exception as e:
        logger.error(f"OpenAI request failed: {e}", exc_info=True)
        raise UpstreamError(failure_message)
    if not isinstance(result, dict):
        logger.error(f"OpenAI returned a non-object JSON payload: {type(result).__name__}")
        raise UpstreamError(failure_message)
    return result


def generate_article_content(topic, target_length=800):
    """Generate an HTML article about ``topic``; returns {title, content, excerpt}."""
    system_prompt = f"""You are a professional content writer creating articles for a viral news website called {SITE_NAME}.
Create engaging, click-worthy content that will make readers want to share the article.
Format the response as HTML with proper paragraph (<p>), heading (<h2>, <h3>), and list (<ul>, <li>) tags.
Write approximately {target_length} words.
Include 4-6 subheadings to break up the content.
The article should be optimized for ad placement with good paragraph breaks.
Output must be in this JSON format: {{ "title": "catchy title", "content": "full HTML content", "excerpt": "compelling 1-2 sentence excerpt" }}"""

    result = _chat_json(system_prompt, f"Create a viral, shareable article about: {topic}", temperature=0.7,
                        failure_message="Failed to generate article content")
    return {
        'title': result.get('title') or 'Generated Article',
        'content': result.get('content') or '<p>Content could not be generated</p>',
        'excerpt': result.get('excerpt') or 'Generated excerpt',
    }


def generate_article_ideas(category, count=5):
    system_prompt = f"""You are a viral content strategist for {SITE_NAME}.
Create {count} compelling, click-worthy article ideas for the {category} category.
These should be titles that would perform well on social media.
Output must be in this JSON format: {{ "ideas": ["title one", "title two"] }}"""

    result = _chat_json(system_prompt, f"Generate {count} viral article ideas for the {category} category.", temperature=0.8,
                        failure_message="Failed to generate article ideas")
    ideas = result.get('ideas') or []
    return [str(idea) for idea in ideas if idea][:count]


def generate_listicle_content(topic, num_items=10, target_length=1000):
    """Generate a numbered HTML listicle; the item count is kept within 5..20."""
    num_items = max(5, min(20, int(num_items)))

    system_prompt = f"""You are a professional content writer creating viral listicles for a website called {SITE_NAME}.
Create an engaging, shareable listicle with exactly {num_items} items.
The title should be catchy and include the number of items (e.g., "{num_items} Incredible Facts...").
Format the response as HTML with:
- Each list item should have an <h2> heading with the item number, e.g., "<h2>1. Item Title</h2>"
- Each item should have 1-3 paragraphs of engaging content
- Write approximately {target_length} words total
- The listicle should be optimized for ad placement with good paragraph breaks

Output must be in this JSON format: {{
  "title": "catchy title with the number {num_items} in it",
  "content": "full HTML content with numbered list items",
  "excerpt": "compelling 1-2 sentence excerpt that teases the content"
}}"""

    result = _chat_json(
        system_prompt,
        f"Create a viral, shareable listicle with {num_items} items about: {topic}",
        temperature=0.7,
        failure_message="Failed to generate listicle content",
    )
    return {
        'title': result.get('title') or f"{num_items} Amazing Facts About {topic}",
        'content': result.get('content') or '<p>Content could not be generated</p>',
        'excerpt': result.get('excerpt') or f"Discover these {num_items} incredible facts about {topic}!",
    }


def generate_batch_topics(count=10, listicle_percentage=40):
    categories = ', '.join(BATCH_CATEGORIES)
    system_prompt = f"""You are a viral content strategist for {SITE_NAME}. Generate a diverse set of {count} content topics.
Each topic should include:
1. A topic name
2. A category it belongs to ({categories})
3. Whether it should be a regular article or listicle format

Output must be in this JSON format: {{ "topics": [{{ "topic": "Compelling topic", "category": "one of the categories mentioned", "contentType": "article | listicle" }}] }}"""

    user_prompt = (
        f"Generate {count} viral content topics for batch creation. "
        f"Approximately {listicle_percentage}% should be listicles. "
        f"The topics should be diverse and cover different categories ({categories})"
    )
    result = _chat_json(system_prompt, user_prompt, temperature=0.8,
                        failure_message="Failed to generate batch content")

    topics = []
    for entry in result.get('topics') or []:
        if not isinstance(entry, dict) or not entry.get('topic'):
            continue
        topics.append({
            'topic': str(entry['topic']),
            'category': str(entry.get('category') or 'General'),
            'contentType': 'listicle' if entry.get('contentType') == 'listicle' else 'article',
        })
    return topics[:count]


def _generate_for_topic(topic_info):
    if topic_info['contentType'] == 'listicle':
        generated = generate_listicle_content(topic_info['topic'], random.randint(7, 15))
    else:
        generated = generate_article_content(topic_info['topic'])
    generated.update(contentType=topic_info['contentType'], category=topic_info['category'])
    return generated


def batch_generate_content(count=10, listicle_percentage=40):
    """
    Ask for ``count`` topics, then generate each one with bounded concurrency.

    Items whose generation fails are logged and left out of the result.
    """
    topics = generate_batch_topics(count, listicle_percentage)
    logger.info(f"Batch generation: {len(topics)} topics received")
    results = run_bounded(topics, _generate_for_topic, label='openai-batch')
    return [result.value for result in results if result.success]

