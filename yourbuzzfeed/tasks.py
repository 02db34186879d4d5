"""
Background tasks run by the Celery worker / beat.
"""
from celery.utils.log import get_task_logger

from .celery_utils import celery_app

logger = get_task_logger(__name__)

# Scraping talks to third-party sites and the LLM; retry transient failures a couple of times
RETRY_KWARGS = {
    'max_retries': 2,
    'default_retry_delay': 300,
    'retry_backoff': True,
    'retry_backoff_max': 900,
    'retry_jitter': True,
}


@celery_app.task(bind=True, **RETRY_KWARGS)
def scrape_news_task(self):
    """Scheduled news scrape; returns the number of articles created."""
    logger.info("[TASK_STARTED] scrape_news_task")

    from yourbuzzfeed import create_app
    from yourbuzzfeed.services.news_scraper import scrape_and_generate_news

    app = create_app()
    with app.app_context():
        try:
            count = scrape_and_generate_news()
        except Exception as e:
            logger.error(f"News scraping run failed: {e}", exc_info=True)
            raise self.retry(exc=e)

    logger.info(f"[TASK_FINISHED] scrape_news_task created {count} articles")
    return count

