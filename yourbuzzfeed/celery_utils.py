"""
Celery utilities.

Provides the Celery instance used for background jobs, including the beat schedule
that runs the news scraper every NEWS_SCRAPE_CRON_HOURS hours.
"""
from celery import Celery
from celery.schedules import crontab

from yourbuzzfeed.config import REDIS_URL, NEWS_SCRAPE_CRON_HOURS

celery = Celery(
    'yourbuzzfeed',
    broker=REDIS_URL,
    backend=REDIS_URL,
    include=['yourbuzzfeed.tasks']
)

celery_config = {
    'broker_url': REDIS_URL,
    'result_backend': REDIS_URL,
    'task_serializer': 'json',
    'accept_content': ['json'],
    'result_serializer': 'json',
    'timezone': 'UTC',
    'worker_max_tasks_per_child': 100,
    'task_routes': {
        'yourbuzzfeed.tasks.scrape_news_task': {'queue': 'content_generation'},
    },
    'beat_schedule': {
        'scrape-news': {
            'task': 'yourbuzzfeed.tasks.scrape_news_task',
            'schedule': crontab(minute=0, hour=f'*/{NEWS_SCRAPE_CRON_HOURS}'),
        },
    },
}

celery.conf.update(celery_config)

celery_app = celery
