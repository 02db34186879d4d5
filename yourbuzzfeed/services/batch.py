"""
Bounded fan-out for batch generation and scraping.

run_bounded() runs ``fn`` over ``items`` on a thread pool of at most ``max_workers``
threads. Each call runs inside its own application context (own database session),
and a failing item is logged and recorded instead of aborting the batch.
"""
import logging
from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor, as_completed

from flask import current_app, has_app_context

logger = logging.getLogger(__name__)

BatchResult = namedtuple('BatchResult', ['item', 'success', 'value', 'error'])


def _run_one(app, fn, item):
    if app is None:
        return fn(item)
    with app.app_context():
        return fn(item)


def run_bounded(items, fn, max_workers=None, label='batch'):
    """Apply ``fn`` to every item; returns BatchResults in input order."""
    items = list(items)
    if not items:
        return []

    app = current_app._get_current_object() if has_app_context() else None
    if max_workers is None:
        max_workers = app.config.get('BATCH_MAX_WORKERS', 4) if app is not None else 4
    max_workers = max(1, min(max_workers, len(items)))

    results = [None] * len(items)
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_index = {
            executor.submit(_run_one, app, fn, item): index
            for index, item in enumerate(items)
        }
        for future in as_completed(future_to_index):
            index = future_to_index[future]
            item = items[index]
            try:
                results[index] = BatchResult(item, True, future.result(), None)
            except Exception as e:
                logger.error(f"[{label}] item {index} failed: {e}", exc_info=True)
                results[index] = BatchResult(item, False, None, str(e) or e.__class__.__name__)

    succeeded = sum(1 for result in results if result.success)
    logger.info(f"[{label}] finished: {succeeded}/{len(items)} succeeded")
    return results
