"""
Celery tasks — scheduled feedback batch analysis.
"""
import logging

from celery_app import celery_app
from app.database import get_session
from app.logging_config import configure_logging
from app.services.feedback_analyzer import run_batch

configure_logging()

logger = logging.getLogger('tasks')


@celery_app.task(name='tasks.analyze_feedback_batch')
def analyze_feedback_batch(force=False):
    """Beat entry point; errors are logged and re-raised so Celery marks the task failed."""
    session = get_session()
    try:
        result = run_batch(session, force=force)
        if result.get('skipped'):
            logger.info("Feedback analysis skipped: %s", result.get('reason'))
        else:
            logger.info("Feedback analysis processed %d rows", result['processed'])
        return result
    except Exception:
        logger.error("Scheduled feedback analysis failed", exc_info=True)
        raise
    finally:
        session.close()
