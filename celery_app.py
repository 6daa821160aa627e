"""
Celery app — Redis broker, beat schedule for the periodic feedback analysis.
"""
from celery import Celery

from app import config

celery_app = Celery(
    'event_engagement',
    broker=config.REDIS_URL,
    include=['tasks'],
)

celery_app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    timezone='UTC',
    enable_utc=True,
    task_ignore_result=True,
    beat_schedule={
        'analyze-feedback-batch': {
            'task': 'tasks.analyze_feedback_batch',
            'schedule': config.ANALYZE_INTERVAL_SECONDS,
        },
    },
)

if __name__ == '__main__':
    celery_app.start()
