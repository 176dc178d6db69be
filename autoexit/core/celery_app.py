from celery import Celery

from autoexit.config import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, MONITOR_INTERVAL

celery_app = Celery(
    'core.celery_app',
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_routes={
        'autoexit.tasks.position_monitor.monitor_open_positions': {'queue': 'position_monitoring'},
    },
    beat_schedule={
        'monitor_open_positions': {
            'task': 'autoexit.tasks.position_monitor.monitor_open_positions',
            'schedule': MONITOR_INTERVAL,
        },
    },
    timezone='UTC',
)

celery_app.autodiscover_tasks(['autoexit.tasks'])

# Ensure tasks are loaded
import autoexit.tasks.position_monitor  # noqa: E402,F401
