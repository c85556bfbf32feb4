# app/config/celery_config.py
"""Celery application and beat schedule"""
from datetime import timedelta

from celery import Celery
from celery.schedules import crontab
from kombu import Queue

from app.config.settings import get_settings


def create_celery_app() -> Celery:
    """Create and configure the Celery app used by the worker and beat"""
    settings = get_settings()

    app = Celery(
        "salon_scheduler",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
        include=[
            "app.tasks.calendar_tasks",
            "app.tasks.reminder_tasks",
        ],
    )

    app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        result_serializer="json",
        accept_content=["json"],
        timezone=settings.DEFAULT_TIMEZONE,
        enable_utc=True,
        result_expires=60 * 60 * 24,

        # Task routing
        task_routes={
            "calendar.*": {"queue": "calendar"},
            "reminders.*": {"queue": "reminders"},
        },

        # Queue definitions
        task_queues=(
            Queue("celery", routing_key="celery"),
            Queue("calendar", routing_key="calendar"),
            Queue("reminders", routing_key="reminders"),
        ),

        # Worker settings
        worker_max_tasks_per_child=1000,
        worker_prefetch_multiplier=1,
        task_acks_late=True,
        broker_connection_retry_on_startup=True,

        # Periodic jobs
        beat_schedule={
            "reconcile-calendar": {
                "task": "calendar.reconcile",
                "schedule": timedelta(minutes=settings.CALENDAR_SYNC_INTERVAL_MINUTES),
            },
            "dispatch-due-reminders": {
                "task": "reminders.dispatch_due",
                "schedule": crontab(hour=settings.REMINDER_DISPATCH_HOUR, minute=0),
                "kwargs": {"dry_run": False},
            },
        },
    )

    return app


celery_app = create_celery_app()
