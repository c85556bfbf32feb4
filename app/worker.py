"""
Celery worker entry point
Runs calendar reconciliation and reminder dispatch jobs
"""
import logging
from celery.signals import worker_ready, worker_shutdown

from app.config.celery_config import celery_app
from app.utils.my_logging import setup_logging

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)


@worker_ready.connect
def worker_ready_handler(sender=None, **kwargs):
    """Handle worker startup"""
    logger.info("🚀 Celery worker ready!")
    logger.info(f"📋 Registered tasks: {sorted(t for t in celery_app.tasks.keys() if not t.startswith('celery.'))}")


@worker_shutdown.connect
def worker_shutdown_handler(sender=None, **kwargs):
    """Handle worker shutdown"""
    logger.info("🛑 Celery worker shutting down...")


if __name__ == "__main__":
    # Worker with an embedded beat scheduler; jobs are single-threaded batches
    celery_app.start([
        'worker',
        '--beat',
        '--loglevel=info',
        '--concurrency=1',
        '--queues=celery,calendar,reminders',
    ])
