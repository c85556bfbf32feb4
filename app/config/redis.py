# app/config/redis.py
"""Redis configuration and job-level locking"""
import logging
from contextlib import contextmanager
from typing import Optional

import redis

from app.config.settings import get_settings
from app.services.exceptions import JobAlreadyRunningError

settings = get_settings()
logger = logging.getLogger(__name__)

# Redis connection pool
_redis_pool: Optional[redis.ConnectionPool] = None


def get_redis_pool() -> redis.ConnectionPool:
    """Get or create Redis connection pool"""
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = redis.ConnectionPool.from_url(
            settings.REDIS_URL,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            retry_on_timeout=True,
        )
    return _redis_pool


def get_redis() -> redis.Redis:
    """Get Redis client from pool"""
    return redis.Redis(connection_pool=get_redis_pool())


# Redis key patterns for different data types
class RedisKeys:
    """Redis key patterns for consistent naming"""

    # Scheduled job locks
    JOB_LOCK = "lock:job:{job_name}"

    CALENDAR_SYNC_JOB = "calendar_sync"
    REMINDER_DISPATCH_JOB = "reminder_dispatch"


@contextmanager
def job_lock(redis_client: redis.Redis, job_name: str, timeout: Optional[int] = None):
    """
    Hold a non-blocking lock for the duration of one job run.

    Raises JobAlreadyRunningError when another run holds it. The lock
    expires after `timeout` seconds so a killed worker cannot wedge the job.
    """
    lock = redis_client.lock(
        RedisKeys.JOB_LOCK.format(job_name=job_name),
        timeout=timeout or settings.JOB_LOCK_TIMEOUT_SECONDS,
        blocking=False,
    )
    if not lock.acquire(blocking=False):
        logger.warning(f"Job {job_name} is already running, skipping this tick")
        raise JobAlreadyRunningError(f"Job {job_name} is already running")

    try:
        yield lock
    finally:
        try:
            lock.release()
        except redis.exceptions.LockError:
            logger.warning(f"Lock for job {job_name} expired before release")
