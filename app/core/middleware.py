# app/core/middleware.py
"""Request tracing and access logging"""
import logging
import time
import uuid

from starlette.requests import Request

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


async def correlation_id_middleware(request: Request, call_next):
    """Tag each request with a correlation id, reusing the caller's one when sent"""
    correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex
    request.state.correlation_id = correlation_id

    response = await call_next(request)
    response.headers[CORRELATION_HEADER] = correlation_id
    return response


async def request_logging_middleware(request: Request, call_next):
    started = time.perf_counter()
    correlation_id = getattr(request.state, "correlation_id", "-")

    try:
        response = await call_next(request)
    except Exception:
        logger.exception(f"[{correlation_id}] {request.method} {request.url.path} crashed")
        raise

    duration_ms = round((time.perf_counter() - started) * 1000, 2)
    log = logger.warning if response.status_code >= 500 else logger.info
    log(
        f"[{correlation_id}] {request.method} {request.url.path} -> {response.status_code} ({duration_ms}ms)",
        extra={
            "correlation_id": correlation_id,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response
