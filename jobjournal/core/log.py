# jobjournal/core/log.py
import logging
import time

from fastapi import Request

logger = logging.getLogger("jobjournal.access")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


async def log_requests(request: Request, call_next):
    """One access-log line per request: method, path, status, duration."""
    started = time.perf_counter()
    # unhandled errors are answered with 500 by the outer server error handler
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000
        client = request.client.host if request.client else "-"
        logger.info(
            '%s "%s %s" %s %.1fms',
            client,
            request.method,
            request.url.path,
            status_code,
            elapsed_ms,
        )
