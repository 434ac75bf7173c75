"""
Flask middleware for structured logging and request metrics.

This module provides Flask hooks to:
- Inject request_id into the logging context (honouring an inbound X-Request-ID)
- Log HTTP request/response details
- Record request counts and durations in Prometheus
"""

import time

from flask import Flask, request, g

from filmmatch.logging_config import get_logger
from filmmatch.logging_context import set_request_id, clear_context
from filmmatch.metrics import track_http_request

logger = get_logger(__name__)


def init_logging_middleware(app: Flask):
    """
    Initialize logging middleware for Flask application.

    Args:
        app: Flask application instance
    """

    @app.before_request
    def before_request_logging():
        request_id = set_request_id(request.headers.get('X-Request-ID'))
        g.request_id = request_id
        g.request_start_time = time.time()

        logger.info(
            "request_started",
            method=request.method,
            path=request.path,
            remote_addr=request.remote_addr,
        )

    @app.after_request
    def after_request_logging(response):
        duration = None
        if hasattr(g, 'request_start_time'):
            duration = time.time() - g.request_start_time

        logger.info(
            "request_completed",
            method=request.method,
            path=request.path,
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2) if duration is not None else None,
        )

        track_http_request(
            request.method,
            request.url_rule.rule if request.url_rule else request.path,
            response.status_code,
            duration,
        )

        if hasattr(g, 'request_id'):
            response.headers['X-Request-ID'] = g.request_id

        return response

    @app.teardown_request
    def teardown_request_logging(exception=None):
        if exception:
            logger.error(
                "request_failed",
                method=request.method,
                path=request.path,
                error=str(exception),
            )

        clear_context()
