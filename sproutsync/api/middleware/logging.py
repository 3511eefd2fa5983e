# 📄 File: sproutsync/api/middleware/logging.py
# 🧭 Purpose (Layman Explanation):
# Keeps a short diary entry for every request made to SproutSync: what was asked for, how
# it ended and how long it took, tagged with a tracking number the caller can quote back.
#
# 🧪 Purpose (Technical Summary):
# Starlette BaseHTTPMiddleware that assigns or reuses an X-Request-ID, binds it to the
# logging context vars for the duration of the request, logs method/path/status/duration
# with slow-request warnings and echoes the id on the response.
#
# 🔗 Dependencies:
# - starlette BaseHTTPMiddleware
# - sproutsync.shared.utils.logging (log_context)
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.main (middleware registration)
# - sproutsync.main exception handlers (read request.state.request_id)

import logging
import time
import uuid
from typing import Dict

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from sproutsync.shared.utils.logging import log_context

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Paths that would only add noise to the logs
EXCLUDED_PATHS = {"/favicon.ico", "/api/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Request logging middleware.

    Features:
    - Request correlation through X-Request-ID
    - Request/response timing with slow-request warnings
    - Sensitive header filtering for debug output
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)

        # Headers that should never reach the logs
        self.sensitive_headers = {
            "authorization",
            "cookie",
            "x-api-key",
            "x-access-token",
        }

        self.slow_request_threshold = 2.0
        self.very_slow_request_threshold = 5.0

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = self._get_or_create_request_id(request)

        with log_context(request_id=request_id):
            start_time = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception as e:
                duration = time.perf_counter() - start_time
                logger.error(
                    f"💥 {request.method} {request.url.path} failed after {duration * 1000:.1f}ms: {e}",
                    extra={"event_type": "http_error", "method": request.method, "path": request.url.path},
                )
                raise

            duration = time.perf_counter() - start_time
            if request.url.path not in EXCLUDED_PATHS:
                self._log_response(request, response.status_code, duration)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    def _get_or_create_request_id(self, request: Request) -> str:
        """Reuse the caller's X-Request-ID when present, otherwise mint one."""
        request_id = request.headers.get(REQUEST_ID_HEADER.lower()) or str(uuid.uuid4())
        request.state.request_id = request_id
        return request_id

    def _filter_sensitive_headers(self, headers: Dict[str, str]) -> Dict[str, str]:
        return {
            key: ("[REDACTED]" if key.lower() in self.sensitive_headers else value)
            for key, value in headers.items()
        }

    def _log_response(self, request: Request, status_code: int, duration: float) -> None:
        message = f"{request.method} {request.url.path} -> {status_code} ({duration * 1000:.1f}ms)"
        extra = {
            "event_type": "http_response",
            "method": request.method,
            "path": request.url.path,
            "status_code": status_code,
            "duration_ms": round(duration * 1000, 2),
        }

        if duration >= self.very_slow_request_threshold:
            logger.warning(f"🐢 Very slow request: {message}", extra=extra)
        elif duration >= self.slow_request_threshold:
            logger.warning(f"⏳ Slow request: {message}", extra=extra)
        elif status_code >= 500:
            logger.error(f"❌ {message}", extra=extra)
        elif status_code >= 400:
            logger.warning(f"⚠️ {message}", extra=extra)
        else:
            logger.info(f"✅ {message}", extra=extra)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"🔎 Request headers: {self._filter_sensitive_headers(dict(request.headers))}",
                extra={"event_type": "http_request_headers"},
            )
