"""
Quillpost Backend — Request Logging Middleware
================================================

What:  Structured logging for every HTTP request and response.
How:   Logs request details on arrival, the sanitized body at DEBUG, and
       response details with duration on completion.
Who:   Applied to every request via Starlette middleware.
When:  After RequestIDMiddleware (uses the correlation id), before tenant
       resolution and the guards.

Records per request:
    INFO     [rid] Incoming: POST /api/articles - UserAgent: curl/8.4.0
    DEBUG    [rid] Body: {"title": "Hi", "password": "[REDACTED]"}   (non-empty bodies only;
             JSON and form bodies redacted, other text logged as sent)
    INFO     [rid] Completed: POST /api/articles - Status: 201 - Duration: 4.2ms
             (WARNING for 4xx, ERROR for 5xx)

What we log vs what we DON'T log (privacy):
    ✅ Log: method, path, status, duration, user-agent, request ID, redacted body
    ❌ Don't log: headers (Authorization), values under sensitive keys
"""

import json
import logging
import time
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from quillpost.context import get_request_context
from quillpost.sanitizer import serialize_for_log

logger = logging.getLogger("quillpost.access")

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def completion_level(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING, everything else → INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def _parse_form(text: str) -> Dict[str, Any]:
    """Form fields as a mapping; a repeated field keeps all its values."""
    fields: Dict[str, Any] = {}
    for key, value in parse_qsl(text, keep_blank_values=True):
        if key not in fields:
            fields[key] = value
        elif isinstance(fields[key], list):
            fields[key].append(value)
        else:
            fields[key] = [fields[key], value]
    return fields


def parse_logged_body(raw: bytes, content_type: Optional[str] = None) -> Any:
    """
    Decode a raw body for the DEBUG log line.

    Form-encoded bodies become a mapping (so sensitive fields get redacted),
    JSON is decoded, and anything else is logged as text. Returns None when
    there is nothing to log: an empty body, or JSON null, {} or [].
    """
    if not raw:
        return None

    text = raw.decode("utf-8", errors="replace")
    if content_type and content_type.split(";", 1)[0].strip().lower() == FORM_CONTENT_TYPE:
        return _parse_form(text) or None

    try:
        body = json.loads(text)
    except ValueError:
        return text if text.strip() else None
    if body is None or body == {} or body == []:
        return None
    return body


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs structured information about each HTTP request and response.

    Duration is measured from this middleware's entry to the moment the
    downstream app returns (or raises), so it covers tenant resolution,
    guards, and the handler.

    The completion record is written exactly once. If the downstream app
    raises, it is logged as a 500 before the exception continues outward to
    Starlette's error middleware.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()
        context = get_request_context(request)
        context.start_time = start_time

        rid = context.correlation_id
        method = request.method
        path = request.url.path
        user_agent = request.headers.get("user-agent") or "unknown"

        logger.info(
            "[%s] Incoming: %s %s - UserAgent: %s",
            rid,
            method,
            path,
            user_agent,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "user_agent": user_agent,
            },
        )

        if logger.isEnabledFor(logging.DEBUG):
            body = parse_logged_body(
                await request.body(), request.headers.get("content-type")
            )
            if body is not None:
                logger.debug(
                    "[%s] Body: %s",
                    rid,
                    serialize_for_log(body),
                    extra={"request_id": rid},
                )

        try:
            response = await call_next(request)
        except Exception:
            self._log_completion(rid, method, path, 500, start_time)
            raise

        self._log_completion(rid, method, path, response.status_code, start_time)
        return response

    @staticmethod
    def _log_completion(
        rid: str, method: str, path: str, status: int, start_time: float
    ) -> None:
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.log(
            completion_level(status),
            "[%s] Completed: %s %s - Status: %d - Duration: %.1fms",
            rid,
            method,
            path,
            status,
            duration_ms,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
            },
        )
