"""
Request logging middleware with request ID tracking and context propagation.
"""
import logging
import time
import uuid
from contextvars import ContextVar
from urllib.parse import parse_qsl

from app.core.logging_config import LogCategory, _sanitize_data

logger = logging.getLogger(LogCategory.REQUEST)

# Context variable for request ID propagation
request_id_ctx: ContextVar[str] = ContextVar('request_id', default='unknown')

# Default status code when response is not captured
DEFAULT_STATUS_CODE = 500
SLOW_REQUEST_MS = 10000
# Launch parameters carrying user names
PERSONAL_QUERY_FIELDS = {"first_name", "last_name"}


def _sanitize_query_string(raw_query: bytes) -> dict:
    """
    Decode a raw query string for logging with sensitive values masked.

    The launch ``hash`` and user names never reach the logs in clear text.
    """
    if not raw_query:
        return {}
    try:
        pairs = parse_qsl(raw_query.decode("latin-1"), keep_blank_values=True)
    except ValueError:
        return {"query": "<unparseable>"}
    first_values = {}
    for name, value in pairs:
        first_values.setdefault(name, "***" if name in PERSONAL_QUERY_FIELDS else value)
    return _sanitize_data(first_values)


class RequestLoggingMiddleware:
    """
    Request logging middleware.

    Features:
    - Generates unique request ID for each request
    - Propagates request ID via context variables
    - Response header injection (x-request-id)
    - Performance timing and slow request warnings
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            # Non-HTTP scope (e.g., lifespan)
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())
        request_id_ctx.set(request_id)

        start_time = time.time()

        method = scope.get("method", "UNKNOWN")
        path = scope.get("path", "/")
        client_host = scope.get("client", ["unknown", 0])[0] if scope.get("client") else "unknown"
        query = _sanitize_query_string(scope.get("query_string", b""))

        logger.info(
            f"[{request_id}] Request started: {method} {path}",
            extra={
                "request_id": request_id,
                "method": method,
                "path": path,
                "query": query,
                "client_ip": client_host,
                "event": "request_start"
            }
        )

        response_captured = None

        async def send_wrapper(message):
            nonlocal response_captured
            if message["type"] == "http.response.start":
                response_captured = {"status_code": message.get("status", DEFAULT_STATUS_CODE)}

                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode()))
                message["headers"] = headers

            await send(message)

        error_message = None
        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as e:
            error_message = str(e)
            logger.error(
                f"[{request_id}] Request failed with exception: {method} {path}",
                extra={
                    "request_id": request_id,
                    "method": method,
                    "path": path,
                    "error": error_message,
                    "event": "request_exception"
                },
                exc_info=True
            )
            # Re-raise the exception to let FastAPI handle it
            raise
        finally:
            duration_ms = round((time.time() - start_time) * 1000, 2)
            status_code = (
                response_captured.get("status_code", DEFAULT_STATUS_CODE)
                if response_captured
                else DEFAULT_STATUS_CODE
            )

            log_extra = {
                "request_id": request_id,
                "method": method,
                "path": path,
                "client_ip": client_host,
                "status_code": status_code,
                "duration_ms": duration_ms,
                "event": "request_complete"
            }
            summary = f"[{request_id}] {method} {path} - {status_code} - {duration_ms}ms"

            if duration_ms >= SLOW_REQUEST_MS:
                logger.warning(f"Slow request: {summary}", extra=log_extra)

            if error_message is not None:
                log_extra["error"] = error_message
                logger.error(f"Request completed with error: {summary}", extra=log_extra)
            elif status_code >= 500:
                logger.error(f"Request completed with server error: {summary}", extra=log_extra)
            elif status_code >= 400:
                logger.warning(f"Request completed with client error: {summary}", extra=log_extra)
            else:
                logger.info(f"Request completed successfully: {summary}", extra=log_extra)
