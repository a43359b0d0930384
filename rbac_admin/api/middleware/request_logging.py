"""Request logging middleware.

Logs one line per API request with:
- HTTP method and path
- Response status and duration
- Client IP address
- Authenticated user id (when the route resolved one)
- JSON request body, with sensitive fields redacted (debug level only)
"""

import json
import logging
import time
import uuid
from typing import Any, Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("rbac_admin.requests")

# Probes and docs are not logged
EXCLUDED_PATHS = {
    "/health",
    "/health/live",
    "/health/ready",
    "/health/detailed",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/favicon.ico",
}

SENSITIVE_FIELDS = {
    "password",
    "password_hash",
    "passwordhash",
    "token",
    "access_token",
    "accesstoken",
    "secret",
    "secret_key",
}


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, honouring reverse proxy headers."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return "unknown"


def redact_sensitive(data: Any) -> Any:
    """Redact sensitive fields from a decoded JSON body."""
    if isinstance(data, dict):
        return {
            k: "[REDACTED]" if str(k).lower() in SENSITIVE_FIELDS else redact_sensitive(v)
            for k, v in data.items()
        }
    elif isinstance(data, list):
        return [redact_sensitive(item) for item in data]
    return data


def determine_level(status_code: int) -> int:
    """Map a response status to a logging level."""
    if status_code >= 500:
        return logging.ERROR
    if status_code in (401, 403):
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every non-probe request once the response is ready."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in EXCLUDED_PATHS:
            return await call_next(request)

        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()
        client_ip = get_client_ip(request)

        request_body: Optional[Any] = None
        if (
            request.method in ("POST", "PUT", "PATCH")
            and request.headers.get("content-type", "").startswith("application/json")
        ):
            body_bytes = await request.body()
            if body_bytes:
                try:
                    request_body = redact_sensitive(json.loads(body_bytes))
                except (json.JSONDecodeError, UnicodeDecodeError):
                    request_body = {"raw_size": len(body_bytes)}

        response = await call_next(request)

        duration_ms = int((time.time() - start_time) * 1000)
        user = getattr(request.state, "user", None)
        user_id = str(user.id) if user is not None else None

        logger.log(
            determine_level(response.status_code),
            "[%s] %s %s -> %d (%dms) ip=%s user=%s",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            client_ip,
            user_id or "-",
        )
        if request_body is not None:
            logger.debug("[%s] body=%s", request_id, json.dumps(request_body, default=str))

        return response
