# middleware.py
"""
Middleware for security headers and request audit logging.
"""
import time
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from budgetx.core.logging import logger


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next: Callable):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


class AuditMiddleware(BaseHTTPMiddleware):
    """Log every request with its outcome and the acting user."""

    async def dispatch(self, request: Request, call_next: Callable):
        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else None

        response = await call_next(request)

        duration = time.perf_counter() - start_time
        # Set by get_current_actor once the bearer token resolves.
        actor = getattr(request.state, "actor", None)
        actor_id = actor.id if actor else None

        logger.info(
            f"Request: {request.method} {request.url.path} | "
            f"Status: {response.status_code} | "
            f"Duration: {duration:.3f}s | "
            f"User: {actor_id} | "
            f"IP: {client_ip}"
        )

        if duration > 2.0:
            logger.warning(
                f"Slow request detected: {request.method} {request.url.path} | "
                f"Duration: {duration:.3f}s | "
                f"User: {actor_id}"
            )

        if response.status_code in (401, 403):
            logger.warning(
                f"Access denied: {response.status_code} | "
                f"Path: {request.url.path} | "
                f"User: {actor_id} | "
                f"IP: {client_ip}"
            )

        return response
