import json
import time
from typing import Callable

from fastapi import Request, Response
from sqlalchemy import select
from starlette.middleware.base import BaseHTTPMiddleware

from pixbank.config import settings
from pixbank.core.dependencies import client_ip
from pixbank.core.logging import api_logger, app_logger
from pixbank.core.security import decode_access_token
from pixbank.database import AsyncSessionLocal
from pixbank.models.user import User


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log every API request: method, path, status, client, user, duration.

    Request bodies are never logged; they carry amounts and PIX keys.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in settings.LOG_EXCLUDED_PATHS:
            return await call_next(request)

        start_time = time.time()

        method = request.method
        path = request.url.path
        query_params = dict(request.query_params) if request.query_params else {}
        ip = client_ip(request) or "-"
        user_agent = request.headers.get("User-Agent", "Unknown")

        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as e:
            user = getattr(request.state, "user", None)
            api_logger.error(
                f"{method} {path} - Status: 500 - IP: {ip} - "
                f"UserID: {user.id if user else 'Anonymous'} - "
                f"Query: {json.dumps(query_params)} - Error: {str(e)}"
            )
            raise

        duration_ms = int((time.time() - start_time) * 1000)

        # The user is injected by UserInjectionMiddleware further down the stack
        user = getattr(request.state, "user", None)
        try:
            api_logger.info(
                f"{method} {path} - Status: {status_code} - "
                f"IP: {ip} - UserID: {user.id if user else 'Anonymous'} - "
                f"UserAgent: {user_agent} - Query: {json.dumps(query_params)} - "
                f"Duration: {duration_ms}ms"
            )
        except Exception as e:
            # Logging must never break the API
            app_logger.warning(f"Error logging request: {e}")

        return response


class UserInjectionMiddleware(BaseHTTPMiddleware):
    """
    Decode the bearer token and load the User into request.state.user.

    Invalid or expired tokens, unknown ids and deactivated accounts all leave
    request.state.user as None; route dependencies decide whether that is a 401.
    """

    # Paths that don't require user lookup
    PUBLIC_PATHS = {
        "/",
        "/health",
        "/docs",
        "/redoc",
        "/openapi.json",
        "/register",
        "/login",
        "/webhooks/pix",
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request.state.user = None

        if request.url.path in self.PUBLIC_PATHS:
            return await call_next(request)

        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            request.state.user = await self._load_user(auth_header[len("Bearer "):])

        return await call_next(request)

    async def _load_user(self, token: str) -> User | None:
        try:
            payload = decode_access_token(token)
            user_id = int(payload.get("sub"))
        except Exception:
            # Malformed, expired or tampered token
            return None

        async with AsyncSessionLocal() as db:
            result = await db.execute(select(User).where(User.id == user_id))
            user = result.scalar_one_or_none()

        if user is None or not user.is_active:
            return None
        return user
