from __future__ import annotations

import logging
import re
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from users_api.core.config import Settings, get_settings
from users_api.core.logging_config import setup_logging
from users_api.repositories.json_storage import JsonUserStore
from users_api.routers import users as users_router
from users_api.services.user_service import UserService

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"\d{1,18}")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (anti clickjacking, nosniff, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests whose declared Content-Length exceeds ``max_bytes``.

    Bodies without a usable length are bounded again while the routers read them.
    """

    def __init__(self, app, *, max_bytes: int) -> None:
        super().__init__(app)
        self._max_bytes = max_bytes

    async def dispatch(self, request, call_next):
        declared = request.headers.get("content-length")
        if declared and _DIGITS.fullmatch(declared) and int(declared) > self._max_bytes:
            return JSONResponse({"message": "Payload too large"}, status_code=413)
        return await call_next(request)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # unmatched paths and unmatched methods both read as "no such route"
    if exc.status_code in (404, 405):
        return JSONResponse({"message": "Route not found"}, status_code=404)
    return JSONResponse({"message": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers)


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"message": "Something went wrong"}, status_code=500)


def _allowed_origins(settings: Settings) -> list[str]:
    origins = set(settings.cors_origins)
    if settings.app_env != "prod":
        origins.update(
            {
                f"http://localhost:{settings.port}",
                f"http://127.0.0.1:{settings.port}",
            }
        )
    return sorted(origin for origin in origins if origin)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application with its own store; compatible with uvicorn/gunicorn factories."""
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="Users API")

    allowed_cors = _allowed_origins(settings)
    if allowed_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_cors,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)

    store = JsonUserStore(settings.users_file)
    app.state.settings = settings
    app.state.user_store = store
    app.state.user_service = UserService(store)

    app.include_router(users_router.router)

    logger.info("Users file: %s", store.path)
    return app
