#!/usr/bin/env python3
"""
Image redirect API: FastAPI app serving GET /{device}/ -> 301 to an upstream image URL.
Run with host/port via env (see image_redirect.shared). Entrypoint for uvicorn is image_redirect.api.main:app.
"""
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.sessions import SessionMiddleware

from image_redirect.api import create_router
from image_redirect.api.errors import RedirectError
from image_redirect.api.logging_config import setup_logging
from image_redirect.api.resolver_cache import ResolverCache
from image_redirect.api.upstream import UpstreamClient
from image_redirect.shared import (
    HOST,
    PORT,
    SESSION_COOKIE,
    SESSION_SECRET,
    UPSTREAM_BASE_URL,
    UPSTREAM_TIMEOUT_SEC,
)

# Uvicorn only configures its own loggers; root would stay at WARNING and drop app INFO logs.
setup_logging()

log = logging.getLogger(__name__)


def _request_line(path: str, query: str) -> str:
    return f"{path}?{query}" if query else path


class _AccessLogMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with status and duration. No log for GET /health when 200."""

    async def dispatch(self, request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        if request.url.path == "/health" and response.status_code == 200:
            return response  # skip log for probe to avoid noise
        duration = time.perf_counter() - start
        client = request.client or ("?", "?")
        client_addr = f"{client[0]}:{client[1]}"
        line = _request_line(request.url.path, request.url.query)
        log.info(
            f'{client_addr} - "{request.method} {line}" {response.status_code}',
            extra={
                "client": client_addr,
                "method": request.method,
                "path": line,
                "status": response.status_code,
                "duration": duration,
            },
        )
        return response


async def _redirect_error_handler(request: Request, exc: RedirectError) -> PlainTextResponse:
    return PlainTextResponse(exc.message, status_code=exc.status_code)


def create_app(
    upstream_base_url: str = UPSTREAM_BASE_URL,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    session_secret: Optional[str] = None,
) -> FastAPI:
    """Build the app. ``transport`` replaces the network for the upstream client (tests)."""

    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        log.info(
            "Image redirect app loaded upstream=%s timeout=%s",
            upstream_base_url,
            UPSTREAM_TIMEOUT_SEC,
        )
        async with httpx.AsyncClient(timeout=UPSTREAM_TIMEOUT_SEC, transport=transport) as client:
            app.state.upstream = UpstreamClient(client, upstream_base_url)
            yield

    app = FastAPI(title="Image Redirect", lifespan=_lifespan)
    app.state.resolver_cache = ResolverCache()

    app.add_middleware(
        SessionMiddleware,
        secret_key=session_secret or SESSION_SECRET,
        session_cookie=SESSION_COOKIE,
    )
    app.add_middleware(_AccessLogMiddleware)  # outermost: sees the final status
    app.add_exception_handler(RedirectError, _redirect_error_handler)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {"status": "ok", "cache_entries": len(app.state.resolver_cache)}

    app.include_router(create_router())
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    log.info(f"Image redirect API starting host={HOST} port={PORT}")
    uvicorn.run(
        "image_redirect.api.main:app",
        host=HOST,
        port=PORT,
        reload=False,
        access_log=False,
    )
