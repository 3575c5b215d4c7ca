"""FastAPI application factory for the music direct-link server."""

from __future__ import annotations

from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from api.routes import music, system
from config import Settings, settings as default_settings
from core.errors import MusicServerError, RangeError, StreamFailureError
from core.storage.metadata_cache import MetadataCache
from core.streaming.handler import MusicRequestHandler
from core.streaming.transport import FileStreamer
from core.utils.logger import bind_context, clear_context, logger
from core.utils.stats import TransferStats


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    handler: MusicRequestHandler = app.state.music_handler
    logger.info(f"startup: serving {handler.media_root}")
    yield
    snapshot = app.state.stats.snapshot()
    logger.info(
        f"shutdown: {snapshot.request_count} requests, {snapshot.total_bytes} bytes"
    )


async def music_error_handler(request: Request, exc: MusicServerError):
    """Render a taxonomy error as a short plain-text response."""
    request_id = getattr(request.state, "request_id", "unknown")
    message = (
        f"{type(exc).__name__}: {exc.message} "
        f"[request_id={request_id}] path={request.url.path} context={exc.context}"
    )
    if isinstance(exc, StreamFailureError):
        logger.opt(exception=exc.original_error).error(message)
    else:
        logger.warning(message)

    headers = {}
    if isinstance(exc, RangeError):
        headers = {
            "Accept-Ranges": "bytes",
            "Content-Range": f"bytes */{exc.total_size}",
        }
    return PlainTextResponse(
        exc.public_message, status_code=exc.status_code, headers=headers
    )


def create_app(
    settings: Settings | None = None,
    stats: TransferStats | None = None,
    cache: MetadataCache | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or default_settings
    media_root = settings.media_root
    media_root.mkdir(parents=True, exist_ok=True)

    app = FastAPI(
        title="Music Direct Link",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.stats = stats or TransferStats()
    app.state.music_handler = MusicRequestHandler(
        media_root=media_root,
        cache=cache
        or MetadataCache(
            ttl_seconds=settings.cache_ttl_seconds,
            max_entries=settings.cache_max_entries,
        ),
        stats=app.state.stats,
        streamer=FileStreamer(chunk_size=settings.chunk_size),
        cache_control_max_age=settings.cache_control_max_age,
    )

    app.add_exception_handler(MusicServerError, music_error_handler)

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid4())
        request.state.request_id = request_id
        bind_context(request_id=request_id, component="api")
        logger.debug(f"Request started: {request.method} {request.url.path}")
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            logger.debug(
                f"Request finished: {request.method} {request.url.path} "
                f"status={response.status_code}"
            )
            return response
        finally:
            clear_context()

    app.include_router(music.router, tags=["Music"])
    app.include_router(system.router, tags=["System"])

    app.mount("/static", StaticFiles(directory=str(media_root)), name="static")

    return app


app = create_app()
