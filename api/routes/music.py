"""API routes for streaming audio files with Range support."""

from typing import Annotated

from fastapi import APIRouter, Depends, Header
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from api.deps import get_music_handler
from core.streaming.handler import MusicRequestHandler

router = APIRouter()


@router.get("/music/{filename:path}")
async def stream_music(
    filename: str,
    handler: Annotated[MusicRequestHandler, Depends(get_music_handler)],
    range_header: Annotated[str | None, Header(alias="range")] = None,
) -> StreamingResponse:
    """Streams an audio file, honouring the first range of a `Range` header.

    The path converter lets slashes through so that traversal attempts reach
    validation and are answered 403 instead of falling through to a 404.

    Args:
        filename: Name of the file inside the media root.
        handler: The request handler holding cache, stats and streamer.
        range_header: The raw `Range` header, if sent.

    Returns:
        A 200 or 206 StreamingResponse. Rejections are raised as
        `MusicServerError` subclasses and rendered by the app's handler.

    Note:
        The body is closed again by a background task, which releases the
        file when the client disconnects before the first chunk is pulled.
    """
    plan = await handler.handle(filename, range_header)
    return StreamingResponse(
        plan.body,
        status_code=plan.status_code,
        headers=plan.headers,
        background=BackgroundTask(plan.body.aclose),
    )
