"""API dependency injection components."""

from fastapi import Request

from core.streaming.handler import MusicRequestHandler
from core.utils.stats import TransferStats


def get_music_handler(request: Request) -> MusicRequestHandler:
    """Retrieve the request handler built for this app."""
    return request.app.state.music_handler


def get_stats(request: Request) -> TransferStats:
    """Retrieve the shared transfer statistics from app state."""
    return request.app.state.stats
