"""Statistics and health check routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from api.deps import get_music_handler, get_stats
from api.schemas import HealthResponse, StatsResponse
from core.streaming.handler import MusicRequestHandler
from core.utils.stats import TransferStats, format_bytes

router = APIRouter()


@router.get("/stats", response_model=StatsResponse)
async def get_transfer_stats(
    stats: Annotated[TransferStats, Depends(get_stats)],
) -> StatsResponse:
    """Returns bytes served and completed requests since startup."""
    snapshot = stats.snapshot()
    return StatsResponse(
        total_transferred=format_bytes(snapshot.total_bytes),
        total_requests=snapshot.request_count,
    )


@router.get("/health", response_model=HealthResponse)
async def health(
    handler: Annotated[MusicRequestHandler, Depends(get_music_handler)],
) -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        media_root=str(handler.media_root),
        media_root_exists=handler.media_root.is_dir(),
        cached_files=len(handler.cache),
    )
