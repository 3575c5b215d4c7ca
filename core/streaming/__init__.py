"""Range resolution, file streaming and request orchestration."""

from core.streaming.handler import MusicRequestHandler, StreamPlan
from core.streaming.ranges import resolve_range
from core.streaming.transport import ByteStream, FileStreamer

__all__ = [
    "ByteStream",
    "FileStreamer",
    "MusicRequestHandler",
    "StreamPlan",
    "resolve_range",
]
