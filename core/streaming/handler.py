"""Per-request orchestration for the `/music/{filename}` endpoint.

A request moves through validation, metadata lookup, range resolution and
header emission before any byte is streamed. Every early exit raises one of
the `core.errors` types; the API layer turns those into responses.
"""

from __future__ import annotations

import os
import stat
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from anyio import to_thread

from core.errors import (
    InvalidFilenameError,
    MediaNotFoundError,
    MusicServerError,
    PathTraversalError,
    RangeMalformedError,
    RangeNotSatisfiableError,
    StreamFailureError,
)
from core.schemas import FileMetadata, RangeKind
from core.storage.metadata_cache import MetadataCache
from core.streaming.ranges import resolve_range
from core.streaming.transport import ByteStream, FileStreamer
from core.utils.filesystem import (
    has_traversal,
    is_allowed_filename,
    normalize_filename,
    resolve_within,
)
from core.utils.logger import get_logger
from core.utils.stats import TransferStats

logger = get_logger("music")

AUDIO_MIME_TYPES = {
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".flac": "audio/flac",
    ".m4a": "audio/mp4",
}


@dataclass
class StreamPlan:
    """Status, headers and body for a request that passed every check."""

    status_code: int
    headers: dict[str, str]
    body: ByteStream


class MusicRequestHandler:
    """Serves audio files from one media root with Range support."""

    def __init__(
        self,
        media_root: Path,
        cache: MetadataCache,
        stats: TransferStats,
        streamer: FileStreamer | None = None,
        cache_control_max_age: int = 3600,
        stat_fn: Callable[[str], os.stat_result] = os.stat,
    ):
        self.media_root = media_root.resolve()
        self.cache = cache
        self.stats = stats
        self.streamer = streamer or FileStreamer()
        self.cache_control = f"public, max-age={cache_control_max_age}"
        self._stat_fn = stat_fn

    async def handle(self, filename: str, range_header: str | None) -> StreamPlan:
        """Validate, resolve and open the requested file.

        Args:
            filename: The raw path parameter from the URL.
            range_header: The `Range` request header, if any.

        Returns:
            A StreamPlan whose body has not been read yet.

        Raises:
            MusicServerError: One of its subclasses for each rejection.
                Anything else raised along the way is wrapped in
                StreamFailureError.
        """
        try:
            path = self.validate(filename)
            metadata = await self.lookup_metadata(path)
            return await self._plan(path, metadata, range_header)
        except MusicServerError:
            raise
        except Exception as exc:
            logger.exception(f"Unexpected failure preparing {filename!r}")
            raise StreamFailureError(
                f"unexpected error: {exc}",
                original_error=exc,
                context={"filename": filename},
            ) from exc

    def validate(self, filename: str) -> Path:
        """Map a URL filename to a path inside the media root."""
        name = normalize_filename(filename)
        if has_traversal(name):
            raise PathTraversalError(
                "parent-directory traversal attempt", context={"filename": filename}
            )
        if not is_allowed_filename(name):
            raise InvalidFilenameError(
                "filename outside the allow-list", context={"filename": filename}
            )
        path = resolve_within(self.media_root, name)
        if path is None:
            raise PathTraversalError(
                "resolved path escapes the media root", context={"filename": filename}
            )
        return path

    async def lookup_metadata(self, path: Path) -> FileMetadata:
        """Return cached metadata, stat'ing the file on a miss."""
        key = str(path)
        metadata = self.cache.get(key)
        if metadata is not None:
            return metadata

        try:
            st = await to_thread.run_sync(self._stat_fn, key)
        except OSError as exc:
            raise MediaNotFoundError(
                f"cannot stat {path.name}", original_error=exc, context={"path": key}
            ) from exc
        if not stat.S_ISREG(st.st_mode):
            raise MediaNotFoundError(
                f"{path.name} is not a regular file", context={"path": key}
            )

        metadata = FileMetadata(size=st.st_size, last_modified=st.st_mtime)
        self.cache.set(key, metadata)
        return metadata

    async def _plan(
        self, path: Path, metadata: FileMetadata, range_header: str | None
    ) -> StreamPlan:
        outcome = resolve_range(metadata.size, range_header)
        context = {"path": str(path), "range": range_header}
        if outcome.kind is RangeKind.MALFORMED:
            raise RangeMalformedError(
                outcome.reason, total_size=metadata.size, context=context
            )
        if outcome.kind is RangeKind.UNSATISFIABLE:
            raise RangeNotSatisfiableError(
                outcome.reason, total_size=metadata.size, context=context
            )

        headers = {
            "Cache-Control": self.cache_control,
            "Last-Modified": metadata.http_last_modified,
            "Accept-Ranges": "bytes",
            "Content-Type": AUDIO_MIME_TYPES.get(
                path.suffix.lower(), "application/octet-stream"
            ),
        }
        window = outcome.window
        if window is not None:
            status_code = 206
            headers["Content-Range"] = window.content_range
            headers["Content-Length"] = str(window.length)
        else:
            status_code = 200
            headers["Content-Length"] = str(metadata.size)

        try:
            body = await self.streamer.open(
                path,
                window=window,
                length=metadata.size,
                on_complete=self.stats.record,
            )
        except MediaNotFoundError:
            self.cache.delete(str(path))
            raise

        logger.info(
            f"Serving {path.name} [{status_code}] {headers['Content-Length']} bytes"
            + (f" ({headers['Content-Range']})" if window else "")
        )
        return StreamPlan(status_code=status_code, headers=headers, body=body)
