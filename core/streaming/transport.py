"""Bounded, chunked reads of a byte window from a file on disk."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from pathlib import Path

import anyio
from anyio.abc import AsyncResource

from core.errors import MediaNotFoundError, StreamFailureError
from core.schemas import RangeSpec
from core.utils.logger import get_logger

logger = get_logger("stream")

DEFAULT_CHUNK_SIZE = 64 * 1024


class ByteStream(AsyncResource):
    """Async iterator over an already opened file window.

    Failures from here on happen after the status line has been sent, so they
    are logged and re-raised as `StreamFailureError(headers_sent=True)`,
    which aborts the body. `on_complete` fires once, only when every promised
    byte was handed to the server.
    """

    def __init__(
        self,
        file: anyio.AsyncFile[bytes],
        path: Path,
        length: int | None,
        chunk_size: int,
        on_complete: Callable[[int], None] | None = None,
    ):
        self._file = file
        self._path = path
        self._length = length
        self._chunk_size = chunk_size
        self._on_complete = on_complete
        self._consumed = False
        self.bytes_sent = 0

    def __aiter__(self) -> AsyncIterator[bytes]:
        if self._consumed:
            raise RuntimeError("ByteStream can only be iterated once")
        self._consumed = True
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[bytes]:
        remaining = self._length
        finished = False
        try:
            while remaining is None or remaining > 0:
                read_size = (
                    self._chunk_size
                    if remaining is None
                    else min(self._chunk_size, remaining)
                )
                try:
                    data = await self._file.read(read_size)
                except OSError as exc:
                    raise self._abort(f"read failed: {exc}", exc) from exc

                if not data:
                    if remaining:
                        raise self._abort(
                            f"file ended {remaining} bytes short of the promised length"
                        )
                    break

                if remaining is not None:
                    remaining -= len(data)
                self.bytes_sent += len(data)
                yield data

            finished = True
            if self._on_complete is not None:
                self._on_complete(self.bytes_sent)
        finally:
            if not finished:
                logger.debug(
                    f"Stream of {self._path.name} stopped after {self.bytes_sent} bytes"
                )
            await self.aclose()

    async def aclose(self) -> None:
        # Shielded so a client disconnect cannot leak the descriptor.
        with anyio.CancelScope(shield=True):
            await self._file.aclose()

    def _abort(self, reason: str, error: Exception | None = None) -> StreamFailureError:
        logger.error(
            f"Stream error for {self._path.name} after {self.bytes_sent} bytes: {reason}"
        )
        return StreamFailureError(
            reason,
            headers_sent=True,
            original_error=error,
            context={"path": str(self._path), "bytes_sent": self.bytes_sent},
        )


class FileStreamer:
    """Opens files for windowed streaming with a fixed chunk budget."""

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size

    async def open(
        self,
        path: Path,
        window: RangeSpec | None = None,
        length: int | None = None,
        on_complete: Callable[[int], None] | None = None,
    ) -> ByteStream:
        """Open `path` positioned at the window start, before headers go out.

        Args:
            path: File to read.
            window: Byte window to serve; None serves from byte 0.
            length: Bytes to serve without a window; None reads to EOF.
            on_complete: Called with the byte count after a full transfer.

        Raises:
            MediaNotFoundError: The file vanished since it was stat'ed.
            StreamFailureError: Opening or seeking failed.
        """
        start = window.start if window else 0
        if window is not None:
            length = window.length

        try:
            file = await anyio.open_file(path, "rb")
        except FileNotFoundError as exc:
            raise MediaNotFoundError(
                f"{path.name} disappeared before streaming",
                original_error=exc,
                context={"path": str(path)},
            ) from exc
        except OSError as exc:
            raise StreamFailureError(
                f"cannot open {path.name}: {exc}",
                original_error=exc,
                context={"path": str(path)},
            ) from exc

        if start:
            try:
                await file.seek(start)
            except OSError as exc:
                await file.aclose()
                raise StreamFailureError(
                    f"cannot seek {path.name} to {start}: {exc}",
                    original_error=exc,
                    context={"path": str(path)},
                ) from exc

        return ByteStream(file, path, length, self.chunk_size, on_complete)
