"""Process-lifetime transfer statistics."""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock

_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")


def format_bytes(num_bytes: int) -> str:
    """Render a byte count with binary units and at most two decimals.

    Example:
        >>> format_bytes(1536)
        '1.5KB'
    """
    value = float(num_bytes)
    unit = _UNITS[0]
    for unit in _UNITS:
        if abs(value) < 1024 or unit == _UNITS[-1]:
            break
        value /= 1024
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text}{unit}"


@dataclass(frozen=True)
class StatsSnapshot:
    """Consistent point-in-time copy of the counters."""

    total_bytes: int
    request_count: int


class TransferStats:
    """Thread-safe counters for bytes served and completed requests."""

    def __init__(self):
        """Initialize both counters to zero."""
        self._lock = Lock()
        self._total_bytes = 0
        self._request_count = 0

    def record(self, bytes_sent: int) -> None:
        """Count one completed transfer of `bytes_sent` bytes."""
        if bytes_sent < 0:
            raise ValueError("bytes_sent must be non-negative")
        with self._lock:
            self._total_bytes += bytes_sent
            self._request_count += 1

    def snapshot(self) -> StatsSnapshot:
        """Read both counters atomically."""
        with self._lock:
            return StatsSnapshot(self._total_bytes, self._request_count)
