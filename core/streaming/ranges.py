"""Resolution of HTTP `Range` headers against a file size."""

from __future__ import annotations

import re

from core.schemas import RangeOutcome

_DIGITS = re.compile(r"[0-9]+")


def _bounded_int(digits: str, limit: int) -> int:
    """Parse a digit string, capping it at `limit` without building huge ints."""
    digits = digits.lstrip("0") or "0"
    if len(digits) > len(str(limit)):
        return limit
    return min(int(digits), limit)


def resolve_range(total_size: int, range_header: str | None) -> RangeOutcome:
    """Resolve a raw `Range` header value into a byte window.

    Supports `bytes=start-end`, open-ended `bytes=start-` and suffix
    `bytes=-N` forms. Only the first range of a comma-separated list is
    honoured; the rest are ignored since multipart bodies are not served.

    Args:
        total_size: Size of the file in bytes.
        range_header: Header value, or None when the client sent none.

    Returns:
        FULL when no header was sent, PARTIAL with the clamped window,
        UNSATISFIABLE when the numbers fall outside the file, or MALFORMED
        when the header does not parse.
    """
    if range_header is None:
        return RangeOutcome.full()

    unit, sep, ranges = range_header.strip().partition("=")
    if not sep:
        return RangeOutcome.malformed("missing '='")
    if unit.strip().lower() != "bytes":
        return RangeOutcome.malformed(f"unsupported unit {unit.strip()!r}")

    first = ranges.split(",", 1)[0].strip()
    start_str, dash, end_str = first.partition("-")
    start_str, end_str = start_str.strip(), end_str.strip()
    if not dash or not (start_str or end_str):
        return RangeOutcome.malformed(f"invalid range {first!r}")
    for part in (start_str, end_str):
        if part and not _DIGITS.fullmatch(part):
            return RangeOutcome.malformed(f"non-numeric bound {part!r}")

    if not start_str:
        suffix = _bounded_int(end_str, total_size)
        if suffix == 0 or total_size == 0:
            return RangeOutcome.unsatisfiable("empty suffix range")
        return RangeOutcome.partial(
            max(0, total_size - suffix), total_size - 1, total_size
        )

    start = _bounded_int(start_str, total_size)
    if start >= total_size:
        return RangeOutcome.unsatisfiable(
            f"start {start} beyond size {total_size}"
        )
    end = total_size - 1
    if end_str:
        end = min(_bounded_int(end_str, total_size), end)
    if start > end:
        return RangeOutcome.unsatisfiable(f"start {start} after end {end}")
    return RangeOutcome.partial(start, end, total_size)
