"""Filename allow-list and media-root containment checks.

A requested filename is served only when it names a single audio file
directly inside the media root. These helpers never touch the disk except
for `resolve_within`, which resolves symlinks of the already-accepted name.
"""

import posixpath
import re
import unicodedata
from pathlib import Path

AUDIO_EXTENSIONS = ("mp3", "wav", "flac", "m4a")

# Latin letters, digits and the CJK Unified Ideographs block.
_LEAD_CHARS = r"a-zA-Z0-9\u4e00-\u9fa5"
_BODY_CHARS = _LEAD_CHARS + r"\s\-_."

_FILENAME_RE = re.compile(
    rf"[{_LEAD_CHARS}][{_BODY_CHARS}]+\.(?:{'|'.join(AUDIO_EXTENSIONS)})"
)

_SEPARATORS = ("/", "\\", "\x00")


def normalize_filename(filename: str) -> str:
    """Normalize Unicode to NFC (composed form) before any check."""
    return unicodedata.normalize("NFC", filename)


def is_allowed_filename(filename: str) -> bool:
    """Return True when the name matches the audio filename grammar.

    Example:
        >>> is_allowed_filename("夜曲 - live_2.flac")
        True
        >>> is_allowed_filename("track!.mp3")
        False
    """
    return _FILENAME_RE.fullmatch(filename) is not None


def has_traversal(filename: str) -> bool:
    """Return True when the name could address anything but a root-level file."""
    if any(sep in filename for sep in _SEPARATORS):
        return True
    return ".." in posixpath.normpath(filename)


def resolve_within(root: Path, filename: str) -> Path | None:
    """Join `filename` onto `root`, or None if the result escapes `root`.

    Symlinks are resolved, so a link inside the media directory that points
    elsewhere is rejected as well.
    """
    candidate = (root / filename).resolve()
    if not candidate.is_relative_to(root):
        return None
    return candidate
