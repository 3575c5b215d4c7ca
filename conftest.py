"""Pytest configuration for root."""

import os
import tempfile

# Settings are read when `config` is first imported, so the environment must
# be in place BEFORE any other imports happen.
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("MUSIC_DIR", tempfile.mkdtemp(prefix="music-"))
