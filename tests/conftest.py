import pytest
from fastapi.testclient import TestClient
from loguru import logger

from api.server import create_app
from config import Settings
from core.storage.metadata_cache import MetadataCache
from core.utils.stats import TransferStats

SONG_SIZE = 1000

# Test Data & Media Fixtures

@pytest.fixture
def song_bytes():
    """Deterministic 1000-byte payload; byte i has value i % 256."""
    return bytes(i % 256 for i in range(SONG_SIZE))


@pytest.fixture
def music_dir(tmp_path, song_bytes):
    """
    Creates a temporary media root containing song.mp3 (1000 bytes).
    """
    root = tmp_path / "music"
    root.mkdir()
    (root / "song.mp3").write_bytes(song_bytes)
    return root


@pytest.fixture
def test_settings(music_dir):
    return Settings(music_dir=music_dir, log_to_file=False)


# App & Client

@pytest.fixture
def stats():
    return TransferStats()


@pytest.fixture
def cache():
    return MetadataCache(ttl_seconds=3600, max_entries=100)


@pytest.fixture
def app(test_settings, stats, cache):
    return create_app(settings=test_settings, stats=stats, cache=cache)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


# Logging

@pytest.fixture
def log_messages():
    """Collects loguru messages emitted while the test runs."""
    messages: list[str] = []
    handler_id = logger.add(
        lambda m: messages.append(m.record["message"]), level="DEBUG"
    )
    yield messages
    logger.remove(handler_id)
