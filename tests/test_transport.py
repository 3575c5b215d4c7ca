from pathlib import Path

import pytest

from core.errors import MediaNotFoundError, StreamFailureError
from core.schemas import RangeSpec
from core.streaming.transport import ByteStream, FileStreamer


async def collect(stream):
    return [chunk async for chunk in stream]


class FakeFile:
    """Async file double that can fail on a given read."""

    def __init__(self, chunks, fail_on_read=None):
        self._chunks = list(chunks)
        self._fail_on_read = fail_on_read
        self.reads = 0
        self.closed = False

    async def read(self, size):
        self.reads += 1
        if self.reads == self._fail_on_read:
            raise OSError(5, "Input/output error")
        return self._chunks.pop(0) if self._chunks else b""

    async def aclose(self):
        self.closed = True


@pytest.mark.asyncio
async def test_streams_exact_window_in_bounded_chunks(music_dir, song_bytes):
    completed = []
    streamer = FileStreamer(chunk_size=16)
    stream = await streamer.open(
        music_dir / "song.mp3",
        window=RangeSpec(start=200, end=299, total=1000),
        on_complete=completed.append,
    )

    chunks = await collect(stream)

    assert b"".join(chunks) == song_bytes[200:300]
    assert all(len(c) <= 16 for c in chunks)
    assert stream.bytes_sent == 100
    assert completed == [100]


@pytest.mark.asyncio
async def test_streams_whole_file_without_window(music_dir, song_bytes):
    completed = []
    stream = await FileStreamer(chunk_size=256).open(
        music_dir / "song.mp3", length=1000, on_complete=completed.append
    )
    assert b"".join(await collect(stream)) == song_bytes
    assert completed == [1000]


@pytest.mark.asyncio
async def test_reads_to_eof_when_length_unknown(music_dir, song_bytes):
    stream = await FileStreamer().open(music_dir / "song.mp3")
    assert b"".join(await collect(stream)) == song_bytes


@pytest.mark.asyncio
async def test_streamed_count_matches_window_length(music_dir):
    streamer = FileStreamer(chunk_size=7)
    for start, end in [(0, 0), (0, 999), (13, 512), (998, 999)]:
        stream = await streamer.open(
            music_dir / "song.mp3", window=RangeSpec(start=start, end=end, total=1000)
        )
        data = b"".join(await collect(stream))
        assert len(data) == end - start + 1


@pytest.mark.asyncio
async def test_missing_file_fails_before_streaming(music_dir):
    with pytest.raises(MediaNotFoundError):
        await FileStreamer().open(music_dir / "gone.mp3")


@pytest.mark.asyncio
async def test_unopenable_path_is_stream_failure(music_dir):
    (music_dir / "album.mp3").mkdir()
    with pytest.raises(StreamFailureError) as exc_info:
        await FileStreamer().open(music_dir / "album.mp3")
    assert exc_info.value.headers_sent is False


@pytest.mark.asyncio
async def test_file_shrinking_mid_stream_aborts_body(music_dir, log_messages):
    path = music_dir / "song.mp3"
    completed = []
    stream = await FileStreamer(chunk_size=100).open(
        path, length=1000, on_complete=completed.append
    )
    path.write_bytes(b"x" * 300)

    with pytest.raises(StreamFailureError) as exc_info:
        await collect(stream)

    assert exc_info.value.headers_sent is True
    assert completed == []
    assert any("Stream error for song.mp3" in m for m in log_messages)


@pytest.mark.asyncio
async def test_read_error_mid_stream_aborts_and_closes():
    fake = FakeFile([b"abcd", b"efgh"], fail_on_read=2)
    completed = []
    stream = ByteStream(fake, Path("x.mp3"), 8, 4, completed.append)

    received = []
    with pytest.raises(StreamFailureError) as exc_info:
        async for chunk in stream:
            received.append(chunk)

    assert received == [b"abcd"]
    assert isinstance(exc_info.value.original_error, OSError)
    assert exc_info.value.context["bytes_sent"] == 4
    assert completed == []
    assert fake.closed


@pytest.mark.asyncio
async def test_consumer_going_away_stops_reading_without_stats():
    fake = FakeFile([b"abcd", b"efgh", b"ijkl"])
    completed = []
    stream = ByteStream(fake, Path("x.mp3"), 12, 4, completed.append)

    iterator = stream.__aiter__()
    assert await iterator.__anext__() == b"abcd"
    await iterator.aclose()

    assert fake.reads == 1
    assert fake.closed
    assert completed == []


@pytest.mark.asyncio
async def test_stream_iterates_once():
    stream = ByteStream(FakeFile([]), Path("x.mp3"), 0, 4)
    assert await collect(stream) == []
    with pytest.raises(RuntimeError):
        stream.__aiter__()


def test_chunk_size_must_be_positive():
    with pytest.raises(ValueError):
        FileStreamer(chunk_size=0)


@pytest.mark.asyncio
async def test_closing_again_after_iteration_is_harmless(music_dir, song_bytes):
    stream = await FileStreamer().open(music_dir / "song.mp3")
    assert b"".join(await collect(stream)) == song_bytes
    await stream.aclose()
    assert stream._file.wrapped.closed
