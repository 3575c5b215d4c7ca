"""Command-line entrypoint for the music direct-link server.

Runs the FastAPI app under uvicorn on the configured host and port. Both,
and the media directory, come from the environment or a `.env` file.

Usage:
    uv run python main.py
    PORT=8080 MUSIC_DIR=/srv/music uv run python main.py
"""

from __future__ import annotations

import uvicorn

from config import settings


def main() -> None:
    """CLI entrypoint for the server."""
    uvicorn.run(
        "api.server:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
