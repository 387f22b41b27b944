from __future__ import annotations

from starlette.config import Config

cfg = Config(".env")

SERVER_PORT: int = cfg("SERVER_PORT", cast=int, default=8665)

DIFFICULTY_SERVICE_URL: str = cfg(
    "DIFFICULTY_SERVICE_URL",
    default="http://127.0.0.1:8666",
)
BEATMAP_DOWNLOAD_URL: str = cfg(
    "BEATMAP_DOWNLOAD_URL",
    default="https://osu.ppy.sh/osu/{beatmap_id}",
)

CACHE_PATH: str = cfg("CACHE_PATH", default="./cache")
CACHE_FILES: bool = cfg("CACHE_FILES", cast=bool, default=True)

LOG_LEVEL: str = cfg("LOG_LEVEL", default="WARNING")
