from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from typing import Protocol

from aiohttp import ClientSession

from errors import CollaboratorError
from errors import HashMismatch
from errors import InvalidInput

logger = logging.getLogger(__name__)


@dataclass
class DownloadResult:
    data: bytes
    hash: str
    file_path: Optional[Path] = None


class Retriever(Protocol):
    async def retrieve(
        self,
        *,
        beatmap_id: Optional[int] = None,
        url: Optional[str] = None,
        hash: Optional[str] = None,
        cache: bool = True,
    ) -> DownloadResult:
        ...


def md5_hexdigest(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


class Downloader:
    """Fetches .osu and replay files, optionally caching them on disk."""

    def __init__(
        self,
        http: Optional[ClientSession],
        download_url: str,
        cache_path: Optional[Path] = None,
    ) -> None:
        self.http = http
        self.download_url = download_url
        self.cache_path = cache_path

    async def retrieve(
        self,
        *,
        beatmap_id: Optional[int] = None,
        url: Optional[str] = None,
        hash: Optional[str] = None,
        cache: bool = True,
    ) -> DownloadResult:
        if beatmap_id is None and url is None:
            raise InvalidInput("No beatmap ID or file URL was specified!")

        file_path = None
        if cache and beatmap_id is not None and self.cache_path is not None:
            file_path = self.cache_path / f"{beatmap_id}.osu"

            if file_path.exists():
                data = file_path.read_bytes()
                if hash is None or md5_hexdigest(data) == hash:
                    return DownloadResult(data, md5_hexdigest(data), file_path)

                logger.info("Cached %s is outdated, downloading again", file_path)

        if url is None:
            url = self.download_url.format(beatmap_id=beatmap_id)

        data = await self._download(url)
        data_hash = md5_hexdigest(data)

        if hash is not None and data_hash != hash:
            raise HashMismatch(f"Wrong file from {url}: expected {hash}, got {data_hash}")

        if file_path is not None:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(data)

        return DownloadResult(data, data_hash, file_path)

    async def _download(self, url: str) -> bytes:
        if self.http is None:
            raise CollaboratorError("Downloads are not available without a session")

        async with self.http.get(url) as response:
            if response.status != 200:
                raise CollaboratorError(f"{url} failed to download ({response.status})")

            data = await response.read()

        if not data:
            raise CollaboratorError(f"{url} returned an empty file")

        return data
