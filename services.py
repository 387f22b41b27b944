from __future__ import annotations

import contextlib
import logging
from pathlib import Path

from aiohttp import ClientSession

import settings
from calculator import Toolkit
from difficulty import RemoteDifficultyCalculator
from difficulty import RemotePerformanceCalculator
from downloader import Downloader

logger = logging.getLogger(__name__)

http: ClientSession
toolkit: Toolkit

ctx_stack: contextlib.AsyncExitStack = contextlib.AsyncExitStack()


async def connect_services() -> None:
    global http, toolkit
    from decoder import SliderBeatmapDecoder

    http = await ctx_stack.enter_async_context(ClientSession())

    toolkit = Toolkit(
        retriever=Downloader(
            http,
            settings.BEATMAP_DOWNLOAD_URL,
            cache_path=Path(settings.CACHE_PATH),
        ),
        beatmap_decoder=SliderBeatmapDecoder(),
        difficulty_calculator=RemoteDifficultyCalculator(
            http,
            settings.DIFFICULTY_SERVICE_URL,
        ),
        performance_calculator=RemotePerformanceCalculator(
            http,
            settings.DIFFICULTY_SERVICE_URL,
        ),
        cache_files=settings.CACHE_FILES,
    )
    logger.info("Services connected, difficulty via %s", settings.DIFFICULTY_SERVICE_URL)


async def disconnect_services() -> None:
    await ctx_stack.aclose()
