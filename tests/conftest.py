from __future__ import annotations

import pytest

from calculator import Toolkit
from fakes import BEATMAP_HASH
from fakes import FakeBeatmapDecoder
from fakes import FakeDifficultyCalculator
from fakes import FakePerformanceCalculator
from fakes import FakeRetriever
from fakes import make_circles_beatmap
from models.beatmap import BeatmapAttributes


@pytest.fixture
def osu_attributes() -> BeatmapAttributes:
    return BeatmapAttributes(
        beatmap_id=1,
        hash=BEATMAP_HASH,
        ruleset_id=0,
        total_hits=100,
        max_combo=100,
    )


@pytest.fixture
def taiko_attributes() -> BeatmapAttributes:
    return BeatmapAttributes(beatmap_id=2, ruleset_id=1, total_hits=200, max_combo=200)


@pytest.fixture
def catch_attributes() -> BeatmapAttributes:
    return BeatmapAttributes(
        beatmap_id=3,
        ruleset_id=2,
        total_hits=200,
        max_combo=120,
        max_fruits=100,
        max_droplets=20,
        max_tiny_droplets=80,
    )


@pytest.fixture
def mania_attributes() -> BeatmapAttributes:
    return BeatmapAttributes(beatmap_id=4, ruleset_id=3, total_hits=100, max_combo=150)


@pytest.fixture
def all_attributes(
    osu_attributes: BeatmapAttributes,
    taiko_attributes: BeatmapAttributes,
    catch_attributes: BeatmapAttributes,
    mania_attributes: BeatmapAttributes,
) -> list[BeatmapAttributes]:
    return [osu_attributes, taiko_attributes, catch_attributes, mania_attributes]


@pytest.fixture
def toolkit() -> Toolkit:
    return Toolkit(
        retriever=FakeRetriever(),
        beatmap_decoder=FakeBeatmapDecoder(make_circles_beatmap(100)),
        difficulty_calculator=FakeDifficultyCalculator(),
        performance_calculator=FakePerformanceCalculator(),
    )
