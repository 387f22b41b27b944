from __future__ import annotations

from enum import Enum
from typing import Any
from typing import Optional
from typing import Union

from pydantic import BaseModel
from pydantic import Field

from models.beatmap import BeatmapAttributes
from models.mod import Mod


class ScoreRank(str, Enum):
    F = "F"
    D = "D"
    C = "C"
    B = "B"
    A = "A"
    S = "S"
    SH = "SH"
    X = "X"
    XH = "XH"


class HitStatistics(BaseModel):
    perfect: int = 0
    great: int = 0
    good: int = 0
    ok: int = 0
    meh: int = 0
    miss: int = 0

    large_tick_hit: int = 0
    large_tick_miss: int = 0
    small_tick_hit: int = 0
    small_tick_miss: int = 0

    large_bonus: int = 0
    small_bonus: int = 0
    ignore_hit: int = 0
    ignore_miss: int = 0

    def total_for(self, ruleset_id: int) -> int:
        kinds = HIT_RESULTS_BY_MODE.get(ruleset_id, ALL_HIT_RESULTS)
        return sum(getattr(self, kind) for kind in kinds)


# judgements that count towards total hits, indexed by ruleset id
HIT_RESULTS_BY_MODE: dict[int, tuple[str, ...]] = {
    0: ("great", "ok", "meh", "miss"),
    1: ("great", "ok", "miss"),
    2: ("great", "large_tick_hit", "small_tick_hit", "small_tick_miss", "miss"),
    3: ("perfect", "great", "good", "ok", "meh", "miss"),
}

ALL_HIT_RESULTS = (
    "perfect",
    "great",
    "good",
    "ok",
    "meh",
    "large_tick_hit",
    "small_tick_hit",
    "small_tick_miss",
    "miss",
)


class ScoreInfo(BaseModel):
    ruleset_id: int = 0
    mods: list[Mod] = []
    statistics: HitStatistics = Field(default_factory=HitStatistics)

    max_combo: int = 0
    total_score: int = 0

    accuracy: float = 1.0
    rank: ScoreRank = ScoreRank.F
    passed: bool = False
    perfect: bool = False

    beatmap_id: int = 0
    beatmap_hash_md5: Optional[str] = None

    @property
    def total_hits(self) -> int:
        return self.statistics.total_for(self.ruleset_id)


class LifeBarFrame(BaseModel):
    start_time: float
    health: float


class ReplayScore(BaseModel):
    """Judgements and metadata decoded from a replay file."""

    ruleset_id: int = 0
    mods: list[Mod] = []
    statistics: HitStatistics = Field(default_factory=HitStatistics)
    max_combo: int = 0
    total_score: int = 0
    beatmap_hash_md5: Optional[str] = None
    life_bar: list[LifeBarFrame] = []


class HitStatisticsInput(BaseModel):
    accuracy: Optional[float] = None
    count_miss: Optional[int] = None
    count_50: Optional[int] = None
    count_100: Optional[int] = None
    count_300: Optional[int] = None
    count_katu: Optional[int] = None
    count_geki: Optional[int] = None


class ScoreSimulationRequest(HitStatisticsInput):
    attributes: BeatmapAttributes
    total_score: Optional[int] = None
    max_combo: Optional[int] = None
    percent_combo: Optional[float] = None


class BeatmapSource(BaseModel):
    beatmap_id: Optional[int] = None
    file_url: Optional[str] = None
    hash: Optional[str] = None
    cache_files: Optional[bool] = None

    ruleset_id: Optional[int] = None
    ruleset_name: Optional[str] = None
    mods: Optional[Union[int, str]] = None

    attributes: Optional[BeatmapAttributes] = None
    difficulty: Optional[dict[str, Any]] = None


class ScoreCalculationRequest(BeatmapSource, HitStatisticsInput):
    score_info: Optional[ScoreInfo] = None
    replay_url: Optional[str] = None
    life_bar: bool = False

    total_score: Optional[int] = None
    max_combo: Optional[int] = None
    percent_combo: Optional[float] = None

    total_hits: Optional[int] = None
    fix: bool = False


class BeatmapCalculationRequest(BeatmapSource):
    accuracy: list[float] = []
    total_scores: list[int] = []
