from __future__ import annotations

import dataclasses
import logging
from abc import abstractmethod
from dataclasses import dataclass
from typing import Any
from typing import Optional
from typing import Protocol

from aiohttp import ClientSession

from constants.modes import GameMode
from constants.modes import to_game_mode
from errors import CollaboratorError
from errors import InvalidInput
from models.beatmap import BeatmapAttributes
from models.scores import ScoreInfo

logger = logging.getLogger(__name__)


@dataclass
class DifficultyAttributes:
    star_rating: float
    max_combo: int


@dataclass
class OsuDifficultyAttributes(DifficultyAttributes):
    aim_difficulty: float = 0.0
    speed_difficulty: float = 0.0
    flashlight_difficulty: float = 0.0

    slider_factor: float = 1.0

    approach_rate: float = 0.0
    overall_difficulty: float = 0.0

    drain_rate: float = 0.0

    slider_count: int = 0
    spinner_count: int = 0
    hit_circle_count: int = 0

    speed_note_count: float = 0.0


@dataclass
class TaikoDifficultyAttributes(DifficultyAttributes):
    stamina_difficulty: float = 0.0
    rhythm_difficulty: float = 0.0
    colour_difficulty: float = 0.0
    approach_rate: float = 0.0
    great_hit_window: float = 0.0


@dataclass
class CatchDifficultyAttributes(DifficultyAttributes):
    approach_rate: float = 0.0


@dataclass
class ManiaDifficultyAttributes(DifficultyAttributes):
    great_hit_window: float = 0.0
    score_multiplier: float = 1.0


@dataclass
class PerformanceAttributes:
    total: float


@dataclass
class OsuPerformanceAttributes(PerformanceAttributes):
    aim: float = 0.0
    speed: float = 0.0
    accuracy: float = 0.0
    flashlight: float = 0.0
    effective_miss_count: float = 0.0


@dataclass
class TaikoPerformanceAttributes(PerformanceAttributes):
    difficulty: float = 0.0
    accuracy: float = 0.0
    effective_miss_count: float = 0.0


@dataclass
class CatchPerformanceAttributes(PerformanceAttributes):
    pass


@dataclass
class ManiaPerformanceAttributes(PerformanceAttributes):
    difficulty: float = 0.0


DIFFICULTY_ATTRIBUTES: dict[GameMode, type[DifficultyAttributes]] = {
    GameMode.OSU: OsuDifficultyAttributes,
    GameMode.TAIKO: TaikoDifficultyAttributes,
    GameMode.FRUITS: CatchDifficultyAttributes,
    GameMode.MANIA: ManiaDifficultyAttributes,
}

PERFORMANCE_ATTRIBUTES: dict[GameMode, type[PerformanceAttributes]] = {
    GameMode.OSU: OsuPerformanceAttributes,
    GameMode.TAIKO: TaikoPerformanceAttributes,
    GameMode.FRUITS: CatchPerformanceAttributes,
    GameMode.MANIA: ManiaPerformanceAttributes,
}


def _from_raw(cls: type, raw: dict[str, Any]) -> Any:
    field_names = {field.name for field in dataclasses.fields(cls)}
    return cls(**{key: value for key, value in raw.items() if key in field_names})


def to_difficulty_attributes(
    raw: dict[str, Any],
    ruleset_id: int,
) -> DifficultyAttributes:
    if "star_rating" not in raw or "max_combo" not in raw:
        raise InvalidInput("Difficulty attributes need star_rating and max_combo")

    return _from_raw(DIFFICULTY_ATTRIBUTES[to_game_mode(ruleset_id)], raw)


def to_performance_attributes(
    raw: dict[str, Any],
    ruleset_id: int,
) -> PerformanceAttributes:
    if "total" not in raw:
        raise InvalidInput("Performance attributes need a total")

    return _from_raw(PERFORMANCE_ATTRIBUTES[to_game_mode(ruleset_id)], raw)


class DifficultyCalculator(Protocol):
    @abstractmethod
    async def calculate(
        self,
        attributes: BeatmapAttributes,
        total_hits: Optional[int] = None,
    ) -> DifficultyAttributes:
        ...


class PerformanceCalculator(Protocol):
    @abstractmethod
    async def calculate(
        self,
        difficulty: DifficultyAttributes,
        score: ScoreInfo,
    ) -> PerformanceAttributes:
        ...


class RemoteDifficultyCalculator(DifficultyCalculator):
    """Asks the difficulty service for attributes of a (possibly partial) beatmap."""

    def __init__(self, http: ClientSession, base_url: str) -> None:
        self.http = http
        self.base_url = base_url.rstrip("/")

    async def calculate(
        self,
        attributes: BeatmapAttributes,
        total_hits: Optional[int] = None,
    ) -> DifficultyAttributes:
        ruleset_id = attributes.ruleset_id or 0
        payload = {
            "beatmap_id": attributes.beatmap_id,
            "beatmap_md5": attributes.hash,
            "ruleset_id": ruleset_id,
            "mods": [mod.model_dump() for mod in attributes.mods],
            "total_hits": total_hits,
        }

        raw = await _post_json(self.http, f"{self.base_url}/attributes", payload)
        return to_difficulty_attributes(raw, ruleset_id)


class RemotePerformanceCalculator(PerformanceCalculator):
    def __init__(self, http: ClientSession, base_url: str) -> None:
        self.http = http
        self.base_url = base_url.rstrip("/")

    async def calculate(
        self,
        difficulty: DifficultyAttributes,
        score: ScoreInfo,
    ) -> PerformanceAttributes:
        payload = {
            "ruleset_id": score.ruleset_id,
            "difficulty": dataclasses.asdict(difficulty),
            "score": score.model_dump(mode="json"),
        }

        raw = await _post_json(self.http, f"{self.base_url}/performance", payload)
        return to_performance_attributes(raw, score.ruleset_id)


async def _post_json(
    http: ClientSession,
    url: str,
    payload: dict[str, Any],
) -> dict[str, Any]:
    async with http.post(url, json=payload) as resp:
        if resp.status != 200:
            logger.warning("%s responded with %d", url, resp.status)
            raise CollaboratorError(f"{url} responded with {resp.status}")

        data = await resp.json()
        if not data:
            raise CollaboratorError(f"{url} returned no attributes")

    return data
