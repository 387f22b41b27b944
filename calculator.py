from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from enum import auto
from typing import Optional
from typing import Protocol

from attributes import create_beatmap_attributes
from attributes import create_beatmap_info
from attributes import get_difficulty_mods
from attributes import lacks_juice_counts
from constants.modes import GameMode
from constants.modes import get_ruleset_id_by_name
from constants.modes import to_game_mode
from constants.mods import Mods
from difficulty import DifficultyAttributes
from difficulty import DifficultyCalculator
from difficulty import PerformanceAttributes
from difficulty import PerformanceCalculator
from difficulty import to_difficulty_attributes
from downloader import Retriever
from errors import HashMismatch
from errors import InvalidInput
from grading import calculate_accuracy
from grading import calculate_rank
from hit_statistics import get_valid_hit_statistics
from models.beatmap import Beatmap
from models.beatmap import BeatmapAttributes
from models.beatmap import BeatmapInfo
from models.mod import Mod
from models.mod import convert_mods
from models.mod import to_mods
from models.scores import BeatmapCalculationRequest
from models.scores import BeatmapSource
from models.scores import HitStatistics
from models.scores import LifeBarFrame
from models.scores import ReplayScore
from models.scores import ScoreCalculationRequest
from models.scores import ScoreInfo
from models.scores import ScoreRank
from models.scores import ScoreSimulationRequest
from simulator import ScoreSimulator

logger = logging.getLogger(__name__)


class BeatmapDecoder(Protocol):
    def decode(self, data: bytes) -> Beatmap:
        ...


class ReplayDecoder(Protocol):
    def decode(self, data: bytes) -> ReplayScore:
        ...


class CalculationState(Enum):
    HAVE_PRECOMPUTED = auto()
    NEED_BEATMAP = auto()


@dataclass
class Toolkit:
    """External collaborators used by the calculators."""

    retriever: Retriever
    beatmap_decoder: BeatmapDecoder
    difficulty_calculator: DifficultyCalculator
    performance_calculator: PerformanceCalculator
    replay_decoder: Optional[ReplayDecoder] = None
    cache_files: bool = True


@dataclass
class LoadedBeatmap:
    beatmap: Beatmap
    attributes: BeatmapAttributes


@dataclass
class CalculatedScore:
    score_info: ScoreInfo
    difficulty: DifficultyAttributes
    performance: PerformanceAttributes
    statistics: HitStatistics
    life_bar: Optional[list[LifeBarFrame]] = None


@dataclass
class CalculatedBeatmap:
    attributes: BeatmapAttributes
    difficulty: DifficultyAttributes
    performance: list[PerformanceAttributes]
    # only known when the beatmap file was decoded
    beatmap_info: Optional[BeatmapInfo] = None
    beatmap_md5: Optional[str] = None


def has_complete_attributes(attributes: BeatmapAttributes) -> bool:
    return (
        bool(attributes.hash)
        and attributes.ruleset_id is not None
        and attributes.total_hits > 0
    )


def resolve_calculation_state(
    attributes: Optional[BeatmapAttributes],
    has_difficulty: bool,
    score_total_hits: Optional[int],
    target_total_hits: Optional[int] = None,
    fix: bool = False,
) -> CalculationState:
    """Decides whether the beatmap has to be parsed for this request.

    ``score_total_hits`` is ``None`` when no usable score is available yet.
    """
    if attributes is None or not has_complete_attributes(attributes):
        return CalculationState.NEED_BEATMAP

    if not has_difficulty or score_total_hits is None:
        return CalculationState.NEED_BEATMAP

    if target_total_hits is not None and target_total_hits != attributes.total_hits:
        return CalculationState.NEED_BEATMAP

    if score_total_hits < attributes.total_hits and not fix:
        return CalculationState.NEED_BEATMAP

    return CalculationState.HAVE_PRECOMPUTED


def check_hashes(beatmap_hash: Optional[str], score_hash: Optional[str]) -> None:
    if beatmap_hash and score_hash and beatmap_hash != score_hash:
        logger.warning("Score hash %s does not match beatmap %s", score_hash, beatmap_hash)
        raise HashMismatch(
            f"Score was set on {score_hash}, but the beatmap is {beatmap_hash}",
        )


def resolve_ruleset_id(source: BeatmapSource) -> Optional[int]:
    if source.ruleset_name is not None:
        return get_ruleset_id_by_name(source.ruleset_name)

    if source.ruleset_id is not None:
        return to_game_mode(source.ruleset_id)

    if source.attributes is not None and source.attributes.ruleset_id is not None:
        return to_game_mode(source.attributes.ruleset_id)

    return None


def resolve_mods(source: BeatmapSource) -> Optional[list[Mod]]:
    if source.mods is not None:
        return convert_mods(Mods.from_input(source.mods))

    if source.attributes is not None:
        return list(source.attributes.mods)

    return None


def has_juice_counts(attributes: BeatmapAttributes) -> bool:
    return bool(
        attributes.max_fruits or attributes.max_droplets or attributes.max_tiny_droplets
    )


def merge_catch_attributes(
    beatmap: Beatmap,
    derived: BeatmapAttributes,
    supplied: Optional[BeatmapAttributes],
) -> BeatmapAttributes:
    """Fills in juice counts the beatmap decoder could not provide."""
    if derived.ruleset_id != GameMode.FRUITS:
        return derived

    if derived.max_droplets or derived.max_tiny_droplets:
        return derived

    if supplied is None or not has_juice_counts(supplied):
        if lacks_juice_counts(beatmap):
            raise InvalidInput(
                f"Fruit and droplet counts of beatmap {derived.beatmap_id} are "
                "unknown, they have to be passed with the attributes",
            )

        return derived

    max_fruits = supplied.max_fruits or derived.max_fruits
    max_droplets = supplied.max_droplets
    max_tiny_droplets = supplied.max_tiny_droplets

    return derived.model_copy(
        update={
            "max_fruits": max_fruits,
            "max_droplets": max_droplets,
            "max_tiny_droplets": max_tiny_droplets,
            "total_hits": max_fruits + max_droplets + max_tiny_droplets,
            "max_combo": supplied.max_combo or derived.max_combo,
        },
    )


async def load_beatmap(toolkit: Toolkit, source: BeatmapSource) -> LoadedBeatmap:
    """Retrieves and decodes the beatmap, then derives its attributes."""
    supplied = source.attributes

    beatmap_id = source.beatmap_id
    if beatmap_id is None and supplied is not None and supplied.beatmap_id:
        beatmap_id = supplied.beatmap_id

    expected_hash = source.hash
    if expected_hash is None and supplied is not None:
        expected_hash = supplied.hash

    if beatmap_id is None and source.file_url is None:
        raise InvalidInput("No beatmap ID or beatmap URL was specified!")

    cache = toolkit.cache_files if source.cache_files is None else source.cache_files
    result = await toolkit.retriever.retrieve(
        beatmap_id=beatmap_id,
        url=source.file_url,
        hash=expected_hash,
        cache=cache,
    )
    beatmap = toolkit.beatmap_decoder.decode(result.data)

    update: dict[str, object] = {}
    if not beatmap.beatmap_id and beatmap_id is not None:
        update["beatmap_id"] = beatmap_id

    ruleset_id = resolve_ruleset_id(source)
    if ruleset_id is not None and ruleset_id != beatmap.mode:
        if beatmap.mode != GameMode.OSU:
            raise InvalidInput(
                f"Beatmaps of ruleset {beatmap.mode} cannot be converted to {ruleset_id}",
            )

        update["mode"] = int(ruleset_id)
        if beatmap.original_mode is None:
            update["original_mode"] = beatmap.mode

    mods = resolve_mods(source)
    if mods is not None:
        update["mods"] = mods

    if update:
        beatmap = beatmap.model_copy(update=update)

    attributes = create_beatmap_attributes(beatmap, result.hash)
    logger.debug(
        "Derived attributes of beatmap %d: %d hits, %dx",
        attributes.beatmap_id,
        attributes.total_hits,
        attributes.max_combo,
    )

    return LoadedBeatmap(
        beatmap=beatmap,
        attributes=merge_catch_attributes(beatmap, attributes, supplied),
    )


async def derive_attributes(
    toolkit: Toolkit,
    source: BeatmapSource,
) -> BeatmapAttributes:
    loaded = await load_beatmap(toolkit, source)
    return loaded.attributes


async def calculate_difficulty(
    toolkit: Toolkit,
    attributes: BeatmapAttributes,
    total_hits: Optional[int] = None,
) -> DifficultyAttributes:
    mods = get_difficulty_mods(attributes.ruleset_id or 0, to_mods(attributes.mods))
    attributes = attributes.model_copy(update={"mods": convert_mods(mods)})

    return await toolkit.difficulty_calculator.calculate(
        attributes,
        total_hits=total_hits,
    )


class ScoreCalculator:
    """Calculates difficulty and performance of a single score."""

    def __init__(self, toolkit: Toolkit) -> None:
        self.toolkit = toolkit
        self.simulator = ScoreSimulator()

    async def calculate(self, request: ScoreCalculationRequest) -> CalculatedScore:
        replay = await self._load_replay(request)
        supplied = request.attributes

        state = resolve_calculation_state(
            attributes=supplied,
            has_difficulty=request.difficulty is not None,
            score_total_hits=self._expected_total_hits(request, replay),
            target_total_hits=request.total_hits,
            fix=request.fix,
        )
        logger.debug("Score calculation state: %s", state.name)

        if supplied is not None and state is CalculationState.HAVE_PRECOMPUTED:
            attributes = supplied
        else:
            attributes = await derive_attributes(self.toolkit, request)

        ruleset_id = attributes.ruleset_id or 0
        difficulty = None
        if request.difficulty is not None:
            difficulty = to_difficulty_attributes(request.difficulty, ruleset_id)

        score = self._create_score(request, attributes, replay)
        check_hashes(attributes.hash, score.beatmap_hash_md5)

        partial = score.total_hits < attributes.total_hits and not request.fix
        if partial:
            logger.info(
                "Score covers %d of %d hits, calculating gradual difficulty",
                score.total_hits,
                attributes.total_hits,
            )
            difficulty = await calculate_difficulty(
                self.toolkit,
                attributes,
                total_hits=score.total_hits,
            )
        elif difficulty is None:
            difficulty = await calculate_difficulty(self.toolkit, attributes)

        if request.fix:
            score = self.simulator.simulate_fc(score, attributes)

        score = self._finalize_score(score, attributes, difficulty, partial)
        performance = await self.toolkit.performance_calculator.calculate(
            difficulty,
            score,
        )

        life_bar = replay.life_bar if replay is not None and request.life_bar else None

        return CalculatedScore(
            score_info=score,
            difficulty=difficulty,
            performance=performance,
            statistics=score.statistics,
            life_bar=life_bar,
        )

    async def _load_replay(
        self,
        request: ScoreCalculationRequest,
    ) -> Optional[ReplayScore]:
        if request.score_info is not None or request.replay_url is None:
            return None

        if self.toolkit.replay_decoder is None:
            raise InvalidInput("Replay files cannot be decoded by this service")

        result = await self.toolkit.retriever.retrieve(
            url=request.replay_url,
            cache=False,
        )

        return self.toolkit.replay_decoder.decode(result.data)

    def _expected_total_hits(
        self,
        request: ScoreCalculationRequest,
        replay: Optional[ReplayScore],
    ) -> Optional[int]:
        if request.score_info is not None:
            return request.score_info.total_hits

        if replay is not None:
            return replay.statistics.total_for(replay.ruleset_id)

        if request.attributes is not None:
            if request.total_hits is not None:
                return request.total_hits

            return request.attributes.total_hits

        return None

    def _create_score(
        self,
        request: ScoreCalculationRequest,
        attributes: BeatmapAttributes,
        replay: Optional[ReplayScore],
    ) -> ScoreInfo:
        if request.score_info is not None:
            score = request.score_info
            return score.model_copy(
                update={
                    "statistics": get_valid_hit_statistics(score.statistics),
                    "mods": score.mods or attributes.mods,
                    "beatmap_id": score.beatmap_id or attributes.beatmap_id,
                },
            )

        if replay is not None:
            return self.simulator.complete_replay(replay, attributes)

        simulated = attributes
        if request.total_hits is not None and request.total_hits != attributes.total_hits:
            simulated = attributes.model_copy(
                update={"total_hits": max(0, request.total_hits)},
            )

        return self.simulator.simulate(
            ScoreSimulationRequest(
                attributes=simulated,
                accuracy=request.accuracy,
                count_miss=request.count_miss,
                count_50=request.count_50,
                count_100=request.count_100,
                count_300=request.count_300,
                count_katu=request.count_katu,
                count_geki=request.count_geki,
                total_score=request.total_score,
                max_combo=request.max_combo,
                percent_combo=request.percent_combo,
            ),
        )

    def _finalize_score(
        self,
        score: ScoreInfo,
        attributes: BeatmapAttributes,
        difficulty: DifficultyAttributes,
        partial: bool,
    ) -> ScoreInfo:
        score = score.model_copy()
        score.accuracy = calculate_accuracy(score)

        if partial:
            score.passed = False
            score.perfect = False
            score.rank = ScoreRank.F
            score.max_combo = min(score.max_combo, difficulty.max_combo)
            return score

        score.passed = score.total_hits >= attributes.total_hits
        score.rank = calculate_rank(score)

        return score


class BeatmapCalculator:
    """Calculates difficulty of a beatmap and performance at several accuracies."""

    def __init__(self, toolkit: Toolkit) -> None:
        self.toolkit = toolkit
        self.simulator = ScoreSimulator()

    async def calculate(self, request: BeatmapCalculationRequest) -> CalculatedBeatmap:
        supplied = request.attributes
        beatmap_info = None

        if (
            supplied is not None
            and request.difficulty is not None
            and has_complete_attributes(supplied)
        ):
            attributes = supplied
        else:
            loaded = await load_beatmap(self.toolkit, request)
            attributes = loaded.attributes
            beatmap_info = create_beatmap_info(loaded.beatmap)

        if request.difficulty is not None:
            difficulty = to_difficulty_attributes(
                request.difficulty,
                attributes.ruleset_id or 0,
            )
        else:
            difficulty = await calculate_difficulty(self.toolkit, attributes)

        scores = self._simulate_scores(attributes, request)
        performance = await asyncio.gather(
            *[
                self.toolkit.performance_calculator.calculate(difficulty, score)
                for score in scores
            ],
        )

        return CalculatedBeatmap(
            attributes=attributes,
            difficulty=difficulty,
            performance=list(performance),
            beatmap_info=beatmap_info,
            beatmap_md5=attributes.hash,
        )

    def _simulate_scores(
        self,
        attributes: BeatmapAttributes,
        request: BeatmapCalculationRequest,
    ) -> list[ScoreInfo]:
        if attributes.ruleset_id == GameMode.MANIA and request.total_scores:
            return [
                self.simulator.simulate(
                    ScoreSimulationRequest(attributes=attributes, total_score=total_score),
                )
                for total_score in request.total_scores
            ]

        return [
            self.simulator.simulate(
                ScoreSimulationRequest(attributes=attributes, accuracy=accuracy),
            )
            for accuracy in request.accuracy
        ]
