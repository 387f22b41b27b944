from __future__ import annotations

from typing import Optional

from constants.modes import GameMode
from errors import InvalidInput
from grading import calculate_accuracy
from grading import calculate_rank
from hit_statistics import clamp
from hit_statistics import full_credit_statistics
from hit_statistics import generate_hit_statistics
from hit_statistics import get_catch_total_hits
from hit_statistics import get_valid_hit_statistics
from models.beatmap import BeatmapAttributes
from models.mod import Mod
from models.scores import HitStatistics
from models.scores import ReplayScore
from models.scores import ScoreInfo
from models.scores import ScoreSimulationRequest

MANIA_MAX_SCORE = 1_000_000


class ScoreSimulator:
    """Builds complete score infos from beatmap attributes.

    Every method returns a fresh ``ScoreInfo`` whose accuracy and rank are
    derived from its statistics, so the result is always self-consistent.
    """

    def simulate(self, request: ScoreSimulationRequest) -> ScoreInfo:
        attributes = request.attributes

        # catch statistics are spread over the whole beatmap's juice
        if (
            attributes.ruleset_id == GameMode.FRUITS
            and 0 < attributes.total_hits < get_catch_total_hits(attributes)
        ):
            raise InvalidInput(
                f"osu!catch scores cannot be simulated for {attributes.total_hits} "
                f"of {get_catch_total_hits(attributes)} hits",
            )

        statistics = generate_hit_statistics(attributes, request)

        beatmap_combo = attributes.max_combo
        percentage = 100.0 if request.percent_combo is None else request.percent_combo
        multiplier = clamp(0.0, percentage, 100.0) / 100.0

        if request.max_combo is not None:
            score_combo = request.max_combo
        else:
            score_combo = int(beatmap_combo * multiplier)

        limited_combo = min(score_combo, beatmap_combo - statistics.miss)
        max_combo = max(0, limited_combo)

        return self._generate_score_info(
            attributes=attributes,
            statistics=statistics,
            max_combo=max_combo,
            total_score=request.total_score,
            perfect=max_combo >= beatmap_combo,
        )

    def simulate_fc(
        self,
        score_info: ScoreInfo,
        attributes: BeatmapAttributes,
    ) -> ScoreInfo:
        if score_info.ruleset_id == GameMode.MANIA:
            return self.simulate_max(attributes)

        statistics = get_valid_hit_statistics(score_info.statistics)
        total_hits = attributes.total_hits

        if score_info.ruleset_id == GameMode.FRUITS:
            statistics.great = max(
                0,
                total_hits
                - statistics.large_tick_hit
                - statistics.small_tick_hit
                - statistics.small_tick_miss
                - statistics.miss,
            )
            statistics.large_tick_hit += statistics.miss
        else:
            statistics.great = max(0, total_hits - statistics.ok - statistics.meh)

        statistics.miss = 0

        return self._generate_score_info(
            attributes=attributes,
            statistics=statistics,
            max_combo=attributes.max_combo,
            ruleset_id=score_info.ruleset_id,
            mods=score_info.mods or attributes.mods,
            beatmap_hash_md5=score_info.beatmap_hash_md5,
            perfect=True,
        )

    def simulate_max(self, attributes: BeatmapAttributes) -> ScoreInfo:
        return self._generate_score_info(
            attributes=attributes,
            statistics=full_credit_statistics(attributes),
            max_combo=attributes.max_combo,
            perfect=True,
        )

    def complete_replay(
        self,
        score: ReplayScore,
        attributes: BeatmapAttributes,
    ) -> ScoreInfo:
        return self._generate_score_info(
            attributes=attributes,
            statistics=get_valid_hit_statistics(score.statistics),
            max_combo=score.max_combo,
            total_score=score.total_score,
            ruleset_id=score.ruleset_id,
            mods=score.mods or attributes.mods,
            beatmap_hash_md5=score.beatmap_hash_md5,
            perfect=score.max_combo >= attributes.max_combo,
        )

    def _generate_score_info(
        self,
        attributes: BeatmapAttributes,
        statistics: HitStatistics,
        max_combo: int,
        perfect: bool,
        total_score: Optional[int] = None,
        ruleset_id: Optional[int] = None,
        mods: Optional[list[Mod]] = None,
        beatmap_hash_md5: Optional[str] = None,
    ) -> ScoreInfo:
        if ruleset_id is None:
            ruleset_id = attributes.ruleset_id or 0

        if total_score is None:
            total_score = MANIA_MAX_SCORE if ruleset_id == GameMode.MANIA else 0

        score_info = ScoreInfo(
            ruleset_id=ruleset_id,
            mods=list(attributes.mods if mods is None else mods),
            statistics=get_valid_hit_statistics(statistics),
            max_combo=max_combo,
            total_score=total_score,
            perfect=perfect,
            beatmap_id=attributes.beatmap_id,
            beatmap_hash_md5=beatmap_hash_md5 or attributes.hash,
        )
        score_info.passed = score_info.total_hits >= attributes.total_hits
        score_info.accuracy = calculate_accuracy(score_info)
        score_info.rank = calculate_rank(score_info)

        return score_info
