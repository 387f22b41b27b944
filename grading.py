from __future__ import annotations

from constants.modes import GameMode
from constants.modes import to_game_mode
from models.mod import has_mod
from models.scores import ScoreInfo
from models.scores import ScoreRank

# how much of a full hit every judgement is worth
ACCURACY_WEIGHTS: dict[GameMode, dict[str, float]] = {
    GameMode.OSU: {"great": 1.0, "ok": 1 / 3, "meh": 1 / 6},
    GameMode.TAIKO: {"great": 1.0, "ok": 1 / 2},
    GameMode.FRUITS: {"great": 1.0, "large_tick_hit": 1.0, "small_tick_hit": 1.0},
    GameMode.MANIA: {
        "perfect": 1.0,
        "great": 1.0,
        "good": 1 / 1.5,
        "ok": 1 / 3,
        "meh": 1 / 6,
    },
}

# minimum accuracy for S, A, B and C
ACCURACY_RANK_THRESHOLDS: dict[GameMode, tuple[float, float, float, float]] = {
    GameMode.FRUITS: (0.98, 0.94, 0.90, 0.85),
    GameMode.MANIA: (0.95, 0.90, 0.80, 0.70),
}


def calculate_total_hits(score_info: ScoreInfo) -> int:
    return score_info.total_hits


def calculate_accuracy(score_info: ScoreInfo) -> float:
    total_hits = calculate_total_hits(score_info)
    if total_hits <= 0:
        return 1.0

    weights = ACCURACY_WEIGHTS[to_game_mode(score_info.ruleset_id)]
    weighted = sum(
        getattr(score_info.statistics, kind) * weight
        for kind, weight in weights.items()
    )

    return max(0.0, weighted / total_hits)


def use_silver_grades(score_info: ScoreInfo) -> bool:
    return has_mod(score_info.mods, "HD") or has_mod(score_info.mods, "FL")


def calculate_rank(score_info: ScoreInfo) -> ScoreRank:
    if not score_info.passed:
        return ScoreRank.F

    mode = to_game_mode(score_info.ruleset_id)
    if mode in (GameMode.OSU, GameMode.TAIKO):
        return calculate_ratio_rank(score_info)

    return calculate_accuracy_rank(score_info, ACCURACY_RANK_THRESHOLDS[mode])


def calculate_ratio_rank(score_info: ScoreInfo) -> ScoreRank:
    """osu! and osu!taiko grade on the share of 300s instead of accuracy."""
    silver = use_silver_grades(score_info)
    total_hits = calculate_total_hits(score_info)
    statistics = score_info.statistics

    if total_hits <= 0:
        return ScoreRank.XH if silver else ScoreRank.X

    ratio_300 = statistics.great / total_hits
    ratio_50 = statistics.meh / total_hits
    no_misses = statistics.miss == 0

    if ratio_300 == 1:
        return ScoreRank.XH if silver else ScoreRank.X

    if ratio_300 > 0.9 and ratio_50 <= 0.01 and no_misses:
        return ScoreRank.SH if silver else ScoreRank.S

    if (ratio_300 > 0.8 and no_misses) or ratio_300 > 0.9:
        return ScoreRank.A

    if (ratio_300 > 0.7 and no_misses) or ratio_300 > 0.8:
        return ScoreRank.B

    return ScoreRank.C if ratio_300 > 0.6 else ScoreRank.D


def calculate_accuracy_rank(
    score_info: ScoreInfo,
    thresholds: tuple[float, float, float, float],
) -> ScoreRank:
    silver = use_silver_grades(score_info)
    accuracy = score_info.accuracy
    s_threshold, a_threshold, b_threshold, c_threshold = thresholds

    if accuracy == 1:
        return ScoreRank.XH if silver else ScoreRank.X

    if accuracy > s_threshold:
        return ScoreRank.SH if silver else ScoreRank.S

    if accuracy > a_threshold:
        return ScoreRank.A

    if accuracy > b_threshold:
        return ScoreRank.B

    if accuracy > c_threshold:
        return ScoreRank.C

    return ScoreRank.D
