from __future__ import annotations

import math
from typing import Callable
from typing import Optional

from constants.modes import GameMode
from constants.modes import to_game_mode
from models.beatmap import BeatmapAttributes
from models.scores import HitStatistics
from models.scores import HitStatisticsInput


def clamp(minimum, value, maximum):
    return max(minimum, min(value, maximum))


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def normalize_accuracy(accuracy: Optional[float]) -> float:
    if accuracy is None:
        return 1.0

    if accuracy > 1.0:
        accuracy /= 100.0

    return clamp(0.0, accuracy, 1.0)


def generate_osu_hit_statistics(
    attributes: BeatmapAttributes,
    accuracy: float,
    options: HitStatisticsInput,
) -> HitStatistics:
    total_hits = max(0, attributes.total_hits)

    count_miss = clamp(0, options.count_miss or 0, total_hits)

    count_50 = 0
    if options.count_50 is not None:
        count_50 = clamp(0, options.count_50, total_hits - count_miss)

    if options.count_100 is None:
        count_100 = round_half_up((total_hits - total_hits * accuracy) * 1.5)
    else:
        count_100 = options.count_100

    count_100 = clamp(0, count_100, total_hits - count_50 - count_miss)
    count_300 = total_hits - count_100 - count_50 - count_miss

    return HitStatistics(
        great=count_300,
        ok=count_100,
        meh=count_50,
        miss=count_miss,
    )


def generate_taiko_hit_statistics(
    attributes: BeatmapAttributes,
    accuracy: float,
    options: HitStatisticsInput,
) -> HitStatistics:
    total_hits = max(0, attributes.total_hits)

    count_miss = clamp(0, options.count_miss or 0, total_hits)
    budget = total_hits - count_miss

    if options.count_100 is None:
        # every hit is worth two halves, a great scores both and an ok one
        target = round_half_up(accuracy * total_hits * 2)
        count_300 = clamp(0, target - budget, budget)
        count_100 = budget - count_300
    else:
        count_100 = clamp(0, options.count_100, budget)
        count_300 = budget - count_100

    return HitStatistics(
        great=count_300,
        ok=count_100,
        miss=count_miss,
    )


def get_catch_total_hits(attributes: BeatmapAttributes) -> int:
    return (
        max(0, attributes.max_fruits)
        + max(0, attributes.max_droplets)
        + max(0, attributes.max_tiny_droplets)
    )


def generate_catch_hit_statistics(
    attributes: BeatmapAttributes,
    accuracy: float,
    options: HitStatisticsInput,
) -> HitStatistics:
    max_fruits = max(0, attributes.max_fruits)
    max_droplets = max(0, attributes.max_droplets)
    max_tiny_droplets = max(0, attributes.max_tiny_droplets)

    count_miss = options.count_miss or 0

    # droplets that were not caught are misses as well
    if options.count_100 is not None:
        count_miss += max_droplets - options.count_100

    count_miss = clamp(0, count_miss, max_droplets + max_fruits)

    if options.count_100 is None:
        droplets = max(0, max_droplets - count_miss)
    else:
        droplets = options.count_100

    droplets = clamp(0, droplets, max_droplets)
    count_miss = min(count_miss, max_fruits + max_droplets - droplets)

    fruits = max_fruits - (count_miss - (max_droplets - droplets))

    # order matters here: the estimate is corrected before it is clamped
    if options.count_50 is None:
        tiny_droplets = round_half_up(
            accuracy * (attributes.max_combo + max_tiny_droplets)
        )
        tiny_droplets = tiny_droplets - fruits - droplets
    else:
        tiny_droplets = options.count_50

    tiny_droplets = clamp(0, tiny_droplets, max_tiny_droplets)
    tiny_misses = max_tiny_droplets - tiny_droplets

    return HitStatistics(
        great=clamp(0, fruits, max_fruits),
        large_tick_hit=droplets,
        small_tick_hit=tiny_droplets,
        small_tick_miss=tiny_misses,
        miss=count_miss,
    )


def generate_mania_hit_statistics(
    attributes: BeatmapAttributes,
    accuracy: float,
    options: HitStatisticsInput,
) -> HitStatistics:
    total_hits = max(0, attributes.total_hits)

    count_miss = clamp(0, options.count_miss or 0, total_hits)
    remaining = total_hits - count_miss

    if options.count_50 is None:
        count_50 = round_half_up(
            1.2 * (total_hits - total_hits * accuracy)
            - 0.8 * (options.count_100 or 0)
            - 0.4 * (options.count_katu or 0)
            - 1.2 * count_miss
        )
    else:
        count_50 = options.count_50

    count_50 = clamp(0, count_50, remaining)
    remaining -= count_50

    count_100 = clamp(0, options.count_100 or 0, remaining)
    remaining -= count_100

    count_katu = clamp(0, options.count_katu or 0, remaining)
    remaining -= count_katu

    count_300 = clamp(0, options.count_300 or 0, remaining)
    remaining -= count_300

    # with an explicit perfect count, great takes whatever is left over
    if options.count_geki is None:
        count_geki = remaining
    else:
        count_geki = clamp(0, options.count_geki, remaining)
        count_300 += remaining - count_geki

    return HitStatistics(
        perfect=count_geki,
        great=count_300,
        good=count_katu,
        ok=count_100,
        meh=count_50,
        miss=count_miss,
    )


HitStatisticsGenerator = Callable[
    [BeatmapAttributes, float, HitStatisticsInput],
    HitStatistics,
]

HIT_STATISTICS_GENERATORS: dict[GameMode, HitStatisticsGenerator] = {
    GameMode.OSU: generate_osu_hit_statistics,
    GameMode.TAIKO: generate_taiko_hit_statistics,
    GameMode.FRUITS: generate_catch_hit_statistics,
    GameMode.MANIA: generate_mania_hit_statistics,
}


def generate_hit_statistics(
    attributes: BeatmapAttributes,
    options: Optional[HitStatisticsInput] = None,
) -> HitStatistics:
    if options is None:
        options = HitStatisticsInput()

    ruleset_id = attributes.ruleset_id if attributes.ruleset_id is not None else 0
    generator = HIT_STATISTICS_GENERATORS[to_game_mode(ruleset_id)]

    return generator(attributes, normalize_accuracy(options.accuracy), options)


def full_credit_statistics(attributes: BeatmapAttributes) -> HitStatistics:
    options = HitStatisticsInput(accuracy=1.0)

    if attributes.ruleset_id == GameMode.FRUITS:
        options.count_50 = attributes.max_tiny_droplets

    return generate_hit_statistics(attributes, options)


def get_valid_hit_statistics(
    original: Optional[HitStatistics] = None,
) -> HitStatistics:
    if original is None:
        return HitStatistics()

    return original.model_copy(
        update={
            "large_tick_miss": 0,
            "large_bonus": 0,
            "small_bonus": 0,
            "ignore_hit": 0,
            "ignore_miss": 0,
        },
    )
