from __future__ import annotations

import pytest

from grading import calculate_accuracy
from hit_statistics import full_credit_statistics
from hit_statistics import generate_hit_statistics
from hit_statistics import get_catch_total_hits
from hit_statistics import get_valid_hit_statistics
from hit_statistics import normalize_accuracy
from models.beatmap import BeatmapAttributes
from models.scores import HitStatistics
from models.scores import HitStatisticsInput
from models.scores import ScoreInfo

ODD_INPUTS = [
    HitStatisticsInput(),
    HitStatisticsInput(accuracy=0.0),
    HitStatisticsInput(accuracy=-0.3),
    HitStatisticsInput(accuracy=0.87, count_miss=3),
    HitStatisticsInput(accuracy=99.5, count_miss=1),
    HitStatisticsInput(count_miss=-5),
    HitStatisticsInput(count_miss=1000),
    HitStatisticsInput(count_100=500, count_50=500),
    HitStatisticsInput(count_50=10, count_100=10, count_300=10, count_katu=10),
    HitStatisticsInput(accuracy=0.5, count_miss=20, count_katu=400),
]


def _total_hits(attributes: BeatmapAttributes) -> int:
    if attributes.ruleset_id == 2:
        return (
            attributes.max_fruits
            + attributes.max_droplets
            + attributes.max_tiny_droplets
        )

    return attributes.total_hits


@pytest.mark.parametrize("options", ODD_INPUTS)
def test_statistics_always_add_up(
    all_attributes: list[BeatmapAttributes],
    options: HitStatisticsInput,
) -> None:
    for attributes in all_attributes:
        statistics = generate_hit_statistics(attributes, options)

        assert statistics.total_for(attributes.ruleset_id) == _total_hits(attributes)
        assert all(value >= 0 for value in statistics.model_dump().values())


@pytest.mark.parametrize("ruleset", ["osu", "taiko", "catch", "mania"])
def test_percentage_accuracy_matches_fraction(
    ruleset: str,
    request: pytest.FixtureRequest,
) -> None:
    attributes = request.getfixturevalue(f"{ruleset}_attributes")

    as_fraction = generate_hit_statistics(attributes, HitStatisticsInput(accuracy=1))
    as_percentage = generate_hit_statistics(
        attributes,
        HitStatisticsInput(accuracy=100),
    )

    assert as_fraction == as_percentage


def test_normalize_accuracy() -> None:
    assert normalize_accuracy(None) == 1.0
    assert normalize_accuracy(95) == pytest.approx(0.95)
    assert normalize_accuracy(0.95) == pytest.approx(0.95)
    assert normalize_accuracy(-1) == 0.0
    assert normalize_accuracy(250) == 1.0


def test_osu_statistics_from_accuracy(osu_attributes: BeatmapAttributes) -> None:
    statistics = generate_hit_statistics(
        osu_attributes,
        HitStatisticsInput(accuracy=0.95, count_miss=0),
    )

    assert statistics.great == 92
    assert statistics.ok == 8
    assert statistics.meh == 0
    assert statistics.miss == 0

    score = ScoreInfo(ruleset_id=0, statistics=statistics)
    assert calculate_accuracy(score) == pytest.approx(0.95, abs=0.01)


def test_osu_explicit_counts_win_over_accuracy(
    osu_attributes: BeatmapAttributes,
) -> None:
    statistics = generate_hit_statistics(
        osu_attributes,
        HitStatisticsInput(accuracy=0.5, count_miss=2, count_50=3, count_100=5),
    )

    assert statistics == HitStatistics(great=90, ok=5, meh=3, miss=2)


def test_taiko_statistics(taiko_attributes: BeatmapAttributes) -> None:
    estimated = generate_hit_statistics(
        taiko_attributes,
        HitStatisticsInput(accuracy=0.95),
    )
    explicit = generate_hit_statistics(
        taiko_attributes,
        HitStatisticsInput(count_100=30, count_miss=5),
    )

    assert estimated == HitStatistics(great=180, ok=20)
    assert explicit == HitStatistics(great=165, ok=30, miss=5)


def test_taiko_estimate_accounts_for_misses() -> None:
    attributes = BeatmapAttributes(ruleset_id=1, total_hits=100, max_combo=100)
    statistics = generate_hit_statistics(
        attributes,
        HitStatisticsInput(accuracy=0.9, count_miss=5),
    )

    assert statistics == HitStatistics(great=85, ok=10, miss=5)

    score = ScoreInfo(ruleset_id=1, statistics=statistics)
    assert calculate_accuracy(score) == pytest.approx(0.9)


def test_taiko_unreachable_accuracy_is_clamped() -> None:
    attributes = BeatmapAttributes(ruleset_id=1, total_hits=100, max_combo=100)

    too_high = generate_hit_statistics(
        attributes,
        HitStatisticsInput(accuracy=1.0, count_miss=20),
    )
    too_low = generate_hit_statistics(
        attributes,
        HitStatisticsInput(accuracy=0.1, count_miss=20),
    )

    assert too_high == HitStatistics(great=80, miss=20)
    assert too_low == HitStatistics(ok=80, miss=20)


def test_catch_full_accuracy(catch_attributes: BeatmapAttributes) -> None:
    statistics = generate_hit_statistics(catch_attributes, HitStatisticsInput())

    assert statistics == HitStatistics(
        great=100,
        large_tick_hit=20,
        small_tick_hit=80,
    )


def test_catch_misses_eat_droplets_first(
    catch_attributes: BeatmapAttributes,
) -> None:
    statistics = generate_hit_statistics(
        catch_attributes,
        HitStatisticsInput(accuracy=0.9, count_miss=5),
    )

    assert statistics.great == 100
    assert statistics.large_tick_hit == 15
    assert statistics.small_tick_hit == 65
    assert statistics.small_tick_miss == 15
    assert statistics.miss == 5


def test_catch_missed_droplets_from_count_100(
    catch_attributes: BeatmapAttributes,
) -> None:
    statistics = generate_hit_statistics(
        catch_attributes,
        HitStatisticsInput(count_100=10),
    )

    assert statistics.large_tick_hit == 10
    assert statistics.miss == 10
    assert statistics.great == 100


def test_catch_tiny_droplets_estimate_is_clamped(
    catch_attributes: BeatmapAttributes,
) -> None:
    statistics = generate_hit_statistics(
        catch_attributes,
        HitStatisticsInput(accuracy=0.3),
    )

    assert statistics.small_tick_hit == 0
    assert statistics.small_tick_miss == 80


def test_mania_statistics_from_accuracy(mania_attributes: BeatmapAttributes) -> None:
    statistics = generate_hit_statistics(
        mania_attributes,
        HitStatisticsInput(accuracy=0.95),
    )

    assert statistics == HitStatistics(perfect=94, meh=6)

    score = ScoreInfo(ruleset_id=3, statistics=statistics)
    assert calculate_accuracy(score) == pytest.approx(0.95)


def test_mania_estimate_accounts_for_given_judgements(
    mania_attributes: BeatmapAttributes,
) -> None:
    statistics = generate_hit_statistics(
        mania_attributes,
        HitStatisticsInput(accuracy=0.9, count_100=3, count_katu=6),
    )

    assert statistics == HitStatistics(perfect=84, good=6, ok=3, meh=7)


def test_mania_priority_order() -> None:
    attributes = BeatmapAttributes(ruleset_id=3, total_hits=10, max_combo=10)
    statistics = generate_hit_statistics(
        attributes,
        HitStatisticsInput(
            count_miss=2,
            count_50=3,
            count_100=4,
            count_katu=5,
            count_300=1,
        ),
    )

    assert statistics == HitStatistics(miss=2, meh=3, ok=4, good=1)


def test_missing_ruleset_is_treated_as_osu() -> None:
    attributes = BeatmapAttributes(total_hits=10, max_combo=10)

    assert generate_hit_statistics(attributes) == HitStatistics(great=10)


def test_full_credit_statistics(all_attributes: list[BeatmapAttributes]) -> None:
    for attributes in all_attributes:
        statistics = full_credit_statistics(attributes)
        score = ScoreInfo(ruleset_id=attributes.ruleset_id, statistics=statistics)

        assert statistics.miss == 0
        assert calculate_accuracy(score) == 1.0


def test_valid_hit_statistics() -> None:
    original = HitStatistics(
        great=50,
        large_tick_miss=3,
        large_bonus=4,
        small_bonus=5,
        ignore_hit=6,
        ignore_miss=7,
    )

    assert get_valid_hit_statistics(original) == HitStatistics(great=50)
    assert original.large_bonus == 4
    assert get_valid_hit_statistics(None) == HitStatistics()


def test_mania_explicit_perfect_count() -> None:
    attributes = BeatmapAttributes(ruleset_id=3, total_hits=10, max_combo=10)

    only_perfect = generate_hit_statistics(
        attributes,
        HitStatisticsInput(count_geki=4, count_miss=1),
    )
    with_great = generate_hit_statistics(
        attributes,
        HitStatisticsInput(count_geki=4, count_300=3),
    )
    too_many = generate_hit_statistics(
        attributes,
        HitStatisticsInput(count_geki=50, count_50=2),
    )

    assert only_perfect == HitStatistics(perfect=4, great=5, miss=1)
    assert with_great == HitStatistics(perfect=4, great=6)
    assert too_many == HitStatistics(perfect=8, meh=2)


def test_catch_total_hits(catch_attributes: BeatmapAttributes) -> None:
    assert get_catch_total_hits(catch_attributes) == 200
    assert get_catch_total_hits(BeatmapAttributes(ruleset_id=2)) == 0
