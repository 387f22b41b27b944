from __future__ import annotations

import pytest

from attributes import create_beatmap_attributes
from attributes import create_beatmap_info
from attributes import get_clock_rate
from attributes import get_difficulty_mods
from attributes import get_length
from attributes import get_total_hits
from attributes import lacks_juice_counts
from constants.mods import Mods
from errors import UnknownRuleset
from models.beatmap import Beatmap
from models.beatmap import HitObject
from models.beatmap import HitType
from models.beatmap import NestedHitObject
from models.beatmap import NestedKind
from models.mod import Mod


def make_hit_objects(*hit_types: int) -> list[HitObject]:
    return [HitObject(hit_type=hit_type) for hit_type in hit_types]


def nested(kind: NestedKind, count: int) -> list[NestedHitObject]:
    return [NestedHitObject(kind=kind) for _ in range(count)]


@pytest.fixture
def standard_objects() -> list[HitObject]:
    return make_hit_objects(
        HitType.NORMAL | HitType.NEW_COMBO,
        HitType.NORMAL,
        HitType.NORMAL,
        HitType.SLIDER | HitType.NEW_COMBO,
        HitType.SLIDER,
        HitType.SPINNER,
    )


def test_osu_total_hits(standard_objects: list[HitObject]) -> None:
    beatmap = Beatmap(mode=0, hit_objects=standard_objects, max_combo=10)

    assert get_total_hits(beatmap) == 6


def test_taiko_counts_only_hits(standard_objects: list[HitObject]) -> None:
    beatmap = Beatmap(mode=1, hit_objects=standard_objects)

    assert get_total_hits(beatmap) == 3


def test_mania_total_hits() -> None:
    beatmap = Beatmap(
        mode=3,
        hit_objects=make_hit_objects(*[HitType.NORMAL] * 4, HitType.HOLD, HitType.HOLD),
    )

    assert get_total_hits(beatmap) == 6


def test_catch_attributes() -> None:
    juice_stream = HitObject(
        hit_type=HitType.SLIDER,
        nested_hit_objects=(
            nested(NestedKind.FRUIT, 2)
            + nested(NestedKind.DROPLET, 3)
            + nested(NestedKind.TINY_DROPLET, 4)
        ),
    )
    banana_shower = HitObject(
        hit_type=HitType.SPINNER,
        nested_hit_objects=nested(NestedKind.BANANA, 5),
    )
    beatmap = Beatmap(
        mode=2,
        beatmap_id=75,
        hit_objects=make_hit_objects(HitType.NORMAL, HitType.NORMAL)
        + [juice_stream, banana_shower],
        max_combo=9,
    )

    attributes = create_beatmap_attributes(beatmap, "abc")

    assert attributes.max_fruits == 4
    assert attributes.max_droplets == 3
    assert attributes.max_tiny_droplets == 4
    assert attributes.total_hits == 11
    assert attributes.max_combo == 9
    assert attributes.ruleset_id == 2
    assert attributes.beatmap_id == 75
    assert attributes.hash == "abc"


def test_create_beatmap_attributes(standard_objects: list[HitObject]) -> None:
    beatmap = Beatmap(
        mode=0,
        beatmap_id=129891,
        hit_objects=standard_objects,
        max_combo=14,
        mods=[Mod(acronym="HD"), Mod(acronym="DT")],
    )

    attributes = create_beatmap_attributes(beatmap)

    assert attributes.total_hits == 6
    assert attributes.max_combo == 14
    assert attributes.clock_rate == 1.5
    assert attributes.mods == [Mod(acronym="HD"), Mod(acronym="DT")]
    assert attributes.hash is None
    assert attributes.max_fruits == 0


@pytest.mark.parametrize(
    ("mods", "expected"),
    [
        (Mods.NOMOD, 1.0),
        (Mods.DOUBLETIME, 1.5),
        (Mods.NIGHTCORE | Mods.DOUBLETIME, 1.5),
        (Mods.HALFTIME | Mods.HIDDEN, 0.75),
        (Mods.HARDROCK, 1.0),
    ],
)
def test_clock_rate(mods: Mods, expected: float) -> None:
    assert get_clock_rate(mods) == expected


@pytest.mark.parametrize(
    ("ruleset_id", "mods", "expected"),
    [
        (0, Mods.HIDDEN | Mods.NIGHTCORE, Mods.DOUBLETIME),
        (0, Mods.NIGHTCORE | Mods.DOUBLETIME, Mods.DOUBLETIME),
        (0, Mods.TOUCHSCREEN | Mods.NOFAIL, Mods.TOUCHSCREEN),
        (1, Mods.HARDROCK | Mods.FLASHLIGHT, Mods.HARDROCK),
        (2, Mods.EASY | Mods.HALFTIME | Mods.HIDDEN, Mods.EASY | Mods.HALFTIME),
        (3, Mods.KEY7 | Mods.HIDDEN | Mods.FADEIN, Mods.KEY7),
        (3, Mods.NOMOD, Mods.NOMOD),
    ],
)
def test_difficulty_mods(ruleset_id: int, mods: Mods, expected: Mods) -> None:
    assert get_difficulty_mods(ruleset_id, mods) == expected


def test_difficulty_mods_unknown_ruleset() -> None:
    with pytest.raises(UnknownRuleset):
        get_difficulty_mods(7, Mods.DOUBLETIME)


def test_juice_counts_of_sliders() -> None:
    decoded = Beatmap(mode=2, hit_objects=make_hit_objects(HitType.NORMAL, HitType.SLIDER))
    circles_only = Beatmap(mode=2, hit_objects=make_hit_objects(HitType.NORMAL))
    with_juice = Beatmap(
        mode=2,
        hit_objects=[
            HitObject(
                hit_type=HitType.SLIDER,
                nested_hit_objects=nested(NestedKind.FRUIT, 2),
            ),
        ],
    )

    assert lacks_juice_counts(decoded)
    assert not lacks_juice_counts(circles_only)
    assert not lacks_juice_counts(with_juice)


def test_length() -> None:
    beatmap = Beatmap(
        mode=3,
        hit_objects=[
            HitObject(hit_type=HitType.NORMAL, start_time=500),
            HitObject(hit_type=HitType.HOLD, start_time=1000, end_time=9000),
            HitObject(hit_type=HitType.NORMAL, start_time=2000),
        ],
    )

    assert get_length(beatmap) == 8500
    assert get_length(Beatmap(mode=0)) == 0


def test_create_beatmap_info() -> None:
    beatmap = Beatmap(
        mode=3,
        original_mode=3,
        beatmap_id=42,
        hit_objects=[
            HitObject(hit_type=HitType.NORMAL, start_time=0),
            HitObject(hit_type=HitType.HOLD, start_time=1000, end_time=3000),
            HitObject(hit_type=HitType.HOLD, start_time=1000, end_time=1500),
        ],
        max_combo=3,
        mods=[Mod(acronym="HT")],
        bpm_min=200,
        bpm_max=200,
        bpm_mode=200,
        circle_size=7,
    )

    info = create_beatmap_info(beatmap)

    assert info.id == 42
    assert info.hittable == 1
    assert info.holdable == 2
    assert info.length == pytest.approx(4.0)
    assert info.bpm_mode == pytest.approx(150)
    assert info.circle_size == 7
    assert info.ruleset_id == 3
    assert info.mods == [Mod(acronym="HT")]
    assert not info.is_convert
