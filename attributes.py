from __future__ import annotations

from typing import Optional

from constants.modes import GameMode
from constants.modes import to_game_mode
from constants.mods import Mods
from models.beatmap import Beatmap
from models.beatmap import BeatmapAttributes
from models.beatmap import BeatmapInfo
from models.beatmap import HitType
from models.beatmap import NestedKind
from models.mod import Mod
from models.mod import to_mods

# mods that change the difficulty calculation of each ruleset
DIFFICULTY_MODS: dict[GameMode, Mods] = {
    GameMode.OSU: (
        Mods.TOUCHSCREEN
        | Mods.DOUBLETIME
        | Mods.HALFTIME
        | Mods.EASY
        | Mods.HARDROCK
        | Mods.FLASHLIGHT
    ),
    GameMode.TAIKO: Mods.DOUBLETIME | Mods.HALFTIME | Mods.EASY | Mods.HARDROCK,
    GameMode.FRUITS: Mods.DOUBLETIME | Mods.HALFTIME | Mods.EASY | Mods.HARDROCK,
    GameMode.MANIA: (
        Mods.DOUBLETIME
        | Mods.HALFTIME
        | Mods.EASY
        | Mods.HARDROCK
        | Mods.KEY_MODS
    ),
}


def count_objects(beatmap: Beatmap, hit_type: HitType) -> int:
    return sum(1 for obj in beatmap.hit_objects if obj.hit_type & hit_type)


def count_nested(beatmap: Beatmap, *kinds: NestedKind) -> int:
    return sum(
        1
        for obj in beatmap.hit_objects
        for nested in obj.nested_hit_objects
        if nested.kind in kinds
    )


def count_fruits(beatmap: Beatmap) -> int:
    return count_nested(beatmap, NestedKind.FRUIT)


def count_droplets(beatmap: Beatmap) -> int:
    # a tiny droplet is still a droplet
    return count_nested(beatmap, NestedKind.DROPLET, NestedKind.TINY_DROPLET)


def count_tiny_droplets(beatmap: Beatmap) -> int:
    return count_nested(beatmap, NestedKind.TINY_DROPLET)


def lacks_juice_counts(beatmap: Beatmap) -> bool:
    """Whether any slider came without the fruits and droplets it spawns."""
    return any(
        obj.hit_type & HitType.SLIDER and not obj.nested_hit_objects
        for obj in beatmap.hit_objects
    )


def get_total_hits(beatmap: Beatmap) -> int:
    circles = count_objects(beatmap, HitType.NORMAL)

    if beatmap.mode == GameMode.OSU:
        sliders = count_objects(beatmap, HitType.SLIDER)
        spinners = count_objects(beatmap, HitType.SPINNER)

        return circles + sliders + spinners

    if beatmap.mode == GameMode.TAIKO:
        return circles

    if beatmap.mode == GameMode.FRUITS:
        tiny_droplets = count_tiny_droplets(beatmap)
        droplets = count_droplets(beatmap) - tiny_droplets
        fruits = count_fruits(beatmap) + circles

        return fruits + droplets + tiny_droplets

    if beatmap.mode == GameMode.MANIA:
        holds = count_objects(beatmap, HitType.HOLD)

        return circles + holds

    return (
        circles
        + count_objects(beatmap, HitType.SLIDER)
        + count_objects(beatmap, HitType.SPINNER)
        + count_objects(beatmap, HitType.HOLD)
    )


def get_max_combo(beatmap: Beatmap) -> int:
    return beatmap.max_combo


def get_mods(beatmap: Beatmap) -> list[Mod]:
    return list(beatmap.mods)


def get_clock_rate(mods: Mods) -> float:
    if mods & (Mods.DOUBLETIME | Mods.NIGHTCORE):
        return 1.5

    if mods & Mods.HALFTIME:
        return 0.75

    return 1.0


def get_difficulty_mods(ruleset_id: int, mods: Mods) -> Mods:
    if mods & Mods.NIGHTCORE:
        mods |= Mods.DOUBLETIME

    return mods & DIFFICULTY_MODS[to_game_mode(ruleset_id)]


def get_length(beatmap: Beatmap) -> float:
    """Milliseconds from the first object to the end of the last one."""
    if not beatmap.hit_objects:
        return 0.0

    start = min(obj.start_time for obj in beatmap.hit_objects)
    end = max(
        obj.start_time if obj.end_time is None else obj.end_time
        for obj in beatmap.hit_objects
    )

    return end - start


def create_beatmap_attributes(
    beatmap: Beatmap,
    hash: Optional[str] = None,
) -> BeatmapAttributes:
    mods = get_mods(beatmap)

    fruits = droplets = tiny_droplets = 0
    if beatmap.mode == GameMode.FRUITS:
        tiny_droplets = count_tiny_droplets(beatmap)
        droplets = count_droplets(beatmap) - tiny_droplets
        fruits = count_fruits(beatmap) + count_objects(beatmap, HitType.NORMAL)

    return BeatmapAttributes(
        beatmap_id=beatmap.beatmap_id,
        hash=hash,
        ruleset_id=beatmap.mode,
        mods=mods,
        clock_rate=get_clock_rate(to_mods(mods)),
        total_hits=get_total_hits(beatmap),
        max_combo=get_max_combo(beatmap),
        max_fruits=fruits,
        max_droplets=droplets,
        max_tiny_droplets=tiny_droplets,
    )


def create_beatmap_info(beatmap: Beatmap) -> BeatmapInfo:
    mods = get_mods(beatmap)
    clock_rate = get_clock_rate(to_mods(mods))

    return BeatmapInfo(
        id=beatmap.beatmap_id,
        beatmapset_id=beatmap.beatmapset_id,
        creator=beatmap.creator,
        title=beatmap.title,
        artist=beatmap.artist,
        version=beatmap.version,
        hittable=count_objects(beatmap, HitType.NORMAL),
        slidable=count_objects(beatmap, HitType.SLIDER),
        spinnable=count_objects(beatmap, HitType.SPINNER),
        holdable=count_objects(beatmap, HitType.HOLD),
        length=get_length(beatmap) / clock_rate / 1000,
        bpm_min=beatmap.bpm_min * clock_rate,
        bpm_max=beatmap.bpm_max * clock_rate,
        bpm_mode=beatmap.bpm_mode * clock_rate,
        circle_size=beatmap.circle_size,
        approach_rate=beatmap.approach_rate,
        overall_difficulty=beatmap.overall_difficulty,
        drain_rate=beatmap.drain_rate,
        ruleset_id=beatmap.mode,
        mods=mods,
        max_combo=get_max_combo(beatmap),
        is_convert=(
            beatmap.original_mode is not None
            and beatmap.original_mode != beatmap.mode
        ),
    )
