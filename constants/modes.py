from __future__ import annotations

from enum import IntEnum

from errors import UnknownModeName
from errors import UnknownRuleset


class GameMode(IntEnum):
    OSU = 0
    TAIKO = 1
    FRUITS = 2
    MANIA = 3


RULESET_NAMES: dict[str, GameMode] = {
    "standard": GameMode.OSU,
    "std": GameMode.OSU,
    "osu": GameMode.OSU,
    "taiko": GameMode.TAIKO,
    "ctb": GameMode.FRUITS,
    "catch": GameMode.FRUITS,
    "fruits": GameMode.FRUITS,
    "mania": GameMode.MANIA,
}


def get_ruleset_id_by_name(ruleset_name: str) -> GameMode:
    mode = RULESET_NAMES.get(ruleset_name.lower())
    if mode is None:
        raise UnknownModeName(f"Unknown ruleset name: {ruleset_name!r}")

    return mode


def to_game_mode(ruleset_id: int) -> GameMode:
    try:
        return GameMode(ruleset_id)
    except ValueError:
        raise UnknownRuleset(f"Invalid mode int: {ruleset_id}") from None
