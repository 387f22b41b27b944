from __future__ import annotations

from enum import Enum
from enum import IntFlag
from typing import Optional

from pydantic import BaseModel
from pydantic import ConfigDict

from models.mod import Mod


class HitType(IntFlag):
    NORMAL = 1 << 0
    SLIDER = 1 << 1
    NEW_COMBO = 1 << 2
    SPINNER = 1 << 3
    HOLD = 1 << 7


class NestedKind(str, Enum):
    FRUIT = "fruit"
    DROPLET = "droplet"
    TINY_DROPLET = "tiny_droplet"
    BANANA = "banana"


class NestedHitObject(BaseModel):
    kind: NestedKind
    start_time: float = 0.0


class HitObject(BaseModel):
    hit_type: int
    start_time: float = 0.0
    # sliders, spinners and hold notes only
    end_time: Optional[float] = None
    nested_hit_objects: list[NestedHitObject] = []


class Beatmap(BaseModel):
    """A decoded beatmap, reduced to what attribute extraction reads."""

    mode: int
    original_mode: Optional[int] = None
    beatmap_id: int = 0
    beatmapset_id: int = 0
    hit_objects: list[HitObject] = []
    max_combo: int = 0
    mods: list[Mod] = []

    title: str = ""
    artist: str = ""
    creator: str = ""
    version: str = ""

    circle_size: float = 5.0
    approach_rate: float = 5.0
    overall_difficulty: float = 5.0
    drain_rate: float = 5.0

    bpm_min: float = 0.0
    bpm_max: float = 0.0
    bpm_mode: float = 0.0


class BeatmapAttributes(BaseModel):
    model_config = ConfigDict(frozen=True)

    beatmap_id: int = 0
    hash: Optional[str] = None
    ruleset_id: Optional[int] = None
    mods: list[Mod] = []
    clock_rate: float = 1.0

    total_hits: int = 0
    max_combo: int = 0

    # osu!catch only
    max_fruits: int = 0
    max_droplets: int = 0
    max_tiny_droplets: int = 0


class BeatmapInfo(BaseModel):
    """Display information of a beatmap as it is played with its mods."""

    id: int = 0
    beatmapset_id: int = 0
    creator: str = ""
    title: str = ""
    artist: str = ""
    version: str = ""

    hittable: int = 0
    slidable: int = 0
    spinnable: int = 0
    holdable: int = 0

    # seconds
    length: float = 0.0
    bpm_min: float = 0.0
    bpm_max: float = 0.0
    bpm_mode: float = 0.0

    circle_size: float = 5.0
    approach_rate: float = 5.0
    overall_difficulty: float = 5.0
    drain_rate: float = 5.0

    ruleset_id: int = 0
    mods: list[Mod] = []
    max_combo: int = 0
    is_convert: bool = False
