from __future__ import annotations

import logging
from collections import defaultdict
from typing import Optional

from slider import Beatmap as SliderBeatmap

from errors import InvalidInput
from models.beatmap import Beatmap
from models.beatmap import HitObject
from models.beatmap import HitType

logger = logging.getLogger(__name__)

# checked in this order when several type bits are set
HIT_OBJECT_KINDS = (HitType.NORMAL, HitType.SLIDER, HitType.SPINNER, HitType.HOLD)


def to_hit_type(type_code: int) -> int:
    for hit_type in HIT_OBJECT_KINDS:
        if type_code & hit_type:
            return hit_type

    return 0


def read_hit_objects(text: str) -> tuple[str, list[list[str]]]:
    """Splits every [HitObjects] line into its fields.

    Hold notes come back as circles in the returned text since slider cannot
    read their v14 end time.
    """
    lines = []
    rows = []
    sections = set()
    section = None

    for line in text.splitlines():
        stripped = line.strip()

        if stripped.startswith("[") and stripped.endswith("]"):
            section = stripped[1:-1]
            sections.add(section)
        elif section == "HitObjects" and stripped and not stripped.startswith("//"):
            fields = stripped.split(",")
            if len(fields) < 5:
                raise ValueError(f"not enough elements in hit object {stripped!r}")

            type_code = int(fields[3])
            if to_hit_type(type_code) == HitType.HOLD:
                if len(fields) < 6:
                    raise ValueError(f"hold note without end time: {stripped!r}")

                circle = int(HitType.NORMAL) | (type_code & int(HitType.NEW_COMBO))
                line = ",".join(fields[:3] + [str(circle), fields[4]])

            rows.append(fields)

        lines.append(line)

    if "HitObjects" not in sections:
        raise ValueError("missing [HitObjects] section")

    return "\n".join(lines), rows


def get_bpm_mode(parsed: SliderBeatmap, last_time: float) -> float:
    """The BPM the beatmap spends the most time in."""
    timing_points = [tp for tp in parsed.timing_points if tp.bpm]
    if not timing_points:
        return 0.0

    durations: dict[float, float] = defaultdict(float)
    for i, timing_point in enumerate(timing_points):
        start = timing_point.offset.total_seconds() * 1000

        if i + 1 < len(timing_points):
            end = timing_points[i + 1].offset.total_seconds() * 1000
        else:
            end = max(start, last_time)

        durations[timing_point.bpm] += end - start

    return max(durations, key=lambda bpm: durations[bpm])


class SliderBeatmapDecoder:
    """Decodes .osu files with slider.

    slider knows nothing about osu!catch juice streams, so fruit and droplet
    counts of catch beatmaps have to come from precalculated attributes.
    """

    def decode(self, data: bytes) -> Beatmap:
        try:
            text, rows = read_hit_objects(data.decode("utf-8-sig"))
            parsed = SliderBeatmap.parse(text)
            hit_objects = self._convert_hit_objects(parsed, rows)
        except (IndexError, KeyError, ValueError) as exc:
            raise InvalidInput(f"Beatmap could not be decoded: {exc!r}") from exc

        last_time = max(
            (
                obj.start_time if obj.end_time is None else obj.end_time
                for obj in hit_objects
            ),
            default=0.0,
        )
        bpm_min = bpm_max = 0.0
        if any(tp.bpm for tp in parsed.timing_points):
            bpm_min = parsed.bpm_min()
            bpm_max = parsed.bpm_max()

        logger.debug(
            "Decoded %r with %d hit objects",
            parsed.display_name,
            len(hit_objects),
        )

        return Beatmap(
            mode=int(parsed.mode),
            original_mode=int(parsed.mode),
            beatmap_id=parsed.beatmap_id or 0,
            beatmapset_id=parsed.beatmap_set_id or 0,
            hit_objects=hit_objects,
            max_combo=parsed.max_combo,
            title=parsed.title,
            artist=parsed.artist,
            creator=parsed.creator,
            version=parsed.version,
            circle_size=parsed.circle_size,
            approach_rate=parsed.approach_rate,
            overall_difficulty=parsed.overall_difficulty,
            drain_rate=parsed.hp_drain_rate,
            bpm_min=bpm_min,
            bpm_max=bpm_max,
            bpm_mode=get_bpm_mode(parsed, last_time),
        )

    def _convert_hit_objects(
        self,
        parsed: SliderBeatmap,
        rows: list[list[str]],
    ) -> list[HitObject]:
        parsed_objects = parsed.hit_objects(stacking=False)
        if len(parsed_objects) != len(rows):
            raise ValueError(
                f"read {len(rows)} hit objects, slider parsed {len(parsed_objects)}",
            )

        hit_objects = []
        for fields, parsed_object in zip(rows, parsed_objects):
            hit_type = to_hit_type(int(fields[3]))

            end_time: Optional[float] = None
            if hit_type == HitType.HOLD:
                end_time = float(fields[5].split(":")[0])
            elif hit_type in (HitType.SLIDER, HitType.SPINNER):
                end_time = parsed_object.end_time.total_seconds() * 1000

            hit_objects.append(
                HitObject(
                    hit_type=hit_type,
                    start_time=float(fields[2]),
                    end_time=end_time,
                ),
            )

        return hit_objects
