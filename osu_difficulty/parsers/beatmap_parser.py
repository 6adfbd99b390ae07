"""Top-level loader: parse a ``.osu`` file into a Beatmap."""

import logging
import math
from pathlib import Path

from osu_difficulty.errors import BeatmapLoadError
from osu_difficulty.parsers.osu_reader import read_osu_file
from osu_difficulty.schemas.beatmap import (
    TYPE_CIRCLE,
    TYPE_HOLD,
    TYPE_SLIDER,
    TYPE_SPINNER,
    Beatmap,
    BeatmapDifficulty,
    BeatmapMetadata,
    HitObject,
    TimingPoint,
)

logger = logging.getLogger(__name__)


# Difficulty settings the editor limits to 0-10
_RANGED_ATTRIBUTES = ("HPDrainRate", "CircleSize", "OverallDifficulty", "ApproachRate")


def _finite(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"not a finite number: {text!r}")
    return value


def _as_float(section: dict, key: str, default: float) -> float:
    value = section.get(key, "")
    if value == "":
        return default
    try:
        number = _finite(value)
    except ValueError as e:
        raise BeatmapLoadError(f"Invalid value for {key}: {value!r}") from e
    if key in _RANGED_ATTRIBUTES and not 0 <= number <= 10:
        raise BeatmapLoadError(f"{key} must be between 0 and 10, got {value!r}")
    return number


def _as_int(section: dict, key: str, default: int) -> int:
    return int(_as_float(section, key, default))


def parse_timing_points(lines: list[str]) -> list[TimingPoint]:
    points = []
    for line in lines:
        parts = line.split(",")
        try:
            time = _finite(parts[0])
            beat_length = _finite(parts[1])
            uninherited = parts[6] != "0" if len(parts) > 6 else True
        except (ValueError, IndexError) as e:
            raise BeatmapLoadError(f"Malformed timing point: {line!r}") from e
        points.append(TimingPoint(time, beat_length, uninherited))
    points.sort(key=lambda p: p.time)
    return points


def _timing_at(points: list[TimingPoint], time: float) -> tuple[float, float]:
    """Return (beat_length, slider_velocity) active at *time*."""
    red = next((p for p in points if p.uninherited), None)
    if red is None:
        raise BeatmapLoadError("Beatmap has no uninherited timing points")
    latest = points[0]
    for p in points:
        if p.time > time:
            break
        latest = p
        if p.uninherited:
            red = p
    return red.beat_length, latest.slider_velocity


def _parse_slider(
    obj: HitObject, params: list[str], difficulty: BeatmapDifficulty, points: list[TimingPoint]
) -> None:
    obj.slides = max(1, int(params[6]))
    obj.length = _finite(params[7]) if len(params) > 7 else 0.0

    beat_length, velocity = _timing_at(points, obj.time)
    pixels_per_beat = difficulty.slider_multiplier * 100 * velocity
    span_duration = obj.length / pixels_per_beat * beat_length if pixels_per_beat > 0 else 0.0
    obj.end_time = obj.time + span_duration * obj.slides

    tick_distance = pixels_per_beat / difficulty.slider_tick_rate if difficulty.slider_tick_rate > 0 else 0.0
    if tick_distance > 0:
        ticks_per_span = max(0, math.ceil(obj.length / tick_distance - 0.01) - 1)
        obj.ticks = ticks_per_span * obj.slides


def parse_hit_objects(
    lines: list[str], difficulty: BeatmapDifficulty, points: list[TimingPoint]
) -> list[HitObject]:
    objects = []
    for line in lines:
        params = line.split(",")
        try:
            x, y, time = _finite(params[0]), _finite(params[1]), _finite(params[2])
            type_bits = int(params[3])
            hitsound = int(params[4]) if len(params) > 4 and params[4] else 0
            obj = HitObject(
                x=x, y=y, time=time, kind="circle", end_time=time,
                hitsound=hitsound,
            )
            if type_bits & TYPE_SLIDER:
                if not points:
                    raise BeatmapLoadError("Slider found but beatmap has no timing points")
                obj.kind = "slider"
                _parse_slider(obj, params, difficulty, points)
            elif type_bits & TYPE_SPINNER:
                obj.kind = "spinner"
                obj.end_time = _finite(params[5])
            elif type_bits & TYPE_HOLD:
                obj.kind = "hold"
                obj.end_time = _finite(params[5].split(":")[0])
            elif not type_bits & TYPE_CIRCLE:
                raise BeatmapLoadError(f"Unknown hit object type {type_bits}")
        except (ValueError, IndexError) as e:
            raise BeatmapLoadError(f"Malformed hit object: {line!r}") from e
        objects.append(obj)
    objects.sort(key=lambda o: o.time)
    return objects


def parse_beatmap(version: int, sections: dict, path: str = "") -> Beatmap:
    """Build a Beatmap from sections produced by ``split_sections``."""
    general = sections.get("General", {})
    meta = sections.get("Metadata", {})
    diff = sections.get("Difficulty", {})

    overall_difficulty = _as_float(diff, "OverallDifficulty", 5.0)
    difficulty = BeatmapDifficulty(
        hp_drain_rate=_as_float(diff, "HPDrainRate", 5.0),
        circle_size=_as_float(diff, "CircleSize", 5.0),
        overall_difficulty=overall_difficulty,
        # Old beatmaps tie AR to OD
        approach_rate=_as_float(diff, "ApproachRate", overall_difficulty),
        slider_multiplier=_as_float(diff, "SliderMultiplier", 1.4),
        slider_tick_rate=_as_float(diff, "SliderTickRate", 1.0),
    )
    metadata = BeatmapMetadata(
        title=meta.get("Title", ""),
        artist=meta.get("Artist", ""),
        creator=meta.get("Creator", ""),
        version=meta.get("Version", ""),
        beatmap_id=_as_int(meta, "BeatmapID", 0),
    )

    timing_points = parse_timing_points(sections.get("TimingPoints", []))
    hit_objects = parse_hit_objects(sections.get("HitObjects", []), difficulty, timing_points)

    return Beatmap(
        format_version=version,
        mode=_as_int(general, "Mode", 0),
        metadata=metadata,
        difficulty=difficulty,
        timing_points=timing_points,
        hit_objects=hit_objects,
        path=path,
    )


def load_beatmap(path: Path) -> Beatmap:
    """Load and parse one ``.osu`` file."""
    path = Path(path)
    if not path.is_file():
        raise BeatmapLoadError(f"Beatmap file {path} does not exist.")
    version, sections = read_osu_file(path)
    beatmap = parse_beatmap(version, sections, path=str(path))
    logger.debug(
        "Loaded %s (v%d, mode %d, %d objects)",
        path.name, version, beatmap.mode, len(beatmap.hit_objects),
    )
    return beatmap
