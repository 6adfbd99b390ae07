"""Parsed osu! beatmap data.

Dataclasses holding the parts of a ``.osu`` file the difficulty engine needs.
Parsers fill these in; calculators and the pipeline only read them.
"""

from dataclasses import dataclass, field

# Hit object type bits
TYPE_CIRCLE = 1
TYPE_SLIDER = 2
TYPE_SPINNER = 8
TYPE_HOLD = 128

# Hitsound bits
HITSOUND_WHISTLE = 2
HITSOUND_CLAP = 8

PLAYFIELD_WIDTH = 512


@dataclass
class TimingPoint:
    """A red (uninherited) or green (inherited) timing line."""

    time: float  # ms
    beat_length: float  # ms per beat; negative for inherited points
    uninherited: bool = True

    @property
    def slider_velocity(self) -> float:
        """Velocity multiplier of an inherited point (1.0 for red lines)."""
        if self.uninherited or self.beat_length >= 0:
            return 1.0
        return 100.0 / -self.beat_length


@dataclass
class HitObject:
    """One playable object; ``kind`` is circle, slider, spinner or hold."""

    x: float
    y: float
    time: float  # ms
    kind: str
    end_time: float  # ms; equals ``time`` for circles
    hitsound: int = 0
    slides: int = 1  # sliders only
    length: float = 0.0  # slider pixel length
    ticks: int = 0  # slider ticks across all spans


@dataclass
class BeatmapDifficulty:
    """The [Difficulty] section."""

    hp_drain_rate: float = 5.0
    circle_size: float = 5.0
    overall_difficulty: float = 5.0
    approach_rate: float = 5.0
    slider_multiplier: float = 1.4
    slider_tick_rate: float = 1.0


@dataclass
class BeatmapMetadata:
    """The [Metadata] section."""

    title: str = ""
    artist: str = ""
    creator: str = ""
    version: str = ""
    beatmap_id: int = 0


@dataclass
class Beatmap:
    """A complete parsed beatmap (one difficulty)."""

    format_version: int
    mode: int  # declared ruleset: 0=osu, 1=taiko, 2=catch, 3=mania
    metadata: BeatmapMetadata
    difficulty: BeatmapDifficulty
    timing_points: list[TimingPoint] = field(default_factory=list)  # sorted by time
    hit_objects: list[HitObject] = field(default_factory=list)  # sorted by time
    path: str = ""

    @property
    def online_id(self) -> int:
        return self.metadata.beatmap_id

    def __str__(self) -> str:
        meta = self.metadata
        return f"{meta.artist} - {meta.title} ({meta.creator}) [{meta.version}]"
