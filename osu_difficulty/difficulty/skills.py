"""Strain skills.

A skill keeps a running strain value that decays exponentially between
objects and records the highest strain seen in every fixed-length section of
(rate-adjusted) map time. The recorded section peaks are what callers read
as a strain series; the weighted sum of the hardest peaks is the skill's
difficulty value.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from osu_difficulty.schemas.beatmap import HITSOUND_CLAP, HITSOUND_WHISTLE, PLAYFIELD_WIDTH, HitObject

SECTION_LENGTH = 400  # ms


@dataclass
class DifficultyHitObject:
    """A hit object paired with its predecessor, in rate-adjusted time."""

    base: HitObject
    last: HitObject
    index: int
    start_time: float
    end_time: float
    delta_time: float


class StrainSkill:
    """Base skill with exponential strain decay and per-section peaks."""

    skill_multiplier = 1.0
    strain_decay_base = 0.15
    decay_weight = 0.9

    def __init__(self):
        self._strain_peaks: list[float] = []
        self._current_strain = 0.0
        self._current_section_peak = 0.0
        self._current_section_end: float | None = None
        self._previous: DifficultyHitObject | None = None

    @property
    def name(self) -> str:
        return type(self).__name__

    def process(self, current: DifficultyHitObject) -> None:
        if self._current_section_end is None:
            self._current_section_end = math.ceil(current.start_time / SECTION_LENGTH) * SECTION_LENGTH

        while current.start_time > self._current_section_end:
            self._strain_peaks.append(self._current_section_peak)
            self._current_section_peak = self._initial_strain(self._current_section_end)
            self._current_section_end += SECTION_LENGTH

        self._current_section_peak = max(self.strain_value_at(current), self._current_section_peak)
        self._previous = current

    def _initial_strain(self, time: float) -> float:
        if self._previous is None:
            return 0.0
        return self._current_strain * self._strain_decay(time - self._previous.start_time)

    def _strain_decay(self, ms: float) -> float:
        return self.strain_decay_base ** (ms / 1000)

    def strain_value_at(self, current: DifficultyHitObject) -> float:
        self._current_strain *= self._strain_decay(current.delta_time)
        self._current_strain += self.strain_value_of(current) * self.skill_multiplier
        return self._current_strain

    def strain_value_of(self, current: DifficultyHitObject) -> float:
        raise NotImplementedError

    def get_current_strain_peaks(self) -> list[float]:
        """Peaks of all completed sections plus the section in progress."""
        if self._current_section_end is None:
            return []
        return self._strain_peaks + [self._current_section_peak]

    def difficulty_value(self) -> float:
        peaks = np.asarray(self.get_current_strain_peaks(), dtype=np.float64)
        peaks = np.sort(peaks[peaks > 0])[::-1]
        weights = self.decay_weight ** np.arange(len(peaks))
        return float(np.sum(peaks * weights))


def _strain_time(current: DifficultyHitObject) -> float:
    return max(current.delta_time, 50.0)


# --- osu! --------------------------------------------------------------------


class Aim(StrainSkill):
    skill_multiplier = 26.25
    strain_decay_base = 0.15

    def __init__(self, radius: float):
        super().__init__()
        # Distances are normalized to a circle radius of 52
        self.scaling_factor = 52.0 / radius

    def strain_value_of(self, current: DifficultyHitObject) -> float:
        if current.base.kind == "spinner" or current.last.kind == "spinner":
            return 0.0
        distance = math.hypot(current.base.x - current.last.x, current.base.y - current.last.y)
        return (distance * self.scaling_factor) ** 0.99 / _strain_time(current)


class Speed(StrainSkill):
    skill_multiplier = 1400.0
    strain_decay_base = 0.3

    def strain_value_of(self, current: DifficultyHitObject) -> float:
        if current.base.kind == "spinner":
            return 0.0
        strain_time = _strain_time(current)
        speed_bonus = ((75 - strain_time) / 40) ** 2 if strain_time < 75 else 0.0
        return (1.0 + speed_bonus) / strain_time


# --- osu!taiko ---------------------------------------------------------------


def _is_rim(hit: HitObject) -> bool:
    return bool(hit.hitsound & (HITSOUND_WHISTLE | HITSOUND_CLAP))


class Colour(StrainSkill):
    strain_decay_base = 0.4

    def strain_value_of(self, current: DifficultyHitObject) -> float:
        # Alternating don/kat is harder than mono-colour streams
        return 1.0 if _is_rim(current.base) != _is_rim(current.last) else 0.3


class Stamina(StrainSkill):
    skill_multiplier = 150.0
    strain_decay_base = 0.4

    def strain_value_of(self, current: DifficultyHitObject) -> float:
        return 1.0 / max(current.delta_time, 30.0)


# --- osu!catch ---------------------------------------------------------------


class Movement(StrainSkill):
    skill_multiplier = 135.0
    strain_decay_base = 0.2

    def __init__(self, half_catcher_width: float):
        super().__init__()
        self.half_catcher_width = half_catcher_width

    def strain_value_of(self, current: DifficultyHitObject) -> float:
        distance = abs(current.base.x - current.last.x) / self.half_catcher_width
        return distance ** 1.3 / max(current.delta_time, 40.0)


# --- osu!mania ---------------------------------------------------------------


class Strain(StrainSkill):
    """Per-column strain plus an overall strain shared by all columns."""

    strain_decay_base = 1.0
    individual_decay_base = 0.125
    overall_decay_base = 0.3

    def __init__(self, key_count: int):
        super().__init__()
        self.key_count = key_count
        self._individual_strains = [0.0] * key_count
        self._column_times = [0.0] * key_count
        self._overall_strain = 1.0

    def column_of(self, hit: HitObject) -> int:
        column = int(hit.x * self.key_count / PLAYFIELD_WIDTH)
        return min(max(column, 0), self.key_count - 1)

    def strain_value_at(self, current: DifficultyHitObject) -> float:
        column = self.column_of(current.base)
        hold_factor = 1.25 if current.base.kind == "hold" else 1.0

        elapsed = current.start_time - self._column_times[column]
        self._individual_strains[column] *= self.individual_decay_base ** (elapsed / 1000)
        self._individual_strains[column] += 2.0 * hold_factor
        self._column_times[column] = current.start_time

        self._overall_strain *= self.overall_decay_base ** (current.delta_time / 1000)
        self._overall_strain += 1.0 * hold_factor

        self._current_strain = self._individual_strains[column] + self._overall_strain
        return self._current_strain
