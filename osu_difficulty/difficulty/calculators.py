"""Per-ruleset difficulty calculators.

A calculator is bound to one beatmap. ``calculate(mods)`` converts the
beatmap's hit objects for the ruleset, feeds them through the ruleset's
skills and condenses the skills into an attribute mapping. Calculators
derived from ExtendedDifficultyCalculator additionally keep the skills of
their latest calculation, which is how strain peaks are read back out.
"""

from __future__ import annotations

import math
from dataclasses import replace

from osu_difficulty.difficulty.skills import (
    Aim,
    Colour,
    DifficultyHitObject,
    Movement,
    Speed,
    Stamina,
    Strain,
    StrainSkill,
)
from osu_difficulty.errors import CalculationError
from osu_difficulty.rulesets.mods import Mod
from osu_difficulty.rulesets.registry import CATCH, MANIA, OSU, TAIKO, Ruleset
from osu_difficulty.schemas.beatmap import Beatmap, BeatmapDifficulty, HitObject

STAR_SCALING_FACTOR = 0.0675


def clock_rate_of(mods: list[Mod]) -> float:
    rate = 1.0
    for mod in mods:
        rate *= mod.clock_rate
    return rate


def rate_adjusted_approach_rate(approach_rate: float, clock_rate: float) -> float:
    if approach_rate < 5:
        preempt = 1800 - 120 * approach_rate
    else:
        preempt = 1200 - 150 * (approach_rate - 5)
    preempt /= clock_rate
    if preempt > 1200:
        return (1800 - preempt) / 120
    return (1200 - preempt) / 150 + 5


def rate_adjusted_overall_difficulty(overall_difficulty: float, clock_rate: float) -> float:
    great_window = (80 - 6 * overall_difficulty) / clock_rate
    return (80 - great_window) / 6


class DifficultyCalculator:
    """Base calculator; subclasses define objects, skills and attributes."""

    ruleset: Ruleset

    def __init__(self, beatmap: Beatmap):
        if beatmap.mode != self.ruleset.online_id and beatmap.mode != OSU.online_id:
            raise CalculationError(
                f"Beatmap for ruleset {beatmap.mode} cannot be converted to {self.ruleset.short_name}."
            )
        self.beatmap = beatmap

    @property
    def is_convert(self) -> bool:
        return self.beatmap.mode != self.ruleset.online_id

    def calculate(self, mods: list[Mod] | None = None) -> dict:
        mods = list(mods or [])
        clock_rate = clock_rate_of(mods)
        difficulty = self.adjusted_difficulty(mods)

        hit_objects = self.convert_hit_objects(mods)
        skills = self.create_skills(difficulty, mods)
        for current in self.create_difficulty_hit_objects(hit_objects, clock_rate):
            for skill in skills:
                skill.process(current)
        self._skills_processed(skills)

        return self.create_difficulty_attributes(difficulty, hit_objects, skills, clock_rate)

    def adjusted_difficulty(self, mods: list[Mod]) -> BeatmapDifficulty:
        difficulty = replace(self.beatmap.difficulty)
        acronyms = {m.acronym for m in mods}
        if "HR" in acronyms:
            if self.ruleset in (OSU, CATCH):
                difficulty.circle_size = min(difficulty.circle_size * 1.3, 10.0)
            difficulty.approach_rate = min(difficulty.approach_rate * 1.4, 10.0)
            difficulty.overall_difficulty = min(difficulty.overall_difficulty * 1.4, 10.0)
            difficulty.hp_drain_rate = min(difficulty.hp_drain_rate * 1.4, 10.0)
        if "EZ" in acronyms:
            difficulty.circle_size *= 0.5
            difficulty.approach_rate *= 0.5
            difficulty.overall_difficulty *= 0.5
            difficulty.hp_drain_rate *= 0.5
        return difficulty

    def convert_hit_objects(self, mods: list[Mod]) -> list[HitObject]:
        return list(self.beatmap.hit_objects)

    @staticmethod
    def create_difficulty_hit_objects(
        hit_objects: list[HitObject], clock_rate: float
    ) -> list[DifficultyHitObject]:
        return [
            DifficultyHitObject(
                base=current,
                last=last,
                index=i,
                start_time=current.time / clock_rate,
                end_time=current.end_time / clock_rate,
                delta_time=(current.time - last.time) / clock_rate,
            )
            for i, (last, current) in enumerate(zip(hit_objects, hit_objects[1:]))
        ]

    def create_skills(self, difficulty: BeatmapDifficulty, mods: list[Mod]) -> list[StrainSkill]:
        raise NotImplementedError

    def create_difficulty_attributes(
        self,
        difficulty: BeatmapDifficulty,
        hit_objects: list[HitObject],
        skills: list[StrainSkill],
        clock_rate: float,
    ) -> dict:
        raise NotImplementedError

    def _skills_processed(self, skills: list[StrainSkill]) -> None:
        pass


class ExtendedDifficultyCalculator(DifficultyCalculator):
    """Calculator that exposes the skills of its latest calculation."""

    def __init__(self, beatmap: Beatmap):
        super().__init__(beatmap)
        self._skills: list[StrainSkill] = []

    def _skills_processed(self, skills: list[StrainSkill]) -> None:
        self._skills = list(skills)

    def get_skills(self) -> list[StrainSkill]:
        return list(self._skills)


class OsuDifficultyCalculator(ExtendedDifficultyCalculator):
    ruleset = OSU

    def create_skills(self, difficulty, mods):
        radius = 54.4 - 4.48 * difficulty.circle_size
        return [Aim(radius), Speed()]

    def create_difficulty_attributes(self, difficulty, hit_objects, skills, clock_rate):
        aim, speed = skills
        aim_rating = math.sqrt(aim.difficulty_value()) * STAR_SCALING_FACTOR
        speed_rating = math.sqrt(speed.difficulty_value()) * STAR_SCALING_FACTOR
        star_rating = aim_rating + speed_rating + abs(aim_rating - speed_rating) / 2

        kinds = [o.kind for o in hit_objects]
        max_combo = sum(1 + o.ticks + o.slides if o.kind == "slider" else 1 for o in hit_objects)
        return {
            "star_rating": star_rating,
            "aim_difficulty": aim_rating,
            "speed_difficulty": speed_rating,
            "approach_rate": rate_adjusted_approach_rate(difficulty.approach_rate, clock_rate),
            "overall_difficulty": rate_adjusted_overall_difficulty(difficulty.overall_difficulty, clock_rate),
            "drain_rate": difficulty.hp_drain_rate,
            "hit_circle_count": kinds.count("circle"),
            "slider_count": kinds.count("slider"),
            "spinner_count": kinds.count("spinner"),
            "max_combo": max_combo,
        }


class TaikoDifficultyCalculator(ExtendedDifficultyCalculator):
    ruleset = TAIKO

    def convert_hit_objects(self, mods):
        # Only hits carry strain; drum rolls and swells are skipped
        return [o for o in self.beatmap.hit_objects if o.kind == "circle"]

    def create_skills(self, difficulty, mods):
        return [Colour(), Stamina()]

    def create_difficulty_attributes(self, difficulty, hit_objects, skills, clock_rate):
        colour, stamina = skills
        colour_rating = colour.difficulty_value() * 0.04
        stamina_rating = stamina.difficulty_value() * 0.04
        return {
            "star_rating": (colour_rating + stamina_rating) * 0.75,
            "colour_difficulty": colour_rating,
            "stamina_difficulty": stamina_rating,
            "great_hit_window": (50 - 3 * difficulty.overall_difficulty) / clock_rate,
            "max_combo": len(hit_objects),
        }


class CatchDifficultyCalculator(ExtendedDifficultyCalculator):
    ruleset = CATCH

    def convert_hit_objects(self, mods):
        fruits = []
        for obj in self.beatmap.hit_objects:
            if obj.kind == "spinner":
                continue
            fruits.append(obj)
            if obj.kind == "slider":
                span = (obj.end_time - obj.time) / obj.slides
                fruits.extend(
                    replace(obj, kind="circle", time=obj.time + span * i, end_time=obj.time + span * i)
                    for i in range(1, obj.slides + 1)
                )
        fruits.sort(key=lambda o: o.time)
        return fruits

    def create_skills(self, difficulty, mods):
        catcher_width = 106.75 * (1.0 - 0.7 * (difficulty.circle_size - 5) / 5)
        return [Movement(catcher_width / 2)]

    def create_difficulty_attributes(self, difficulty, hit_objects, skills, clock_rate):
        (movement,) = skills
        return {
            "star_rating": math.sqrt(movement.difficulty_value()) * 0.153,
            "approach_rate": rate_adjusted_approach_rate(difficulty.approach_rate, clock_rate),
            "max_combo": len(hit_objects),
        }


class ManiaDifficultyCalculator(ExtendedDifficultyCalculator):
    ruleset = MANIA

    def key_count(self, mods: list[Mod]) -> int:
        difficulty = self.beatmap.difficulty
        if not self.is_convert:
            return max(1, round(difficulty.circle_size))

        # Key mods only apply to converted beatmaps
        for mod in mods:
            if mod.key_count:
                return mod.key_count

        objects = self.beatmap.hit_objects
        long_objects = sum(1 for o in objects if o.kind in ("slider", "spinner"))
        percent_long = long_objects / len(objects) if objects else 0.0
        rounded_cs = round(difficulty.circle_size)
        rounded_od = round(difficulty.overall_difficulty)
        if percent_long < 0.2:
            return 7
        if percent_long < 0.3 or rounded_cs >= 5:
            return 7 if rounded_od > 5 else 6
        if percent_long > 0.6:
            return 5 if rounded_od > 4 else 4
        return max(4, min(rounded_od + 1, 7))

    def convert_hit_objects(self, mods):
        if not self.is_convert:
            return list(self.beatmap.hit_objects)
        return [
            replace(o, kind="hold") if o.kind in ("slider", "spinner") else o
            for o in self.beatmap.hit_objects
        ]

    def create_skills(self, difficulty, mods):
        return [Strain(self.key_count(mods))]

    def create_difficulty_attributes(self, difficulty, hit_objects, skills, clock_rate):
        (strain,) = skills
        holds = sum(1 for o in hit_objects if o.kind == "hold")
        return {
            "star_rating": strain.difficulty_value() * 0.018,
            "key_count": strain.key_count,
            "great_hit_window": (64 - 3 * difficulty.overall_difficulty) / clock_rate,
            "max_combo": len(hit_objects) + holds,
        }


CALCULATORS: dict[int, type[DifficultyCalculator]] = {
    OSU.online_id: OsuDifficultyCalculator,
    TAIKO.online_id: TaikoDifficultyCalculator,
    CATCH.online_id: CatchDifficultyCalculator,
    MANIA.online_id: ManiaDifficultyCalculator,
}


def create_difficulty_calculator(ruleset: Ruleset, beatmap: Beatmap) -> DifficultyCalculator:
    return CALCULATORS[ruleset.online_id](beatmap)
