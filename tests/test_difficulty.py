"""Tests for strain skills, ruleset calculators and the engine adapter."""

import math
from pathlib import Path

import pytest

from osu_difficulty.difficulty import adapter
from osu_difficulty.difficulty.adapter import compute_with_trace
from osu_difficulty.difficulty.calculators import (
    ManiaDifficultyCalculator,
    OsuDifficultyCalculator,
    create_difficulty_calculator,
    rate_adjusted_approach_rate,
    rate_adjusted_overall_difficulty,
)
from osu_difficulty.difficulty.skills import SECTION_LENGTH, DifficultyHitObject, Speed
from osu_difficulty.errors import CalculationError
from osu_difficulty.parsers.beatmap_parser import load_beatmap
from osu_difficulty.rulesets.mods import resolve_mods
from osu_difficulty.rulesets.registry import CATCH, MANIA, OSU, TAIKO
from osu_difficulty.schemas.beatmap import Beatmap, BeatmapDifficulty, BeatmapMetadata, HitObject

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def standard():
    return load_beatmap(FIXTURES / "osu_standard.osu")


def _circle(time: float, x: float = 256.0) -> HitObject:
    return HitObject(x=x, y=192.0, time=time, kind="circle", end_time=time)


def _dho(last: HitObject, current: HitObject) -> DifficultyHitObject:
    return DifficultyHitObject(
        base=current, last=last, index=0,
        start_time=current.time, end_time=current.end_time,
        delta_time=current.time - last.time,
    )


class TestStrainSkill:
    def test_no_objects_no_peaks(self):
        skill = Speed()
        assert skill.get_current_strain_peaks() == []
        assert skill.difficulty_value() == 0.0

    def test_one_peak_per_section(self):
        skill = Speed()
        objects = [_circle(t) for t in range(0, 2001, 100)]
        for last, current in zip(objects, objects[1:]):
            skill.process(_dho(last, current))
        # Sections end at 400, 800, ..., 2000
        peaks = skill.get_current_strain_peaks()
        assert len(peaks) == 2000 // SECTION_LENGTH
        assert all(p > 0 for p in peaks)

    def test_gap_sections_decay(self):
        skill = Speed()
        a, b, c = _circle(0), _circle(100), _circle(3000)
        skill.process(_dho(a, b))
        skill.process(_dho(b, c))
        peaks = skill.get_current_strain_peaks()
        # Peaks across the gap only decay
        assert peaks[1] < peaks[0]
        assert peaks == sorted(peaks[:-1], reverse=True) + [peaks[-1]]


class TestRateAdjustment:
    def test_approach_rate(self):
        assert rate_adjusted_approach_rate(9.0, 1.0) == pytest.approx(9.0)
        assert rate_adjusted_approach_rate(9.0, 1.5) == pytest.approx(10.0 + 1 / 3)
        assert rate_adjusted_approach_rate(5.0, 0.75) < 5.0

    def test_overall_difficulty(self):
        assert rate_adjusted_overall_difficulty(8.0, 1.0) == pytest.approx(8.0)
        assert rate_adjusted_overall_difficulty(8.0, 1.5) > 8.0


class TestCalculators:
    def test_osu_attributes(self, standard):
        attributes = OsuDifficultyCalculator(standard).calculate()
        assert list(attributes)[0] == "star_rating"
        assert attributes["star_rating"] > 0
        assert attributes["aim_difficulty"] > 0
        assert attributes["speed_difficulty"] > 0
        assert attributes["hit_circle_count"] == 10
        assert attributes["slider_count"] == 2
        assert attributes["spinner_count"] == 1
        assert attributes["max_combo"] == 16

    def test_double_time_is_harder(self, standard):
        calculator = OsuDifficultyCalculator(standard)
        nomod = calculator.calculate()
        dt = calculator.calculate(resolve_mods(["dt"], OSU))
        assert dt["star_rating"] > nomod["star_rating"]
        assert dt["approach_rate"] > nomod["approach_rate"]

    def test_hard_rock_caps_approach_rate(self, standard):
        attributes = OsuDifficultyCalculator(standard).calculate(resolve_mods(["hr"], OSU))
        assert attributes["approach_rate"] == pytest.approx(10.0)

    def test_mania_native(self):
        beatmap = load_beatmap(FIXTURES / "mania_4k.osu")
        attributes = create_difficulty_calculator(MANIA, beatmap).calculate()
        assert attributes["key_count"] == 4
        assert attributes["max_combo"] == 9
        assert attributes["star_rating"] > 0

    def test_mania_convert_key_count(self, standard):
        calculator = ManiaDifficultyCalculator(standard)
        assert calculator.calculate()["key_count"] == 7
        assert calculator.calculate(resolve_mods(["4k"], MANIA))["key_count"] == 4

    def test_key_mods_ignored_for_native_mania(self):
        beatmap = load_beatmap(FIXTURES / "mania_4k.osu")
        attributes = ManiaDifficultyCalculator(beatmap).calculate(resolve_mods(["7k"], MANIA))
        assert attributes["key_count"] == 4

    def test_taiko(self):
        beatmap = load_beatmap(FIXTURES / "taiko.osu")
        attributes = create_difficulty_calculator(TAIKO, beatmap).calculate()
        assert attributes["colour_difficulty"] > 0
        assert attributes["stamina_difficulty"] > 0
        assert attributes["max_combo"] == 6

    def test_catch_convert(self, standard):
        attributes = create_difficulty_calculator(CATCH, standard).calculate()
        assert attributes["max_combo"] == 15
        assert set(attributes) == {"star_rating", "approach_rate", "max_combo"}

    @pytest.mark.parametrize("ruleset", [OSU, CATCH])
    def test_largest_circle_size_with_hard_rock(self, standard, ruleset):
        standard.difficulty.circle_size = 10.0
        attributes = create_difficulty_calculator(ruleset, standard).calculate(resolve_mods(["hr"], ruleset))
        assert isinstance(attributes["star_rating"], float)
        assert math.isfinite(attributes["star_rating"])

    def test_unconvertible_pairing(self):
        beatmap = load_beatmap(FIXTURES / "taiko.osu")
        with pytest.raises(CalculationError, match="cannot be converted"):
            create_difficulty_calculator(OSU, beatmap)
        with pytest.raises(CalculationError):
            create_difficulty_calculator(MANIA, beatmap)


class _PlainCalculator:
    """Calculator without skill exposure; records every calculate call."""

    def __init__(self):
        self.calls = []

    def calculate(self, mods=None):
        self.calls.append(mods)
        return {"star_rating": 1.5}


class TestComputeWithTrace:
    def test_returns_first_skill_peaks(self, standard):
        mods = resolve_mods(["hr"], OSU)
        attributes, strains = compute_with_trace(standard, OSU, mods)

        calculator = OsuDifficultyCalculator(standard)
        expected_attributes = calculator.calculate(mods)
        aim = calculator.get_skills()[0]
        assert aim.name == "Aim"
        assert strains == aim.get_current_strain_peaks()
        assert attributes == expected_attributes

    def test_section_count(self, standard):
        _, strains = compute_with_trace(standard, OSU, [])
        # Objects after the first span 250ms..5450ms: sections ending 400..5600
        assert len(strains) == 14

    def test_deterministic(self, standard):
        mods = resolve_mods(["dt"], OSU)
        first = compute_with_trace(standard, OSU, mods)
        second = compute_with_trace(standard, OSU, mods)
        assert first == second

    def test_without_skill_exposure(self, standard, monkeypatch):
        plain = _PlainCalculator()
        monkeypatch.setattr(adapter, "create_difficulty_calculator", lambda ruleset, beatmap: plain)
        mods = resolve_mods(["dt"], OSU)

        attributes, strains = compute_with_trace(standard, OSU, mods)
        assert attributes == {"star_rating": 1.5}
        assert strains == []
        # Warm-up and real pass share one instance
        assert plain.calls == [None, mods]

    def test_empty_beatmap(self):
        beatmap = Beatmap(
            format_version=14, mode=0,
            metadata=BeatmapMetadata(), difficulty=BeatmapDifficulty(),
        )
        attributes, strains = compute_with_trace(beatmap, OSU, [])
        assert attributes["star_rating"] == 0.0
        assert strains == []
