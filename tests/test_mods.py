"""Tests for ruleset lookup, mod resolution and legacy conversion."""

import pytest

from osu_difficulty.errors import CalculationError, InvalidModifierError
from osu_difficulty.rulesets.mods import (
    available_mods,
    convert_to_legacy_difficulty_adjustment_mods,
    resolve_mods,
)
from osu_difficulty.rulesets.registry import CATCH, MANIA, OSU, TAIKO, ruleset_for


def _acronyms(mods) -> list[str]:
    return [m.acronym for m in mods]


class TestRegistry:
    def test_lookup(self):
        assert ruleset_for(0) is OSU
        assert ruleset_for(3).short_name == "mania"

    def test_unknown_id(self):
        with pytest.raises(CalculationError):
            ruleset_for(7)


class TestResolveMods:
    def test_preserves_order(self):
        assert _acronyms(resolve_mods(["hr", "dt"], OSU)) == ["HR", "DT"]
        assert _acronyms(resolve_mods(["dt", "hr"], OSU)) == ["DT", "HR"]

    def test_case_insensitive(self):
        assert _acronyms(resolve_mods(["Hd", "FL"], OSU)) == ["HD", "FL"]

    def test_empty(self):
        assert resolve_mods([], OSU) == []
        assert resolve_mods(None, OSU) == []

    def test_invalid_token(self):
        with pytest.raises(InvalidModifierError) as exc_info:
            resolve_mods(["hr", "zz"], OSU)
        assert exc_info.value.token == "zz"
        assert "Invalid mod provided: zz" in str(exc_info.value)

    def test_ruleset_specific_catalog(self):
        assert _acronyms(resolve_mods(["4k"], MANIA)) == ["4K"]
        with pytest.raises(InvalidModifierError):
            resolve_mods(["4k"], OSU)
        with pytest.raises(InvalidModifierError):
            resolve_mods(["td"], TAIKO)

    def test_duplicates_kept(self):
        assert _acronyms(resolve_mods(["hr", "HR"], OSU)) == ["HR", "HR"]

    def test_idempotent(self):
        assert resolve_mods(["hr", "dt"], CATCH) == resolve_mods(["hr", "dt"], CATCH)

    def test_every_catalog_has_classic(self):
        for ruleset in (OSU, TAIKO, CATCH, MANIA):
            assert "CL" in _acronyms(available_mods(ruleset))


class TestLegacyConversion:
    def test_empty_stays_empty(self):
        assert convert_to_legacy_difficulty_adjustment_mods(OSU, []) == []

    def test_classic_is_not_a_legacy_mod(self):
        mods = resolve_mods(["cl", "hr"], OSU)
        assert _acronyms(convert_to_legacy_difficulty_adjustment_mods(OSU, mods)) == ["HR"]

    def test_maps_to_legacy_equivalents(self):
        mods = resolve_mods(["nc", "hr"], OSU)
        converted = convert_to_legacy_difficulty_adjustment_mods(OSU, mods)
        assert _acronyms(converted) == ["DT", "HR"]

        mods = resolve_mods(["dc"], TAIKO)
        assert _acronyms(convert_to_legacy_difficulty_adjustment_mods(TAIKO, mods)) == ["HT"]

    def test_drops_non_difficulty_mods(self):
        mods = resolve_mods(["nf", "sd", "hd", "dt"], OSU)
        converted = convert_to_legacy_difficulty_adjustment_mods(OSU, mods)
        assert _acronyms(converted) == ["DT"]

    def test_hidden_kept_with_flashlight(self):
        mods = resolve_mods(["hd", "fl"], OSU)
        converted = convert_to_legacy_difficulty_adjustment_mods(OSU, mods)
        assert _acronyms(converted) == ["HD", "FL"]

        mods = resolve_mods(["hd", "fl"], CATCH)
        assert _acronyms(convert_to_legacy_difficulty_adjustment_mods(CATCH, mods)) == []

    def test_mania_key_mods(self):
        mods = resolve_mods(["7k", "dt"], MANIA)
        assert _acronyms(convert_to_legacy_difficulty_adjustment_mods(MANIA, mods)) == ["7K", "DT"]

        # 10K has no legacy flag
        mods = resolve_mods(["10k"], MANIA)
        assert _acronyms(convert_to_legacy_difficulty_adjustment_mods(MANIA, mods)) == []

    def test_repeats_collapse(self):
        mods = resolve_mods(["dt", "nc"], OSU)
        assert _acronyms(convert_to_legacy_difficulty_adjustment_mods(OSU, mods)) == ["DT"]

    @pytest.mark.parametrize("tokens", [["hr", "dt"], ["nf"], ["zz"], ["hr", "4k"], []])
    def test_conversion_never_changes_validity(self, tokens):
        """Validity is decided by resolution alone, before any conversion."""
        try:
            mods = resolve_mods(tokens, OSU)
        except InvalidModifierError:
            valid = False
        else:
            valid = True
            convert_to_legacy_difficulty_adjustment_mods(OSU, mods)
        assert valid == all(t.upper() in _acronyms(available_mods(OSU)) for t in tokens)
