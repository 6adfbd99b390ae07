"""Ruleset registry keyed by legacy (online) ruleset ID."""

from dataclasses import dataclass

from osu_difficulty.errors import CalculationError


@dataclass(frozen=True)
class Ruleset:
    online_id: int
    short_name: str
    name: str


OSU = Ruleset(0, "osu", "osu!")
TAIKO = Ruleset(1, "taiko", "osu!taiko")
CATCH = Ruleset(2, "fruits", "osu!catch")
MANIA = Ruleset(3, "mania", "osu!mania")

RULESETS = {r.online_id: r for r in (OSU, TAIKO, CATCH, MANIA)}


def ruleset_for(legacy_id: int) -> Ruleset:
    """Look up a ruleset by its legacy ID (0-3)."""
    try:
        return RULESETS[legacy_id]
    except KeyError:
        raise CalculationError(f"Invalid ruleset ID: {legacy_id}") from None
