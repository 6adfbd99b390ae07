"""Mod catalogs per ruleset, acronym resolution and legacy conversion."""

import logging
from dataclasses import dataclass

from osu_difficulty.errors import InvalidModifierError
from osu_difficulty.rulesets.registry import CATCH, MANIA, OSU, TAIKO, Ruleset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Mod:
    """A gameplay mod as offered by one ruleset."""

    acronym: str
    name: str
    type: str  # reduction, increase, conversion, automation, fun, system
    clock_rate: float = 1.0
    key_count: int | None = None  # mania key mods only
    legacy_equivalent: str | None = None  # closest mod with a legacy flag

    def to_api(self) -> dict:
        """Serialized form used in result documents."""
        return {"acronym": self.acronym}


_SHARED = [
    Mod("EZ", "Easy", "reduction"),
    Mod("NF", "No Fail", "reduction"),
    Mod("HT", "Half Time", "reduction", clock_rate=0.75),
    Mod("DC", "Daycore", "reduction", clock_rate=0.75, legacy_equivalent="HT"),
    Mod("HR", "Hard Rock", "increase"),
    Mod("SD", "Sudden Death", "increase"),
    Mod("PF", "Perfect", "increase"),
    Mod("DT", "Double Time", "increase", clock_rate=1.5),
    Mod("NC", "Nightcore", "increase", clock_rate=1.5, legacy_equivalent="DT"),
    Mod("HD", "Hidden", "increase"),
    Mod("FL", "Flashlight", "increase"),
    Mod("AC", "Accuracy Challenge", "increase"),
    Mod("DA", "Difficulty Adjust", "conversion"),
    Mod("CL", "Classic", "conversion"),
    Mod("AT", "Autoplay", "automation"),
    Mod("CN", "Cinema", "automation"),
    Mod("WU", "Wind Up", "fun"),
    Mod("WD", "Wind Down", "fun"),
    Mod("MU", "Muted", "fun"),
]

_CATALOGS: dict[int, list[Mod]] = {
    OSU.online_id: _SHARED + [
        Mod("BL", "Blinds", "increase"),
        Mod("ST", "Strict Tracking", "increase"),
        Mod("TP", "Target Practice", "conversion"),
        Mod("RD", "Random", "conversion"),
        Mod("MR", "Mirror", "conversion"),
        Mod("AL", "Alternate", "conversion"),
        Mod("SG", "Single Tap", "conversion"),
        Mod("RX", "Relax", "automation"),
        Mod("AP", "Autopilot", "automation"),
        Mod("SO", "Spun Out", "automation"),
        Mod("TR", "Transform", "fun"),
        Mod("WG", "Wiggle", "fun"),
        Mod("GR", "Grow", "fun"),
        Mod("DF", "Deflate", "fun"),
        Mod("TC", "Traceable", "fun"),
        Mod("TD", "Touch Device", "system"),
    ],
    TAIKO.online_id: _SHARED + [
        Mod("RD", "Random", "conversion"),
        Mod("SW", "Swap", "conversion"),
        Mod("SR", "Single Tap", "conversion"),
        Mod("CS", "Constant Speed", "conversion"),
        Mod("RX", "Relax", "automation"),
    ],
    CATCH.online_id: _SHARED + [
        Mod("MR", "Mirror", "conversion"),
        Mod("RX", "Relax", "automation"),
        Mod("FF", "Floating Fruits", "fun"),
    ],
    MANIA.online_id: _SHARED + [
        Mod("FI", "Fade In", "increase"),
        Mod("CO", "Cover", "increase"),
        Mod("RD", "Random", "conversion"),
        Mod("DS", "Dual Stages", "conversion"),
        Mod("MR", "Mirror", "conversion"),
        Mod("IN", "Invert", "conversion"),
        Mod("CS", "Constant Speed", "conversion"),
        Mod("HO", "Hold Off", "conversion"),
    ] + [Mod(f"{k}K", f"{k} Keys", "conversion", key_count=k) for k in range(1, 11)],
}

_LEGACY_KEY_MODS = frozenset(f"{k}K" for k in range(1, 10))

# Mods with a legacy flag that change difficulty attributes
_LEGACY_DIFFICULTY_MODS: dict[int, frozenset[str]] = {
    OSU.online_id: frozenset({"EZ", "HR", "DT", "HT", "FL", "TD"}),
    TAIKO.online_id: frozenset({"EZ", "HR", "DT", "HT"}),
    CATCH.online_id: frozenset({"EZ", "HR", "DT", "HT"}),
    MANIA.online_id: frozenset({"EZ", "HR", "DT", "HT"}) | _LEGACY_KEY_MODS,
}


def available_mods(ruleset: Ruleset) -> list[Mod]:
    return list(_CATALOGS[ruleset.online_id])


def resolve_mods(tokens: list[str] | tuple[str, ...] | None, ruleset: Ruleset) -> list[Mod]:
    """Resolve acronyms against the ruleset's catalog, keeping input order.

    Matching is case-insensitive. The first unknown acronym raises
    InvalidModifierError; nothing is returned for a partial match.
    Repeated acronyms are kept as given.
    """
    if not tokens:
        return []

    by_acronym = {m.acronym.casefold(): m for m in available_mods(ruleset)}
    mods = []
    for token in tokens:
        mod = by_acronym.get(token.casefold())
        if mod is None:
            raise InvalidModifierError(token)
        mods.append(mod)
    return mods


def convert_to_legacy_difficulty_adjustment_mods(ruleset: Ruleset, mods: list[Mod]) -> list[Mod]:
    """Reduce *mods* to the mods that adjust difficulty under legacy rules.

    Mods without a legacy flag map to their closest equivalent (NC -> DT,
    DC -> HT); mods that never affected legacy difficulty are dropped.
    Legacy mods are a flag set, so repeats collapse to the first occurrence.
    """
    catalog = {m.acronym: m for m in available_mods(ruleset)}
    allowed = _LEGACY_DIFFICULTY_MODS[ruleset.online_id]
    acronyms = [m.legacy_equivalent or m.acronym for m in mods]

    # Hidden only changes osu! difficulty together with Flashlight
    if ruleset.online_id == OSU.online_id and "FL" in acronyms:
        allowed = allowed | {"HD"}

    converted: list[Mod] = []
    for acronym in acronyms:
        if acronym in allowed and catalog[acronym] not in converted:
            converted.append(catalog[acronym])

    logger.debug(
        "Legacy conversion for %s: %s -> %s",
        ruleset.short_name,
        [m.acronym for m in mods],
        [m.acronym for m in converted],
    )
    return converted
