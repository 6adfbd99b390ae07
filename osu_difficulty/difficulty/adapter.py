"""Run the difficulty engine for one beatmap and pull out a strain trace."""

import logging

from osu_difficulty.difficulty.calculators import ExtendedDifficultyCalculator, create_difficulty_calculator
from osu_difficulty.rulesets.mods import Mod
from osu_difficulty.rulesets.registry import Ruleset
from osu_difficulty.schemas.beatmap import Beatmap

logger = logging.getLogger(__name__)


def compute_with_trace(
    beatmap: Beatmap, ruleset: Ruleset, mods: list[Mod]
) -> tuple[dict, list[float]]:
    """Return (attributes, strains) for *beatmap* under *ruleset* and *mods*.

    Skill state is only populated as a side effect of ``calculate()``, so
    both passes run on the same calculator instance. The strain series is
    the section peaks of the first exposed skill; calculators that do not
    expose skills yield an empty series.
    """
    calculator = create_difficulty_calculator(ruleset, beatmap)

    calculator.calculate()
    attributes = calculator.calculate(mods)

    skills = []
    if isinstance(calculator, ExtendedDifficultyCalculator):
        skills = calculator.get_skills()

    strains = [float(peak) for peak in skills[0].get_current_strain_peaks()] if skills else []
    logger.debug(
        "%s [%s] %s: %d skills, %d strain sections",
        beatmap, ruleset.short_name, [m.acronym for m in mods], len(skills), len(strains),
    )
    return attributes, strains
