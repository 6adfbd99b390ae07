"""Error types raised while loading beatmaps and computing difficulty."""


class OsuDifficultyError(Exception):
    """Base class for failures tied to a single beatmap."""


class InvalidModifierError(OsuDifficultyError):
    """A mod acronym did not match any mod of the active ruleset."""

    def __init__(self, token: str):
        super().__init__(f"Invalid mod provided: {token}")
        self.token = token


class BeatmapLoadError(OsuDifficultyError):
    """A beatmap file is missing, unreadable or malformed."""


class CalculationError(OsuDifficultyError):
    """The difficulty engine could not handle a beatmap/ruleset pairing."""
