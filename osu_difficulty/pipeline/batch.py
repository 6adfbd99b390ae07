"""Compute difficulty for one beatmap, a beatmap ID, or a folder of beatmaps."""

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path

from tqdm import tqdm

from osu_difficulty.difficulty.adapter import compute_with_trace
from osu_difficulty.parsers.beatmap_parser import load_beatmap
from osu_difficulty.rulesets.mods import convert_to_legacy_difficulty_adjustment_mods, resolve_mods
from osu_difficulty.rulesets.registry import ruleset_for
from osu_difficulty.schemas.beatmap import Beatmap
from osu_difficulty.sources.osu_web import DEFAULT_CACHE_DIR, OsuWebClient, load_beatmap_from_file_or_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DifficultyConfig:
    path: str
    ruleset_id: int | None = None
    mods: tuple[str, ...] = ()
    output_json: bool = False
    no_classic: bool = False
    output_file: Path | None = None
    cache_dir: Path = DEFAULT_CACHE_DIR
    show_progress: bool = False


@dataclass(frozen=True)
class MapResult:
    ruleset_id: int
    beatmap_id: int
    beatmap: str
    mods: list[dict]
    attributes: dict
    strains: list[float]


@dataclass
class ResultSet:
    errors: list[str] = field(default_factory=list)
    results: list[MapResult] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "errors": list(self.errors),
            "results": [asdict(r) for r in self.results],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ResultSet":
        return cls(
            errors=list(data.get("errors", [])),
            results=[MapResult(**r) for r in data.get("results", [])],
        )


def process_beatmap(beatmap: Beatmap, config: DifficultyConfig) -> MapResult:
    """Resolve ruleset and mods for *beatmap* and compute its difficulty."""
    ruleset = ruleset_for(config.ruleset_id if config.ruleset_id is not None else beatmap.mode)
    mods = resolve_mods(config.mods, ruleset)
    if not config.no_classic:
        mods = convert_to_legacy_difficulty_adjustment_mods(ruleset, mods)

    attributes, strains = compute_with_trace(beatmap, ruleset, mods)
    return MapResult(
        ruleset_id=ruleset.online_id,
        beatmap_id=beatmap.online_id,
        beatmap=str(beatmap),
        mods=[m.to_api() for m in mods],
        attributes=attributes,
        strains=strains,
    )


def iter_beatmap_files(folder: Path) -> list[Path]:
    """All ``.osu`` files below *folder*, in path order."""
    return sorted(Path(folder).rglob("*.osu"))


def run_difficulty(config: DifficultyConfig, client: OsuWebClient | None = None) -> ResultSet:
    """Process the configured target into a ResultSet.

    For a folder, every failing beatmap becomes an entry in ``errors`` and
    processing continues. A single file or ID is processed without that
    safety net, so its errors reach the caller.
    """
    result_set = ResultSet()
    target = Path(config.path)

    if config.path and target.is_dir():
        files = iter_beatmap_files(target)
        logger.info("Found %d beatmaps in %s", len(files), target)
        for file in tqdm(files, desc="Computing difficulty", unit="map", disable=not config.show_progress):
            try:
                beatmap = load_beatmap(file)
                result_set.results.append(process_beatmap(beatmap, config))
            except Exception as e:
                logger.debug("Processing %s failed", file, exc_info=True)
                result_set.errors.append(f'Processing beatmap "{file}" failed:\n{e}')
        logger.info(
            "Processed %d beatmaps: %d succeeded, %d failed",
            len(files), len(result_set.results), len(result_set.errors),
        )
    else:
        beatmap = load_beatmap_from_file_or_id(config.path, cache_dir=config.cache_dir, client=client)
        result_set.results.append(process_beatmap(beatmap, config))

    return result_set
