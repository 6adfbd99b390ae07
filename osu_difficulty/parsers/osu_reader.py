"""Utility to split an osu! ``.osu`` file into its sections."""

import re
from pathlib import Path

from osu_difficulty.errors import BeatmapLoadError

# Sections made of ``Key: Value`` lines; every other section is kept as raw lines.
MAPPING_SECTIONS = ("General", "Editor", "Metadata", "Difficulty")

_VERSION_RE = re.compile(r"^osu file format v(\d+)$")


def split_sections(lines: list[str]) -> tuple[int, dict]:
    """Split raw ``.osu`` lines into (format_version, sections).

    Mapping sections become ``dict[str, str]``; the rest ``list[str]``.
    Blank lines and ``//`` comments are dropped.
    """
    lines = [line.strip() for line in lines]
    lines = [line for line in lines if line and not line.startswith("//")]
    if not lines:
        raise BeatmapLoadError("Beatmap file is empty")

    match = _VERSION_RE.match(lines[0])
    if match is None:
        raise BeatmapLoadError(f"Missing osu file format header, got: {lines[0]!r}")
    version = int(match.group(1))

    sections: dict = {}
    current = None
    for line in lines[1:]:
        if line.startswith("[") and line.endswith("]"):
            current = line[1:-1]
            sections[current] = {} if current in MAPPING_SECTIONS else []
            continue
        if current is None:
            continue
        if current in MAPPING_SECTIONS:
            key, _, value = line.partition(":")
            sections[current][key.strip()] = value.strip()
        else:
            sections[current].append(line)

    return version, sections


def read_osu_file(filepath: Path) -> tuple[int, dict]:
    """Read a ``.osu`` file from disk. Returns (format_version, sections)."""
    try:
        text = Path(filepath).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise BeatmapLoadError(f"Could not read beatmap file {filepath}: {e}") from e
    return split_sections(text.splitlines())
