"""Render a ResultSet as a JSON document or as a grouped text report."""

import json
import logging
from pathlib import Path
from typing import TextIO

from osu_difficulty.pipeline.batch import MapResult, ResultSet
from osu_difficulty.rulesets.registry import ruleset_for

logger = logging.getLogger(__name__)

COLUMN_GAP = "  "


# --- JSON --------------------------------------------------------------------


def result_set_to_json(result_set: ResultSet) -> str:
    return json.dumps(result_set.to_dict(), allow_nan=False)


def read_result_set(text: str) -> ResultSet:
    """Parse a document produced by ``result_set_to_json``."""
    return ResultSet.from_dict(json.loads(text))


def _emit(text: str, stream: TextIO, output_file: Path | None) -> None:
    print(text, file=stream)
    if output_file is not None:
        Path(output_file).write_text(text, encoding="utf-8")
        logger.info("Wrote results to %s", output_file)


def write_json(result_set: ResultSet, stream: TextIO, output_file: Path | None = None) -> None:
    """Print the JSON document and, if requested, save the same text to a file."""
    _emit(result_set_to_json(result_set), stream, output_file)


# --- Text report -------------------------------------------------------------


def humanize_key(key: str) -> str:
    """``star_rating`` -> ``Star rating``."""
    words = key.replace("_", " ").replace("-", " ").split()
    text = " ".join(words).lower()
    return text[:1].upper() + text[1:]


def format_value(value) -> str:
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (int, float)):
        return f"{value:,.2f}"
    return str(value)


def _render_grid(results: list[MapResult]) -> list[str]:
    """Lay out one ruleset group as aligned rows.

    Columns come from the first result's attribute keys; later results
    render those keys only (missing keys stay blank, extra keys are dropped).
    """
    keys = list(results[0].attributes.keys())
    header = ["beatmap"] + [humanize_key(k) for k in keys]
    rows = [
        [f"{r.beatmap_id} - {r.beatmap}"]
        + [format_value(r.attributes[k]) if k in r.attributes else "" for k in keys]
        for r in results
    ]

    widths = [max(len(row[i]) for row in [header] + rows) for i in range(len(header))]

    def _line(cells: list[str], align_values: bool) -> str:
        parts = [cells[0].ljust(widths[0])]
        for cell, width in zip(cells[1:], widths[1:]):
            parts.append(cell.rjust(width) if align_values else cell.ljust(width))
        return COLUMN_GAP.join(parts).rstrip()

    lines = [_line(header, align_values=False)]
    lines.append(COLUMN_GAP.join("-" * w for w in widths))
    lines.extend(_line(row, align_values=True) for row in rows)
    return lines


def render_report(result_set: ResultSet) -> str:
    """Errors first, then one grid per ruleset in order of first appearance."""
    lines: list[str] = list(result_set.errors)
    if result_set.errors:
        lines.append("")

    groups: dict[int, list[MapResult]] = {}
    for result in result_set.results:
        groups.setdefault(result.ruleset_id, []).append(result)

    for ruleset_id, results in groups.items():
        lines.append(f"ruleset: {ruleset_for(ruleset_id).short_name}")
        lines.extend(_render_grid(results))
        lines.append("")

    return "\n".join(lines)


def write_report(result_set: ResultSet, stream: TextIO, output_file: Path | None = None) -> None:
    """Print the text report and, if requested, save the same text to a file."""
    _emit(render_report(result_set), stream, output_file)
