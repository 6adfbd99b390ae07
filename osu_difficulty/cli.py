"""Command-line interface for osu-difficulty."""

import argparse
import logging
import sys
from pathlib import Path


def cmd_difficulty(args: argparse.Namespace) -> None:
    from osu_difficulty.pipeline.batch import DifficultyConfig, run_difficulty
    from osu_difficulty.storage.writer import write_json, write_report

    config = DifficultyConfig(
        path=args.path,
        ruleset_id=args.ruleset,
        mods=tuple(args.mods or ()),
        output_json=args.json,
        no_classic=args.no_classic,
        output_file=Path(args.output) if args.output else None,
        cache_dir=Path(args.cache_dir),
        show_progress=sys.stderr.isatty(),
    )
    result_set = run_difficulty(config)

    if config.output_json:
        write_json(result_set, sys.stdout, config.output_file)
    else:
        write_report(result_set, sys.stdout, config.output_file)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="osu-difficulty",
        description="Difficulty attributes and strain profiles for osu! beatmaps",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    sub = parser.add_subparsers(dest="command")

    # difficulty
    diff = sub.add_parser("difficulty", help="Compute the difficulty of a beatmap")
    diff.add_argument("path",
                      help="A beatmap file (.osu), beatmap ID, or a folder containing .osu files")
    diff.add_argument("-r", "--ruleset", type=int, choices=[0, 1, 2, 3], default=None,
                      help="Ruleset to compute for, if the beatmap is convertible "
                           "(0 - osu!, 1 - osu!taiko, 2 - osu!catch, 3 - osu!mania)")
    diff.add_argument("-m", "--m", "--mod", dest="mods", action="append", default=None,
                      help="One for each mod (hr, dt, hd, fl, ez, 4k, 5k, etc...)")
    diff.add_argument("-j", "--json", action="store_true", help="Output results as JSON")
    diff.add_argument("-nc", "--no-classic", action="store_true",
                      help="Keep mods as given instead of converting them to legacy difficulty mods")
    diff.add_argument("-o", "--output", default=None, help="Also write the output to this file")
    diff.add_argument("--cache-dir", default="cache",
                      help="Where beatmaps downloaded by ID are cached (default: cache)")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {
        "difficulty": cmd_difficulty,
    }

    handler = commands.get(args.command)
    if handler:
        handler(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
