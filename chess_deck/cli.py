from __future__ import annotations

import argparse

from .config import load_config
from .errors import ChessDeckError
from .pipeline import DeckPipeline, RunOptions
from .utils import format_stats
from .validator import validate_apkg


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="chess_deck", description="Convert PGN repertoires into an Anki deck")
    sub = p.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Build an .apkg deck from PGN files")
    build.add_argument("out", help="Filename of the output .apkg deck file")
    build.add_argument(
        "-w",
        "--white",
        action="append",
        default=[],
        metavar="PGN",
        help="PGN file processed from White's perspective (repeatable)",
    )
    build.add_argument(
        "-b",
        "--black",
        action="append",
        default=[],
        metavar="PGN",
        help="PGN file processed from Black's perspective (repeatable)",
    )
    build.add_argument("--squares", action="store_true", help="Add the 64 square-recognition notes")
    build.add_argument("--font", default=None, help="Chess font (.ttf) bundled as deck media (required here or in --config)")
    build.add_argument("--deck-name", default=None, help="Deck name (overrides config)")
    build.add_argument(
        "--split-answers",
        action="store_true",
        default=None,
        help="One card per move instead of merging transpositions",
    )
    build.add_argument("--config", default=None, help="JSON config path")

    validate = sub.add_parser("validate", help="Check an exported .apkg")
    validate.add_argument("apkg", help="Path to the .apkg file")
    validate.add_argument("--expect-notes", type=int, default=None)
    validate.add_argument("--expect-font", action="store_true", help="Require the bundled chess font")

    return p


def cmd_build(args: argparse.Namespace) -> int:
    try:
        cfg = load_config(args.config).with_overrides(
            font_path=args.font,
            deck_name=args.deck_name,
            split_answers=args.split_answers,
        )
    except (OSError, ValueError, TypeError) as e:
        print(f"config_failed: {e}")
        return 1

    opts = RunOptions(out_path=args.out, white=list(args.white), black=list(args.black), squares=bool(args.squares))
    try:
        stats = DeckPipeline(cfg=cfg, opts=opts).run()
    except (ChessDeckError, OSError) as e:
        print(f"build_failed: {e}")
        return 1

    print(format_stats(stats))
    print(args.out)
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    ok, report = validate_apkg(args.apkg, expect_notes=args.expect_notes, expect_font=bool(args.expect_font))
    print(f"notes_total={report.get('notes_total', 0)}")
    for w in report.get("warnings", []):
        print(f"warning: {w}")
    if not ok:
        for m in report.get("errors", []):
            print(m)
        return 1

    print("OK")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "build":
        return cmd_build(args)

    if args.command == "validate":
        return cmd_validate(args)

    raise SystemExit(2)


if __name__ == "__main__":
    raise SystemExit(main())
