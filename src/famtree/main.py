"""
Command-line entry point:

1) Load members and relationships from a JSON, GEDCOM or SQLite file.
2) Optionally store them in a SQLite database.
3) Optionally narrow them to the neighbourhood or parental line of one member.
4) Compute the tree layout and report data-integrity warnings.
5) Validate the result for implausible dates.
6) Write the layout as JSON or DOT, or plot it.
"""

import argparse
from contextlib import closing
import json
import logging
from pathlib import Path
import sqlite3
import sys

from famtree.database import create_database, store_data
from famtree.graph import ego_selection, lineage_selection
from famtree.layout import compute_layout, search_members
from famtree.models import LayoutConfig
from famtree.parsing import load_file
from famtree.plotting import plot_layout, to_dot
from famtree.validation import validate_layout

MAX_REPORTED = 10


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="famtree", description="Lay out a family tree diagram.")
    parser.add_argument("input", type=Path, help="Members and relationships (.json, .ged, .db).")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output file: .json, .dot, .png, .svg or .pdf (default: print JSON to stdout).",
    )
    parser.add_argument("--save-db", type=Path, default=None, help="Also store the input in this SQLite file.")
    parser.add_argument("--focus", default=None, help="Only lay out members around this member id.")
    parser.add_argument("--radius", type=int, default=2, help="Relationship distance kept around --focus.")
    parser.add_argument(
        "--lineage",
        choices=["M", "F"],
        default=None,
        help="With --focus, follow the father (M) or mother (F) line instead.",
    )
    parser.add_argument("--search", default=None, help="Highlight members whose name contains this text.")
    parser.add_argument("--center", action="store_true", help="Center the layout on x = 0.")

    defaults = LayoutConfig()
    parser.add_argument("--node-width", type=float, default=defaults.node_width)
    parser.add_argument("--node-height", type=float, default=defaults.node_height)
    parser.add_argument("--margin", type=float, default=defaults.horizontal_margin)
    parser.add_argument("--spouse-gap", type=float, default=defaults.spouse_gap)
    parser.add_argument("--vertical-gap", type=float, default=defaults.vertical_gap)
    parser.add_argument("--component-gap", type=float, default=defaults.component_gap)
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output.")
    return parser


def config_from_args(args: argparse.Namespace) -> LayoutConfig:
    return LayoutConfig(
        node_width=args.node_width,
        node_height=args.node_height,
        horizontal_margin=args.margin,
        spouse_gap=args.spouse_gap,
        vertical_gap=args.vertical_gap,
        component_gap=args.component_gap,
        center=args.center,
    )


def _report(title: str, messages: list[str], out):
    print(f"  Found {len(messages)} {title}:", file=out)
    for message in messages[:MAX_REPORTED]:
        print(f"    - {message}", file=out)
    if len(messages) > MAX_REPORTED:
        print(f"    ... and {len(messages) - MAX_REPORTED} more", file=out)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = config_from_args(args)
    # Progress goes to stderr when the layout itself is written to stdout
    out = sys.stdout if args.output else sys.stderr

    try:
        print(f"Loading: {args.input}", file=out)
        members, relationships = load_file(args.input)
        print(f"  Found {len(members)} members and {len(relationships)} relationships", file=out)

        if args.save_db:
            print(f"Storing data in SQLite: {args.save_db}", file=out)
            with closing(create_database(args.save_db)) as conn:
                store_data(conn, members, relationships)

        if args.focus:
            if args.lineage:
                members, relationships = lineage_selection(
                    members, relationships, args.focus, gender=args.lineage, radius=args.radius
                )
            else:
                members, relationships = ego_selection(members, relationships, args.focus, radius=args.radius)
            print(f"  Kept {len(members)} members around {args.focus}", file=out)
    except (OSError, ValueError, sqlite3.Error) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print("Computing layout...", file=out)
    result = compute_layout(members, relationships, config)
    problems = [w.message for w in result.warnings] + [r.message for r in result.rejections]
    if problems:
        _report("data-integrity warnings", problems, out)

    print("Validating layout...", file=out)
    warnings = validate_layout(result)
    if warnings:
        _report("validation warnings", warnings, out)
    else:
        print("  No validation issues found", file=out)

    highlight = set(search_members(result, args.search)) if args.search else None

    if args.output is None:
        json.dump(result.to_dict(), sys.stdout, indent=2)
        print()
        return 0

    suffix = args.output.suffix.lower()
    if suffix == ".json":
        args.output.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
        print(f"Layout saved to {args.output}")
    elif suffix == ".dot":
        to_dot(result, config).write_raw(str(args.output))
        print(f"Graph saved to {args.output}")
    else:
        plot_layout(result, args.output, config, highlight=highlight)

    print("Done!", file=out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
