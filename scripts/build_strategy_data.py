#!/usr/bin/env python3
"""Build and inspect strategy data sets (JSON).

Commands:
    dump      Write the built-in data set to a JSON file.
    import    Merge baseline tables from CSV files into a data set.
    validate  Load a data set and report schema violations.
    list      Summarize the baseline tables in a data set.
    show      Print the 13×13 range for one preflop context.

CSV File Format:
    Each CSV file is one baseline table. The filename encodes its key:

        {FORMAT}_{STAGE}_{SEAT}_{SPOT}_{bucket}.csv   (tournament)
        {FORMAT}_{SEAT}_{SPOT}_{bucket}.csv           (cash)

    bucket is one of: shallow (<=20bb), mid (21-40bb), standard
    (41-80bb), deep (>80bb).

    Examples:
        CASH_BTN_RFI_deep.csv
        TOURNAMENT_NEAR_BUBBLE_CO_VS_OPEN_shallow.csv

    CSV columns:
        hand        Required. Hand notation ("AA", "AKs", "T7o") or a
                    range ("A5s-A2s").
        <category>  One column per range category: AllIn_Red,
                    Raise_Orange, Bluff_Purple, Call_Green, Limp_Yellow.
                    A Fold_Gray column is ignored; fold is the remainder.

    Example CSV (CASH_SB_RFI_deep.csv):
        hand,Raise_Orange,Limp_Yellow,Fold_Gray
        AA,1.00,0.00,0.00
        T7o,0.00,0.83,0.17

    Values below 0.001 are dropped (noise removal).

Usage:
    python scripts/build_strategy_data.py dump strategy.json
    python scripts/build_strategy_data.py import data/csvs/ -o strategy.json
    python scripts/build_strategy_data.py import data/csvs/ --base strategy.json -o out.json
    python scripts/build_strategy_data.py validate strategy.json
    python scripts/build_strategy_data.py list strategy.json
    python scripts/build_strategy_data.py show --format CASH --seat BTN --spot RFI --stack 100
"""

from __future__ import annotations

import argparse
import csv
import json
import logging
import re
import sys
from pathlib import Path

from range_coach.core.context import PreflopContext
from range_coach.core.errors import ContextError, StrategyDataError
from range_coach.solver import SolveEngine
from range_coach.strategy.builtin_data import generate_strategy_data
from range_coach.strategy.strategy_data import AUTHORED_CATEGORIES, StrategyData
from range_coach.utils.constants import RangeCategory, Seat, Spot, StackBucket, TournamentStage

_BUCKET_ALIASES: dict[str, StackBucket] = {
    "shallow": StackBucket.SHALLOW,
    "mid": StackBucket.MID,
    "standard": StackBucket.STANDARD,
    "deep": StackBucket.DEEP,
}

_FILENAME_PATTERN = re.compile(
    r"^(CASH|TOURNAMENT)_(?:(%s)_)?(%s)_(%s)_(%s)\.csv$" % (
        "|".join(s.value for s in TournamentStage),
        "|".join(sorted((s.value for s in Seat), key=len, reverse=True)),
        "|".join(sorted((s.value for s in Spot), key=len, reverse=True)),
        "|".join(_BUCKET_ALIASES),
    )
)

_MIN_FREQUENCY = 0.001  # Skip values below this threshold

_CATEGORY_INITIALS: dict[RangeCategory, str] = {
    RangeCategory.ALL_IN: "A",
    RangeCategory.RAISE: "R",
    RangeCategory.BLUFF: "B",
    RangeCategory.CALL: "C",
    RangeCategory.LIMP: "L",
    RangeCategory.FOLD: ".",
}

logger = logging.getLogger("range_coach.scripts")


def parse_filename(path: Path) -> dict[str, str | None] | None:
    """Extract the baseline key fields from a CSV filename.

    Returns None if the filename doesn't match the expected pattern, or if
    the stage does not agree with the format.
    """
    match = _FILENAME_PATTERN.match(path.name)
    if not match:
        return None

    fmt, stage, seat, spot, bucket = match.groups()
    if (fmt == "TOURNAMENT") != (stage is not None):
        return None
    return {
        "format": fmt,
        "stage": stage,
        "seat": seat,
        "spot": spot,
        "stack_bucket": _BUCKET_ALIASES[bucket].value,
    }


def read_csv_table(csv_path: Path) -> dict | None:
    """Read one CSV file into a baseline table entry.

    Returns None (after printing why) for files that cannot be used.
    """
    key = parse_filename(csv_path)
    if key is None:
        print(f"  SKIP {csv_path.name}: filename doesn't match pattern")
        return None

    authored = {c.value for c in AUTHORED_CATEGORIES}
    with open(csv_path, newline="") as f:
        reader = csv.DictReader(f)
        fieldnames = reader.fieldnames or []
        if "hand" not in fieldnames:
            print(f"  SKIP {csv_path.name}: missing 'hand' column")
            return None

        columns = [col for col in fieldnames if col in authored]
        if not columns:
            print(f"  SKIP {csv_path.name}: no category columns found")
            return None

        hands: dict[str, dict[str, float]] = {}
        for row in reader:
            hand = (row.get("hand") or "").strip()
            if not hand:
                continue
            mix: dict[str, float] = {}
            for col in columns:
                raw = (row.get(col) or "0").strip()
                try:
                    value = float(raw)
                except ValueError:
                    print(f"  WARN {csv_path.name}: {hand} {col}='{raw}' is not a number")
                    continue
                if value >= _MIN_FREQUENCY:
                    mix[col] = value
            if mix:
                hands[hand] = mix

    return {**key, "hands": hands}


def _table_key(entry: dict) -> tuple:
    return (entry["format"], entry.get("stage"), entry["seat"], entry["spot"], entry["stack_bucket"])


def import_path(target: Path, data: dict) -> int:
    """Merge a CSV file, or every CSV in a directory, into ``data``.

    Tables with an existing key replace the old table.

    Returns:
        Number of tables imported.
    """
    if target.is_file():
        csv_files = [target]
    elif target.is_dir():
        csv_files = sorted(target.glob("*.csv"))
        if not csv_files:
            print(f"No CSV files found in {target}")
            return 0
    else:
        print(f"Path not found: {target}")
        return 0

    index = {_table_key(e): i for i, e in enumerate(data["baseline"])}
    imported = 0
    for csv_path in csv_files:
        entry = read_csv_table(csv_path)
        if entry is None:
            continue
        key = _table_key(entry)
        if key in index:
            data["baseline"][index[key]] = entry
            verb = "replaced"
        else:
            index[key] = len(data["baseline"])
            data["baseline"].append(entry)
            verb = "added"
        print(f"  {csv_path.name}: {len(entry['hands'])} hands ({verb})")
        imported += 1
    return imported


def _load_raw(path: Path | None) -> dict:
    if path is None:
        return generate_strategy_data()
    with open(path) as f:
        return json.load(f)


def _write(data: dict, out: Path) -> None:
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w") as f:
        json.dump(data, f, indent=1)
    print(f"Wrote {out}")


def cmd_dump(args: argparse.Namespace) -> int:
    data = generate_strategy_data()
    _write(data, args.out)
    print(f"{len(data['baseline'])} baseline tables, {len(data['adjustments'])} adjustments")
    return 0


def cmd_import(args: argparse.Namespace) -> int:
    data = _load_raw(args.base)
    imported = import_path(args.path, data)
    if imported == 0:
        return 1
    try:
        StrategyData.from_dict(data)
    except StrategyDataError as e:
        print(f"Import produced an invalid data set: {e}")
        return 1
    print(f"\nImported {imported} tables")
    if args.dry_run:
        print("[DRY RUN] nothing written")
        return 0
    _write(data, args.out)
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    try:
        data = StrategyData.from_json(args.path)
    except StrategyDataError as e:
        print(f"INVALID {e}")
        return 1
    print(f"OK {args.path}: version {data.version}, {len(data)} baseline tables, "
          f"{len(data.adjustments)} adjustments")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    try:
        data = StrategyData.from_json(args.path) if args.path else SolveEngine().data
    except StrategyDataError as e:
        print(f"INVALID {e}")
        return 1

    print(f"Data set {data.version} ({len(data)} baseline tables)\n")
    print(f"{'Format':<11} {'Stage':<19} {'Seat':<5} {'Spot':<10} {'Stack':<8} Categories")
    print("-" * 78)
    for key in data.baseline_keys:
        table = data.baseline_for(key)
        offered = ",".join(sorted(c.value.split("_")[0] for c in table.offered))
        stage = key.stage.value if key.stage else "-"
        print(f"{key.format:<11} {stage:<19} {key.seat:<5} {key.spot:<10} "
              f"{key.stack_bucket:<8} {offered}")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    try:
        ctx = PreflopContext.from_dict({
            "format": args.format,
            "stage": args.stage,
            "hero_seat": args.seat,
            "villain_seat": args.vs,
            "spot": args.spot,
            "hero_stack_bb": args.stack,
            "tendency": args.tendency,
        })
    except ContextError as e:
        print(f"Invalid context: {e.message}")
        return 1

    engine = SolveEngine(data=StrategyData.from_json(args.data) if args.data else None)
    result = engine.solve_preflop(ctx)
    if not result.ok:
        print(f"Rejected ({result.code}): {result.message}")
        return 1

    print(result.key)
    for row in result.grid:
        print(" ".join(f"{c.hand:>3}{_CATEGORY_INITIALS[c.dominant]}" for c in row))
    print()
    for category, description in result.legend.items():
        print(f"  {_CATEGORY_INITIALS[category]} {category.value:<13} {description}")
    if result.adjustments:
        print(f"\nAdjustments: {', '.join(result.adjustments)}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Build and inspect preflop strategy data sets.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    p = sub.add_parser("dump", help="Write the built-in data set to JSON")
    p.add_argument("out", type=Path)
    p.set_defaults(func=cmd_dump)

    p = sub.add_parser("import", help="Merge CSV baseline tables into a data set")
    p.add_argument("path", type=Path, help="CSV file or directory to import")
    p.add_argument("--base", type=Path, default=None,
                   help="Data set to merge into (default: built-in data)")
    p.add_argument("-o", "--out", type=Path, default=Path("strategy.json"))
    p.add_argument("--dry-run", action="store_true",
                   help="Parse and validate without writing")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("validate", help="Validate a JSON data set")
    p.add_argument("path", type=Path)
    p.set_defaults(func=cmd_validate)

    p = sub.add_parser("list", help="List baseline tables")
    p.add_argument("path", type=Path, nargs="?", help="JSON data set (default: built-in)")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("show", help="Print the range grid for a preflop context")
    p.add_argument("--format", default="CASH")
    p.add_argument("--stage", default=None)
    p.add_argument("--seat", required=True)
    p.add_argument("--vs", default=None, help="Villain seat")
    p.add_argument("--spot", default="RFI")
    p.add_argument("--stack", type=float, default=100.0)
    p.add_argument("--tendency", default="GTO")
    p.add_argument("--data", type=Path, default=None, help="JSON data set (default: built-in)")
    p.set_defaults(func=cmd_show)

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        sys.exit(2)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
