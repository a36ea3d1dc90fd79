"""
CLI (Command Line Interface).

This module provides quick terminal commands for power users and for testing, e.g.:

    coattain setup <config.json>
    coattain show
    coattain calc 1=5 2=3 [--save [ID]]
    coattain records
    coattain remove <record_id>
    coattain export <file.csv>
    coattain interactive

Note:
- The interactive UI lives in coattain/interactive.py
- This CLI is intentionally simple and prints plain text (no rich formatting)
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from coattain.aggregate import aggregate, display_order, format_marks, percentage, possible_marks_by_co
from coattain.errors import CalculatorError
from coattain.export_csv import export_records_to_csv
from coattain.model import CalculatedMarks, ExamSetup, StudentRecord
from coattain.storage import (
    RECORDS_FILENAME,
    SETUP_FILENAME,
    adopt_records,
    default_data_dir,
    load_exam_setup,
    load_records,
    next_record_id,
    save_exam_setup,
    save_records,
)
from coattain.validate import validate_setup

logger = logging.getLogger(__name__)


class DataFiles:
    """
    Locations of exam_setup.json and records.json for one CLI run.
    """

    def __init__(self, data_dir: str | Path | None = None) -> None:
        base = Path(data_dir) if data_dir else default_data_dir()
        self.setup = base / SETUP_FILENAME
        self.records = base / RECORDS_FILENAME


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _require_setup(files: DataFiles) -> Optional[ExamSetup]:
    setup = load_exam_setup(files.setup)
    if setup is None:
        print("No exam setup yet. Run 'coattain setup <config.json>' or 'coattain interactive' first.")
    return setup


def _fmt_pct(obtained: float, possible: float) -> str:
    pct = percentage(obtained, possible)
    return "-" if pct is None else f"{pct:.1f}%"


def print_result(setup: ExamSetup, calc: CalculatedMarks) -> None:
    """
    Plain-text summary of one calculation.
    """
    possible = possible_marks_by_co(setup)
    print(f"{setup.name}")
    print(f"Total: {format_marks(calc.total_marks)} / {format_marks(setup.total_marks)} "
          f"({_fmt_pct(calc.total_marks, setup.total_marks)})")
    print("CO-wise:")
    for code, marks in calc.co_marks.items():
        poss = possible.get(code, 0)
        print(f"- {code}: {format_marks(marks)} / {format_marks(poss)} ({_fmt_pct(marks, poss)})")
    print("Question-wise:")
    for q in display_order(setup.questions):
        got = calc.question_marks.get(q.number, 0)
        print(f"- Q{q.number} ({q.co}): {format_marks(got)} / {format_marks(q.marks)}")


def _cmd_setup(args: argparse.Namespace, files: DataFiles) -> int:
    """
    Validate a JSON configuration file and make it the active setup.
    """
    src = Path(args.config)
    try:
        raw = json.loads(src.read_text(encoding="utf-8"))
    except FileNotFoundError:
        print(f"File not found: {src}")
        return 1
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        print(f"Could not read {src}: {e}")
        return 1

    if not isinstance(raw, dict):
        print("Configuration must be a JSON object.")
        return 1

    warnings: list[str] = []
    try:
        setup = validate_setup(raw, warnings=warnings)
    except CalculatorError as e:
        print(f"Invalid setup: {e}")
        return 1

    for w in warnings:
        print(f"Warning: {w}")

    previous = load_exam_setup(files.setup)
    stored = len(load_records(files.records))
    save_exam_setup(setup, files.setup)

    # records of another setup would no longer line up with the columns
    if previous is not None and previous != setup:
        save_records([], files.records, exam_name=setup.name)
        kept = 0
    else:
        kept = len(adopt_records(files.records, setup.name))
    if kept < stored:
        print(f"{stored - kept} stored record(s) of a previous setup were cleared.")

    print(f"Saved exam setup: {setup.name} ({len(setup.cos)} COs, {len(setup.questions)} questions, "
          f"total {format_marks(setup.total_marks)})")
    return 0


def _cmd_show(args: argparse.Namespace, files: DataFiles) -> int:
    setup = _require_setup(files)
    if setup is None:
        return 1

    print(f"{setup.name} | total marks: {format_marks(setup.total_marks)}")
    print("COs: " + ", ".join(setup.co_codes))
    for q in setup.questions:
        print(f"- Q{q.number} ({q.co}): {format_marks(q.marks)} marks")
    return 0


def _parse_mark_args(pairs: list[str]) -> dict[str, str]:
    """
    ["1=5", "2=3.5"] -> {"1": "5", "2": "3.5"}. Raises ValueError on bad syntax.
    """
    out: dict[str, str] = {}
    for pair in pairs:
        number, sep, value = pair.partition("=")
        number = number.strip()
        if not sep or not number:
            raise ValueError(f"Expected <question>=<marks>, got {pair!r}")
        out[number] = value.strip()
    return out


def _cmd_calc(args: argparse.Namespace, files: DataFiles) -> int:
    """
    Aggregate marks given on the command line against the active setup.
    """
    setup = _require_setup(files)
    if setup is None:
        return 1

    try:
        marks = _parse_mark_args(args.marks)
    except ValueError as e:
        print(str(e))
        return 1

    unknown = sorted(set(marks) - set(setup.question_numbers))
    if unknown:
        print("Unknown question(s): " + ", ".join(unknown))
        return 1

    try:
        calc = aggregate(setup, marks)
    except CalculatorError as e:
        print(str(e))
        return 1

    print_result(setup, calc)

    if args.save is not None:
        records = load_records(files.records, exam_name=setup.name)
        record_id = args.save.strip() or next_record_id(records)
        if any(r.id == record_id for r in records):
            print(f"Record ID already exists: {record_id}")
            return 1
        records.append(StudentRecord.from_calculated(record_id, calc))
        save_records(records, files.records, exam_name=setup.name)
        print(f"Saved record: {record_id} (records: {len(records)})")

    return 0


def _cmd_records(args: argparse.Namespace, files: DataFiles) -> int:
    setup = _require_setup(files)
    if setup is None:
        return 1

    records = load_records(files.records, exam_name=setup.name)
    if not records:
        print("No records found.")
        return 0

    for r in records:
        cos = " ".join(f"{code}={format_marks(r.co_marks.get(code, 0))}" for code in setup.co_codes)
        print(f"{r.id} | {cos} | Total={format_marks(r.total_marks)}")
    return 0


def _cmd_remove(args: argparse.Namespace, files: DataFiles) -> int:
    """
    Remove a stored record by id.
    """
    record_id = (args.record_id or "").strip()
    if not record_id:
        print("Please provide a record id.")
        return 1

    setup = _require_setup(files)
    if setup is None:
        return 1

    records = load_records(files.records, exam_name=setup.name)
    kept = [r for r in records if r.id != record_id]
    if len(kept) == len(records):
        print(f"No such record: {record_id}")
        return 1

    save_records(kept, files.records, exam_name=setup.name)
    print(f"Removed: {record_id} (records: {len(kept)})")
    return 0


def _cmd_export(args: argparse.Namespace, files: DataFiles) -> int:
    """
    Export stored records into a CSV file.
    """
    setup = _require_setup(files)
    if setup is None:
        return 1

    records = load_records(files.records, exam_name=setup.name)
    if not records:
        print("No records to export.")
        return 0

    out_path = (args.out or "").strip()
    if not out_path:
        print("Please provide output .csv path.")
        return 1

    n = export_records_to_csv(setup, records, out_path)
    print(f"Exported {n} records to: {out_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="coattain", description="Course Outcome (CO) marks calculator")
    parser.add_argument("--data-dir", type=str, default=None, help="Directory for exam_setup.json / records.json")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_setup = sub.add_parser("setup", help="Validate a JSON exam configuration and make it active")
    p_setup.add_argument("config", type=str, help="Path to the configuration JSON")

    sub.add_parser("show", help="Show the active exam setup")

    p_calc = sub.add_parser("calc", help="Calculate CO-wise marks")
    p_calc.add_argument("marks", nargs="*", help="Obtained marks as <question>=<marks> (missing = 0)")
    p_calc.add_argument(
        "--save", nargs="?", const="", default=None, metavar="ID", help="Store the result as a record"
    )

    sub.add_parser("records", help="List stored records")

    p_remove = sub.add_parser("remove", help="Remove a stored record")
    p_remove.add_argument("record_id", type=str, help="Record ID (e.g. R001)")

    p_export = sub.add_parser("export", help="Export stored records to .csv")
    p_export.add_argument("out", type=str, help="Output file path (e.g. results.csv)")

    sub.add_parser("interactive", help="Interactive menu mode")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    files = DataFiles(args.data_dir)
    logger.debug("Using %s and %s", files.setup, files.records)

    if args.command == "setup":
        raise SystemExit(_cmd_setup(args, files))
    if args.command == "show":
        raise SystemExit(_cmd_show(args, files))
    if args.command == "calc":
        raise SystemExit(_cmd_calc(args, files))
    if args.command == "records":
        raise SystemExit(_cmd_records(args, files))
    if args.command == "remove":
        raise SystemExit(_cmd_remove(args, files))
    if args.command == "export":
        raise SystemExit(_cmd_export(args, files))

    if args.command == "interactive":
        from coattain.interactive import run_interactive

        run_interactive(files)
        raise SystemExit(0)

    raise SystemExit(2)
