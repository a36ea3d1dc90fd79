from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.progress_bar import ProgressBar
from rich.table import Table

from coattain.aggregate import display_order, format_marks, percentage, possible_marks_by_co
from coattain.cli import DataFiles
from coattain.errors import AggregationError, SetupError
from coattain.export_csv import export_records_to_csv
from coattain.model import ExamSetup, StudentRecord
from coattain.session import MarkingSession
from coattain.storage import (
    adopt_records,
    load_exam_setup,
    load_records,
    next_record_id,
    save_exam_setup,
    save_records,
)
from coattain.validate import validate_setup


console = Console()


@dataclass
class MenuState:
    files: DataFiles
    setup: Optional[ExamSetup] = None
    session: Optional[MarkingSession] = None
    records: list[StudentRecord] = field(default_factory=list)

    def activate(self, setup: ExamSetup) -> None:
        self.setup = setup
        self.session = MarkingSession(setup)


def _println(msg: str = "") -> None:
    console.print(msg)


def _prompt(msg: str) -> str:
    return console.input(msg, markup=False)


def load_state(files: DataFiles) -> MenuState:
    state = MenuState(files=files)
    setup = load_exam_setup(files.setup)
    if setup is not None:
        state.activate(setup)
        state.records = load_records(files.records, exam_name=setup.name)
    return state


def run_interactive(files: DataFiles) -> None:
    """
    Interactive menu loop: exam setup, marks entry, results and records.
    """
    state = load_state(files)

    while True:
        _print_header(state)

        choice = _prompt(
            "\n[1] Exam setup\n"
            "[2] Enter marks\n"
            "[3] Calculate + show results\n"
            "[4] Reset marks\n"
            "[5] Save result as record\n"
            "[6] View records\n"
            "[7] Delete a record\n"
            "[8] Export records .csv\n"
            "[0] Exit\n"
            "Select: "
        ).strip()

        if choice == "0":
            _println("Bye.")
            return

        if choice == "1":
            _flow_setup(state)
            continue

        # everything else needs an active setup (like the disabled entry tab)
        if choice in {"2", "3", "4", "5", "6", "7", "8"} and state.session is None:
            _println("No exam setup yet. Choose [1] first.")
            continue

        if choice == "2":
            _flow_enter_marks(state)
        elif choice == "3":
            _flow_calculate(state)
        elif choice == "4":
            state.session.reset()
            _println("Marks reset to 0.")
        elif choice == "5":
            _flow_save_record(state)
        elif choice == "6":
            _flow_view_records(state)
        elif choice == "7":
            _flow_delete_record(state)
        elif choice == "8":
            _flow_export(state)
        else:
            _println("Invalid choice.")


def _print_header(state: MenuState) -> None:
    _println("\n=== CO Marks Calculator ===")
    if state.setup is None:
        _println("Exam: (no setup yet)")
        return
    s = state.setup
    _println(
        f"Exam: [bold cyan]{escape(s.name)}[/] | total marks: {format_marks(s.total_marks)} | "
        f"COs: {len(s.cos)} | questions: {len(s.questions)} | records: {len(state.records)}"
    )


def _ask(msg: str, default: str = "") -> str:
    """
    Prompt with an optional default shown in brackets; blank input keeps the default.
    """
    suffix = f" [{default}]" if default else ""
    value = _prompt(f"{msg}{suffix}: ").strip()
    return value if value else default


def _collect_raw_setup(current: Optional[ExamSetup]) -> dict[str, Any]:
    """
    Ask for name, total marks, CO codes and questions. Current values are defaults.
    """
    name = _ask("Exam name (e.g. Mid Semester Test-2)", current.name if current else "")
    total = _ask("Total marks (e.g. 20)", format_marks(current.total_marks) if current else "")

    default_cos = ", ".join(current.co_codes) if current else ""
    cos_line = _ask("Course Outcomes, comma separated (e.g. CO1, CO2)", default_cos)
    cos = [{"code": part} for part in cos_line.split(",")]

    questions: list[dict[str, Any]] = []
    if current and _prompt("Keep existing questions? [Y/n]: ").strip().lower() != "n":
        questions = [{"number": q.number, "co": q.co, "marks": q.marks} for q in current.questions]
        if _prompt("Add more questions? [y/N]: ").strip().lower() != "y":
            return {"name": name, "totalMarks": total, "cos": cos, "questions": questions}

    _println("Enter questions (blank question number = done).")
    while True:
        number = _prompt("Question number: ").strip()
        if not number:
            break
        marks = _prompt(f"  Marks for Q{number}: ").strip()
        co = _prompt(f"  Mapped CO for Q{number}: ").strip()
        questions.append({"number": number, "co": co, "marks": marks})

    return {"name": name, "totalMarks": total, "cos": cos, "questions": questions}


def _flow_setup(state: MenuState) -> None:
    """
    Guided exam setup. On success the setup is saved and becomes active.
    """
    while True:
        raw = _collect_raw_setup(state.setup)
        warnings: list[str] = []
        try:
            setup = validate_setup(raw, warnings=warnings)
        except SetupError as e:
            _println(f"[red]{escape(str(e))}[/]")
            if _prompt("Try again? [Y/n]: ").strip().lower() == "n":
                return
            continue
        break

    for w in warnings:
        _println(f"[yellow]Warning:[/] {escape(w)}")

    replacing = state.setup is not None and setup != state.setup
    if replacing and state.records:
        ok = _prompt(f"Replacing the setup clears {len(state.records)} stored record(s). Continue? [y/N]: ")
        if ok.strip().lower() != "y":
            _println("Setup not changed.")
            return

    save_exam_setup(setup, state.files.setup)
    state.activate(setup)

    # records of another exam never stay next to this setup
    if replacing:
        state.records = []
        save_records([], state.files.records, exam_name=setup.name)
    else:
        state.records = adopt_records(state.files.records, setup.name)
    _println(f"Saved exam setup: {escape(setup.name)}")


def _flow_enter_marks(state: MenuState) -> None:
    """
    Ask for each question's obtained marks. Blank keeps the current value.
    """
    session = state.session
    for q in display_order(session.setup.questions):
        while True:
            current = format_marks(session.marks.get(q.number, 0))
            raw = _prompt(f"Q{q.number} ({q.co}) [0-{format_marks(q.marks)}] (now {current}): ").strip()
            if not raw:
                break
            try:
                session.set_mark(q.number, raw)
            except AggregationError as e:
                _println(f"[red]{escape(str(e))}[/]")
                continue
            break
    _println("Marks updated. Choose [3] to calculate.")


def _pct_bar(obtained: float, possible: float) -> Any:
    pct = percentage(obtained, possible)
    if pct is None:
        return "-"
    return ProgressBar(total=100, completed=pct, width=20)


def _pct_text(obtained: float, possible: float) -> str:
    pct = percentage(obtained, possible)
    return "-" if pct is None else f"{pct:.1f}%"


def _flow_calculate(state: MenuState) -> None:
    session = state.session
    setup = session.setup
    try:
        calc = session.calculate()
    except AggregationError as e:
        _println(f"[red]{escape(str(e))}[/]")
        return

    _println(
        f"\n[bold]{format_marks(calc.total_marks)} / {format_marks(setup.total_marks)}[/] Total Marks "
        f"({_pct_text(calc.total_marks, setup.total_marks)})"
    )

    possible = possible_marks_by_co(setup)
    table = Table(title="CO-wise Performance", box=box.SIMPLE)
    table.add_column("Course Outcome")
    table.add_column("Marks", justify="right")
    table.add_column("%", justify="right")
    table.add_column("")
    for code, marks in calc.co_marks.items():
        poss = possible.get(code, 0)
        table.add_row(
            f"[bold cyan]{escape(code)}[/]",
            f"{format_marks(marks)} / {format_marks(poss)}",
            _pct_text(marks, poss),
            _pct_bar(marks, poss),
        )
    console.print(table)

    table = Table(title="Question-wise Marks", box=box.SIMPLE)
    table.add_column("Question")
    table.add_column("CO")
    table.add_column("Marks", justify="right")
    for q in display_order(setup.questions):
        got = calc.question_marks.get(q.number, 0)
        table.add_row(escape(f"Q{q.number}"), escape(q.co), f"{format_marks(got)} / {format_marks(q.marks)}")
    console.print(table)


def _flow_save_record(state: MenuState) -> None:
    calc = state.session.result
    if calc is None:
        _println("No current result. Calculate first ([3]); results are cleared whenever marks change.")
        return

    default_id = next_record_id(state.records)
    record_id = _ask("Record ID", default_id)
    if any(r.id == record_id for r in state.records):
        _println(f"Record ID already exists: {escape(record_id)}")
        return

    state.records.append(StudentRecord.from_calculated(record_id, calc))
    save_records(state.records, state.files.records, exam_name=state.setup.name)
    _println(f"Saved record: {escape(record_id)}")

    if _prompt("Reset marks for the next student? [Y/n]: ").strip().lower() != "n":
        state.session.reset()


def _records_table(setup: ExamSetup, records: list[StudentRecord], title: str) -> Table:
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Record ID")
    for q in setup.questions:
        table.add_column(escape(f"Q{q.number} ({q.co})"), justify="right")
    for code in setup.co_codes:
        table.add_column(escape(code), justify="right")
    table.add_column("Total", justify="right")

    for i, r in enumerate(records, start=1):
        row = [str(i), f"[bold cyan]{escape(r.id)}[/]"]
        row.extend(format_marks(r.marks.get(q.number, 0)) for q in setup.questions)
        row.extend(format_marks(r.co_marks.get(code, 0)) for code in setup.co_codes)
        row.append(f"[yellow]{format_marks(r.total_marks)}[/]")
        table.add_row(*row)
    return table


def _flow_view_records(state: MenuState) -> None:
    if not state.records:
        _println("No records found. Save a result with [5].")
        return
    console.print(_records_table(state.setup, state.records, "Results"))


def _flow_delete_record(state: MenuState) -> None:
    while True:
        if not state.records:
            _println("No records found.")
            return

        console.print(_records_table(state.setup, state.records, "Delete record"))

        pick = _prompt("Enter number to delete (or blank to cancel): ").strip()
        if not pick:
            return
        if not pick.isdigit():
            _println("Not a number.")
            continue

        idx = int(pick)
        if not (1 <= idx <= len(state.records)):
            _println("Out of range.")
            continue

        record = state.records[idx - 1]
        if _prompt(f"Delete {record.id}? [y/N]: ").strip().lower() != "y":
            continue

        del state.records[idx - 1]
        save_records(state.records, state.files.records, exam_name=state.setup.name)
        _println(f"Deleted: {escape(record.id)}")

        more = _prompt("Delete another record? [y/N]: ").strip().lower()
        if more != "y":
            return


def _safe_filename(name: str) -> str:
    """
    Exam name usable as a single file name ("Mid/Term" -> "Mid_Term").
    """
    cleaned = re.sub(r'[\\/:*?"<>|]+', "_", name).strip(" .")
    return cleaned or "exam"


def _flow_export(state: MenuState) -> None:
    if not state.records:
        _println("No records to export.")
        return

    # Default to user's Downloads folder (works on Windows/macOS/Linux)
    downloads = Path.home() / "Downloads"
    default_name = f"{_safe_filename(state.setup.name)}_results.csv"

    out_in = _prompt(f"Please enter desired file name, default is [{default_name}]: ").strip()
    out_path = downloads / (out_in or default_name)

    if out_path.suffix.lower() != ".csv":
        out_path = out_path.with_suffix(".csv")

    n = export_records_to_csv(state.setup, state.records, out_path)
    _println(f"\nExported {n} records.")
    _println(f"Saved to: {escape(str(out_path.resolve()))}")
