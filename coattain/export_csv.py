"""
CSV export of stored results.

One header row, then one row per record:

    Record ID, Q1 (CO1), Q2 (CO2), ..., CO1, CO2, ..., Total

The file opens directly in Excel / LibreOffice / Google Sheets.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from coattain.aggregate import format_marks
from coattain.model import ExamSetup, StudentRecord


def csv_header(setup: ExamSetup) -> list[str]:
    header = ["Record ID"]
    header.extend(f"Q{q.number} ({q.co})" for q in setup.questions)
    header.extend(setup.co_codes)
    header.append("Total")
    return header


def csv_row(setup: ExamSetup, record: StudentRecord) -> list[str]:
    row = [record.id]
    row.extend(format_marks(record.marks.get(q.number, 0)) for q in setup.questions)
    row.extend(format_marks(record.co_marks.get(code, 0)) for code in setup.co_codes)
    row.append(format_marks(record.total_marks))
    return row


def export_records_to_csv(setup: ExamSetup, records: Iterable[StudentRecord], out_path: str | Path) -> int:
    """
    Export records to a .csv file. Returns number of exported records.
    """
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with out.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(csv_header(setup))
        for record in records:
            writer.writerow(csv_row(setup, record))
            count += 1
    return count
