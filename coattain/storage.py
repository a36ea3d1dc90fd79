"""
Persistent storage for the active exam setup and the stored results.

This module manages two files inside the data directory:

    data/exam_setup.json   the active ExamSetup
    data/records.json      stored StudentRecords of that exam

Design rationale:
- the setup is replaced wholesale when the user edits it
- records belong to one exam; records.json remembers the exam name so the
  caller can detect records left over from a different setup
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Iterable, Optional

from coattain.errors import SetupError
from coattain.model import ExamSetup, StudentRecord
from coattain.validate import validate_setup

logger = logging.getLogger(__name__)

SETUP_FILENAME = "exam_setup.json"
RECORDS_FILENAME = "records.json"


def default_data_dir() -> Path:
    """
    Return the default data directory inside the package.

    Using a function instead of a constant makes testing easier,
    because tests can override the path.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data"


def _setup_path(path: str | Path | None) -> Path:
    return Path(path) if path is not None else default_data_dir() / SETUP_FILENAME


def _records_path(path: str | Path | None) -> Path:
    return Path(path) if path is not None else default_data_dir() / RECORDS_FILENAME


def _write_json(path: Path, payload: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def load_exam_setup(path: str | Path | None = None) -> Optional[ExamSetup]:
    """
    Load the active exam setup.

    Returns None if the file does not exist, is unreadable, or no longer passes
    validation. A broken file never crashes the application.
    """
    setup_path = _setup_path(path)

    # First run: nothing saved yet
    if not setup_path.exists():
        return None

    try:
        data = json.loads(setup_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Could not read %s: %s", setup_path, e)
        return None

    if not isinstance(data, dict):
        logger.warning("Ignoring %s: not a JSON object", setup_path)
        return None

    try:
        return validate_setup(data)
    except SetupError as e:
        logger.warning("Ignoring stored exam setup in %s: %s", setup_path, e)
        return None


def save_exam_setup(setup: ExamSetup, path: str | Path | None = None) -> None:
    """
    Save the exam setup. Creates parent directories if needed.
    """
    _write_json(_setup_path(path), setup.to_dict())


def _read_records_file(records_path: Path) -> tuple[Optional[str], list[StudentRecord]]:
    """
    (exam name, records) of records.json. Missing/invalid file -> (None, []).

    Single broken entries are skipped, the rest is kept.
    """
    if not records_path.exists():
        return None, []

    try:
        data = json.loads(records_path.read_text(encoding="utf-8"))
        name = data.get("exam")
        entries = data.get("records", [])
    except (OSError, json.JSONDecodeError, UnicodeDecodeError, AttributeError) as e:
        logger.warning("Could not read %s: %s", records_path, e)
        return None, []

    exam = name if isinstance(name, str) else None
    if not isinstance(entries, list):
        return exam, []

    out: list[StudentRecord] = []
    for entry in entries:
        try:
            out.append(StudentRecord.from_dict(entry))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping broken record %r: %s", entry, e)
    return exam, out


def load_records(path: str | Path | None = None, exam_name: Optional[str] = None) -> list[StudentRecord]:
    """
    Load stored records. Returns [] if the file does not exist or is invalid.

    With exam_name, records stored for a different exam are not returned:
    their columns would not line up with the current setup.
    """
    records_path = _records_path(path)
    exam, records = _read_records_file(records_path)
    if exam_name is not None and exam is not None and exam != exam_name:
        logger.info("Ignoring %d record(s) of exam %r in %s", len(records), exam, records_path)
        return []
    return records


def adopt_records(path: str | Path | None, exam_name: str) -> list[StudentRecord]:
    """
    Make records.json belong to exam_name: records of another exam are removed.

    Returns the records that were kept.
    """
    kept = load_records(path, exam_name=exam_name)
    save_records(kept, path, exam_name=exam_name)
    return kept


def save_records(
    records: Iterable[StudentRecord], path: str | Path | None = None, exam_name: Optional[str] = None
) -> None:
    """
    Save records in the order given. Creates parent directories if needed.
    """
    payload = {"exam": exam_name, "records": [r.to_dict() for r in records]}
    _write_json(_records_path(path), payload)


_RECORD_ID_RE = re.compile(r"^R(\d+)$")


def next_record_id(records: Iterable[StudentRecord]) -> str:
    """
    Next free automatic id: R001, R002, ...
    """
    highest = 0
    for r in records:
        m = _RECORD_ID_RE.match(r.id)
        if m:
            highest = max(highest, int(m.group(1)))
    return f"R{highest + 1:03d}"
