"""
Exam setup validation.

Turns a raw configuration (parsed JSON or values collected by the menu) into an
immutable ExamSetup, or raises the first SetupError found.

Raw shape (same as exam_setup.json):

    {"name": str, "totalMarks": number,
     "cos": [{"code": str}, ...],
     "questions": [{"number": str, "co": str, "marks": number}, ...]}

Rule order (first failure wins):
    name -> total marks -> COs -> duplicate COs -> questions
    -> duplicate questions -> unknown CO references -> total marks sum

Malformed CO/question entries are dropped, not reported as errors.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional

from coattain.errors import (
    DuplicateCourseOutcome,
    DuplicateQuestion,
    InvalidTotalMarks,
    MissingName,
    NoCourseOutcomes,
    NoValidQuestions,
    TotalMarksMismatch,
    UnknownCourseOutcome,
)
from coattain.model import CourseOutcome, ExamSetup, Number, Question

logger = logging.getLogger(__name__)

CO_PREFIX = "CO"


def normalize_co_code(value: Any) -> str:
    """
    Canonical CO code: trimmed, "CO" prefix added when missing.

        "1"   -> "CO1"
        "co2" -> "CO2"
        "CO3" -> "CO3"
        ""    -> ""
    """
    code = "" if value is None else str(value).strip()
    if not code:
        return ""
    if code[:2].upper() == CO_PREFIX:
        return CO_PREFIX + code[2:]
    return CO_PREFIX + code


def parse_number(value: Any) -> Optional[Number]:
    """
    Convert user input to int/float. Returns None if it is not a finite number.

    Accepts ints, floats and numeric strings ("5", " 2.5 "). Booleans are rejected.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            num = float(text)
        except ValueError:
            return None
        return num if math.isfinite(num) else None
    return None


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _warn(warnings: Optional[list[str]], msg: str) -> None:
    logger.warning(msg)
    if warnings is not None:
        warnings.append(msg)


def _as_list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def validate_setup(raw: Mapping[str, Any], warnings: Optional[list[str]] = None) -> ExamSetup:
    """
    Validate a raw exam configuration and return an ExamSetup.

    If a list is passed as `warnings`, one message per dropped CO/question entry
    is appended to it. Dropped entries never make validation fail on their own.
    """
    name = _text(raw.get("name"))
    if not name:
        raise MissingName()

    total_raw = raw.get("totalMarks")
    total = parse_number(total_raw)
    if total is None or total <= 0:
        raise InvalidTotalMarks(total_raw)

    cos: list[CourseOutcome] = []
    for i, entry in enumerate(_as_list(raw.get("cos")), start=1):
        code = normalize_co_code(entry.get("code") if isinstance(entry, Mapping) else entry)
        if not code:
            _warn(warnings, f"Course Outcome #{i} has no code and was ignored")
            continue
        cos.append(CourseOutcome(code=code))

    if not cos:
        raise NoCourseOutcomes()

    seen_codes: set[str] = set()
    for co in cos:
        if co.code in seen_codes:
            raise DuplicateCourseOutcome(co.code)
        seen_codes.add(co.code)

    questions: list[Question] = []
    for i, entry in enumerate(_as_list(raw.get("questions")), start=1):
        if not isinstance(entry, Mapping):
            _warn(warnings, f"Question #{i} is not a question entry and was ignored")
            continue
        number = _text(entry.get("number"))
        co = normalize_co_code(entry.get("co"))
        marks = parse_number(entry.get("marks"))
        if not number:
            _warn(warnings, f"Question #{i} has no number and was ignored")
            continue
        if not co:
            _warn(warnings, f"Question {number} has no CO and was ignored")
            continue
        if marks is None or marks <= 0:
            _warn(warnings, f"Question {number} has no positive marks and was ignored")
            continue
        questions.append(Question(number=number, co=co, marks=marks))

    if not questions:
        raise NoValidQuestions()

    seen_numbers: set[str] = set()
    for q in questions:
        if q.number in seen_numbers:
            raise DuplicateQuestion(q.number)
        seen_numbers.add(q.number)

    for q in questions:
        if q.co not in seen_codes:
            raise UnknownCourseOutcome(q.number, q.co)

    # exact comparison, no tolerance
    computed = sum(q.marks for q in questions)
    if computed != total:
        raise TotalMarksMismatch(computed=computed, declared=total)

    setup = ExamSetup(name=name, total_marks=total, cos=tuple(cos), questions=tuple(questions))
    logger.debug("Validated exam %r: %d COs, %d questions", name, len(cos), len(questions))
    return setup
