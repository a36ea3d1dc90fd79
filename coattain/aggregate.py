"""
Marks aggregation.

Given a validated ExamSetup and the obtained marks per question number,
compute per-CO sums and the grand total:

    co_marks[co] = sum(obtained[q] for q in questions if q.co == co)
    total        = sum(co_marks.values())

Missing questions count as 0. Values above a question's maximum are rejected,
never clamped.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Mapping, Optional

from coattain.errors import InvalidMark, MarkBelowMinimum, MarkExceedsMaximum
from coattain.model import CalculatedMarks, ExamSetup, Number, Question
from coattain.validate import parse_number

logger = logging.getLogger(__name__)


def check_mark(question: Question, value: Any) -> Number:
    """
    Validate one obtained mark against its question and return it as a number.
    """
    mark = parse_number(value)
    if mark is None:
        raise InvalidMark(question.number, value)
    if mark < 0:
        raise MarkBelowMinimum(question.number, mark)
    if mark > question.marks:
        raise MarkExceedsMaximum(question.number, question.marks, mark)
    return mark


def aggregate(setup: ExamSetup, question_marks: Mapping[str, Any]) -> CalculatedMarks:
    """
    Sum obtained marks into CO buckets and a total. Returns a new snapshot.
    """
    known = set(setup.question_numbers)
    for number in question_marks:
        if number not in known:
            logger.debug("Ignoring marks for unknown question %r", number)

    co_marks: dict[str, Number] = {code: 0 for code in setup.co_codes}
    obtained: dict[str, Number] = {}

    for q in setup.questions:
        if q.number in question_marks:
            mark = check_mark(q, question_marks[q.number])
            obtained[q.number] = mark
        else:
            mark = 0
        # setdefault only matters if the setup skipped validation
        co_marks[q.co] = co_marks.setdefault(q.co, 0) + mark

    total = sum(co_marks.values())
    logger.debug("Aggregated %s: total=%s", setup.name, total)
    return CalculatedMarks(question_marks=obtained, co_marks=co_marks, total_marks=total)


def possible_marks_by_co(setup: ExamSetup) -> dict[str, Number]:
    """
    Maximum achievable marks per CO, in CO order.
    """
    out: dict[str, Number] = {code: 0 for code in setup.co_codes}
    for q in setup.questions:
        out[q.co] = out.get(q.co, 0) + q.marks
    return out


def percentage(obtained: Number, possible: Number) -> Optional[float]:
    """
    obtained / possible * 100, or None when nothing was possible (a CO without questions).
    """
    if not possible:
        return None
    return obtained / possible * 100


def format_marks(value: Optional[Number]) -> str:
    """
    5 -> "5", 5.0 -> "5", 2.5 -> "2.5", None -> "".
    """
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


_LEADING_INT_RE = re.compile(r"\s*(\d+)")


def display_order(questions: Iterable[Question]) -> list[Question]:
    """
    Questions sorted for entry/display: by leading number when there is one
    ("2" before "10", "3a" after "3"), otherwise by text after all numbered ones.
    """

    def key(q: Question) -> tuple[int, int, str]:
        m = _LEADING_INT_RE.match(q.number)
        if m:
            return (0, int(m.group(1)), q.number)
        return (1, 0, q.number)

    return sorted(questions, key=key)
