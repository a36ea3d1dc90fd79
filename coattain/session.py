"""
Marks entry session.

A MarkingSession is owned by the caller (CLI command or interactive menu) and
holds one active ExamSetup plus the marks entered so far. The validator and the
aggregator never keep any state themselves.

Invalidation rule: every change to the entered marks clears the last result,
so a stale result is never shown next to new inputs.
"""

from __future__ import annotations

from typing import Any, Optional

from coattain.aggregate import aggregate, check_mark
from coattain.model import CalculatedMarks, ExamSetup, Number


class MarkingSession:
    def __init__(self, setup: ExamSetup) -> None:
        self.setup = setup
        self._marks: dict[str, Number] = {}
        self._result: Optional[CalculatedMarks] = None
        self.reset()

    @property
    def marks(self) -> dict[str, Number]:
        return dict(self._marks)

    @property
    def result(self) -> Optional[CalculatedMarks]:
        return self._result

    def set_mark(self, number: str, value: Any) -> Number:
        """
        Store the obtained mark for one question.

        Raises KeyError for an unknown question and an AggregationError for an
        out-of-range value; in both cases the stored marks stay unchanged.
        """
        question = self.setup.question(number)
        if question is None:
            raise KeyError(number)
        mark = check_mark(question, value)
        self._marks[number] = mark
        self._result = None
        return mark

    def reset(self) -> None:
        self._marks = {q.number: 0 for q in self.setup.questions}
        self._result = None

    def calculate(self) -> CalculatedMarks:
        self._result = aggregate(self.setup, self._marks)
        return self._result
