"""
Unit tests for the marks entry session.

Session contract:
- every question starts at 0
- a rejected mark leaves the stored marks unchanged
- any accepted change clears the last result (no stale results)
"""

import unittest

from coattain import errors
from coattain.session import MarkingSession
from coattain.validate import validate_setup


def quiz_session() -> MarkingSession:
    setup = validate_setup(
        {
            "name": "Quiz",
            "totalMarks": 10,
            "cos": [{"code": "CO1"}, {"code": "CO2"}],
            "questions": [
                {"number": "1", "co": "CO1", "marks": 5},
                {"number": "2", "co": "CO2", "marks": 5},
            ],
        }
    )
    return MarkingSession(setup)


class TestMarkingSession(unittest.TestCase):
    def test_starts_with_zero_marks(self) -> None:
        s = quiz_session()
        self.assertEqual(s.marks, {"1": 0, "2": 0})
        self.assertIsNone(s.result)

    def test_calculate(self) -> None:
        s = quiz_session()
        s.set_mark("1", "5")
        s.set_mark("2", 3)
        calc = s.calculate()
        self.assertIs(s.result, calc)
        self.assertEqual(dict(calc.co_marks), {"CO1": 5, "CO2": 3})
        self.assertEqual(calc.total_marks, 8)

    def test_change_invalidates_result(self) -> None:
        s = quiz_session()
        s.calculate()
        self.assertIsNotNone(s.result)
        s.set_mark("2", 1)
        self.assertIsNone(s.result)

    def test_rejected_mark_keeps_previous_value(self) -> None:
        s = quiz_session()
        s.set_mark("1", 4)
        with self.assertRaises(errors.MarkExceedsMaximum):
            s.set_mark("1", 6)
        with self.assertRaises(errors.MarkBelowMinimum):
            s.set_mark("1", -1)
        self.assertEqual(s.marks["1"], 4)

    def test_unknown_question(self) -> None:
        s = quiz_session()
        with self.assertRaises(KeyError):
            s.set_mark("7", 1)

    def test_reset(self) -> None:
        s = quiz_session()
        s.set_mark("1", 2)
        s.calculate()
        s.reset()
        self.assertEqual(s.marks, {"1": 0, "2": 0})
        self.assertIsNone(s.result)

    def test_marks_returns_a_copy(self) -> None:
        s = quiz_session()
        s.marks["1"] = 99
        self.assertEqual(s.marks["1"], 0)


if __name__ == "__main__":
    unittest.main()
