"""
Unit tests for exam setup validation.

Validation contract:
- first violated rule wins (name -> total -> COs -> questions -> sum)
- CO codes are normalized to "CO..." before any check
- malformed CO/question entries are dropped silently (optionally reported as warnings)
- sum of question marks must equal total marks exactly
"""

import unittest

from coattain import errors
from coattain.validate import normalize_co_code, parse_number, validate_setup


def quiz_config() -> dict:
    return {
        "name": "Quiz",
        "totalMarks": 10,
        "cos": [{"code": "CO1"}, {"code": "CO2"}],
        "questions": [
            {"number": "1", "co": "CO1", "marks": 5},
            {"number": "2", "co": "CO2", "marks": 5},
        ],
    }


class TestNormalizeCoCode(unittest.TestCase):
    def test_examples(self) -> None:
        self.assertEqual(normalize_co_code("1"), "CO1")
        self.assertEqual(normalize_co_code("co2"), "CO2")
        self.assertEqual(normalize_co_code("CO3"), "CO3")
        self.assertEqual(normalize_co_code("  4 "), "CO4")
        self.assertEqual(normalize_co_code("   "), "")
        self.assertEqual(normalize_co_code(None), "")

    def test_idempotent(self) -> None:
        for raw in ["1", "co2", "CO3", "Co4a", " x ", "", "c", "COCO"]:
            once = normalize_co_code(raw)
            self.assertEqual(normalize_co_code(once), once, raw)


class TestParseNumber(unittest.TestCase):
    def test_accepts_numbers_and_numeric_strings(self) -> None:
        self.assertEqual(parse_number(5), 5)
        self.assertEqual(parse_number(2.5), 2.5)
        self.assertEqual(parse_number(" 7 "), 7)
        self.assertIsInstance(parse_number("7"), int)
        self.assertEqual(parse_number("2.5"), 2.5)

    def test_rejects_non_numbers(self) -> None:
        for value in [None, True, "", "abc", "nan", "inf", float("nan"), [], {}]:
            self.assertIsNone(parse_number(value), value)


class TestValidateSetup(unittest.TestCase):
    def test_valid_quiz(self) -> None:
        setup = validate_setup(quiz_config())
        self.assertEqual(setup.name, "Quiz")
        self.assertEqual(setup.total_marks, 10)
        self.assertEqual(setup.co_codes, ["CO1", "CO2"])
        self.assertEqual(setup.question_numbers, ["1", "2"])
        self.assertEqual(sum(q.marks for q in setup.questions), setup.total_marks)

    def test_missing_name_wins_over_invalid_total(self) -> None:
        cfg = quiz_config()
        cfg["name"] = "   "
        cfg["totalMarks"] = 0
        with self.assertRaises(errors.MissingName) as ctx:
            validate_setup(cfg)
        self.assertEqual(ctx.exception.kind, "MissingName")

    def test_invalid_total_marks(self) -> None:
        for total in [0, -5, "abc", None, True]:
            cfg = quiz_config()
            cfg["totalMarks"] = total
            with self.assertRaises(errors.InvalidTotalMarks):
                validate_setup(cfg)

    def test_no_course_outcomes_after_dropping_empty_codes(self) -> None:
        cfg = quiz_config()
        cfg["cos"] = [{"code": ""}, {"code": "  "}]
        with self.assertRaises(errors.NoCourseOutcomes):
            validate_setup(cfg)

    def test_codes_are_normalized_and_references_follow(self) -> None:
        cfg = quiz_config()
        cfg["cos"] = [{"code": "1"}, {"code": "co2"}, {"code": ""}]
        cfg["questions"][0]["co"] = "1"
        setup = validate_setup(cfg)
        self.assertEqual(setup.co_codes, ["CO1", "CO2"])
        self.assertEqual(setup.questions[0].co, "CO1")

    def test_duplicate_course_outcome(self) -> None:
        cfg = quiz_config()
        cfg["cos"].append({"code": "1"})
        with self.assertRaises(errors.DuplicateCourseOutcome) as ctx:
            validate_setup(cfg)
        self.assertEqual(ctx.exception.code, "CO1")

    def test_no_valid_questions(self) -> None:
        cfg = quiz_config()
        cfg["questions"] = [
            {"number": "", "co": "CO1", "marks": 5},
            {"number": "2", "co": "", "marks": 5},
            {"number": "3", "co": "CO1", "marks": 0},
        ]
        with self.assertRaises(errors.NoValidQuestions):
            validate_setup(cfg)

    def test_invalid_questions_are_dropped_with_warnings(self) -> None:
        cfg = quiz_config()
        cfg["questions"].append({"number": "3", "co": "CO1", "marks": 0})
        cfg["questions"].append({"number": "", "co": "CO1", "marks": 2})
        warnings: list[str] = []
        with self.assertLogs("coattain.validate", level="WARNING"):
            setup = validate_setup(cfg, warnings=warnings)
        self.assertEqual(setup.question_numbers, ["1", "2"])
        self.assertEqual(len(warnings), 2)

    def test_duplicate_question(self) -> None:
        cfg = quiz_config()
        cfg["questions"][1]["number"] = "1"
        with self.assertRaises(errors.DuplicateQuestion) as ctx:
            validate_setup(cfg)
        self.assertEqual(ctx.exception.number, "1")

    def test_unknown_course_outcome(self) -> None:
        cfg = quiz_config()
        cfg["questions"][1]["co"] = "CO9"
        with self.assertRaises(errors.UnknownCourseOutcome) as ctx:
            validate_setup(cfg)
        self.assertEqual(ctx.exception.co, "CO9")

    def test_total_marks_mismatch(self) -> None:
        cfg = quiz_config()
        cfg["questions"][1]["marks"] = 4
        with self.assertRaises(errors.TotalMarksMismatch) as ctx:
            validate_setup(cfg)
        self.assertEqual(ctx.exception.computed, 9)
        self.assertEqual(ctx.exception.declared, 10)
        self.assertIn("(9)", str(ctx.exception))

    def test_string_marks_from_prompts(self) -> None:
        cfg = quiz_config()
        cfg["totalMarks"] = "7.5"
        cfg["questions"] = [
            {"number": "1", "co": "1", "marks": "5"},
            {"number": "2", "co": "2", "marks": "2.5"},
        ]
        setup = validate_setup(cfg)
        self.assertEqual(setup.total_marks, 7.5)
        self.assertEqual([q.marks for q in setup.questions], [5, 2.5])

    def test_setup_is_immutable(self) -> None:
        setup = validate_setup(quiz_config())
        with self.assertRaises(AttributeError):
            setup.name = "Other"  # type: ignore[misc]


if __name__ == "__main__":
    unittest.main()
