"""
Typed errors raised by the validator and the aggregator.

Every error carries:
- kind: a short stable name (e.g. "MissingName") for programmatic checks
- a user-facing message (str(error)) that the CLI / menu prints as-is

All errors are plain input errors: the user fixes the input and tries again.
"""

from __future__ import annotations


class CalculatorError(ValueError):
    kind = "CalculatorError"


# --- setup validation -------------------------------------------------------


class SetupError(CalculatorError):
    kind = "SetupError"


class MissingName(SetupError):
    kind = "MissingName"

    def __init__(self) -> None:
        super().__init__("Please enter exam name")


class InvalidTotalMarks(SetupError):
    kind = "InvalidTotalMarks"

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__("Please enter valid total marks")


class NoCourseOutcomes(SetupError):
    kind = "NoCourseOutcomes"

    def __init__(self) -> None:
        super().__init__("Please add at least one Course Outcome")


class DuplicateCourseOutcome(SetupError):
    kind = "DuplicateCourseOutcome"

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"Course Outcome {code} is defined more than once")


class NoValidQuestions(SetupError):
    kind = "NoValidQuestions"

    def __init__(self) -> None:
        super().__init__("Please add at least one question")


class DuplicateQuestion(SetupError):
    kind = "DuplicateQuestion"

    def __init__(self, number: str) -> None:
        self.number = number
        super().__init__(f"Question {number} is defined more than once")


class UnknownCourseOutcome(SetupError):
    kind = "UnknownCourseOutcome"

    def __init__(self, number: str, co: str) -> None:
        self.number = number
        self.co = co
        super().__init__(f"Question {number} is mapped to {co}, which is not a defined Course Outcome")


class TotalMarksMismatch(SetupError):
    kind = "TotalMarksMismatch"

    def __init__(self, computed: int | float, declared: int | float) -> None:
        self.computed = computed
        self.declared = declared
        super().__init__(
            f"Total marks from questions ({computed}) doesn't match the specified total marks ({declared})"
        )


# --- aggregation ------------------------------------------------------------


class AggregationError(CalculatorError):
    kind = "AggregationError"


class MarkExceedsMaximum(AggregationError):
    kind = "MarkExceedsMaximum"

    def __init__(self, number: str, maximum: int | float, value: int | float) -> None:
        self.number = number
        self.maximum = maximum
        self.value = value
        super().__init__(f"Marks cannot exceed maximum marks ({maximum}) for question {number}")


class MarkBelowMinimum(AggregationError):
    kind = "MarkBelowMinimum"

    def __init__(self, number: str, value: int | float) -> None:
        self.number = number
        self.value = value
        super().__init__(f"Marks cannot be negative for question {number}")


class InvalidMark(AggregationError):
    kind = "InvalidMark"

    def __init__(self, number: str, value: object) -> None:
        self.number = number
        self.value = value
        super().__init__(f"Marks for question {number} must be a number (got {value!r})")
