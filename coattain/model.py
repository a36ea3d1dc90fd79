"""
Central data model definitions used across the project.

This module defines the canonical structure of the exam setup and of the
calculated results so that:
- validator, aggregator, storage, export and UI share the same field names
- the JSON shape on disk stays stable (camelCase keys, see to_dict())

All objects are immutable. A new setup or a new calculation always produces
a new object instead of changing an existing one.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Union

Number = Union[int, float]


@dataclass(frozen=True)
class CourseOutcome:
    """
    One Course Outcome (CO), e.g. "CO1".
    """

    code: str


@dataclass(frozen=True)
class Question:
    """
    One graded question, mapped to exactly one CO.

    marks is the maximum achievable mark for this question.
    """

    number: str
    co: str
    marks: Number


@dataclass(frozen=True)
class ExamSetup:
    """
    A validated exam definition.

    Only created by coattain.validate.validate_setup(), which guarantees:
    - cos and questions are non-empty
    - every question.co is one of the CO codes
    - sum(q.marks) == total_marks
    """

    name: str
    total_marks: Number
    cos: Tuple[CourseOutcome, ...]
    questions: Tuple[Question, ...]

    @property
    def co_codes(self) -> list[str]:
        return [co.code for co in self.cos]

    @property
    def question_numbers(self) -> list[str]:
        return [q.number for q in self.questions]

    def question(self, number: str) -> Optional[Question]:
        for q in self.questions:
            if q.number == number:
                return q
        return None

    def to_dict(self) -> dict[str, Any]:
        """
        JSON shape used for exam_setup.json.
        """
        return {
            "name": self.name,
            "totalMarks": self.total_marks,
            "cos": [{"code": co.code} for co in self.cos],
            "questions": [{"number": q.number, "co": q.co, "marks": q.marks} for q in self.questions],
        }


@dataclass(frozen=True)
class CalculatedMarks:
    """
    Result snapshot of one aggregation call.

    The mappings are read-only views; co_marks keeps the CO order of the setup.
    """

    question_marks: Mapping[str, Number]
    co_marks: Mapping[str, Number]
    total_marks: Number

    def __post_init__(self) -> None:
        object.__setattr__(self, "question_marks", MappingProxyType(dict(self.question_marks)))
        object.__setattr__(self, "co_marks", MappingProxyType(dict(self.co_marks)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "questionMarks": dict(self.question_marks),
            "coMarks": dict(self.co_marks),
            "totalMarks": self.total_marks,
        }


@dataclass(frozen=True)
class StudentRecord:
    """
    A stored CalculatedMarks plus an identifier (one row of the results list).
    """

    id: str
    marks: Mapping[str, Number]
    co_marks: Mapping[str, Number]
    total_marks: Number

    def __post_init__(self) -> None:
        object.__setattr__(self, "marks", MappingProxyType(dict(self.marks)))
        object.__setattr__(self, "co_marks", MappingProxyType(dict(self.co_marks)))

    @classmethod
    def from_calculated(cls, record_id: str, calc: CalculatedMarks) -> "StudentRecord":
        return cls(
            id=record_id,
            marks=calc.question_marks,
            co_marks=calc.co_marks,
            total_marks=calc.total_marks,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StudentRecord":
        """
        Build a record from its JSON shape. Raises ValueError/TypeError on bad data.
        """
        record_id = str(data["id"]).strip()
        if not record_id:
            raise ValueError("Record without id")
        marks = {str(k): _as_stored_number(v) for k, v in dict(data.get("marks", {})).items()}
        co_marks = {str(k): _as_stored_number(v) for k, v in dict(data.get("coMarks", {})).items()}
        total = _as_stored_number(data.get("totalMarks", 0))
        return cls(id=record_id, marks=marks, co_marks=co_marks, total_marks=total)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "marks": dict(self.marks),
            "coMarks": dict(self.co_marks),
            "totalMarks": self.total_marks,
        }


def _as_stored_number(value: Any) -> Number:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Expected a number, got {value!r}")
    return value
