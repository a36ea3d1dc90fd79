import csv
import tempfile
import unittest
from pathlib import Path

from coattain.export_csv import export_records_to_csv
from coattain.model import StudentRecord
from coattain.validate import validate_setup


class TestExportCSV(unittest.TestCase):
    def test_export_creates_file_with_header_and_rows(self) -> None:
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
        records = [
            StudentRecord("R001", {"1": 5, "2": 3}, {"CO1": 5, "CO2": 3}, 8),
            # question 2 never entered -> written as 0
            StudentRecord("R002", {"1": 2.5}, {"CO1": 2.5}, 2.5),
        ]

        with tempfile.TemporaryDirectory() as d:
            out = Path(d) / "sub" / "Quiz_results.csv"
            n = export_records_to_csv(setup, records, out)
            self.assertEqual(n, 2)

            with out.open(newline="", encoding="utf-8") as fh:
                rows = list(csv.reader(fh))

        self.assertEqual(rows[0], ["Record ID", "Q1 (CO1)", "Q2 (CO2)", "CO1", "CO2", "Total"])
        self.assertEqual(rows[1], ["R001", "5", "3", "5", "3", "8"])
        self.assertEqual(rows[2], ["R002", "2.5", "0", "2.5", "0", "2.5"])

    def test_export_without_records_writes_header_only(self) -> None:
        setup = validate_setup(
            {
                "name": "Solo",
                "totalMarks": 3,
                "cos": [{"code": "1"}],
                "questions": [{"number": "1a", "co": "1", "marks": 3}],
            }
        )
        with tempfile.TemporaryDirectory() as d:
            out = Path(d) / "empty.csv"
            self.assertEqual(export_records_to_csv(setup, [], out), 0)
            lines = out.read_text(encoding="utf-8").splitlines()
        self.assertEqual(lines, ["Record ID,Q1a (CO1),CO1,Total"])


if __name__ == "__main__":
    unittest.main()
