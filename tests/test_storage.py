"""
Unit tests for the JSON export of records.

Export contract:
- enums are written as their literal values
- dates as ISO strings
- sets as sorted lists
"""

import json
import tempfile
import unittest
from datetime import date
from pathlib import Path

from academicsync.model import (
    AcademicHistoryEntry,
    Branch,
    ClassSchedule,
    Day,
    HistoryType,
    PassedCourses,
    Quarter,
    ScheduleSlot,
    Turn,
)
from academicsync.storage import records_to_json, save_records, to_jsonable


class TestStorage(unittest.TestCase):
    def test_class_schedule_to_json(self) -> None:
        record = ClassSchedule(
            year=2021,
            quarter=Quarter.FIRST,
            course_code="950701",
            course_name="Fisica I",
            class_code="Z1154",
            branch=Branch.PINERO,
            schedules=(ScheduleSlot(day=Day.MON, turn=Turn.NIGHT, start_slot=1, end_slot=5),),
        )
        self.assertEqual(
            to_jsonable(record),
            {
                "year": 2021,
                "quarter": "1C",
                "course_code": "950701",
                "course_name": "Fisica I",
                "class_code": "Z1154",
                "branch": "PIÑERO",
                "schedules": [{"day": "Mon", "turn": "night", "start_slot": 1, "end_slot": 5}],
            },
        )

    def test_sets_are_sorted(self) -> None:
        passed = PassedCourses(signed=frozenset({"950702", "950701"}), passed=frozenset({"950701"}))
        self.assertEqual(json.loads(records_to_json(passed)), {"signed": ["950701", "950702"], "passed": ["950701"]})

    def test_save_and_load(self) -> None:
        records = [AcademicHistoryEntry("950701", HistoryType.PASSED, date(2019, 12, 20))]
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "nested" / "history.json"
            save_records(records, p)
            data = json.loads(p.read_text(encoding="utf-8"))
        self.assertEqual(data, [{"course_code": "950701", "type": "PASSED", "date": "2019-12-20"}])


if __name__ == "__main__":
    unittest.main()
