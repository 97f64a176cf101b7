import csv
import io
import json
from datetime import date
from typing import List, Optional

from .models import Student

CSV_HEADER = ["Id", "Name", "Registration Number", "Roll Number", "Day", "Free Slots"]


def students_to_json(students: List[Student]) -> str:
    return json.dumps([s.to_dict() for s in students], indent=2)


def _quoted(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def students_to_csv(students: List[Student]) -> str:
    """One row per student and day that has at least one free slot.

    The Free Slots column is always quoted, even for a single slot.
    """
    buf = io.StringIO()
    buf.write(",".join(CSV_HEADER) + "\n")
    # leading columns only; the slots column is appended by hand
    writer = csv.writer(buf, lineterminator="")
    for s in students:
        for entry in s.time_slots:
            if not entry.slots:
                continue
            writer.writerow([s.id, s.name, s.reg_no, s.roll_no, entry.day])
            buf.write("," + _quoted(", ".join(entry.slots)) + "\n")
    return buf.getvalue()


def export_filename(extension: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"student-timetable-data-{today.isoformat()}.{extension}"
