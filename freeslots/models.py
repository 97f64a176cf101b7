from dataclasses import dataclass, field
from typing import Any, Dict, List, Set

WEEKDAYS: List[str] = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]

# Offered to the registration form; submitted labels are not checked against it.
DEFAULT_TIME_SLOTS: List[str] = [
    "8:00-9:00",
    "9:00-10:00",
    "10:00-11:00",
    "11:00-12:00",
    "12:00-13:00",
    "13:00-14:00",
    "14:00-15:00",
    "15:00-16:00",
    "16:00-17:00",
    "17:00-18:00",
]


@dataclass
class DaySlots:
    day: str
    slots: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"day": self.day, "slots": list(self.slots)}


@dataclass
class Student:
    id: str
    name: str
    reg_no: str
    roll_no: str
    time_slots: List[DaySlots] = field(default_factory=list)
    timetable_images: Dict[str, str] = field(default_factory=dict)

    def slots_for(self, day: str) -> Set[str]:
        """Slot set for ``day``; empty when the student has no entry for it."""
        for entry in self.time_slots:
            if entry.day == day:
                return set(entry.slots)
        return set()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "regNo": self.reg_no,
            "rollNo": self.roll_no,
            "timeSlots": [entry.to_dict() for entry in self.time_slots],
            "timetableImages": dict(self.timetable_images),
        }


@dataclass
class CommonAvailability:
    day: str
    available_slots: List[str]
    students: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day": self.day,
            "availableSlots": list(self.available_slots),
            "students": list(self.students),
        }
