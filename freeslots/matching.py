from typing import Iterable, List, Set

from .models import WEEKDAYS, CommonAvailability, Student


def _unique(slots: Iterable[str]) -> List[str]:
    seen: Set[str] = set()
    ordered: List[str] = []
    for slot in slots:
        if slot not in seen:
            seen.add(slot)
            ordered.append(slot)
    return ordered


def _reported_slots(student: Student, day: str) -> List[str]:
    for entry in student.time_slots:
        if entry.day == day:
            return _unique(entry.slots)
    return []


def common_slots_for_day(students: List[Student], day: str) -> List[str]:
    """Slots that every student in ``students`` marked free on ``day``.

    Order follows the first student's list; membership is set based, so a
    student with no slots that day empties the result.
    """
    if not students:
        return []

    slot_sets = [s.slots_for(day) for s in students]
    return [
        slot
        for slot in _reported_slots(students[0], day)
        if all(slot in slot_set for slot_set in slot_sets)
    ]


def qualifying_students(
    students: List[Student], day: str, common_slots: Iterable[str]
) -> List[str]:
    """Names of students free during all of ``common_slots`` on ``day``.

    ``common_slots`` does not have to come from :func:`common_slots_for_day`,
    so every student is checked. An empty slot list qualifies nobody.
    """
    required = set(common_slots)
    if not required:
        return []
    return [s.name for s in students if required <= s.slots_for(day)]


def compute_common_availability(students: List[Student]) -> List[CommonAvailability]:
    """Compute per-day common availability for the whole roster.

    Always returns one entry per weekday, Monday to Saturday.
    """
    result: List[CommonAvailability] = []

    for day in WEEKDAYS:
        if not any(s.slots_for(day) for s in students):
            # No data for this day
            result.append(CommonAvailability(day=day, available_slots=[], students=[]))
            continue

        common = common_slots_for_day(students, day)
        result.append(
            CommonAvailability(
                day=day,
                available_slots=common,
                students=qualifying_students(students, day, common),
            )
        )

    return result
