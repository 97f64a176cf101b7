import logging
import threading
from typing import List, Optional

from .models import Student

logger = logging.getLogger(__name__)


class RosterStore:
    """In-memory roster of registered students.

    Lives for the lifetime of its owner; nothing is written to disk.
    Readers get a copy of the list so later additions never show up in a
    snapshot that is already being analyzed.
    """

    def __init__(self) -> None:
        self._students: List[Student] = []
        self._lock = threading.Lock()

    def add(self, student: Student) -> None:
        with self._lock:
            self._students.append(student)
        logger.info("Registered student %s (%s)", student.id, student.reg_no)

    def get_all(self) -> List[Student]:
        with self._lock:
            return list(self._students)

    def get_by_id(self, student_id: str) -> Optional[Student]:
        with self._lock:
            for student in self._students:
                if student.id == student_id:
                    return student
        return None

    def clear(self) -> None:
        with self._lock:
            count = len(self._students)
            self._students.clear()
        logger.info("Cleared roster (%d students)", count)

    def __len__(self) -> int:
        with self._lock:
            return len(self._students)
