from typing import Dict, List, Optional

import pytest

from freeslots.app import create_app
from freeslots.config import Settings
from freeslots.models import DaySlots, Student
from freeslots.roster import RosterStore


def make_student(
    name: str, days: Optional[Dict[str, List[str]]] = None, student_id: Optional[str] = None
) -> Student:
    return Student(
        id=student_id or f"id-{name.lower()}",
        name=name,
        reg_no=f"REG-{name.upper()}",
        roll_no=f"ROLL-{name.upper()}",
        time_slots=[DaySlots(day=day, slots=slots) for day, slots in (days or {}).items()],
    )


class StubClient:
    """Stands in for GeminiClient; returns canned text or raises."""

    def __init__(self, text: Optional[str] = None, error: Optional[Exception] = None) -> None:
        self.text = text
        self.error = error
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def roster():
    return RosterStore()


@pytest.fixture
def settings():
    return Settings(enrichment_enabled=False)


@pytest.fixture
def client(roster, settings):
    app = create_app(roster=roster, settings=settings)
    app.config["TESTING"] = True
    return app.test_client()
