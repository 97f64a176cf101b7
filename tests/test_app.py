from conftest import StubClient, make_student

from freeslots.app import create_app
from freeslots.config import Settings
from freeslots.models import DEFAULT_TIME_SLOTS, WEEKDAYS


def _payload(**overrides):
    data = {
        "name": "Asha",
        "regNo": "REG1",
        "rollNo": "ROLL1",
        "timeSlots": [{"day": "Monday", "slots": ["9:00-10:00"]}],
    }
    data.update(overrides)
    return data


def test_health(client):
    assert client.get("/api/health").get_json() == {"status": "ok"}


def test_timeslots_catalog(client):
    data = client.get("/api/timeslots").get_json()
    assert data["days"] == WEEKDAYS
    assert data["slots"] == DEFAULT_TIME_SLOTS
    assert len(data["slots"]) == 10


def test_register_student(client, roster):
    resp = client.post("/api/students", json=_payload())
    assert resp.status_code == 201

    body = resp.get_json()
    assert body["name"] == "Asha"
    assert [d["day"] for d in body["timeSlots"]] == WEEKDAYS
    assert body["timeSlots"][0]["slots"] == ["9:00-10:00"]

    stored = roster.get_by_id(body["id"])
    assert stored is not None
    assert client.get(f"/api/students/{body['id']}").get_json()["regNo"] == "REG1"


def test_register_drops_unknown_days(client):
    resp = client.post(
        "/api/students",
        json=_payload(timeSlots=[{"day": "Sunday", "slots": ["9:00-10:00"]}, {"day": "Friday", "slots": ["x"]}]),
    )
    days = {d["day"]: d["slots"] for d in resp.get_json()["timeSlots"]}
    assert "Sunday" not in days
    assert days["Friday"] == ["x"]


def test_register_validation(client, roster):
    cases = [
        (_payload(name="  "), "name is required"),
        (_payload(regNo=""), "registration number is required"),
        (_payload(rollNo=None), "roll number is required"),
        (_payload(timeSlots=[{"day": "Monday", "slots": []}]), "select at least one free time slot"),
    ]
    cases += [([1, 2], "invalid request body"), ("Asha", "invalid request body")]
    for payload, error in cases:
        resp = client.post("/api/students", json=payload)
        assert resp.status_code == 400
        assert resp.get_json() == {"error": error}
    assert len(roster) == 0


def test_unknown_student(client):
    assert client.get("/api/students/nope").status_code == 404


def test_list_and_clear(client, roster):
    roster.add(make_student("A"))
    assert [s["name"] for s in client.get("/api/students").get_json()] == ["A"]

    assert client.delete("/api/students").status_code == 204
    assert client.get("/api/students").get_json() == []


def test_analysis_empty_roster(client):
    assert client.post("/api/analysis").get_json() == {"source": "none", "commonSlots": []}


def test_analysis_fallback(client, roster):
    roster.add(make_student("A", {"Monday": ["9-10", "10-11"]}))
    roster.add(make_student("B", {"Monday": ["9-10"]}))

    data = client.post("/api/analysis").get_json()
    assert data["source"] == "fallback"
    assert [d["day"] for d in data["commonSlots"]] == WEEKDAYS
    assert data["commonSlots"][0] == {
        "day": "Monday",
        "availableSlots": ["9-10"],
        "students": ["A", "B"],
    }


def test_analysis_remote(roster):
    stub = StubClient(text='[{"day": "Monday", "availableSlots": ["9-10"], "students": ["A"]}]')
    app = create_app(roster=roster, settings=Settings(), enrichment_client=stub)
    roster.add(make_student("A", {"Monday": ["9-10"]}))

    data = app.test_client().post("/api/analysis").get_json()
    assert data == {
        "source": "remote",
        "commonSlots": [{"day": "Monday", "availableSlots": ["9-10"], "students": ["A"]}],
    }


def test_export_requires_students(client):
    assert client.get("/api/export/json").status_code == 400
    assert client.get("/api/export/csv").status_code == 400


def test_export_downloads(client, roster):
    roster.add(make_student("A", {"Monday": ["9-10", "10-11"]}, student_id="s1"))

    resp = client.get("/api/export/csv")
    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "attachment; filename=\"student-timetable-data-" in resp.headers["Content-Disposition"]
    assert 's1,A,REG-A,ROLL-A,Monday,"9-10, 10-11"' in resp.get_data(as_text=True)

    resp = client.get("/api/export/json")
    assert resp.mimetype == "application/json"
    assert resp.headers["Content-Disposition"].endswith('.json"')
    assert resp.get_json()[0]["id"] == "s1"
