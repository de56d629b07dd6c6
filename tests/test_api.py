"""
Test the scheduler API with self-contained test data.
"""
import inspect
import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient
from config import Settings
from main import app
from service.storage import MemoryStore, SchedulerRepository, get_repository


client = TestClient(app)


@pytest.fixture(autouse=True)
def fresh_repository():
    """Give every test its own empty in-memory store."""
    repo = SchedulerRepository(MemoryStore())
    app.dependency_overrides[get_repository] = lambda: repo
    yield repo
    app.dependency_overrides.clear()


# Test data fixtures
def get_instructor_request():
    """Instructor from the end-to-end scenario."""
    return {
        "id": "i1",
        "name": "Maria Keys",
        "email": "maria@example.com",
        "instruments": ["Piano", "Guitar"],
        "skill_levels": ["Beginner", "Intermediate"],
        "lesson_durations": [30, 60],
        "availability": [
            {"id": "i-mon", "day": "Monday", "start_time": "09:00", "end_time": "12:00"}
        ]
    }


def get_student_request(student_id="s1", **overrides):
    data = {
        "id": student_id,
        "name": f"Student {student_id}",
        "instruments": ["Piano"],
        "skill_level": "Beginner",
        "preferred_duration": 60,
        "availability": [
            {"id": f"{student_id}-mon", "day": "Monday", "start_time": "10:00", "end_time": "11:00"}
        ]
    }
    data.update(overrides)
    return data


def setup_instructor_and_students(*students):
    response = client.post("/api/v1/instructors", json=get_instructor_request())
    assert response.status_code == 201
    for student in students:
        response = client.post("/api/v1/students", json=student)
        assert response.status_code == 201


def test_root_endpoint():
    """Test root endpoint is accessible."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "service" in data
    assert data["status"] == "healthy"


def test_health_endpoint():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_match_endpoint_end_to_end():
    """Stateless /match reproduces the 80-point scenario."""
    response = client.post("/api/v1/match", json={
        "instructor": get_instructor_request(),
        "student": get_student_request()
    })

    assert response.status_code == 200
    data = response.json()
    assert data["score"] == 80
    assert data["breakdown"] == {
        "instrument_score": 30,
        "skill_score": 25,
        "duration_score": 20,
        "time_score": 5
    }
    assert data["instrument_overlap"] == ["Piano"]
    assert data["time_overlap"] == [
        {"id": "match-i-mon-s1-mon", "day": "Monday", "start_time": "10:00", "end_time": "11:00"}
    ]


def test_overlaps_endpoint():
    response = client.post("/api/v1/overlaps", json={
        "slots_a": [{"id": "a", "day": "Monday", "start_time": "09:00", "end_time": "10:00"}],
        "slots_b": [
            {"id": "b", "day": "Monday", "start_time": "09:30", "end_time": "10:30"},
            {"id": "c", "day": "Monday", "start_time": "10:00", "end_time": "11:00"}
        ]
    })

    assert response.status_code == 200
    assert response.json() == [
        {"id": "match-a-b", "day": "Monday", "start_time": "09:30", "end_time": "10:00"}
    ]


def test_rank_endpoint_orders_by_score():
    response = client.post("/api/v1/rank", json={
        "instructor": get_instructor_request(),
        "students": [
            get_student_request("low", instruments=["Drums"], availability=[]),
            get_student_request("high")
        ]
    })

    assert response.status_code == 200
    assert [m["student"]["id"] for m in response.json()] == ["high", "low"]


def test_invalid_time_slot_is_rejected():
    """Slots with start after end never reach the matching engine."""
    request = get_instructor_request()
    request["availability"][0]["start_time"] = "13:00"

    response = client.post("/api/v1/instructors", json=request)

    assert response.status_code == 422
    data = response.json()
    assert "errors" in data
    for field, messages in data["errors"].items():
        assert isinstance(messages, list)
        assert isinstance(messages[0], str)
    assert any("must be before end time" in m for messages in data["errors"].values() for m in messages)


def test_validation_error_format():
    """Missing required fields produce human-readable messages."""
    response = client.post("/api/v1/students", json={"name": "No Level"})

    assert response.status_code == 422
    errors = response.json()["errors"]
    assert errors["Skill Level"] == ["Skill Level is required."]
    assert errors["Preferred Duration"] == ["Preferred Duration is required."]


def test_student_crud():
    response = client.post("/api/v1/students", json=get_student_request())
    assert response.status_code == 201

    updated = get_student_request(name="Renamed")
    response = client.put("/api/v1/students/s1", json=updated)
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"

    assert len(client.get("/api/v1/students").json()) == 1

    assert client.delete("/api/v1/students/s1").status_code == 204
    assert client.get("/api/v1/students/s1").status_code == 404


def test_duplicate_instructor_conflicts():
    setup_instructor_and_students()
    response = client.post("/api/v1/instructors", json=get_instructor_request())
    assert response.status_code == 409


def test_unknown_instructor_returns_not_found():
    response = client.get("/api/v1/instructors/missing/matches")

    assert response.status_code == 404
    assert "errors" in response.json()


def test_stored_matches_and_filters():
    setup_instructor_and_students(
        get_student_request("good"),
        get_student_request("weak", instruments=["Drums"], skill_level="Advanced", preferred_duration=90),
    )

    all_matches = client.get("/api/v1/instructors/i1/matches").json()
    assert [m["student"]["id"] for m in all_matches] == ["good", "weak"]
    assert [m["score"] for m in all_matches] == [80, 5]

    good = client.get("/api/v1/instructors/i1/matches", params={"filter": "good"}).json()
    assert [m["student"]["id"] for m in good] == ["good"]

    bookable = client.get("/api/v1/instructors/i1/matches", params={"filter": "bookable"}).json()
    assert [m["student"]["id"] for m in bookable] == ["good"]

    single = client.get("/api/v1/instructors/i1/matches/weak").json()
    assert single["score"] == 5


def test_booking_flow_and_conflict():
    setup_instructor_and_students(get_student_request("s1"), get_student_request("s2"))

    match = client.get("/api/v1/instructors/i1/matches/s1").json()
    slot_id = match["time_overlap"][0]["id"]

    response = client.post("/api/v1/bookings", json={
        "instructor_id": "i1", "student_id": "s1", "slot_id": slot_id, "notes": "First lesson"
    })
    assert response.status_code == 201
    booking = response.json()
    assert booking["day"] == "Monday"
    assert (booking["start_time"], booking["end_time"]) == ("10:00", "11:00")
    assert booking["instrument"] == "Piano"
    assert booking["recurring"] is True

    # s2 wants the same hour, which is now taken
    assert client.get("/api/v1/instructors/i1/matches/s2/bookable-slots").json() == []

    other_slot = client.get("/api/v1/instructors/i1/matches/s2").json()["time_overlap"][0]["id"]
    response = client.post("/api/v1/bookings", json={
        "instructor_id": "i1", "student_id": "s2", "slot_id": other_slot
    })
    assert response.status_code == 409
    assert "BookingConflictError" in response.json()["errors"]


def test_booking_unknown_slot():
    setup_instructor_and_students(get_student_request("s1"))

    response = client.post("/api/v1/bookings", json={
        "instructor_id": "i1", "student_id": "s1", "slot_id": "not-a-slot"
    })
    assert response.status_code == 404


def test_bookings_listed_in_week_order(fresh_repository):
    setup_instructor_and_students(get_student_request("s1"))
    request = get_instructor_request()
    request["availability"] = [
        {"id": "fri", "day": "Friday", "start_time": "09:00", "end_time": "10:00"},
        {"id": "mon", "day": "Monday", "start_time": "10:00", "end_time": "11:00"},
    ]
    client.put("/api/v1/instructors/i1", json=request)
    student = get_student_request("s1", availability=[
        {"id": "sfri", "day": "Friday", "start_time": "09:00", "end_time": "10:00"},
        {"id": "smon", "day": "Monday", "start_time": "10:00", "end_time": "11:00"},
    ])
    client.put("/api/v1/students/s1", json=student)

    for slot_id in ["match-fri-sfri", "match-mon-smon"]:
        response = client.post("/api/v1/bookings", json={
            "instructor_id": "i1", "student_id": "s1", "slot_id": slot_id
        })
        assert response.status_code == 201

    days = [b["day"] for b in client.get("/api/v1/bookings", params={"student_id": "s1"}).json()]
    assert days == ["Monday", "Friday"]

    booking_id = fresh_repository.list_bookings()[0].id
    assert client.delete(f"/api/v1/bookings/{booking_id}").status_code == 204
    assert len(client.get("/api/v1/bookings").json()) == 1


def test_deleting_student_removes_bookings():
    setup_instructor_and_students(get_student_request("s1"))
    slot_id = client.get("/api/v1/instructors/i1/matches/s1").json()["time_overlap"][0]["id"]
    client.post("/api/v1/bookings", json={"instructor_id": "i1", "student_id": "s1", "slot_id": slot_id})

    assert client.delete("/api/v1/students/s1").status_code == 204
    assert client.get("/api/v1/bookings").json() == []


def test_student_cannot_be_double_booked_across_instructors():
    """One student, two instructors, same hour: the second booking is refused."""
    setup_instructor_and_students(get_student_request("s1"))
    second = get_instructor_request()
    second["id"] = "i2"
    second["name"] = "Otto Strings"
    assert client.post("/api/v1/instructors", json=second).status_code == 201

    slot_id = client.get("/api/v1/instructors/i1/matches/s1").json()["time_overlap"][0]["id"]
    response = client.post("/api/v1/bookings", json={
        "instructor_id": "i1", "student_id": "s1", "slot_id": slot_id
    })
    assert response.status_code == 201

    assert client.get("/api/v1/instructors/i2/matches/s1/bookable-slots").json() == []

    other_slot = client.get("/api/v1/instructors/i2/matches/s1").json()["time_overlap"][0]["id"]
    response = client.post("/api/v1/bookings", json={
        "instructor_id": "i2", "student_id": "s1", "slot_id": other_slot
    })
    assert response.status_code == 409
    assert len(client.get("/api/v1/bookings", params={"student_id": "s1"}).json()) == 1


def test_api_handlers_run_in_threadpool():
    """Store access blocks, so handlers are plain functions, not coroutines."""
    handlers = [
        route.endpoint for route in app.routes
        if isinstance(route, APIRoute) and route.path.startswith("/api/v1")
    ]

    assert handlers
    assert not any(inspect.iscoroutinefunction(handler) for handler in handlers)


def test_settings_have_no_unused_debug_flag():
    assert "debug" not in Settings.model_fields
