"""Courses, timetable, attendance, grades, assignments, submissions and fees."""

from decimal import Decimal

import pytest

NO_SUCH_ID = "00000000-0000-0000-0000-000000000000"


async def _post(client, path: str, payload: dict) -> dict:
    r = await client.post(f"/api/v1/{path}", json=payload)
    assert r.status_code == 201, r.text
    return r.json()


@pytest.fixture
def seed(client):
    async def _seed() -> tuple[dict, dict]:
        student = await _post(client, "students", {"full_name": "Ada", "roll_number": "R-1"})
        course = await _post(client, "courses", {"code": "MATH101", "name": "Algebra", "credits": 4})
        return student, course

    return _seed


# ── Courses ──────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_course_crud(client):
    course = await _post(client, "courses", {"code": "PHY1", "name": "Physics"})
    assert course["credits"] == 0

    r = await client.post("/api/v1/courses", json={"code": "PHY1", "name": "Again"})
    assert r.status_code == 409

    r = await client.patch(f"/api/v1/courses/{course['id']}", json={"credits": 3})
    assert r.json()["credits"] == 3

    r = await client.get("/api/v1/courses")
    assert r.json()["total"] == 1


# ── Timetable ────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_timetable_order_and_validation(client, seed):
    _, course = await seed()
    base = {"course_id": course["id"], "room": "B12"}
    await _post(client, "timetable", {**base, "day_of_week": 2, "start_time": "09:00", "end_time": "10:00"})
    await _post(client, "timetable", {**base, "day_of_week": 0, "start_time": "11:00", "end_time": "12:00"})
    first = await _post(
        client, "timetable", {**base, "day_of_week": 0, "start_time": "08:00", "end_time": "09:00"}
    )

    r = await client.get("/api/v1/timetable")
    slots = [(e["day_of_week"], e["start_time"]) for e in r.json()["items"]]
    assert slots == [(0, "08:00:00"), (0, "11:00:00"), (2, "09:00:00")]

    r = await client.get("/api/v1/timetable", params={"day_of_week": 0})
    assert r.json()["total"] == 2

    r = await client.post(
        "/api/v1/timetable", json={**base, "day_of_week": 1, "start_time": "10:00", "end_time": "09:00"}
    )
    assert r.status_code == 422

    # Moving only the end before the stored start is caught on save
    r = await client.patch(f"/api/v1/timetable/{first['id']}", json={"end_time": "07:00"})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_timetable_unknown_course(client):
    r = await client.post(
        "/api/v1/timetable",
        json={"course_id": NO_SUCH_ID, "day_of_week": 0, "start_time": "08:00", "end_time": "09:00"},
    )
    assert r.status_code == 422


# ── Attendance ───────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_attendance(client, seed):
    student, course = await seed()
    record = {"student_id": student["id"], "course_id": course["id"], "attended_on": "2026-09-01"}
    created = await _post(client, "attendance", record)
    assert created["status"] == "present"

    r = await client.post("/api/v1/attendance", json=record)
    assert r.status_code == 409

    await _post(client, "attendance", {**record, "attended_on": "2026-09-02", "status": "absent"})

    r = await client.get("/api/v1/attendance", params={"status": "absent"})
    assert r.json()["total"] == 1
    r = await client.get("/api/v1/attendance", params={"attended_on": "2026-09-01"})
    assert r.json()["items"][0]["id"] == created["id"]

    r = await client.patch(f"/api/v1/attendance/{created['id']}", json={"status": "excused"})
    assert r.json()["status"] == "excused"

    r = await client.patch(f"/api/v1/attendance/{created['id']}", json={"status": "asleep"})
    assert r.status_code == 422


# ── Grades ───────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_grades(client, seed):
    student, course = await seed()
    grade = {
        "student_id": student["id"],
        "course_id": course["id"],
        "assessment": "Midterm",
        "score": 42,
        "max_score": 50,
        "letter": "A",
    }
    created = await _post(client, "grades", grade)
    assert created["score"] == 42

    r = await client.post("/api/v1/grades", json=grade)
    assert r.status_code == 409

    r = await client.post("/api/v1/grades", json={**grade, "assessment": "Quiz", "score": 60})
    assert r.status_code == 422

    r = await client.patch(f"/api/v1/grades/{created['id']}", json={"max_score": 40})
    assert r.status_code == 422

    r = await client.get("/api/v1/grades", params={"student_id": student["id"]})
    assert r.json()["total"] == 1


@pytest.mark.asyncio
async def test_grade_unknown_student(client, seed):
    _, course = await seed()
    r = await client.post(
        "/api/v1/grades",
        json={"student_id": NO_SUCH_ID, "course_id": course["id"], "assessment": "Final", "score": 1},
    )
    assert r.status_code == 422


# ── Assignments & submissions ────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_submission_flow(client, seed):
    student, course = await seed()
    assignment = await _post(
        client,
        "assignments",
        {"course_id": course["id"], "title": "Essay", "max_score": 20, "due_date": "2999-01-01T00:00:00Z"},
    )

    submission = await _post(
        client,
        "submissions",
        {"assignment_id": assignment["id"], "student_id": student["id"], "content": "My essay"},
    )
    assert submission["status"] == "submitted"
    assert submission["score"] is None

    r = await client.post(
        "/api/v1/submissions",
        json={"assignment_id": assignment["id"], "student_id": student["id"], "content": "Again"},
    )
    assert r.status_code == 409

    r = await client.post(f"/api/v1/submissions/{submission['id']}/grade", json={"score": 25})
    assert r.status_code == 422

    r = await client.post(
        f"/api/v1/submissions/{submission['id']}/grade", json={"score": 18, "feedback": "Good"}
    )
    assert r.status_code == 200
    assert r.json()["status"] == "graded"
    assert r.json()["score"] == 18

    r = await client.get("/api/v1/submissions", params={"assignment_id": assignment["id"]})
    assert r.json()["total"] == 1


@pytest.mark.asyncio
async def test_late_submission(client, seed):
    student, course = await seed()
    assignment = await _post(
        client,
        "assignments",
        {"course_id": course["id"], "title": "Old", "due_date": "2000-01-01T00:00:00Z"},
    )
    submission = await _post(
        client,
        "submissions",
        {"assignment_id": assignment["id"], "student_id": student["id"], "attachment_url": "https://example.com/a.pdf"},
    )
    assert submission["status"] == "late"


@pytest.mark.asyncio
async def test_empty_submission_rejected(client, seed):
    student, course = await seed()
    assignment = await _post(client, "assignments", {"course_id": course["id"], "title": "T"})
    r = await client.post(
        "/api/v1/submissions",
        json={"assignment_id": assignment["id"], "student_id": student["id"]},
    )
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_submission_unknown_assignment(client, seed):
    student, _ = await seed()
    r = await client.post(
        "/api/v1/submissions",
        json={"assignment_id": NO_SUCH_ID, "student_id": student["id"], "content": "x"},
    )
    assert r.status_code == 422


# ── Fees ─────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_fee_payment(client, seed):
    student, _ = await seed()
    fee = await _post(
        client,
        "fees",
        {"student_id": student["id"], "description": "Term 1 tuition", "amount": "150.00"},
    )
    assert fee["status"] == "pending"
    assert fee["currency"] == "USD"
    assert Decimal(fee["amount"]) == Decimal("150.00")

    r = await client.post(f"/api/v1/fees/{fee['id']}/pay", json={"payment_reference": "RCPT-7"})
    assert r.status_code == 200
    assert r.json()["status"] == "paid"
    assert r.json()["paid_at"] is not None

    r = await client.post(f"/api/v1/fees/{fee['id']}/pay", json={"payment_reference": "RCPT-8"})
    assert r.status_code == 409

    r = await client.get("/api/v1/fees", params={"status": "pending"})
    assert r.json()["total"] == 0


@pytest.mark.asyncio
async def test_fee_validation(client, seed):
    student, _ = await seed()
    r = await client.post(
        "/api/v1/fees", json={"student_id": student["id"], "description": "Bad", "amount": "-5"}
    )
    assert r.status_code == 422
    r = await client.post(
        "/api/v1/fees",
        json={"student_id": student["id"], "description": "Bad", "amount": "5", "currency": "usd"},
    )
    assert r.status_code == 422
