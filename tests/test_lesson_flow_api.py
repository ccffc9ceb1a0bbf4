"""End-to-end booking flow over HTTP against an in-memory SQLite database"""
import pytest

from app.models.user import UserRole


REQUEST_BODY = {
    "lesson_type": "GUITAR",
    "start_time": "2030-01-01T10:00:00Z",
    "duration_minutes": 45,
    "address": "1 Music Lane",
}


@pytest.fixture
def rated_teachers(api_as, make_user):
    t1 = make_user(UserRole.TEACHER, first_name="Gil")
    t2 = make_user(UserRole.TEACHER, first_name="Vera")
    assert api_as(t1).post("/teacher-rates", json={"lesson_type": "GUITAR", "rate_in_cents": 6000}).status_code == 201
    assert api_as(t2).post("/teacher-rates", json={"lesson_type": "GUITAR", "rate_in_cents": 5000}).status_code == 201
    return t1, t2


class TestTeacherRatesApi:
    def test_create_change_and_history(self, api_as, teacher):
        client = api_as(teacher)

        created = client.post("/teacher-rates", json={"lesson_type": "BASS", "rate_in_cents": 5000})
        assert created.status_code == 201
        assert created.json()["status"] == "ACTIVE"
        assert created.json()["available_transitions"] == ["DEACTIVATE"]

        duplicate = client.post("/teacher-rates", json={"lesson_type": "BASS", "rate_in_cents": 5200})
        assert duplicate.status_code == 409
        assert duplicate.json()["code"] == "conflict"

        changed = client.put("/teacher-rates/BASS", json={"rate_in_cents": 5500})
        assert changed.status_code == 200
        assert changed.json()["rate_in_cents"] == 5500

        rates = client.get("/teacher-rates").json()
        assert [(r["rate_in_cents"], r["status"]) for r in rates] == [(5000, "INACTIVE"), (5500, "ACTIVE")]

        old_id = rates[0]["id"]
        history = client.get(f"/teacher-rates/{old_id}/history").json()
        assert [h["status"] for h in history] == ["ACTIVE", "INACTIVE"]

        reactivate = client.post(f"/teacher-rates/{old_id}/transitions", json={"transition": "ACTIVATE"})
        assert reactivate.status_code == 409

    def test_teachers_listing_by_lesson_type(self, api_as, rated_teachers, student):
        response = api_as(student).get("/users/teachers", params={"lesson_type": "GUITAR"})

        assert response.status_code == 200
        assert [(t["first_name"], t["rate_in_cents"]) for t in response.json()] == [("Gil", 6000), ("Vera", 5000)]


class TestBookingFlow:
    def test_request_quotes_accept_and_complete(self, api_as, rated_teachers, student):
        t1, t2 = rated_teachers

        created = api_as(student).post("/lesson-requests", json=REQUEST_BODY)
        assert created.status_code == 201
        body = created.json()
        quotes = body["quotes"]
        assert [q["cost_in_cents"] for q in quotes] == [4500, 3750]
        assert quotes[0]["cost_display"] == "45.00"
        assert quotes[0]["status"] == "CREATED"
        assert quotes[0]["status_label"] == "Created"
        assert quotes[0]["available_transitions"] == ["ACCEPT", "REJECT"]
        assert quotes[0]["current_status"]["status"] == "CREATED"

        accepted = api_as(student).post(
            f"/lesson-quotes/{quotes[0]['id']}/transitions", json={"transition": "accept"}
        )
        assert accepted.status_code == 200
        assert accepted.json()["quote"]["status"] == "ACCEPTED"
        assert accepted.json()["quote"]["available_transitions"] == []
        lesson = accepted.json()["lesson"]
        assert lesson["status"] == "REQUESTED"
        assert lesson["teacher_id"] == t1.id

        sibling = api_as(student).post(
            f"/lesson-quotes/{quotes[1]['id']}/transitions", json={"transition": "ACCEPT"}
        )
        assert sibling.status_code == 409

        teacher_client = api_as(t1)
        too_early = teacher_client.post(f"/lessons/{lesson['id']}/transitions", json={"transition": "COMPLETE"})
        assert too_early.status_code == 400
        assert too_early.json()["code"] == "invalid_transition"

        assert teacher_client.post(
            f"/lessons/{lesson['id']}/transitions", json={"transition": "ACCEPT"}
        ).json()["status"] == "ACCEPTED"
        completed = teacher_client.post(
            f"/lessons/{lesson['id']}/transitions", json={"transition": "COMPLETE", "context": {"notes": "ok"}}
        )
        assert completed.json()["status"] == "COMPLETED"
        assert completed.json()["available_transitions"] == ["VOID"]

        history = teacher_client.get(f"/lessons/{lesson['id']}/history").json()
        assert [h["status"] for h in history] == ["REQUESTED", "ACCEPTED", "COMPLETED"]
        assert history[-1]["context"] == {"notes": "ok"}

        assert api_as(t2).get(f"/lessons/{lesson['id']}").status_code == 403

    def test_student_may_only_void_lesson(self, api_as, rated_teachers, student):
        quotes = api_as(student).post("/lesson-requests", json=REQUEST_BODY).json()["quotes"]
        lesson = api_as(student).post(
            f"/lesson-quotes/{quotes[0]['id']}/transitions", json={"transition": "ACCEPT"}
        ).json()["lesson"]

        client = api_as(student)
        assert client.post(f"/lessons/{lesson['id']}/transitions", json={"transition": "ACCEPT"}).status_code == 403
        assert client.post(f"/lessons/{lesson['id']}/transitions", json={"transition": "VOID"}).status_code == 400

    def test_request_without_generating_quotes(self, api_as, rated_teachers, student):
        client = api_as(student)
        body = client.post("/lesson-requests", json={**REQUEST_BODY, "generate_quotes": False}).json()
        assert body["quotes"] == []

        generated = client.post(f"/lesson-requests/{body['id']}/quotes", json={"teacher_ids": [rated_teachers[1].id]})
        assert generated.status_code == 201
        assert [q["teacher_id"] for q in generated.json()] == [rated_teachers[1].id]

        listed = client.get(f"/lesson-requests/{body['id']}/quotes").json()
        assert len(listed) == 1
        assert [r["id"] for r in client.get("/lesson-requests").json()] == [body["id"]]

    def test_teacher_sees_only_own_quote_on_request(self, api_as, rated_teachers, student):
        t1, t2 = rated_teachers
        body = api_as(student).post("/lesson-requests", json=REQUEST_BODY).json()

        seen = api_as(t2).get(f"/lesson-requests/{body['id']}").json()
        assert [q["teacher_id"] for q in seen["quotes"]] == [t2.id]

    def test_reject_quote_history(self, api_as, rated_teachers, student):
        quotes = api_as(student).post("/lesson-requests", json=REQUEST_BODY).json()["quotes"]
        client = api_as(student)

        rejected = client.post(
            f"/lesson-quotes/{quotes[0]['id']}/transitions",
            json={"transition": "REJECT", "context": {"reason": "too pricey"}},
        )
        assert rejected.json()["lesson"] is None
        history = client.get(f"/lesson-quotes/{quotes[0]['id']}/history").json()
        assert [h["status"] for h in history] == ["CREATED", "REJECTED"]
        assert history[-1]["context"] == {"reason": "too pricey"}


class TestGoalsAndPlansApi:
    def test_goals_objectives_plans_and_milestones(self, api_as, booked_lesson, teacher, student):
        teacher_client = api_as(teacher)
        goal = teacher_client.post(f"/lessons/{booked_lesson.id}/goals", json={"title": "Barre chords"})
        assert goal.status_code == 201
        goal_id = goal.json()["id"]
        assert teacher_client.post(f"/goals/{goal_id}/transitions", json={"transition": "START"}).json()["status_label"] == "In Progress"
        assert [h["status"] for h in teacher_client.get(f"/goals/{goal_id}/history").json()] == ["CREATED", "IN_PROGRESS"]

        plan = teacher_client.post("/lesson-plans", json={"title": "Blues", "lesson_id": booked_lesson.id})
        assert plan.status_code == 201
        plan_id = plan.json()["id"]
        milestone = teacher_client.post(f"/lesson-plans/{plan_id}/milestones", json={"title": "12-bar"})
        assert milestone.status_code == 201
        started = teacher_client.post(
            f"/milestones/{milestone.json()['id']}/transitions", json={"transition": "START_PROGRESS"}
        )
        assert started.json()["available_transitions"] == ["MARK_COMPLETED", "CANCEL_MILESTONE", "RESET_TO_CREATED"]
        submitted = teacher_client.post(f"/lesson-plans/{plan_id}/transitions", json={"transition": "SUBMIT_FOR_APPROVAL"})
        assert submitted.json()["status_label"] == "Pending Approval"

        student_client = api_as(student)
        assert [g["id"] for g in student_client.get(f"/lessons/{booked_lesson.id}/goals").json()] == [goal_id]
        fetched = student_client.get(f"/lesson-plans/{plan_id}").json()
        assert [m["title"] for m in fetched["milestones"]] == ["12-bar"]
        assert student_client.post(f"/goals/{goal_id}/transitions", json={"transition": "ABANDON"}).status_code == 403

        objective = student_client.post("/objectives", json={"lesson_type": "GUITAR", "title": "Play Wonderwall"})
        assert objective.status_code == 201
        done = student_client.post(f"/objectives/{objective.json()['id']}/transitions", json={"transition": "COMPLETE"})
        assert done.json()["status"] == "ACHIEVED"
        assert len(student_client.get("/objectives").json()) == 1
