"""Tests for lesson summaries and teacher statistics (app/services/lesson_summaries.py, app/services/lessons.py)"""
import pytest
from datetime import timedelta

from app.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.models.base import utcnow
from app.services.goals import create_goal, transition_goal
from app.services.lesson_summaries import create_lesson_summary, get_lesson_summary
from app.services.lessons import teacher_statistics, transition_lesson

SUMMARY = "Worked on alternate picking at 90 bpm."
HOMEWORK = "Practice the G major scale daily."


@pytest.fixture
def completed_lesson(db_session, booked_lesson, teacher):
    transition_lesson(db_session, booked_lesson.id, "ACCEPT", teacher)
    return transition_lesson(db_session, booked_lesson.id, "COMPLETE", teacher)


class TestCreateLessonSummary:
    def test_requested_lesson_rejected(self, db_session, booked_lesson, teacher):
        with pytest.raises(ConflictError):
            create_lesson_summary(db_session, booked_lesson.id, teacher, SUMMARY, HOMEWORK)

    def test_accepted_lesson_rejected(self, db_session, booked_lesson, teacher):
        transition_lesson(db_session, booked_lesson.id, "ACCEPT", teacher)
        with pytest.raises(ConflictError):
            create_lesson_summary(db_session, booked_lesson.id, teacher, SUMMARY, HOMEWORK)

    def test_completed_lesson_accepted(self, db_session, completed_lesson, teacher):
        summary = create_lesson_summary(db_session, completed_lesson.id, teacher, f"  {SUMMARY}  ", HOMEWORK)

        assert summary.lesson_id == completed_lesson.id
        assert summary.summary == SUMMARY
        assert summary.homework == HOMEWORK

    def test_second_summary_conflicts(self, db_session, completed_lesson, teacher):
        create_lesson_summary(db_session, completed_lesson.id, teacher, SUMMARY, HOMEWORK)
        with pytest.raises(ConflictError):
            create_lesson_summary(db_session, completed_lesson.id, teacher, SUMMARY, HOMEWORK)

    @pytest.mark.parametrize("summary, homework", [
        ("too short", HOMEWORK),
        ("x" * 5001, HOMEWORK),
        (SUMMARY, "tiny"),
        (SUMMARY, "y" * 2001),
        (None, HOMEWORK),
    ])
    def test_length_limits(self, db_session, completed_lesson, teacher, summary, homework):
        with pytest.raises(ValidationError):
            create_lesson_summary(db_session, completed_lesson.id, teacher, summary, homework)

    def test_student_cannot_write(self, db_session, completed_lesson, student):
        with pytest.raises(ForbiddenError):
            create_lesson_summary(db_session, completed_lesson.id, student, SUMMARY, HOMEWORK)

    def test_missing_lesson(self, db_session, teacher):
        with pytest.raises(NotFoundError):
            create_lesson_summary(db_session, 999, teacher, SUMMARY, HOMEWORK)

    def test_summary_survives_void(self, db_session, completed_lesson, teacher, student):
        create_lesson_summary(db_session, completed_lesson.id, teacher, SUMMARY, HOMEWORK)
        transition_lesson(db_session, completed_lesson.id, "VOID", teacher)

        assert get_lesson_summary(db_session, completed_lesson.id, student).homework == HOMEWORK


class TestGetLessonSummary:
    def test_missing_summary(self, db_session, booked_lesson, student):
        with pytest.raises(NotFoundError):
            get_lesson_summary(db_session, booked_lesson.id, student)

    def test_outsider_forbidden(self, db_session, completed_lesson, teacher, make_user):
        create_lesson_summary(db_session, completed_lesson.id, teacher, SUMMARY, HOMEWORK)
        with pytest.raises(ForbiddenError):
            get_lesson_summary(db_session, completed_lesson.id, make_user())


class TestTeacherStatistics:
    def test_no_lessons(self, db_session, teacher):
        stats = teacher_statistics(db_session, teacher.id)

        assert stats["total_lessons"] == 0
        assert stats["total_earnings_in_cents"] == 0
        assert stats["completion_rate"] == 0.0
        assert stats["goals_per_lesson"] == 0.0
        assert stats["goal_completion_rate"] == 0.0

    def test_booked_lesson_is_upcoming_without_earnings(self, db_session, booked_lesson, teacher):
        stats = teacher_statistics(db_session, teacher.id)

        assert stats["total_lessons"] == 1
        assert stats["completed_lessons"] == 0
        assert stats["upcoming_lessons"] == 1
        assert stats["total_earnings_in_cents"] == 0

    def test_completed_lesson_counts_earnings_and_goals(self, db_session, completed_lesson, teacher):
        achieved = create_goal(db_session, completed_lesson.id, teacher, title="Alternate picking")
        create_goal(db_session, completed_lesson.id, teacher, title="Sweep picking")
        transition_goal(db_session, achieved.id, "START", teacher)
        transition_goal(db_session, achieved.id, "COMPLETE", teacher)

        stats = teacher_statistics(db_session, teacher.id)

        # 6000 cents/hour for 45 minutes
        assert stats["total_earnings_in_cents"] == 4500
        assert stats["completed_lessons"] == 1
        assert stats["completion_rate"] == 100.0
        assert stats["total_goals"] == 2
        assert stats["completed_goals"] == 1
        assert stats["goals_per_lesson"] == 2.0
        assert stats["goal_completion_rate"] == 50.0

    def test_past_and_voided_lessons_not_upcoming(self, db_session, booked_lesson, teacher):
        later = utcnow() + timedelta(days=30)
        assert teacher_statistics(db_session, teacher.id, now=later)["upcoming_lessons"] == 0

        transition_lesson(db_session, booked_lesson.id, "REJECT", teacher)
        assert teacher_statistics(db_session, teacher.id)["upcoming_lessons"] == 0

    def test_other_teachers_lessons_excluded(self, db_session, booked_lesson, make_user):
        from app.models.user import UserRole
        other = make_user(UserRole.TEACHER)
        assert teacher_statistics(db_session, other.id)["total_lessons"] == 0


class TestSummaryAndStatisticsApi:
    def test_summary_endpoints(self, api_as, completed_lesson, teacher, student):
        client = api_as(teacher)
        body = {"summary": SUMMARY, "homework": HOMEWORK}

        created = client.post(f"/lessons/{completed_lesson.id}/summary", json=body)
        assert created.status_code == 201
        duplicate = client.post(f"/lessons/{completed_lesson.id}/summary", json=body)
        assert duplicate.status_code == 409
        assert duplicate.json()["code"] == "conflict"

        fetched = api_as(student).get(f"/lessons/{completed_lesson.id}/summary")
        assert fetched.status_code == 200
        assert fetched.json()["homework"] == HOMEWORK

    def test_summary_before_completion_is_conflict(self, api_as, booked_lesson, teacher):
        response = api_as(teacher).post(
            f"/lessons/{booked_lesson.id}/summary", json={"summary": SUMMARY, "homework": HOMEWORK}
        )
        assert response.status_code == 409

    def test_statistics_endpoint(self, api_as, completed_lesson, teacher, student):
        response = api_as(teacher).get("/users/me/statistics")
        assert response.status_code == 200
        assert response.json()["total_earnings_in_cents"] == 4500

        assert api_as(student).get("/users/me/statistics").status_code == 403
