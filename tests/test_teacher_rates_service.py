"""Tests for teacher rate management (app/services/teacher_rates.py)"""
import pytest

from app.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.models.lesson_request import LessonType
from app.models.teacher_rate import TeacherLessonHourlyRateStatusValue as RateStatus
from app.models.user import UserRole
from app.services.status_history import list_history
from app.services.teacher_rates import (
    change_rate,
    create_rate,
    find_teachers_with_active_rate,
    get_active_rate,
    list_rates,
    transition_rate,
)


class TestCreateRate:
    def test_creates_active_rate(self, db_session, teacher):
        rate = create_rate(db_session, teacher, LessonType.GUITAR, 6000)

        assert rate.id is not None
        assert rate.rate_in_cents == 6000
        assert rate.status == RateStatus.ACTIVE
        assert len(list_history(db_session, rate)) == 1

    def test_accepts_plain_string_lesson_type(self, db_session, teacher):
        rate = create_rate(db_session, teacher, "VOICE", 5000)
        assert rate.lesson_type == LessonType.VOICE

    def test_second_active_rate_for_same_type_conflicts(self, db_session, teacher):
        create_rate(db_session, teacher, LessonType.GUITAR, 6000)
        with pytest.raises(ConflictError):
            create_rate(db_session, teacher, LessonType.GUITAR, 7000)

    def test_different_types_coexist(self, db_session, teacher):
        create_rate(db_session, teacher, LessonType.GUITAR, 6000)
        create_rate(db_session, teacher, LessonType.BASS, 5500)
        assert len(list_rates(db_session, teacher.id, active_only=True)) == 2

    @pytest.mark.parametrize("cents", [0, -100, 12.5, "6000", True])
    def test_rejects_non_positive_or_non_integer_rate(self, db_session, teacher, cents):
        with pytest.raises(ValidationError):
            create_rate(db_session, teacher, LessonType.GUITAR, cents)

    def test_rejects_unknown_lesson_type(self, db_session, teacher):
        with pytest.raises(ValidationError):
            create_rate(db_session, teacher, "KAZOO", 6000)

    def test_students_cannot_hold_rates(self, db_session, student):
        with pytest.raises(ForbiddenError):
            create_rate(db_session, student, LessonType.GUITAR, 6000)


class TestChangeRate:
    def test_old_row_kept_inactive_and_new_row_active(self, db_session, teacher):
        old = create_rate(db_session, teacher, LessonType.GUITAR, 6000)
        new = change_rate(db_session, teacher, LessonType.GUITAR, 6500)

        db_session.refresh(old)
        assert new.id != old.id
        assert old.rate_in_cents == 6000
        assert old.status == RateStatus.INACTIVE
        assert new.status == RateStatus.ACTIVE
        assert get_active_rate(db_session, teacher.id, LessonType.GUITAR).id == new.id

        deactivation = list_history(db_session, old)[-1]
        assert deactivation.context == {"replaced_by_rate_in_cents": 6500}
        assert list_history(db_session, new)[0].context == {"replaces_rate_id": old.id}

    def test_change_without_existing_rate_creates_one(self, db_session, teacher):
        rate = change_rate(db_session, teacher, LessonType.DRUMS, 4000)
        assert rate.status == RateStatus.ACTIVE
        assert len(list_rates(db_session, teacher.id)) == 1


class TestTransitionRate:
    def test_deactivate_then_activate(self, db_session, teacher):
        rate = create_rate(db_session, teacher, LessonType.GUITAR, 6000)

        rate = transition_rate(db_session, rate.id, "DEACTIVATE", teacher)
        assert rate.status == RateStatus.INACTIVE
        assert get_active_rate(db_session, teacher.id, LessonType.GUITAR) is None

        rate = transition_rate(db_session, rate.id, "ACTIVATE", teacher)
        assert rate.status == RateStatus.ACTIVE

    def test_activate_conflicts_with_other_active_rate(self, db_session, teacher):
        old = create_rate(db_session, teacher, LessonType.GUITAR, 6000)
        change_rate(db_session, teacher, LessonType.GUITAR, 6500)

        with pytest.raises(ConflictError):
            transition_rate(db_session, old.id, "ACTIVATE", teacher)

        db_session.refresh(old)
        assert old.status == RateStatus.INACTIVE

    def test_activate_allowed_when_other_type_active(self, db_session, teacher):
        guitar = create_rate(db_session, teacher, LessonType.GUITAR, 6000)
        create_rate(db_session, teacher, LessonType.BASS, 5000)
        transition_rate(db_session, guitar.id, "DEACTIVATE", teacher)

        assert transition_rate(db_session, guitar.id, "ACTIVATE", teacher).status == RateStatus.ACTIVE

    def test_other_teacher_forbidden(self, db_session, teacher, make_user):
        rate = create_rate(db_session, teacher, LessonType.GUITAR, 6000)
        other = make_user(UserRole.TEACHER)
        with pytest.raises(ForbiddenError):
            transition_rate(db_session, rate.id, "DEACTIVATE", other)

    def test_admin_allowed(self, db_session, teacher, admin):
        rate = create_rate(db_session, teacher, LessonType.GUITAR, 6000)
        assert transition_rate(db_session, rate.id, "DEACTIVATE", admin).status == RateStatus.INACTIVE

    def test_missing_rate(self, db_session, teacher):
        with pytest.raises(NotFoundError):
            transition_rate(db_session, 999, "DEACTIVATE", teacher)


class TestFindTeachers:
    def test_only_teachers_with_active_rate_for_type(self, db_session, make_user):
        t1 = make_user(UserRole.TEACHER)
        t2 = make_user(UserRole.TEACHER)
        t3 = make_user(UserRole.TEACHER)
        create_rate(db_session, t1, LessonType.GUITAR, 6000)
        create_rate(db_session, t2, LessonType.GUITAR, 5000)
        create_rate(db_session, t3, LessonType.VOICE, 5000)
        rate = create_rate(db_session, t3, LessonType.GUITAR, 5000)
        transition_rate(db_session, rate.id, "DEACTIVATE", t3)

        teachers = find_teachers_with_active_rate(db_session, LessonType.GUITAR)
        assert [t.id for t in teachers] == [t1.id, t2.id]

    def test_limit(self, db_session, make_user):
        for _ in range(4):
            create_rate(db_session, make_user(UserRole.TEACHER), LessonType.BASS, 5000)
        assert len(find_teachers_with_active_rate(db_session, LessonType.BASS, limit=3)) == 3
