import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock, MagicMock

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from app.database import get_db
from app.auth.dependencies import get_current_user
from app.models import Base
from app.models.user import User, UserRole
from app.models.lesson_request import LessonType


@pytest.fixture
def mock_db():
    """Mock database session"""
    db = MagicMock()
    db.query.return_value = db
    db.filter.return_value = db
    db.first.return_value = None
    db.all.return_value = []
    db.count.return_value = 0
    return db


@pytest.fixture
def mock_teacher():
    """Mock teacher user"""
    user = Mock(spec=User)
    user.id = 1
    user.email = "teacher@test.com"
    user.first_name = "Terry"
    user.last_name = "Teacher"
    user.role = UserRole.TEACHER
    user.created_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return user


@pytest.fixture
def mock_student():
    """Mock student user"""
    user = Mock(spec=User)
    user.id = 2
    user.email = "student@test.com"
    user.first_name = "Stu"
    user.last_name = "Dent"
    user.role = UserRole.STUDENT
    user.created_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return user


@pytest.fixture
def mock_admin():
    """Mock admin user"""
    user = Mock(spec=User)
    user.id = 3
    user.email = "admin@test.com"
    user.first_name = "Ada"
    user.last_name = "Admin"
    user.role = UserRole.ADMIN
    user.created_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return user


@pytest.fixture
def client_with_teacher(mock_db, mock_teacher):
    """TestClient with teacher auth and mocked DB"""
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_current_user] = lambda: mock_teacher
    client = TestClient(app)
    yield client, mock_db, mock_teacher
    app.dependency_overrides.clear()


@pytest.fixture
def client_with_student(mock_db, mock_student):
    """TestClient with student auth and mocked DB"""
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_current_user] = lambda: mock_student
    client = TestClient(app)
    yield client, mock_db, mock_student
    app.dependency_overrides.clear()


@pytest.fixture
def client_with_admin(mock_db, mock_admin):
    """TestClient with admin auth and mocked DB"""
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_current_user] = lambda: mock_admin
    client = TestClient(app)
    yield client, mock_db, mock_admin
    app.dependency_overrides.clear()


@pytest.fixture
def unauthenticated_client(mock_db):
    """TestClient with mocked DB but no auth"""
    app.dependency_overrides[get_db] = lambda: mock_db
    client = TestClient(app)
    yield client, mock_db
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


# ---------------------------------------------------------------------------
# SQLite-backed fixtures for service tests
# ---------------------------------------------------------------------------

@pytest.fixture
def db_session():
    """
    Fresh in-memory SQLite database per test.

    Services commit, so isolation comes from a new engine rather than a
    rolled-back transaction.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def make_user(db_session):
    """Factory: persist a user with the given role."""
    counter = {"n": 0}

    def _make(role=UserRole.STUDENT, email=None, first_name="Test", last_name="User"):
        counter["n"] += 1
        user = User(
            email=email or f"{role.value}{counter['n']}@test.com",
            first_name=first_name,
            last_name=last_name,
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def teacher(make_user):
    return make_user(UserRole.TEACHER)


@pytest.fixture
def student(make_user):
    return make_user(UserRole.STUDENT)


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN)


@pytest.fixture
def make_lesson_request(db_session):
    """Factory: persist a lesson request for a student."""
    from app.services.lesson_requests import create_lesson_request

    def _make(student, lesson_type=LessonType.GUITAR, duration_minutes=45, start_time=None):
        return create_lesson_request(
            db_session,
            student,
            lesson_type=lesson_type,
            start_time=start_time or datetime.now(timezone.utc) + timedelta(days=3),
            duration_minutes=duration_minutes,
            address="1 Music Lane",
        )

    return _make


@pytest.fixture
def booked_lesson(db_session, teacher, student, make_lesson_request):
    """A lesson created the normal way: rate, request, quote, acceptance."""
    from app.services.teacher_rates import create_rate
    from app.services.lesson_quotes import accept_quote, generate_quotes

    create_rate(db_session, teacher, LessonType.GUITAR, 6000)
    request = make_lesson_request(student)
    quotes = generate_quotes(db_session, request.id, student)
    _, lesson = accept_quote(db_session, quotes[0].id, student)
    return lesson


@pytest.fixture
def api_as(db_session):
    """TestClient bound to the SQLite session, authenticated as the given user."""
    def _client(user):
        app.dependency_overrides[get_db] = lambda: db_session
        app.dependency_overrides[get_current_user] = lambda: user
        return TestClient(app)

    yield _client
    app.dependency_overrides.clear()
