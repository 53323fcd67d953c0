# tests/conftest.py

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.db import Base, enable_sqlite_foreign_keys, get_db, init_db
from main import app
from schemas.assessments import AssessmentCreate
from schemas.courses import CourseCreate
from schemas.enrollments import EnrollmentCreate
from schemas.enums import AssessmentType, GradeLevel, UserRole
from schemas.students import StudentCreate
from schemas.users import UserUpsert
from services.storage import DatabaseStorage

# ✅ 테스트 전용 인메모리 SQLite (모든 연결이 같은 DB를 보도록 StaticPool)
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

SESSION_DATE = date(2025, 9, 17)


@pytest.fixture
def db():
    init_db(engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage(db):
    return DatabaseStorage(db)


@pytest.fixture
def seed(storage):
    """관리자 / 교사 / 학생 2명 / 과목 1개 / 평가 2개 (Midterm 100점 w1, Quiz 50점 w0.5)"""
    admin = storage.upsert_user(UserUpsert(email="admin@school.test", role=UserRole.ADMIN, api_token="admin-token"))
    teacher = storage.upsert_user(
        UserUpsert(email="teacher@school.test", first_name="Mina", role=UserRole.TEACHER, api_token="teacher-token")
    )
    alice_user = storage.upsert_user(
        UserUpsert(email="alice@school.test", first_name="Alice", role=UserRole.STUDENT, api_token="alice-token")
    )
    bob_user = storage.upsert_user(
        UserUpsert(email="bob@school.test", first_name="Bob", role=UserRole.STUDENT, api_token="bob-token")
    )

    alice = storage.create_student(
        StudentCreate(user_id=alice_user.id, student_id="S-001", grade_level=GradeLevel.GRADE_10)
    )
    bob = storage.create_student(StudentCreate(user_id=bob_user.id, student_id="S-002", grade_level=GradeLevel.GRADE_10))

    course = storage.create_course(
        CourseCreate(code="MATH-10", name="Algebra II", grade_level=GradeLevel.GRADE_10, teacher_id=teacher.id)
    )
    storage.create_enrollment(EnrollmentCreate(student_id=alice.id, course_id=course.id))
    storage.create_enrollment(EnrollmentCreate(student_id=bob.id, course_id=course.id))

    midterm = storage.create_assessment(
        AssessmentCreate(
            course_id=course.id, name="Midterm", type=AssessmentType.MIDTERM,
            max_score=Decimal("100"), weight=Decimal("1.00"),
        )
    )
    quiz = storage.create_assessment(
        AssessmentCreate(
            course_id=course.id, name="Quiz", type=AssessmentType.QUIZ,
            max_score=Decimal("50"), weight=Decimal("0.50"),
        )
    )

    return SimpleNamespace(
        admin=admin, teacher=teacher, alice_user=alice_user, bob_user=bob_user,
        alice=alice, bob=bob, course=course, midterm=midterm, quiz=quiz,
    )


@pytest.fixture
def client(db):
    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
