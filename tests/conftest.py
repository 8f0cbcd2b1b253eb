from datetime import date
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401  (registers tables)
from database.db import Base, get_db
from main import app
from models.attendance import AttendanceRecord as AttendanceModel
from models.students import Student as StudentModel
from services.report_cache import report_cache


# ==========================================================
# [DB] in-memory SQLite shared by the test session and the app
# ==========================================================
@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    # no `with`: startup (init_db on the configured database) is not run
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def _clear_report_cache():
    report_cache.clear()
    yield
    report_cache.clear()


# ==========================================================
# [data helpers]
# ==========================================================
def rec(student_id, day, status="PRESENT", late=False, early_dismissal=False, excused=None):
    """Plain record object for the pure statistics / alert functions."""
    return SimpleNamespace(
        student_id=student_id,
        date=day,
        status=status,
        late=late,
        early_dismissal=early_dismissal,
        excused=(status == "EXCUSED") if excused is None else excused,
    )


def add_student(db, student_id, first_name, last_name, grade=None):
    student = StudentModel(id=student_id, first_name=first_name, last_name=last_name, grade=grade)
    db.add(student)
    db.commit()
    return student


def add_attendance(db, student_id, day: date, status="PRESENT", late=False, early_dismissal=False):
    record = AttendanceModel(
        student_id=student_id,
        date=day,
        status=status,
        late=late or status == "LATE",
        early_dismissal=early_dismissal,
        excused=status == "EXCUSED",
    )
    db.add(record)
    db.commit()
    return record


@pytest.fixture
def roster(db):
    """Three students: Ann Smith, Bob Jones, Cara Smithers."""
    return [
        add_student(db, "STU001", "Ann", "Smith", "5"),
        add_student(db, "STU002", "Bob", "Jones", "5"),
        add_student(db, "STU003", "Cara", "Smithers", "6"),
    ]
