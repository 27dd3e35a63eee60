"""
Central pytest configuration for the hospital backend tests.

Unit tests work against ``Mock(spec=...)`` doubles of the domain
interfaces. Integration tests get a fresh SQLite file database per test,
so commits and rollbacks behave like they do in production.
"""

import os
from datetime import date, datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Keep test runs from writing log files (set before the app reads it)
os.environ.setdefault("LOG_TO_FILE", "0")

from hospital.db import base as models  # noqa: E402
from hospital.db.session import create_tables  # noqa: E402
from hospital.domain.entities import Patient  # noqa: E402
from hospital.repositories.patient_repo import PatientRepository  # noqa: E402
from hospital.services.unit_of_work import UnitOfWork  # noqa: E402

from tests.config.markers import (  # noqa: E402,F401
    pytest_collection_modifyitems,
    pytest_configure,
)


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'hospital_test.db'}"


@pytest.fixture
def engine(database_url):
    engine = create_engine(database_url)
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(
        bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
    )


@pytest.fixture
def db_session(session_factory):
    """A plain session for arranging and inspecting rows."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def uow(session_factory):
    return UnitOfWork(session_factory=session_factory)


def _patient(**overrides) -> Patient:
    data = dict(
        first_name="Test",
        second_name="Patient",
        sex="F",
        birth_date=date(1980, 5, 17),
        age=44,
        age_type="d0",
        address="Test Address",
        city="Test City",
        next_kin="Test Next Kin",
        telephone="555-0100",
        mother_name="Test Mother",
        mother="A",
        father_name="Test Father",
        father="A",
        blood_type="0+",
        has_insurance="Y",
        parent_together="Y",
        note=None,
    )
    data.update(overrides)
    return Patient(**data)


@pytest.fixture
def patient_data():
    """Build an unsaved domain Patient with realistic defaults."""
    return _patient


@pytest.fixture
def make_patient(session_factory):
    """Persist a patient and return the stored domain object."""

    def _make(**overrides) -> Patient:
        session = session_factory()
        try:
            saved = PatientRepository(session).save_all([_patient(**overrides)])[0]
            session.commit()
            return saved
        finally:
            session.close()

    return _make


@pytest.fixture
def add_history(session_factory):
    """Insert one history row for a patient and return its id.

    ``kind`` is one of visit, examination, admission, bill.
    """

    def _add(kind: str, patient_code: int, **fields) -> int:
        now = datetime(2024, 3, 1, 9, 30)
        if kind == "visit":
            row = models.Visit(patient_code=patient_code, date=now, **fields)
        elif kind == "examination":
            row = models.PatientExamination(
                patient_code=patient_code, date=now, height=170, **fields
            )
        elif kind == "admission":
            fields.setdefault("discharge_date", now)
            row = models.Admission(
                patient_code=patient_code, admission_date=now, **fields
            )
        elif kind == "bill":
            fields.setdefault("status", "C")
            row = models.Bill(patient_code=patient_code, date=now, **fields)
        else:
            raise ValueError(f"Unknown history kind {kind!r}")

        session = session_factory()
        try:
            session.add(row)
            session.commit()
            return row.id
        finally:
            session.close()

    return _add
