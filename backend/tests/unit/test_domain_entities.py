"""Unit tests for domain entity rules."""

from datetime import datetime

import pytest

from hospital.domain.entities import (
    Admission,
    Bill,
    Exam,
    ExamType,
    Patient,
    Permission,
    User,
    UserPermissions,
)


@pytest.mark.unit
class TestPatient:
    def test_name_built_from_parts(self):
        patient = Patient(first_name="Anna", second_name="Okello", sex="F")

        assert patient.name == "Anna Okello"
        assert patient.is_active

    def test_invalid_sex_rejected(self):
        with pytest.raises(ValueError):
            Patient(first_name="Anna", sex="X")


@pytest.mark.unit
def test_admission_is_open_only_while_admitted_and_not_discharged():
    assert Admission(patient_code=1).is_open
    assert not Admission(patient_code=1, discharge_date=datetime(2024, 1, 2)).is_open
    assert not Admission(patient_code=1, deleted=True).is_open
    assert not Admission(patient_code=1, admitted=False).is_open


@pytest.mark.unit
def test_bill_status_validation():
    assert Bill(patient_code=1).is_pending
    assert not Bill(patient_code=1, status="C").is_pending
    with pytest.raises(ValueError):
        Bill(patient_code=1, status="X")


@pytest.mark.unit
class TestExamType:
    def test_equality_ignores_description_case(self):
        assert ExamType("HB", "Haematology") == ExamType("HB", "HAEMATOLOGY")
        assert ExamType("HB", "Haematology") != ExamType("CH", "Haematology")

    def test_hash_and_str(self):
        types = {ExamType("HB", "Haematology"), ExamType("HB", "haematology")}

        assert len(types) == 1
        assert str(ExamType("HB", "Haematology")) == "Haematology"


@pytest.mark.unit
class TestExam:
    def test_code_required(self):
        with pytest.raises(ValueError):
            Exam(code="", description="Blood count")

    def test_procedure_range(self):
        with pytest.raises(ValueError):
            Exam(code="01.01", procedure=4)
        assert Exam(code="01.02", procedure=3).is_free_text


@pytest.mark.unit
def test_user_requires_group():
    with pytest.raises(ValueError):
        User(user_name="nurse", group_code="")


@pytest.mark.unit
def test_user_permissions_lookup():
    perms = UserPermissions(
        user_name="admin",
        group_code="admin",
        permissions=[Permission(name="patients.merge")],
    )

    assert perms.has("patients.merge")
    assert not perms.has("exams.delete")
