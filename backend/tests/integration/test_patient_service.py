"""Integration tests for PatientService lookups."""

import pytest

from hospital.core.exceptions import NotFound
from hospital.services.patient_service import PatientService


@pytest.fixture
def service(uow):
    return PatientService(uow)


@pytest.mark.integration
@pytest.mark.services
class TestPatientService:
    def test_deleted_patients_hidden_from_normal_lookups(self, service, make_patient):
        active = make_patient(first_name="Anna")
        deleted = make_patient(first_name="Anne", deleted=True)

        assert [p.code for p in service.get_active_patients()] == [active.code]
        assert service.get_patient(deleted.code) is None
        assert [p.code for p in service.search_patients("Ann")] == [active.code]

    def test_search_treats_wildcards_literally(self, service, make_patient):
        make_patient(first_name="Anna")
        make_patient(first_name="Bob")
        percent = make_patient(first_name="Ward_7", second_name="100%")

        assert [p.code for p in service.search_patients("%")] == [percent.code]
        assert [p.code for p in service.search_patients("_")] == [percent.code]
        assert service.search_patients("B%b") == []

    def test_search_ignores_case(self, service, make_patient):
        anna = make_patient(first_name="Anna")

        assert [p.code for p in service.search_patients("aNN")] == [anna.code]


    def test_deleted_patient_addressable_for_audit(self, service, make_patient):
        deleted = make_patient(deleted=True)

        patient = service.get_patient_for_audit(deleted.code)

        assert patient.code == deleted.code
        assert patient.deleted is True

    def test_audit_lookup_of_unknown_code(self, service):
        with pytest.raises(NotFound):
            service.get_patient_for_audit(4242)

    def test_save_patient_assigns_code(self, service, patient_data):
        saved = service.save_patient(patient_data(first_name="Grace", second_name="Auma"))

        assert saved.code is not None
        assert service.get_patient(saved.code).name == "Grace Auma"
        assert saved.created_at is not None

    def test_history_counts(self, service, make_patient, add_history):
        patient = make_patient()
        add_history("visit", patient.code)
        add_history("visit", patient.code)
        add_history("bill", patient.code)

        assert service.history_counts(patient.code) == {
            "visits": 2,
            "examinations": 0,
            "admissions": 0,
            "bills": 1,
        }

    def test_history_counts_unknown_patient(self, service):
        with pytest.raises(NotFound):
            service.history_counts(4242)
