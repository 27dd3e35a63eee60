"""Integration tests for the exam catalogue service."""

import pytest

from hospital.core.exceptions import NotFound
from hospital.domain.entities import Exam, ExamRow, ExamType
from hospital.services.exam_service import ExamService

HAEMATOLOGY = ExamType("HB", "Haematology")
CHEMISTRY = ExamType("CH", "Chemistry")


@pytest.fixture
def service(uow):
    service = ExamService(uow)
    service.new_exam_type(HAEMATOLOGY)
    service.new_exam_type(CHEMISTRY)
    return service


def _exam(code, description, exam_type=HAEMATOLOGY, procedure=1):
    return Exam(code=code, description=description, exam_type=exam_type, procedure=procedure)


def _row_descriptions(service, exam_code):
    return [row.description for row in service.get_exam_rows(exam_code)]


@pytest.mark.integration
@pytest.mark.services
class TestExamQueries:
    @pytest.fixture(autouse=True)
    def seed(self, service):
        service.new_exam(_exam("01.01", "Haemoglobin"))
        service.new_exam(_exam("02.01", "Glucose", CHEMISTRY))
        service.new_exam(_exam("02.02", "Albumin", CHEMISTRY))

    def test_get_exams_ordered_by_description(self, service):
        assert [e.description for e in service.get_exams()] == [
            "Albumin",
            "Glucose",
            "Haemoglobin",
        ]

    def test_get_exams_by_desc_orders_by_type_then_description(self, service):
        exams = service.get_exams_by_desc("o")

        assert [e.code for e in exams] == ["02.01", "01.01"]
        assert exams[0].exam_type == CHEMISTRY

    def test_get_exams_by_exam_type_desc(self, service):
        exams = service.get_exams_by_exam_type_desc("Chem")

        assert [e.description for e in exams] == ["Albumin", "Glucose"]

    def test_get_exams_by_exam_type_desc_without_filter(self, service):
        assert len(service.get_exams_by_exam_type_desc(None)) == 3

    def test_presence_checks(self, service):
        assert service.is_code_present("01.01")
        assert not service.is_code_present("99.99")
        assert service.is_key_present(_exam("02.01", "anything"))
        assert service.find_by_code("99.99") is None

    def test_exam_types_ordered_by_description(self, service):
        assert [str(t) for t in service.get_exam_types()] == ["Chemistry", "Haematology"]


@pytest.mark.integration
@pytest.mark.services
class TestExamRows:
    def test_create_with_rows(self, service):
        service.create(_exam("01.02", "Blood group"), ["A", "B", "AB", "0"])

        assert _row_descriptions(service, "01.02") == ["0", "A", "AB", "B"]

    def test_create_free_text_exam_ignores_rows(self, service):
        service.create(_exam("01.03", "Observations", procedure=3), ["ignored"])

        assert _row_descriptions(service, "01.03") == []

    def test_update_diffs_rows(self, service):
        service.create(_exam("01.02", "Blood group"), ["A", "B", "AB"])

        service.update(_exam("01.02", "Blood group (ABO)"), ["A", "AB", "0"])

        assert _row_descriptions(service, "01.02") == ["0", "A", "AB"]
        assert service.find_by_code("01.02").description == "Blood group (ABO)"

    def test_update_to_free_text_drops_rows(self, service):
        service.create(_exam("01.02", "Blood group"), ["A", "B"])

        service.update(_exam("01.02", "Blood group", procedure=3), ["A"])

        assert _row_descriptions(service, "01.02") == []

    def test_update_can_change_exam_type(self, service):
        service.create(_exam("01.02", "Blood group"), [])

        service.update(_exam("01.02", "Blood group", exam_type=CHEMISTRY), [])

        assert service.find_by_code("01.02").exam_type == CHEMISTRY

    def test_update_unknown_exam(self, service):
        with pytest.raises(NotFound):
            service.update(_exam("77.77", "Missing"), [])

    def test_new_exam_row(self, service):
        service.new_exam(_exam("01.02", "Blood group"))

        row = service.new_exam_row(ExamRow(exam_code="01.02", description="A"))

        assert row.code is not None
        assert _row_descriptions(service, "01.02") == ["A"]

    def test_delete_exam_removes_rows(self, service):
        exam = service.create(_exam("01.02", "Blood group"), ["A", "B"])

        service.delete_exam(exam)

        assert service.find_by_code("01.02") is None
        assert service.get_exam_rows("01.02") == []

    def test_update_exam_keeps_rows(self, service):
        service.create(_exam("01.02", "Blood group"), ["A"])

        updated = service.update_exam(_exam("01.02", "Blood group ABO"))

        assert updated.description == "Blood group ABO"
        assert _row_descriptions(service, "01.02") == ["A"]
