"""
Exam service - laboratory exam catalogue.

An exam's result rows are managed together with the exam: ``create`` and
``update`` take the list of row descriptions, and procedure 3 (free text)
exams never carry rows.
"""

import logging
from typing import Iterable, List, Optional

from hospital.core.exceptions import NotFound
from hospital.domain.entities import Exam, ExamRow, ExamType
from hospital.repositories.exam_repo import (
    ExamRepository,
    ExamRowRepository,
    ExamTypeRepository,
)
from hospital.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class ExamService:
    def __init__(self, uow: Optional[UnitOfWork] = None) -> None:
        self.uow = uow or UnitOfWork()

    # ------------------- queries -------------------

    def get_exams(self) -> List[Exam]:
        return self.get_exams_by_desc(None)

    def get_exams_by_desc(self, description: Optional[str]) -> List[Exam]:
        """Exams whose description contains ``description``.

        Filtered results are ordered by exam type description then exam
        description; the unfiltered list by exam description only.
        """
        with self.uow.transaction() as tx:
            return ExamRepository(tx.session).search(description=description)

    def get_exams_by_exam_type_desc(self, description: Optional[str]) -> List[Exam]:
        with self.uow.transaction() as tx:
            return ExamRepository(tx.session).search(exam_type_description=description)

    def get_exam_types(self) -> List[ExamType]:
        with self.uow.transaction() as tx:
            return ExamTypeRepository(tx.session).get_all()

    def get_exam_rows(self, exam_code: str) -> List[ExamRow]:
        with self.uow.transaction() as tx:
            return ExamRowRepository(tx.session).get_by_exam(exam_code)

    def find_by_code(self, code: str) -> Optional[Exam]:
        with self.uow.transaction() as tx:
            return ExamRepository(tx.session).find_by_code(code)

    def is_key_present(self, exam: Exam) -> bool:
        return self.find_by_code(exam.code) is not None

    def is_code_present(self, code: str) -> bool:
        with self.uow.transaction() as tx:
            return ExamRepository(tx.session).exists(code)

    # ------------------- commands -------------------

    def create(self, exam: Exam, rows: Optional[Iterable[str]] = None) -> Exam:
        """Insert ``exam`` and one result row per description."""
        with self.uow.transaction() as tx:
            saved = ExamRepository(tx.session).save_all([exam])[0]
            if not saved.is_free_text and rows:
                ExamRowRepository(tx.session).save_all(
                    ExamRow(exam_code=saved.code, description=d) for d in rows
                )
            return saved

    def update(self, exam: Exam, rows: Optional[Iterable[str]] = None) -> Exam:
        """Update ``exam`` and bring its rows in line with ``rows``.

        Rows whose description is not listed are deleted and listed
        descriptions without a row are added. Turning an exam into a free
        text exam drops all of its rows.
        """
        rows = list(rows or [])
        with self.uow.transaction() as tx:
            exams = ExamRepository(tx.session)
            row_repo = ExamRowRepository(tx.session)
            previous = exams.find_by_code(exam.code)
            if previous is None:
                raise NotFound("Exam", exam.code)

            saved = exams.save_all([exam])[0]
            existing = row_repo.get_by_exam(saved.code)

            if saved.is_free_text and not previous.is_free_text:
                row_repo.delete_all(existing)
                return saved

            existing_descriptions = {r.description for r in existing}
            to_remove = [r for r in existing if r.description not in rows]
            to_add = [
                ExamRow(exam_code=saved.code, description=d)
                for d in dict.fromkeys(rows)
                if d not in existing_descriptions
            ]
            if to_remove:
                row_repo.delete_all(to_remove)
            if to_add:
                row_repo.save_all(to_add)
            logger.debug(
                "Exam rows updated",
                extra={
                    "context": {
                        "exam_code": saved.code,
                        "removed": len(to_remove),
                        "added": len(to_add),
                    }
                },
            )
            return saved

    def new_exam(self, exam: Exam) -> Exam:
        with self.uow.transaction() as tx:
            return ExamRepository(tx.session).save_all([exam])[0]

    def update_exam(self, exam: Exam) -> Exam:
        return self.new_exam(exam)

    def new_exam_row(self, row: ExamRow) -> ExamRow:
        with self.uow.transaction() as tx:
            return ExamRowRepository(tx.session).save_all([row])[0]

    def new_exam_type(self, exam_type: ExamType) -> ExamType:
        with self.uow.transaction() as tx:
            return ExamTypeRepository(tx.session).save_all([exam_type])[0]

    def delete_exam(self, exam: Exam) -> None:
        """Delete ``exam`` together with its result rows."""
        with self.uow.transaction() as tx:
            ExamRowRepository(tx.session).delete_by_exam(exam.code)
            ExamRepository(tx.session).delete(exam.code)
