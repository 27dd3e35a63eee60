"""Exam catalogue repositories: exam types, exams and exam result rows."""

from typing import Iterable, List, Optional

from sqlalchemy import delete, select

from hospital.db.base import Exam as DbExam
from hospital.db.base import ExamRow as DbExamRow
from hospital.db.base import ExamType as DbExamType
from hospital.domain.entities import Exam as DomainExam
from hospital.domain.entities import ExamRow as DomainExamRow
from hospital.domain.entities import ExamType as DomainExamType
from hospital.domain.interfaces import (
    IExamRepository,
    IExamRowRepository,
    IExamTypeRepository,
)

from .base_repo import SqlAlchemyEntityStore


class ExamTypeRepository(SqlAlchemyEntityStore, IExamTypeRepository):
    model = DbExamType
    entity = DomainExamType
    entity_name = "ExamType"
    fields = ("description",)

    def get_all(self) -> List[DomainExamType]:
        stmt = select(DbExamType).order_by(DbExamType.description)
        return [self._to_domain(row) for row in self.db.scalars(stmt)]


class ExamRepository(SqlAlchemyEntityStore, IExamRepository):
    model = DbExam
    entity = DomainExam
    entity_name = "Exam"
    fields = ("description", "procedure", "default_result")

    def find_by_code(self, code: str) -> Optional[DomainExam]:
        return self._to_domain(self.db.get(DbExam, code))

    def exists(self, code: str) -> bool:
        return self.db.get(DbExam, code) is not None

    def search(
        self,
        description: Optional[str] = None,
        exam_type_description: Optional[str] = None,
    ) -> List[DomainExam]:
        stmt = select(DbExam).join(DbExamType)
        if description is None and exam_type_description is None:
            stmt = stmt.order_by(DbExam.description)
        else:
            if description is not None:
                stmt = stmt.where(DbExam.description.contains(description))
            if exam_type_description is not None:
                stmt = stmt.where(
                    DbExamType.description.contains(exam_type_description)
                )
            stmt = stmt.order_by(DbExamType.description, DbExam.description)
        return [self._to_domain(row) for row in self.db.scalars(stmt).unique()]

    def delete(self, code: str) -> bool:
        row = self.db.get(DbExam, code)
        if row is None:
            return False
        self.db.delete(row)
        self.db.flush()
        return True

    def _apply(self, row, entity: DomainExam) -> None:
        super()._apply(row, entity)
        if entity.exam_type is None:
            raise ValueError(f"Exam {entity.code} has no exam type")
        row.exam_type_code = entity.exam_type.code

    def _to_domain(self, row) -> Optional[DomainExam]:
        if row is None:
            return None
        exam_type = self.db.get(DbExamType, row.exam_type_code)
        return DomainExam(
            code=row.code,
            description=row.description,
            exam_type=DomainExamType(code=exam_type.code, description=exam_type.description)
            if exam_type is not None
            else None,
            procedure=row.procedure,
            default_result=row.default_result,
        )


class ExamRowRepository(IExamRowRepository):
    def __init__(self, db_session) -> None:
        self.db = db_session

    def get_by_exam(self, exam_code: str) -> List[DomainExamRow]:
        stmt = (
            select(DbExamRow)
            .where(DbExamRow.exam_code == exam_code)
            .order_by(DbExamRow.description)
        )
        return [self._to_domain(row) for row in self.db.scalars(stmt)]

    def save_all(self, rows: Iterable[DomainExamRow]) -> List[DomainExamRow]:
        db_rows = []
        for row in rows:
            db_row = self.db.get(DbExamRow, row.code) if row.code is not None else None
            if db_row is None:
                db_row = DbExamRow()
                self.db.add(db_row)
            db_row.exam_code = row.exam_code
            db_row.description = row.description
            db_rows.append(db_row)
        self.db.flush()
        return [self._to_domain(r) for r in db_rows]

    def delete_all(self, rows: Iterable[DomainExamRow]) -> int:
        codes = [row.code for row in rows if row.code is not None]
        if not codes:
            return 0
        result = self.db.execute(delete(DbExamRow).where(DbExamRow.code.in_(codes)))
        return result.rowcount or 0

    def delete_by_exam(self, exam_code: str) -> int:
        result = self.db.execute(
            delete(DbExamRow).where(DbExamRow.exam_code == exam_code)
        )
        return result.rowcount or 0

    @staticmethod
    def _to_domain(row: DbExamRow) -> DomainExamRow:
        return DomainExamRow(
            exam_code=row.exam_code, description=row.description, code=row.code
        )
