"""Patient repository implementation.

Soft deleted patients are excluded from normal lookups but remain
loadable by code for audit and history purposes.
"""

from typing import Iterable, List, Optional

from sqlalchemy import select

from hospital.db.base import Patient as DbPatient
from hospital.domain.entities import Patient as DomainPatient
from hospital.domain.interfaces import IPatientRepository

from .base_repo import SqlAlchemyEntityStore

PATIENT_FIELDS = (
    "first_name",
    "second_name",
    "name",
    "sex",
    "birth_date",
    "age",
    "age_type",
    "address",
    "city",
    "next_kin",
    "telephone",
    "mother_name",
    "mother",
    "father_name",
    "father",
    "blood_type",
    "has_insurance",
    "parent_together",
    "note",
    "deleted",
)


class PatientRepository(SqlAlchemyEntityStore, IPatientRepository):
    """Repository for Patient persistence operations."""

    model = DbPatient
    entity = DomainPatient
    entity_name = "Patient"
    fields = PATIENT_FIELDS
    read_only_fields = ("created_at", "updated_at")

    def get_by_code(
        self, code: int, include_deleted: bool = False
    ) -> Optional[DomainPatient]:
        stmt = select(DbPatient).where(DbPatient.code == code)
        if not include_deleted:
            stmt = stmt.where(DbPatient.deleted.is_(False))
        return self._to_domain(self.db.scalars(stmt).first())

    def get_active(self) -> List[DomainPatient]:
        stmt = (
            select(DbPatient)
            .where(DbPatient.deleted.is_(False))
            .order_by(DbPatient.name, DbPatient.code)
        )
        return [self._to_domain(row) for row in self.db.scalars(stmt)]

    def search_by_name(self, fragment: str) -> List[DomainPatient]:
        stmt = (
            select(DbPatient)
            .where(DbPatient.deleted.is_(False))
            .where(DbPatient.name.icontains(fragment, autoescape=True))
            .order_by(DbPatient.name, DbPatient.code)
        )
        return [self._to_domain(row) for row in self.db.scalars(stmt)]

    def lock_for_merge(self, codes: Iterable[int]) -> List[DomainPatient]:
        # Lock in key order so two concurrent merges cannot deadlock
        ordered = sorted(set(codes))
        stmt = (
            select(DbPatient)
            .where(DbPatient.code.in_(ordered))
            .order_by(DbPatient.code)
            .with_for_update()
        )
        return [self._to_domain(row) for row in self.db.scalars(stmt)]
