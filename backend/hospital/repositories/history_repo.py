"""Repositories for patient-scoped history records.

Each store is one category the merge workflow moves from the obsolete
patient to the survivor. Bills and admissions also answer the merge
precondition queries.
"""

from typing import List

from sqlalchemy import exists, func, select

from hospital.db.base import Admission as DbAdmission
from hospital.db.base import Bill as DbBill
from hospital.db.base import PatientExamination as DbPatientExamination
from hospital.db.base import Visit as DbVisit
from hospital.domain.entities import BILL_OPEN
from hospital.domain.entities import Admission as DomainAdmission
from hospital.domain.entities import Bill as DomainBill
from hospital.domain.entities import PatientExamination as DomainPatientExamination
from hospital.domain.entities import Visit as DomainVisit
from hospital.domain.interfaces import (
    IAdmissionReader,
    IBillReader,
    IPatientHistoryStore,
)

from .base_repo import SqlAlchemyEntityStore


class PatientHistoryStore(SqlAlchemyEntityStore, IPatientHistoryStore):
    """Entity store whose rows reference a patient through ``patient_code``."""

    def count_for_patient(self, patient_code: int) -> int:
        stmt = (
            select(func.count())
            .select_from(self.model)
            .where(self.model.patient_code == patient_code)
        )
        return self.db.scalar(stmt) or 0

    def reassign_patient(self, from_code: int, to_code: int) -> int:
        return self.update_where({"patient_code": from_code}, {"patient_code": to_code})


class VisitRepository(PatientHistoryStore):
    model = DbVisit
    entity = DomainVisit
    entity_name = "Visit"
    category = "visits"
    fields = ("patient_code", "date", "ward_code", "duration", "service", "note", "sms")


class ExaminationRepository(PatientHistoryStore):
    model = DbPatientExamination
    entity = DomainPatientExamination
    entity_name = "PatientExamination"
    category = "examinations"
    fields = ("patient_code", "date", "height", "weight", "temperature", "note")


class AdmissionRepository(PatientHistoryStore, IAdmissionReader):
    model = DbAdmission
    entity = DomainAdmission
    entity_name = "Admission"
    category = "admissions"
    fields = (
        "patient_code",
        "admission_date",
        "discharge_date",
        "ward_code",
        "admitted",
        "deleted",
    )

    def has_open_admission(self, patient_code: int) -> bool:
        stmt = select(
            exists().where(
                DbAdmission.patient_code == patient_code,
                DbAdmission.admitted.is_(True),
                DbAdmission.deleted.is_(False),
                DbAdmission.discharge_date.is_(None),
            )
        )
        return bool(self.db.scalar(stmt))


class BillRepository(PatientHistoryStore, IBillReader):
    model = DbBill
    entity = DomainBill
    entity_name = "Bill"
    category = "bills"
    fields = ("patient_code", "date", "status", "amount", "balance")

    def has_pending_bills(self, patient_code: int) -> bool:
        stmt = select(
            exists().where(
                DbBill.patient_code == patient_code,
                DbBill.status == BILL_OPEN,
            )
        )
        return bool(self.db.scalar(stmt))


HISTORY_STORES = (
    VisitRepository,
    ExaminationRepository,
    AdmissionRepository,
    BillRepository,
)


def history_stores_for(db_session) -> List[PatientHistoryStore]:
    """Instantiate every patient-scoped history store on one session."""
    return [store(db_session) for store in HISTORY_STORES]
