"""
Patient service - lookups and registration of patient identities.

Normal lookups never return soft deleted patients; ``get_patient_for_audit``
is the one way to read a merged-away record.
"""

from typing import List, Optional

from hospital.core.exceptions import NotFound
from hospital.domain.entities import Patient
from hospital.repositories.history_repo import history_stores_for
from hospital.repositories.patient_repo import PatientRepository
from hospital.services.unit_of_work import UnitOfWork


class PatientService:
    def __init__(self, uow: Optional[UnitOfWork] = None) -> None:
        self.uow = uow or UnitOfWork()

    def get_active_patients(self) -> List[Patient]:
        with self.uow.transaction() as tx:
            return PatientRepository(tx.session).get_active()

    def get_patient(self, code: int) -> Optional[Patient]:
        with self.uow.transaction() as tx:
            return PatientRepository(tx.session).get_by_code(code)

    def get_patient_for_audit(self, code: int) -> Patient:
        """Load a patient whether or not it has been soft deleted."""
        with self.uow.transaction() as tx:
            return PatientRepository(tx.session).load(code)

    def search_patients(self, name_fragment: str) -> List[Patient]:
        with self.uow.transaction() as tx:
            return PatientRepository(tx.session).search_by_name(name_fragment)

    def save_patient(self, patient: Patient) -> Patient:
        with self.uow.transaction() as tx:
            return PatientRepository(tx.session).save_all([patient])[0]

    def history_counts(self, code: int) -> dict:
        """Number of history records per category held by a patient."""
        with self.uow.transaction() as tx:
            if PatientRepository(tx.session).get_by_code(code, include_deleted=True) is None:
                raise NotFound("Patient", code)
            return {
                store.category: store.count_for_patient(code)
                for store in history_stores_for(tx.session)
            }
