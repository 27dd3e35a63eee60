"""
History Reassignment Engine.

Moves every patient-scoped history record from the obsolete identity to
the survivor, flags the obsolete identity deleted and stores the merged
survivor fields. Runs inside the caller's transaction and never commits.
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from hospital.core.exceptions import translate_persistence_errors
from hospital.domain.entities import Patient
from hospital.domain.interfaces import IPatientHistoryStore, IPatientRepository

logger = logging.getLogger(__name__)


@dataclass
class ReassignmentSummary:
    survivor: Patient
    obsolete: Patient
    moved: Dict[str, int] = field(default_factory=dict)

    @property
    def total_moved(self) -> int:
        return sum(self.moved.values())


class HistoryReassignmentEngine:
    def __init__(
        self, stores: Iterable[IPatientHistoryStore], patients: IPatientRepository
    ) -> None:
        self.stores: List[IPatientHistoryStore] = list(stores)
        self.patients = patients

    @translate_persistence_errors
    def reassign(
        self, survivor: Patient, obsolete: Patient, merged: Optional[Patient] = None
    ) -> ReassignmentSummary:
        """Repoint history records and soft delete ``obsolete``.

        ``merged`` is the reconciled survivor to persist; defaults to
        ``survivor`` unchanged.
        """
        moved = {}
        for store in self.stores:
            moved[store.category] = store.reassign_patient(obsolete.code, survivor.code)
            logger.debug(
                "History records reassigned",
                extra={
                    "context": {
                        "category": store.category,
                        "from": obsolete.code,
                        "to": survivor.code,
                        "count": moved[store.category],
                    }
                },
            )

        flagged = dataclasses.replace(obsolete, deleted=True)
        saved_survivor, saved_obsolete = self.patients.save_all(
            [merged or survivor, flagged]
        )
        return ReassignmentSummary(
            survivor=saved_survivor, obsolete=saved_obsolete, moved=moved
        )
