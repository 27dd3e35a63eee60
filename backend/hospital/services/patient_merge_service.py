"""
Patient Merge Service - merges a duplicate patient into a surviving one.

The whole workflow runs in one transaction:

1. both patient rows are locked and re-read,
2. preconditions are checked (nothing is written if they fail),
3. the survivor's fields are reconciled with the obsolete record,
4. history is reassigned and the obsolete patient soft deleted,
5. the merge event is dispatched as a pre-commit hook.

A failure at any step rolls everything back; the caller gets a single
typed ``ServiceError``.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Callable, List, Optional

from hospital.core.config import MERGE_ISOLATION_LEVEL
from hospital.core.exceptions import NotFound, ValidationFailed
from hospital.core.logging_config import log_performance
from hospital.domain.entities import Patient, PatientMergedEvent
from hospital.domain.interfaces import IAdmissionReader, IBillReader
from hospital.repositories.history_repo import history_stores_for
from hospital.repositories.patient_repo import PatientRepository
from hospital.services.history_reassignment import (
    HistoryReassignmentEngine,
    ReassignmentSummary,
)
from hospital.services.merge_notifier import MergeEventNotifier
from hospital.services.merge_reconciliation import FieldReconciler
from hospital.services.merge_validator import MergeValidator
from hospital.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class MergeState(str, Enum):
    VALIDATING = "validating"
    RECONCILING = "reconciling"
    REASSIGNING = "reassigning"
    NOTIFYING = "notifying"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class MergeResult:
    survivor: Patient
    obsolete: Patient
    event: PatientMergedEvent
    summary: ReassignmentSummary
    states: List[MergeState] = field(default_factory=list)


class PatientMergeService:
    """Application service for the patient merge use-case."""

    def __init__(
        self,
        uow: Optional[UnitOfWork] = None,
        notifier: Optional[MergeEventNotifier] = None,
        reconciler: Optional[FieldReconciler] = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self.uow = uow or UnitOfWork(isolation_level=MERGE_ISOLATION_LEVEL)
        self.notifier = notifier or MergeEventNotifier()
        self.reconciler = reconciler or FieldReconciler()
        self.clock = clock

    def merge(self, survivor: Patient, obsolete: Patient) -> MergeResult:
        """Merge ``obsolete`` into ``survivor``.

        Both records are re-read under a row lock, so the arguments only
        identify the patients.

        Returns:
            MergeResult with the merged survivor and the soft deleted
            obsolete patient as committed.

        Raises:
            ValidationFailed: preconditions violated, nothing changed
            NotFound: either patient does not exist
            PersistenceFailed: storage error, transaction rolled back
            NotificationFailed: a listener raised, transaction rolled back
        """
        return self.merge_by_code(survivor.code, obsolete.code)

    def merge_by_code(self, survivor_code: int, obsolete_code: int) -> MergeResult:
        correlation_id = str(uuid.uuid4())[:8]
        extra = {
            "correlation_id": correlation_id,
            "context": {
                "survivor_code": survivor_code,
                "obsolete_code": obsolete_code,
            },
        }
        states: List[MergeState] = []
        start = time.perf_counter()

        logger.info(
            f"Starting patient merge {obsolete_code} -> {survivor_code} - Run ID: {correlation_id}",
            extra=extra,
        )
        try:
            with self.uow.transaction() as tx:
                states.append(MergeState.VALIDATING)
                patients = PatientRepository(tx.session)
                stores = history_stores_for(tx.session)
                survivor, obsolete = self._lock_participants(
                    patients, survivor_code, obsolete_code
                )
                self._validator_for(stores).ensure_valid(survivor, obsolete)

                states.append(MergeState.RECONCILING)
                merged_fields = self.reconciler.reconcile(
                    survivor, obsolete, today=self.clock()
                )
                merged = self.reconciler.apply(survivor, merged_fields)

                states.append(MergeState.REASSIGNING)
                summary = HistoryReassignmentEngine(stores, patients).reassign(
                    survivor, obsolete, merged
                )

                states.append(MergeState.NOTIFYING)
                event = PatientMergedEvent(
                    survivor=replace(summary.survivor),
                    obsolete=replace(summary.obsolete),
                )
                tx.add_pre_commit_hook(lambda: self.notifier.notify(event))
        except Exception as e:
            states.append(MergeState.ROLLED_BACK)
            logger.warning(
                f"Patient merge rolled back - Run ID: {correlation_id}",
                extra={
                    "correlation_id": correlation_id,
                    "context": {
                        **extra["context"],
                        "states": [s.value for s in states],
                        "error_type": type(e).__name__,
                        "error": str(e),
                    },
                },
            )
            raise

        states.append(MergeState.COMMITTED)
        duration_ms = (time.perf_counter() - start) * 1000
        log_performance(
            "patient_merge",
            duration_ms,
            correlation_id=correlation_id,
            records_moved=summary.total_moved,
        )
        logger.info(
            f"Patient merge committed - Run ID: {correlation_id}",
            extra={
                "correlation_id": correlation_id,
                "context": {**extra["context"], "moved": summary.moved},
            },
        )
        return MergeResult(
            survivor=summary.survivor,
            obsolete=summary.obsolete,
            event=event,
            summary=summary,
            states=states,
        )

    @staticmethod
    def _lock_participants(patients: PatientRepository, survivor_code, obsolete_code):
        if survivor_code == obsolete_code:
            raise ValidationFailed("A patient cannot be merged with itself.")
        locked = {p.code: p for p in patients.lock_for_merge([survivor_code, obsolete_code])}
        for code in (survivor_code, obsolete_code):
            if code not in locked:
                raise NotFound("Patient", code)
        survivor, obsolete = locked[survivor_code], locked[obsolete_code]
        deleted = [p.code for p in (survivor, obsolete) if p.deleted]
        if deleted:
            raise ValidationFailed(
                [f"Patient {code} is deleted and cannot be merged." for code in deleted]
            )
        return survivor, obsolete

    @staticmethod
    def _validator_for(stores) -> MergeValidator:
        bills = next(s for s in stores if isinstance(s, IBillReader))
        admissions = next(s for s in stores if isinstance(s, IAdmissionReader))
        return MergeValidator(bills, admissions)
