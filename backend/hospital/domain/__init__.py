"""
Domain package - Pure business logic layer.

This package contains:
- entities.py: Domain entities with business rules
- interfaces.py: Repository contracts
"""

from .entities import (
    Admission,
    Bill,
    Exam,
    ExamRow,
    ExamType,
    Patient,
    PatientExamination,
    PatientMergedEvent,
    Permission,
    User,
    UserGroup,
    UserMenuItem,
    Visit,
)
from .interfaces import (
    IAdmissionReader,
    IBillReader,
    IEntityStore,
    IPatientHistoryStore,
    IPatientRepository,
)

__all__ = [
    # Domain entities
    "Patient",
    "Visit",
    "PatientExamination",
    "Admission",
    "Bill",
    "PatientMergedEvent",
    "ExamType",
    "Exam",
    "ExamRow",
    "User",
    "UserGroup",
    "UserMenuItem",
    "Permission",
    # Repository interfaces
    "IEntityStore",
    "IPatientRepository",
    "IPatientHistoryStore",
    "IBillReader",
    "IAdmissionReader",
]
