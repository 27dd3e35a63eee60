"""
Domain entities - Pure business logic, no framework dependencies.

Repositories map between these dataclasses and the SQLAlchemy models in
``hospital.db.base``; services only ever see the dataclasses.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

SEX_VALUES = ("M", "F")
UNKNOWN = "U"


@dataclass
class Patient:
    """Domain entity representing a patient identity."""

    code: Optional[int] = None
    first_name: str = ""
    second_name: str = ""
    name: str = ""
    sex: str = ""
    birth_date: Optional[date] = None
    age: int = 0
    age_type: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    next_kin: Optional[str] = None
    telephone: Optional[str] = None
    mother_name: Optional[str] = None
    mother: str = UNKNOWN
    father_name: Optional[str] = None
    father: str = UNKNOWN
    blood_type: Optional[str] = None
    has_insurance: str = UNKNOWN
    parent_together: str = UNKNOWN
    note: Optional[str] = None
    deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate domain rules."""
        if self.sex not in SEX_VALUES:
            raise ValueError(f"Sex must be one of {SEX_VALUES}, got {self.sex!r}")
        if not self.name:
            self.name = f"{self.first_name} {self.second_name}".strip()

    @property
    def is_active(self) -> bool:
        return not self.deleted


@dataclass
class Visit:
    """Domain entity for a patient visit."""

    patient_code: int = 0
    date: Optional[datetime] = None
    ward_code: Optional[str] = None
    duration: Optional[int] = None
    service: Optional[str] = None
    note: Optional[str] = None
    sms: bool = False
    id: Optional[int] = None


@dataclass
class PatientExamination:
    """Domain entity for vital signs recorded during an examination."""

    patient_code: int = 0
    date: Optional[datetime] = None
    height: Optional[int] = None
    weight: Optional[Decimal] = None
    temperature: Optional[Decimal] = None
    note: Optional[str] = None
    id: Optional[int] = None


@dataclass
class Admission:
    """Domain entity for a ward admission."""

    patient_code: int = 0
    admission_date: Optional[datetime] = None
    discharge_date: Optional[datetime] = None
    ward_code: Optional[str] = None
    admitted: bool = True
    deleted: bool = False
    id: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.admitted and not self.deleted and self.discharge_date is None


BILL_OPEN = "O"
BILL_CLOSED = "C"
BILL_DELETED = "D"


@dataclass
class Bill:
    """Domain entity for a patient bill."""

    patient_code: Optional[int] = None
    date: Optional[datetime] = None
    status: str = BILL_OPEN
    amount: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")
    id: Optional[int] = None

    def __post_init__(self):
        if self.status not in (BILL_OPEN, BILL_CLOSED, BILL_DELETED):
            raise ValueError(f"Unknown bill status {self.status!r}")

    @property
    def is_pending(self) -> bool:
        return self.status == BILL_OPEN


@dataclass(frozen=True)
class PatientMergedEvent:
    """Published exactly once per merge, before the transaction commits."""

    survivor: Patient
    obsolete: Patient

    @property
    def survivor_code(self) -> Optional[int]:
        return self.survivor.code

    @property
    def obsolete_code(self) -> Optional[int]:
        return self.obsolete.code


# ------------------- EXAMS -------------------


@dataclass(eq=False)
class ExamType:
    """Laboratory exam category."""

    code: str = ""
    description: str = ""

    def __eq__(self, other):
        if not isinstance(other, ExamType):
            return NotImplemented
        return (
            self.code == other.code
            and self.description.lower() == other.description.lower()
        )

    def __hash__(self):
        return hash(self.code)

    def __str__(self):
        return self.description


PROCEDURE_FREE_TEXT = 3


@dataclass
class Exam:
    """Laboratory exam definition."""

    code: str = ""
    description: str = ""
    exam_type: Optional[ExamType] = None
    procedure: int = 1
    default_result: Optional[str] = None

    def __post_init__(self):
        if not self.code:
            raise ValueError("Exam code is required")
        if self.procedure not in (1, 2, PROCEDURE_FREE_TEXT):
            raise ValueError("Procedure must be 1, 2 or 3")

    @property
    def is_free_text(self) -> bool:
        return self.procedure == PROCEDURE_FREE_TEXT


@dataclass
class ExamRow:
    """One selectable result of an exam."""

    exam_code: str = ""
    description: str = ""
    code: Optional[int] = None


# ------------------- USERS & MENUS -------------------


@dataclass
class UserGroup:
    code: str = ""
    description: Optional[str] = None
    deleted: bool = False

    def __post_init__(self):
        if not self.code:
            raise ValueError("Group code is required")


@dataclass
class User:
    user_name: str = ""
    group_code: str = ""
    description: Optional[str] = None
    deleted: bool = False

    def __post_init__(self):
        if not self.user_name:
            raise ValueError("User name is required")
        if not self.group_code:
            raise ValueError("User group is required")


@dataclass
class UserMenuItem:
    """A menu entry as composed for a user or a group."""

    code: str = ""
    button_label: str = ""
    alt_label: Optional[str] = None
    tooltip: Optional[str] = None
    shortcut: Optional[str] = None
    submenu: Optional[str] = None
    handler: Optional[str] = None
    is_submenu: bool = False
    position: int = 0
    active: bool = False


@dataclass
class Permission:
    name: str = ""
    description: Optional[str] = None
    id: Optional[int] = None


@dataclass
class UserPermissions:
    """Capability set of a user, resolved through the user's group."""

    user_name: str
    group_code: str
    permissions: List[Permission] = field(default_factory=list)

    def has(self, name: str) -> bool:
        return any(p.name == name for p in self.permissions)
