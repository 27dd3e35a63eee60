"""
Merge Validator - preconditions for merging two patient identities.

Each rule is a category; a violated category contributes exactly one
message no matter how many of the two patients violate it, and every
category is evaluated so the caller sees all problems at once.
"""

import logging

from hospital.core.validation import ValidationResult
from hospital.domain.entities import Patient
from hospital.domain.interfaces import IAdmissionReader, IBillReader

logger = logging.getLogger(__name__)

SEX_MISMATCH = "Patients with different sex cannot be merged."
PENDING_BILLS = "Patients with pending bills cannot be merged."
OPEN_ADMISSION = "Patients currently admitted in a ward cannot be merged."


class MergeValidator:
    def __init__(self, bills: IBillReader, admissions: IAdmissionReader) -> None:
        self.bills = bills
        self.admissions = admissions

    def validate(self, survivor: Patient, obsolete: Patient) -> ValidationResult:
        """Check every merge precondition. Read only."""
        result = ValidationResult()
        codes = (survivor.code, obsolete.code)

        if survivor.sex != obsolete.sex:
            result.add_error(SEX_MISMATCH)

        if any(self.bills.has_pending_bills(code) for code in codes):
            result.add_error(PENDING_BILLS)

        if any(self.admissions.has_open_admission(code) for code in codes):
            result.add_error(OPEN_ADMISSION)

        if not result.is_valid:
            logger.info(
                "Merge preconditions violated",
                extra={
                    "context": {
                        "survivor_code": survivor.code,
                        "obsolete_code": obsolete.code,
                        "errors": len(result.errors),
                    }
                },
            )
        return result

    def ensure_valid(self, survivor: Patient, obsolete: Patient) -> None:
        """Raise ValidationFailed carrying every violated category."""
        self.validate(survivor, obsolete).raise_if_invalid()
