"""
Field Reconciliation Engine.

Computes the field values the surviving patient takes on after a merge.
The survivor's own data wins unless it is missing; notes are concatenated
and the birth date of the obsolete record is trusted when it has one.
"""

import dataclasses
from datetime import date
from typing import Any, Dict, Optional

from hospital.core.validation import is_blank
from hospital.domain.entities import UNKNOWN, Patient

NOTE_SEPARATOR = "\n\n"
UNKNOWN_BLOOD_TYPE = "Unknown"

# Fields whose "U" value means not recorded
FLAG_FIELDS = ("mother", "father", "has_insurance", "parent_together")

SCALAR_FIELDS = (
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
)


def is_missing(field_name: str, value: Any) -> bool:
    if is_blank(value):
        return True
    if field_name in FLAG_FIELDS:
        return value == UNKNOWN
    if field_name == "blood_type":
        return value.strip().lower() == UNKNOWN_BLOOD_TYPE.lower()
    return False


def age_in_years(birth_date: date, today: date) -> int:
    """Whole years elapsed between ``birth_date`` and ``today``."""
    before_birthday = (today.month, today.day) < (birth_date.month, birth_date.day)
    return max(today.year - birth_date.year - int(before_birthday), 0)


class FieldReconciler:
    def reconcile(
        self, survivor: Patient, obsolete: Patient, today: Optional[date] = None
    ) -> Dict[str, Any]:
        """Return the merged values for every reconciled survivor field."""
        today = today or date.today()
        merged: Dict[str, Any] = {"note": self._merge_note(survivor.note, obsolete.note)}

        for name in SCALAR_FIELDS:
            value = getattr(survivor, name)
            if is_missing(name, value) and not is_missing(name, getattr(obsolete, name)):
                value = getattr(obsolete, name)
            merged[name] = value

        merged.update(self._merge_age(survivor, obsolete, today))
        return merged

    def apply(self, survivor: Patient, fields: Dict[str, Any]) -> Patient:
        """Return a copy of ``survivor`` carrying ``fields``."""
        return dataclasses.replace(survivor, **fields)

    @staticmethod
    def _merge_note(survivor_note: Optional[str], obsolete_note: Optional[str]):
        if is_blank(obsolete_note):
            return survivor_note
        if is_blank(survivor_note):
            return obsolete_note
        return f"{obsolete_note}{NOTE_SEPARATOR}{survivor_note}"

    @staticmethod
    def _merge_age(survivor: Patient, obsolete: Patient, today: date) -> Dict[str, Any]:
        age_type = survivor.age_type if not is_blank(survivor.age_type) else obsolete.age_type
        birth_date = obsolete.birth_date or survivor.birth_date
        if birth_date is not None:
            age = age_in_years(birth_date, today)
        else:
            age = survivor.age if survivor.age is not None else obsolete.age
        return {"birth_date": birth_date, "age": age, "age_type": age_type}
