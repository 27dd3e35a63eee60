"""Unit tests for the field reconciliation rules applied on patient merge."""

from datetime import date

import pytest

from hospital.services.merge_reconciliation import (
    FieldReconciler,
    age_in_years,
    is_missing,
)

TODAY = date(2021, 6, 1)


@pytest.fixture
def reconciler():
    return FieldReconciler()


@pytest.mark.unit
@pytest.mark.services
class TestNoteMerge:
    def test_notes_are_concatenated_obsolete_first(self, reconciler, patient_data):
        survivor = patient_data(code=1, note="Note 1")
        obsolete = patient_data(code=2, note="Note 2")

        merged = reconciler.reconcile(survivor, obsolete, today=TODAY)

        assert merged["note"] == "Note 2\n\nNote 1"

    def test_obsolete_note_used_when_survivor_has_none(self, reconciler, patient_data):
        merged = reconciler.reconcile(
            patient_data(code=1, note=None), patient_data(code=2, note="Note 2"), TODAY
        )

        assert merged["note"] == "Note 2"

    @pytest.mark.parametrize("obsolete_note", [None, "", "   "])
    def test_survivor_note_kept_when_obsolete_empty(
        self, reconciler, patient_data, obsolete_note
    ):
        merged = reconciler.reconcile(
            patient_data(code=1, note="Note 1"),
            patient_data(code=2, note=obsolete_note),
            TODAY,
        )

        assert merged["note"] == "Note 1"


@pytest.mark.unit
@pytest.mark.services
class TestScalarFields:
    def test_missing_survivor_values_are_filled(self, reconciler, patient_data):
        survivor = patient_data(
            code=1,
            address=None,
            next_kin="",
            telephone=None,
            mother="U",
            father="U",
            blood_type="Unknown",
            has_insurance="U",
            parent_together="U",
        )
        obsolete = patient_data(
            code=2,
            address="Obsolete Street 1",
            next_kin="Obsolete Kin",
            telephone="555-0199",
            mother="D",
            father="A",
            blood_type="AB-",
            has_insurance="N",
            parent_together="N",
        )

        merged = reconciler.reconcile(survivor, obsolete, TODAY)

        assert merged["address"] == "Obsolete Street 1"
        assert merged["next_kin"] == "Obsolete Kin"
        assert merged["telephone"] == "555-0199"
        assert merged["mother"] == "D"
        assert merged["father"] == "A"
        assert merged["blood_type"] == "AB-"
        assert merged["has_insurance"] == "N"
        assert merged["parent_together"] == "N"

    def test_present_survivor_values_win(self, reconciler, patient_data):
        survivor = patient_data(code=1, city="Survivor City", mother_name="Mary")
        obsolete = patient_data(code=2, city="Obsolete City", mother_name="Maria")

        merged = reconciler.reconcile(survivor, obsolete, TODAY)

        assert merged["city"] == "Survivor City"
        assert merged["mother_name"] == "Mary"

    def test_missing_on_both_sides_stays_missing(self, reconciler, patient_data):
        merged = reconciler.reconcile(
            patient_data(code=1, telephone=None), patient_data(code=2, telephone=""), TODAY
        )

        assert merged["telephone"] is None

    def test_is_missing_rules(self):
        assert is_missing("mother", "U")
        assert not is_missing("mother_name", "U")
        assert is_missing("blood_type", "unknown")
        assert is_missing("city", "  ")
        assert not is_missing("city", "Kampala")


@pytest.mark.unit
@pytest.mark.services
class TestBirthDateAndAge:
    def test_obsolete_birth_date_wins_and_age_is_recomputed(
        self, reconciler, patient_data
    ):
        survivor = patient_data(code=1, birth_date=date(50, 1, 1), age_type=None)
        obsolete = patient_data(code=2, birth_date=date(100, 1, 1), age=199)

        merged = reconciler.reconcile(survivor, obsolete, TODAY)

        assert merged["birth_date"] == date(100, 1, 1)
        assert merged["age"] == 1921
        assert merged["age"] >= 21
        assert merged["age_type"] == obsolete.age_type

    def test_survivor_age_type_preserved(self, reconciler, patient_data):
        survivor = patient_data(code=1, birth_date=date(50, 1, 1), age_type="d5")
        obsolete = patient_data(code=2, birth_date=date(100, 1, 1), age=199)

        merged = reconciler.reconcile(survivor, obsolete, TODAY)

        assert merged["age_type"] == "d5"
        assert merged["age"] >= 71

    def test_survivor_birth_date_used_when_obsolete_has_none(
        self, reconciler, patient_data
    ):
        survivor = patient_data(code=1, birth_date=date(1990, 7, 1), age=3)
        obsolete = patient_data(code=2, birth_date=None, age=50)

        merged = reconciler.reconcile(survivor, obsolete, TODAY)

        assert merged["birth_date"] == date(1990, 7, 1)
        assert merged["age"] == 30

    def test_age_kept_without_any_birth_date(self, reconciler, patient_data):
        survivor = patient_data(code=1, birth_date=None, age=0)
        obsolete = patient_data(code=2, birth_date=None, age=42)

        merged = reconciler.reconcile(survivor, obsolete, TODAY)

        assert merged["birth_date"] is None
        assert merged["age"] == 0

    def test_obsolete_age_used_when_survivor_has_none(self, reconciler, patient_data):
        survivor = patient_data(code=1, birth_date=None, age=None)
        obsolete = patient_data(code=2, birth_date=None, age=42)

        merged = reconciler.reconcile(survivor, obsolete, TODAY)

        assert merged["age"] == 42

    def test_age_in_years_counts_whole_years(self):
        assert age_in_years(date(2000, 6, 2), date(2021, 6, 1)) == 20
        assert age_in_years(date(2000, 6, 1), date(2021, 6, 1)) == 21


@pytest.mark.unit
@pytest.mark.services
def test_apply_returns_updated_copy(patient_data):
    reconciler = FieldReconciler()
    survivor = patient_data(code=1, note="Note 1")

    merged = reconciler.apply(survivor, {"note": "Note 2\n\nNote 1"})

    assert merged is not survivor
    assert merged.note == "Note 2\n\nNote 1"
    assert survivor.note == "Note 1"
    assert merged.code == 1
