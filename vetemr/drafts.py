"""
Form validation and normalisation for new patients and medical records.

Nothing here does I/O: a draft that fails validation never reaches the
gateway.
"""

from typing import Any, Dict, Iterable, List, Optional, Union

from vetemr.config import (
    DEFAULT_GENDER,
    DEFAULT_SPECIES,
    GENDER_CHOICES,
    PRESCRIPTION_DELIMITER,
    SPECIES_CHOICES,
)
from vetemr.errors import ValidationError
from vetemr.models import PatientDraft, RecordDraft


def _clean(value: Any) -> str:
    return "" if value is None else str(value).strip()


def parse_prescription(value: Union[str, Iterable[str], None]) -> List[str]:
    """
    Turn the comma separated prescription field into a list.
    Items are trimmed and blanks dropped; order and duplicates are kept.
    """
    if value is None:
        return []
    if isinstance(value, str):
        parts = value.split(PRESCRIPTION_DELIMITER)
    else:
        parts = list(value)
    return [p for p in (_clean(x) for x in parts) if p]


def _parse_measure(value: Any, field_name: str, errors: Dict[str, str]) -> Optional[float]:
    text = _clean(value)
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        errors[field_name] = f"{field_name} must be a number"
        return None
    if number < 0:
        errors[field_name] = f"{field_name} cannot be negative"
        return None
    return number


def build_record_draft(
    animal_id: Any,
    diagnosis: Any,
    treatment: Any,
    notes: Any = "",
    prescription: Union[str, Iterable[str], None] = "",
) -> RecordDraft:
    """Validate the new-record form for *animal_id*; raise ValidationError on failure."""
    errors: Dict[str, str] = {}

    animal = _clean(animal_id)
    if not animal:
        errors["animal_id"] = "a record must belong to a patient"

    diagnosis = _clean(diagnosis)
    if not diagnosis:
        errors["diagnosis"] = "diagnosis is required"

    treatment = _clean(treatment)
    if not treatment:
        errors["treatment"] = "treatment is required"

    if errors:
        raise ValidationError(errors)

    return RecordDraft(
        animal_id=animal,
        diagnosis=diagnosis,
        treatment=treatment,
        notes=_clean(notes) or None,
        prescription=tuple(parse_prescription(prescription)),
    )


def build_patient_draft(
    name: Any,
    species: Any = DEFAULT_SPECIES,
    breed: Any = "",
    age: Any = "",
    weight: Any = "",
    gender: Any = DEFAULT_GENDER,
    owner_id: Any = None,
) -> PatientDraft:
    """Validate the patient registration form; raise ValidationError on failure."""
    errors: Dict[str, str] = {}

    name = _clean(name)
    if not name:
        errors["name"] = "name is required"

    species = _clean(species).lower() or DEFAULT_SPECIES
    if species not in SPECIES_CHOICES:
        errors["species"] = f"species must be one of: {', '.join(SPECIES_CHOICES)}"

    gender = _clean(gender).lower() or DEFAULT_GENDER
    if gender not in GENDER_CHOICES:
        errors["gender"] = f"gender must be one of: {', '.join(GENDER_CHOICES)}"

    age = _parse_measure(age, "age", errors)
    weight = _parse_measure(weight, "weight", errors)

    if errors:
        raise ValidationError(errors)

    return PatientDraft(
        name=name,
        species=species,
        gender=gender,
        breed=_clean(breed) or None,
        age=age,
        weight=weight,
        owner_id=_clean(owner_id) or None,
    )
