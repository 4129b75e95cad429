"""
Display formatting for patient cards, the patient profile and record entries.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from vetemr.models import MedicalRecord, Patient


def _number(value: float) -> str:
    # 5.0 -> "5", 15.5 -> "15.5"
    return f"{value:g}"


def format_date(value: Optional[datetime]) -> str:
    """``Mar 5, 2024`` style date, or an empty string."""
    if value is None:
        return ""
    return f"{value:%b} {value.day}, {value.year}"


def short_owner_id(owner_id: Optional[str]) -> str:
    if not owner_id:
        return "Unknown"
    return owner_id.split("-")[0] + "..."


def patient_card(patient: Patient) -> Dict[str, Any]:
    """One roster tile."""
    return {
        "id": patient.id,
        "name": patient.name,
        "subtitle": patient.breed or patient.species,
        "species": patient.species,
        "gender": patient.gender.upper() if patient.gender else "N/A",
        "age": f"{_number(patient.age)} yrs" if patient.age else "-",
        "weight": f"{_number(patient.weight)} kg" if patient.weight else "-",
    }


def patient_profile(patient: Patient) -> Dict[str, Any]:
    """The overview panel next to the medical history."""
    return {
        "id": patient.id,
        "name": patient.name,
        "initial": patient.name[:1].upper(),
        "gender": patient.gender.upper() if patient.gender else "UNKNOWN",
        "species_line": " • ".join(p for p in (patient.species, patient.breed) if p),
        "age": f"{_number(patient.age)} Years" if patient.age else "N/A",
        "weight": f"{_number(patient.weight)} Kg" if patient.weight else "N/A",
        "owner": short_owner_id(patient.owner_id),
    }


def record_entry(record: MedicalRecord) -> Dict[str, Any]:
    """One timeline entry; notes and prescriptions only when present."""
    entry = {
        "id": record.id,
        "date": format_date(record.created_at),
        "vet": f"Dr. {record.vet_name or 'Staff'}",
        "diagnosis": record.diagnosis,
        "treatment": record.treatment,
    }
    if record.notes:
        entry["notes"] = record.notes
    if record.prescription:
        entry["prescriptions"] = list(record.prescription)
    return entry
