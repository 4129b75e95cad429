"""
Domain dataclasses used across the application.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from vetemr.config import GENDER_CHOICES, DEFAULT_GENDER


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _opt_float(value: Any) -> Optional[float]:
    """Coerce a nullable numeric field; blanks and junk become None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp as sent by the records API."""
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


@dataclass(frozen=True)
class Identity:
    """The authenticated user. Frozen: a role change needs a new login."""
    id: str
    name: str
    role: str                  # "admin", "vet", "owner", ...
    email: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Identity":
        return cls(
            id=str(d.get("id", "")),
            name=str(d.get("name") or d.get("display_name") or ""),
            role=str(d.get("role") or "").strip().lower(),
            email=_opt_str(d.get("email")),
        )


@dataclass
class Policy:
    """Access decisions derived from a role."""
    role: str
    can_view_roster: bool
    can_view_patient: bool
    can_create_patient: bool
    can_create_record: bool
    notes: str


@dataclass
class Patient:
    """An animal under clinical care."""
    id: str
    name: str
    species: str
    breed: Optional[str]
    age: Optional[float]
    weight: Optional[float]
    gender: str                # "male", "female" or "unknown"
    owner_id: Optional[str]

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Patient":
        gender = str(d.get("gender") or "").strip().lower()
        if gender not in GENDER_CHOICES:
            gender = DEFAULT_GENDER
        return cls(
            id=str(d.get("id", "")),
            name=str(d.get("name") or ""),
            species=str(d.get("species") or "").strip().lower(),
            breed=_opt_str(d.get("breed")),
            age=_opt_float(d.get("age")),
            weight=_opt_float(d.get("weight")),
            gender=gender,
            owner_id=_opt_str(d.get("owner_id")),
        )


@dataclass
class MedicalRecord:
    """An immutable diagnosis/treatment entry attached to one patient."""
    id: str
    animal_id: str
    diagnosis: str
    treatment: str
    notes: Optional[str] = None
    prescription: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    vet_name: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MedicalRecord":
        rx = d.get("prescription")
        return cls(
            id=str(d.get("id", "")),
            animal_id=str(d.get("animal_id", "")),
            diagnosis=str(d.get("diagnosis") or ""),
            treatment=str(d.get("treatment") or ""),
            notes=_opt_str(d.get("notes")),
            prescription=[str(x) for x in rx] if isinstance(rx, list) else [],
            created_at=parse_timestamp(d.get("created_at")),
            vet_name=_opt_str(d.get("vet_name")),
        )


@dataclass(frozen=True)
class PatientDraft:
    """Validated registration form, ready to submit."""
    name: str
    species: str
    gender: str
    breed: Optional[str] = None
    age: Optional[float] = None
    weight: Optional[float] = None
    owner_id: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload = {
            "name": self.name,
            "species": self.species,
            "breed": self.breed or "",
            "age": self.age,
            "weight": self.weight,
            "gender": self.gender,
        }
        if self.owner_id:
            payload["owner_id"] = self.owner_id
        return payload


@dataclass(frozen=True)
class RecordDraft:
    """Validated new-record form. Always carries the target animal_id."""
    animal_id: str
    diagnosis: str
    treatment: str
    notes: Optional[str] = None
    prescription: tuple = ()

    def to_payload(self) -> Dict[str, Any]:
        return {
            "animal_id": self.animal_id,
            "diagnosis": self.diagnosis,
            "treatment": self.treatment,
            "notes": self.notes,
            "prescription": list(self.prescription),
        }
