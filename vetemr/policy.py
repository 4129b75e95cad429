"""
Role-Based Access Control – which roles may see and change what.

Every show/hide decision in the views goes through these functions.
Server-side authorization is enforced by the records API; nothing here
filters data.
"""

from enum import Enum
from typing import Optional, Union

from vetemr.config import OWNER_ROLE
from vetemr.models import Patient, Policy


class Role(str, Enum):
    ADMIN = "admin"
    VET = "vet"
    OWNER = OWNER_ROLE


RoleLike = Union[Role, str, None]


def normalize_role(role: RoleLike) -> Optional[str]:
    """Lower-case role name, or None when there is no role at all."""
    if role is None:
        return None
    if isinstance(role, Role):
        return role.value
    role = str(role).strip().lower()
    return role or None


def _is_staff(role: RoleLike) -> bool:
    r = normalize_role(role)
    return r is not None and r != Role.OWNER.value


def can_create_patient(role: RoleLike) -> bool:
    """Every authenticated role except owner may admit patients."""
    return _is_staff(role)


def can_create_record(role: RoleLike) -> bool:
    """Every authenticated role except owner may add medical records."""
    return _is_staff(role)


def can_view_roster(role: RoleLike) -> bool:
    return normalize_role(role) is not None


def can_view_patient(role: RoleLike, patient: Optional[Patient] = None) -> bool:
    # Ownership scoping is the records API's job.
    return normalize_role(role) is not None


def build_policy(role: RoleLike) -> Policy:
    """Bundle the decisions for *role* into a Policy."""
    r = normalize_role(role)
    if r is None:
        raise ValueError("Cannot build a policy without a role.")

    if r == Role.OWNER.value:
        notes = "Owner can browse patients and their medical history (read-only)."
    elif r == Role.ADMIN.value:
        notes = "Admin can admit patients and add medical records."
    elif r == Role.VET.value:
        notes = "Vet can admit patients and add medical records."
    else:
        notes = f"Role '{r}' is treated as clinic staff: full read and create access."

    return Policy(
        role=r,
        can_view_roster=can_view_roster(r),
        can_view_patient=can_view_patient(r),
        can_create_patient=can_create_patient(r),
        can_create_record=can_create_record(r),
        notes=notes,
    )
