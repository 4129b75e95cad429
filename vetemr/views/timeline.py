"""
One patient's profile plus their medical history, and the New Entry form.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from vetemr.drafts import build_record_draft
from vetemr.errors import GatewayError, NotFound, ValidationError
from vetemr.models import MedicalRecord, Patient
from vetemr.policy import can_create_record, can_view_patient
from vetemr.views.base import ViewModel, ViewStatus
from vetemr.views.display import patient_profile, record_entry


@dataclass(frozen=True)
class TimelineState:
    status: ViewStatus = ViewStatus.LOADING
    patient: Optional[Patient] = None
    records: Tuple[MedicalRecord, ...] = ()
    error: Optional[str] = None
    form_errors: Dict[str, str] = field(default_factory=dict)
    submit_error: Optional[str] = None


class TimelineViewModel(ViewModel):

    def __init__(self, session, gateway, patient_id: str):
        super().__init__(session, gateway, TimelineState())
        self.patient_id = str(patient_id)

    @property
    def can_add_entry(self) -> bool:
        """Whether the New Entry button is shown."""
        identity = self._identity()
        return (
            identity is not None
            and self.state.patient is not None
            and can_create_record(identity.role)
        )

    @property
    def profile(self) -> Optional[Dict[str, Any]]:
        if self.state.patient is None:
            return None
        return patient_profile(self.state.patient)

    @property
    def entries(self) -> List[Dict[str, Any]]:
        """Timeline entries in the order the records API returned them."""
        return [record_entry(r) for r in self.state.records]

    async def load(self) -> None:
        generation = self._begin()
        if generation is None:
            return

        # Both requests run together and both must settle before rendering.
        patient, records = await asyncio.gather(
            self._gateway.get_patient(self.patient_id),
            self._gateway.list_records(self.patient_id),
            return_exceptions=True,
        )
        if not self._is_current(generation):
            return

        if isinstance(patient, NotFound):
            self._update(status=ViewStatus.NOT_FOUND, patient=None, records=(),
                         error="Patient not found")
            return
        for result in (patient, records):
            if isinstance(result, (GatewayError, ValidationError)):
                self._warn(f"Failed to load patient {self.patient_id}", result)
                self._update(status=ViewStatus.ERRORED, patient=None, records=(),
                             error=getattr(result, "message", str(result)))
                return
            if isinstance(result, BaseException):
                raise result

        identity = self._identity()
        if identity is None or not can_view_patient(identity.role, patient):
            self._update(status=ViewStatus.UNAUTHENTICATED, patient=None, records=())
            return
        self._update(status=ViewStatus.LOADED, patient=patient,
                     records=tuple(records), error=None)

    async def submit_record(
        self,
        diagnosis: str,
        treatment: str,
        notes: str = "",
        prescription="",
    ) -> bool:
        """
        Validate and submit a new record for this patient, then reload
        the whole timeline. Returns True when the record was created.
        """
        if not self.can_add_entry:
            self._update(submit_error="You are not allowed to add medical records.")
            return False

        try:
            draft = build_record_draft(
                self.state.patient.id, diagnosis, treatment, notes, prescription
            )
        except ValidationError as e:
            self._update(form_errors=e.errors, submit_error=None)
            return False

        try:
            await self._gateway.create_record(draft)
        except ValidationError as e:
            self._warn("Medical record rejected", e)
            if self._mounted:
                self._update(form_errors=e.errors, submit_error=str(e))
            return False
        except GatewayError as e:
            self._warn("Failed to add record", e)
            if self._mounted:
                self._update(submit_error=e.message)
            return False

        if not self._mounted:
            return True
        self._update(form_errors={}, submit_error=None)
        await self.load()
        return True
