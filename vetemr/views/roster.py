"""
Patient roster: the list of registered animals and the Admit Patient form.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from vetemr.drafts import build_patient_draft
from vetemr.errors import GatewayError, ValidationError
from vetemr.models import Patient
from vetemr.policy import can_create_patient
from vetemr.views.base import ViewModel, ViewStatus
from vetemr.views.display import patient_card


@dataclass(frozen=True)
class RosterState:
    status: ViewStatus = ViewStatus.LOADING
    patients: Tuple[Patient, ...] = ()
    error: Optional[str] = None
    form_errors: Dict[str, str] = field(default_factory=dict)
    submit_error: Optional[str] = None


class RosterViewModel(ViewModel):

    def __init__(self, session, gateway):
        super().__init__(session, gateway, RosterState())

    @property
    def can_admit(self) -> bool:
        """Whether the Admit Patient button is shown."""
        identity = self._identity()
        return identity is not None and can_create_patient(identity.role)

    @property
    def cards(self) -> List[Dict[str, Any]]:
        return [patient_card(p) for p in self.state.patients]

    async def load(self) -> None:
        generation = self._begin()
        if generation is None:
            return
        try:
            patients = await self._gateway.list_patients()
        except (GatewayError, ValidationError) as e:
            self._warn("Failed to load patients", e)
            if self._is_current(generation):
                self._update(status=ViewStatus.ERRORED, patients=(),
                             error=getattr(e, "message", str(e)))
            return

        if not self._is_current(generation):
            return
        status = ViewStatus.LOADED if patients else ViewStatus.EMPTY
        self._update(status=status, patients=tuple(patients), error=None)

    async def submit_patient(self, **form) -> bool:
        """
        Validate and submit the registration form, then reload the roster.
        Returns True when the patient was created.
        """
        if not self.can_admit:
            self._update(submit_error="You are not allowed to admit patients.")
            return False

        try:
            draft = build_patient_draft(**form)
        except ValidationError as e:
            self._update(form_errors=e.errors, submit_error=None)
            return False

        try:
            await self._gateway.create_patient(draft)
        except ValidationError as e:
            self._warn("Patient registration rejected", e)
            if self._mounted:
                self._update(form_errors=e.errors, submit_error=str(e))
            return False
        except GatewayError as e:
            self._warn("Failed to register patient", e)
            if self._mounted:
                self._update(submit_error=e.message)
            return False

        if not self._mounted:
            return True
        self._update(form_errors={}, submit_error=None)
        await self.load()
        return True
