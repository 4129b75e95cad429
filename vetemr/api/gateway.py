"""
Typed client for the records API: patients and their medical records.

Every read is a fresh request. No retries, no caching.
"""

from typing import List

from vetemr.api.client import ApiClient
from vetemr.errors import GatewayError, NotFound
from vetemr.models import MedicalRecord, Patient, PatientDraft, RecordDraft


class RecordsGateway(ApiClient):

    async def list_patients(self) -> List[Patient]:
        """Patients in the order the server returns them."""
        data = await self.request("GET", "/animals")
        return [Patient.from_dict(a) for a in data.get("animals") or [] if isinstance(a, dict)]

    async def get_patient(self, patient_id: str) -> Patient:
        data = await self.request("GET", f"/animals/{patient_id}")
        animal = data.get("animal")
        if not isinstance(animal, dict):
            raise NotFound(f"patient {patient_id} not found")
        return Patient.from_dict(animal)

    async def list_records(self, patient_id: str) -> List[MedicalRecord]:
        """Records for one patient; an empty list is a normal answer."""
        data = await self.request("GET", f"/records/{patient_id}")
        return [MedicalRecord.from_dict(r) for r in data.get("records") or [] if isinstance(r, dict)]

    async def create_patient(self, draft: PatientDraft) -> Patient:
        data = await self.request("POST", "/animals", json=draft.to_payload())
        animal = data.get("animal")
        if not isinstance(animal, dict):
            raise GatewayError(None, "create patient response is missing 'animal'")
        return Patient.from_dict(animal)

    async def create_record(self, draft: RecordDraft) -> MedicalRecord:
        data = await self.request("POST", "/records", json=draft.to_payload())
        record = data.get("record")
        if not isinstance(record, dict):
            raise GatewayError(None, "create record response is missing 'record'")
        return MedicalRecord.from_dict(record)
