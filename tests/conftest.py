"""
Shared fakes for session and view-model tests.
"""

import asyncio

import httpx
import pytest

from vetemr.errors import AuthError, NotFound
from vetemr.models import Identity, MedicalRecord, Patient
from vetemr.session import SessionStore


VET = Identity(id="u-vet", name="Sarah Chen", role="vet")
ADMIN = Identity(id="u-admin", name="Clinic Admin", role="admin")
OWNER = Identity(id="u-owner", name="Jamie Rivera", role="owner")


class FakeAuthClient:
    """Mimic AuthClient: email -> (password, token, identity)."""
    def __init__(self, accounts=None):
        self.accounts = accounts or {
            "vet@vet.clinic": ("pw", "tok-vet", VET),
            "admin@vet.clinic": ("pw", "tok-admin", ADMIN),
            "owner@vet.clinic": ("pw", "tok-owner", OWNER),
        }
        self.login_calls = 0
        self.me_calls = 0

    async def login(self, email, password):
        self.login_calls += 1
        account = self.accounts.get(email)
        if not account or account[0] != password:
            raise AuthError("Invalid credentials. Please try again.")
        return account[1], account[2]

    async def current_user(self, token):
        self.me_calls += 1
        for _pw, tok, identity in self.accounts.values():
            if tok == token:
                return identity
        raise AuthError("Session could not be restored: unknown token")


class FakeGateway:
    """In-memory stand-in for RecordsGateway with optional failures and gates."""
    def __init__(self, patients=None, records=None, errors=None):
        self.patients = list(patients or [])
        self.records = {k: list(v) for k, v in (records or {}).items()}
        self.errors = dict(errors or {})
        self.gates = {}
        self.calls = []
        self.created = []
        self.cancelled = []

    async def _enter(self, name):
        self.calls.append(name)
        gate = self.gates.get(name)
        if gate is not None:
            try:
                await gate.wait()
            except asyncio.CancelledError:
                self.cancelled.append(name)
                raise
        if name in self.errors:
            raise self.errors[name]

    async def list_patients(self):
        await self._enter("list_patients")
        return list(self.patients)

    async def get_patient(self, patient_id):
        await self._enter("get_patient")
        for p in self.patients:
            if p.id == patient_id:
                return p
        raise NotFound(f"patient {patient_id} not found")

    async def list_records(self, patient_id):
        await self._enter("list_records")
        return list(self.records.get(patient_id, []))

    async def create_patient(self, draft):
        await self._enter("create_patient")
        self.created.append(draft)
        patient = Patient(id=f"p{len(self.patients) + 1}", name=draft.name,
                          species=draft.species, breed=draft.breed, age=draft.age,
                          weight=draft.weight, gender=draft.gender, owner_id=draft.owner_id)
        self.patients.append(patient)
        return patient

    async def create_record(self, draft):
        await self._enter("create_record")
        self.created.append(draft)
        record = MedicalRecord(id=f"r{len(self.created)}", animal_id=draft.animal_id,
                               diagnosis=draft.diagnosis, treatment=draft.treatment,
                               notes=draft.notes, prescription=list(draft.prescription))
        self.records.setdefault(draft.animal_id, []).append(record)
        return record


def make_patient(pid="p1", name="Max", **overrides):
    fields = dict(id=pid, name=name, species="dog", breed="Beagle", age=5.0,
                  weight=15.5, gender="male", owner_id="u-owner")
    fields.update(overrides)
    return Patient(**fields)


def make_record(rid, animal_id="p1", diagnosis="Otitis", **overrides):
    fields = dict(id=rid, animal_id=animal_id, diagnosis=diagnosis, treatment="Drops")
    fields.update(overrides)
    return MedicalRecord(**fields)


async def settle():
    """Let pending tasks run until they block."""
    for _ in range(5):
        await asyncio.sleep(0)


async def logged_in(email="vet@vet.clinic"):
    session = SessionStore(FakeAuthClient())
    await session.login(email, "pw")
    return session


def flask_transport(app):
    """httpx transport that hands requests to a Flask test client."""
    client = app.test_client()

    def handler(request: httpx.Request) -> httpx.Response:
        headers = {}
        for name in ("Authorization", "Content-Type"):
            if name in request.headers:
                headers[name] = request.headers[name]
        resp = client.open(
            request.url.path,
            method=request.method,
            headers=headers,
            data=request.content,
        )
        return httpx.Response(
            resp.status_code,
            headers={"Content-Type": resp.content_type},
            content=resp.get_data(),
        )

    return httpx.MockTransport(handler)


@pytest.fixture
def fake_auth():
    return FakeAuthClient()
