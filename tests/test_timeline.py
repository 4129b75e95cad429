"""
Unit tests for the patient timeline view-model.
"""

import asyncio
from datetime import datetime

import pytest

from vetemr.errors import GatewayError
from vetemr.views.base import ViewStatus
from vetemr.views.timeline import TimelineViewModel

from conftest import FakeGateway, logged_in, make_patient, make_record, settle


def clinic_gateway(**kwargs):
    records = [
        make_record("r2", diagnosis="Dental tartar", created_at=datetime(2024, 5, 1)),
        make_record("r1", diagnosis="Otitis", created_at=datetime(2024, 3, 5),
                    vet_name="Sarah Chen", notes="Recheck", prescription=["Otomax"]),
    ]
    return FakeGateway([make_patient("p1")], {"p1": records}, **kwargs)


# ── Tests: load states ───────────────────────────────────────────────

@pytest.mark.asyncio
async def test_loads_patient_and_records_in_returned_order():
    vm = TimelineViewModel(await logged_in(), clinic_gateway(), "p1")
    await vm.mount()
    assert vm.state.status == ViewStatus.LOADED
    assert vm.profile["name"] == "Max"
    # Newest first because that is what the gateway returned.
    assert [e["id"] for e in vm.entries] == ["r2", "r1"]


@pytest.mark.asyncio
async def test_entries_are_formatted():
    vm = TimelineViewModel(await logged_in(), clinic_gateway(), "p1")
    await vm.mount()
    newest, oldest = vm.entries
    assert newest["vet"] == "Dr. Staff"
    assert "notes" not in newest and "prescriptions" not in newest
    assert oldest["date"] == "Mar 5, 2024"
    assert oldest["vet"] == "Dr. Sarah Chen"
    assert oldest["prescriptions"] == ["Otomax"]


@pytest.mark.asyncio
async def test_no_records_still_shows_patient():
    gw = FakeGateway([make_patient("p1")])
    vm = TimelineViewModel(await logged_in(), gw, "p1")
    await vm.mount()
    assert vm.state.status == ViewStatus.LOADED
    assert vm.state.patient.id == "p1"
    assert vm.entries == []


@pytest.mark.asyncio
async def test_records_failure_hides_patient():
    gw = clinic_gateway(errors={"list_records": GatewayError(500, "db down")})
    vm = TimelineViewModel(await logged_in(), gw, "p1")
    await vm.mount()
    assert vm.state.status == ViewStatus.ERRORED
    assert vm.state.patient is None
    assert vm.profile is None
    assert vm.state.error == "db down"


@pytest.mark.asyncio
async def test_unknown_patient_is_not_found():
    vm = TimelineViewModel(await logged_in(), clinic_gateway(), "missing")
    await vm.mount()
    assert vm.state.status == ViewStatus.NOT_FOUND
    assert vm.can_add_entry is False


# ── Tests: concurrency ───────────────────────────────────────────────

@pytest.mark.asyncio
async def test_patient_and_records_are_fetched_concurrently():
    gw = clinic_gateway()
    vm = TimelineViewModel(await logged_in(), gw, "p1")
    patient_gate = gw.gates["get_patient"] = asyncio.Event()
    records_gate = gw.gates["list_records"] = asyncio.Event()

    task = asyncio.create_task(vm.mount())
    await settle()
    # Both requests are in flight before either has been answered.
    assert gw.calls == ["get_patient", "list_records"]

    records_gate.set()
    await settle()
    assert vm.state.status == ViewStatus.LOADING

    patient_gate.set()
    await task
    assert vm.state.status == ViewStatus.LOADED


@pytest.mark.asyncio
async def test_waits_for_both_even_when_one_fails_fast():
    gw = clinic_gateway(errors={"get_patient": GatewayError(None, "offline")})
    records_gate = gw.gates["list_records"] = asyncio.Event()
    vm = TimelineViewModel(await logged_in(), gw, "p1")

    task = asyncio.create_task(vm.mount())
    await settle()
    assert vm.state.status == ViewStatus.LOADING

    records_gate.set()
    await task
    assert vm.state.status == ViewStatus.ERRORED


@pytest.mark.asyncio
async def test_result_after_unmount_is_discarded():
    gw = clinic_gateway()
    gate = gw.gates["list_records"] = asyncio.Event()
    vm = TimelineViewModel(await logged_in(), gw, "p1")

    task = asyncio.create_task(vm.mount())
    await settle()
    vm.unmount()
    gate.set()
    await task
    assert vm.state.patient is None


# ── Tests: affordance and new entry ──────────────────────────────────

@pytest.mark.asyncio
async def test_owner_does_not_see_new_entry():
    vm = TimelineViewModel(await logged_in("owner@vet.clinic"), clinic_gateway(), "p1")
    await vm.mount()
    assert vm.state.status == ViewStatus.LOADED
    assert vm.can_add_entry is False


@pytest.mark.asyncio
async def test_submit_record_targets_patient_and_refetches():
    gw = clinic_gateway()
    vm = TimelineViewModel(await logged_in(), gw, "p1")
    await vm.mount()
    assert vm.can_add_entry is True

    ok = await vm.submit_record("Gastritis", "Bland diet", "", "Famotidine 10mg, , Probiotic")
    assert ok is True

    draft = gw.created[-1]
    assert draft.animal_id == "p1"
    assert draft.prescription == ("Famotidine 10mg", "Probiotic")
    assert gw.calls.count("get_patient") == 2
    assert gw.calls.count("list_records") == 2
    assert vm.entries[-1]["prescriptions"] == ["Famotidine 10mg", "Probiotic"]


@pytest.mark.asyncio
async def test_empty_diagnosis_blocks_submission():
    gw = clinic_gateway()
    vm = TimelineViewModel(await logged_in(), gw, "p1")
    await vm.mount()
    assert await vm.submit_record("", "Bland diet") is False
    assert "create_record" not in gw.calls
    assert vm.state.form_errors == {"diagnosis": "diagnosis is required"}


@pytest.mark.asyncio
async def test_owner_submit_is_refused():
    gw = clinic_gateway()
    vm = TimelineViewModel(await logged_in("owner@vet.clinic"), gw, "p1")
    await vm.mount()
    assert await vm.submit_record("D", "T") is False
    assert "create_record" not in gw.calls


@pytest.mark.asyncio
async def test_create_record_failure_keeps_timeline():
    gw = clinic_gateway(errors={"create_record": GatewayError(502, "bad gateway")})
    vm = TimelineViewModel(await logged_in(), gw, "p1")
    await vm.mount()
    assert await vm.submit_record("D", "T") is False
    assert vm.state.status == ViewStatus.LOADED
    assert vm.state.submit_error == "bad gateway"
