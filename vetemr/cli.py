"""
Interactive CLI for VetEMR.
Browse the patient roster, open a patient's medical history and, for clinic
staff, admit patients and add records.
"""

import asyncio
import getpass
import os

import pandas as pd

from vetemr.app import create_clinic
from vetemr.config import API_BASE_URL, DEFAULT_SPECIES, DEFAULT_GENDER
from vetemr.errors import VetEMRError
from vetemr.policy import build_policy
from vetemr.views.base import ViewStatus

HELP = (
    "Commands: open <id> | admit | add | back | refresh | logout | quit"
)

ROSTER_COLUMNS = ["id", "name", "subtitle", "gender", "age", "weight"]


async def ask(prompt: str, secret: bool = False) -> str:
    reader = getpass.getpass if secret else input
    return (await asyncio.to_thread(reader, prompt)).strip()


# ── Rendering ────────────────────────────────────────────────────────

def render_roster(vm) -> None:
    state = vm.state
    print("\n=== Patient Roster ===")
    if state.status == ViewStatus.ERRORED:
        print(f"[ERROR] Could not load patients: {state.error}")
    elif state.status == ViewStatus.EMPTY:
        print("No patients found.")
    elif state.status == ViewStatus.LOADED:
        df = pd.DataFrame(vm.cards, columns=ROSTER_COLUMNS)
        df.columns = ["ID", "Name", "Breed", "Gender", "Age", "Weight"]
        print(df.to_string(index=False))
    if vm.can_admit:
        print("\n[+] Admit Patient  (type 'admit')")


def render_timeline(vm) -> None:
    state = vm.state
    if state.status == ViewStatus.NOT_FOUND:
        print("\nPatient not found")
        return
    if state.status == ViewStatus.ERRORED:
        print(f"\n[ERROR] Could not load patient: {state.error}")
        return
    if state.status != ViewStatus.LOADED:
        return

    p = vm.profile
    print(f"\n=== {p['name']} ({p['gender']}) ===")
    print(p["species_line"])
    print(f"Age: {p['age']}   Weight: {p['weight']}   Owner: {p['owner']}")
    print("\n--- Medical History ---")
    entries = vm.entries
    if not entries:
        print("No medical records found.")
    for e in entries:
        print(f"\n[{e['date']}] {e['vet']}")
        print(f"  Diagnosis: {e['diagnosis']}")
        print(f"  Treatment: {e['treatment']}")
        if "notes" in e:
            print(f"  Notes: {e['notes']}")
        for rx in e.get("prescriptions", []):
            print(f"  Rx: {rx}")
    if vm.can_add_entry:
        print("\n[+] New Entry  (type 'add')")


def render_form_errors(state) -> None:
    for field_name, message in state.form_errors.items():
        print(f"  ! {field_name}: {message}")
    if state.submit_error and not state.form_errors:
        print(f"[ERROR] {state.submit_error}")


# ── Session ──────────────────────────────────────────────────────────

async def login(clinic) -> bool:
    token = os.getenv("VETEMR_TOKEN")
    if token and await clinic.session.restore(token):
        return True

    while True:
        email = await ask("Email (or 'quit'): ")
        if not email or email.lower() in {"quit", "exit"}:
            return False
        password = await ask("Password: ", secret=True)
        try:
            await clinic.session.login(email, password)
            return True
        except VetEMRError as e:
            print(f"\n[ERROR] {e}")


# ── Forms ────────────────────────────────────────────────────────────

async def admit(roster) -> None:
    form = {
        "name": await ask("Name: "),
        "species": await ask(f"Species [{DEFAULT_SPECIES}]: ") or DEFAULT_SPECIES,
        "gender": await ask(f"Gender [{DEFAULT_GENDER}]: ") or DEFAULT_GENDER,
        "breed": await ask("Breed: "),
        "age": await ask("Age (yrs): "),
        "weight": await ask("Weight (kg): "),
    }
    if await roster.submit_patient(**form):
        print("[ok] Patient registered.")
    else:
        render_form_errors(roster.state)


async def add_record(timeline) -> None:
    diagnosis = await ask("Diagnosis: ")
    treatment = await ask("Treatment: ")
    notes = await ask("Notes (optional): ")
    prescription = await ask("Prescriptions (comma separated): ")
    if await timeline.submit_record(diagnosis, treatment, notes, prescription):
        print("[ok] Record saved.")
    else:
        render_form_errors(timeline.state)


# ── REPL ─────────────────────────────────────────────────────────────

async def run(base_url: str) -> None:
    clinic = create_clinic(base_url)
    try:
        if not await login(clinic):
            print("Goodbye.")
            return

        identity = clinic.session.current_identity()
        print(f"[auth] Policy: {build_policy(identity.role).notes}")
        print(HELP)

        roster = clinic.roster()
        await roster.mount()
        render_roster(roster)
        timeline = None

        while True:
            try:
                cmd = await ask("\nvetemr> ")
            except (EOFError, KeyboardInterrupt):
                print("\nExiting.")
                break

            if not cmd:
                continue
            verb, _, arg = cmd.partition(" ")
            verb = verb.lower()

            if verb in {"quit", "exit"}:
                print("Goodbye.")
                break
            if verb == "logout":
                clinic.session.logout()
                print("Logged out.")
                break
            if clinic.session.current_identity() is None:
                print("Session ended. Please log in again.")
                break

            if verb == "open" and arg:
                if timeline is not None:
                    timeline.unmount()
                timeline = clinic.timeline(arg.strip())
                await timeline.mount()
                render_timeline(timeline)
            elif verb == "back":
                if timeline is not None:
                    timeline.unmount()
                    timeline = None
                await roster.load()
                render_roster(roster)
            elif verb == "refresh":
                if timeline is not None:
                    await timeline.load()
                    render_timeline(timeline)
                else:
                    await roster.load()
                    render_roster(roster)
            elif verb == "admit" and roster.can_admit:
                await admit(roster)
                render_roster(roster)
            elif verb == "add" and timeline is not None and timeline.can_add_entry:
                await add_record(timeline)
                render_timeline(timeline)
            else:
                print(HELP)
    finally:
        await clinic.aclose()


def main():
    print("=== VetEMR: Patient Roster & Medical Records ===\n")
    base_url = os.getenv("VETEMR_API_URL", API_BASE_URL)
    print(f"[init] Records API: {base_url}")
    try:
        asyncio.run(run(base_url))
    except KeyboardInterrupt:
        print("\nExiting.")


if __name__ == "__main__":
    main()
