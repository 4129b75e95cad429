"""
Tests for the demo records API (Flask test client).
"""

import pytest

from vetemr.config import DEMO_DEFAULT_PASSWORD
from vetemr.devserver.app import create_app
from vetemr.devserver.auth import generate_token, verify_token
from vetemr.devserver.store import init_engine


# ── Helpers / Fixtures ───────────────────────────────────────────────

@pytest.fixture
def app():
    app = create_app(engine=init_engine("sqlite+pysqlite:///:memory:"))
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, email):
    resp = client.post("/api/auth/login", json={"email": email, "password": DEMO_DEFAULT_PASSWORD})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.get_json()['data']['token']}"}


# ── Tests: auth ──────────────────────────────────────────────────────

def test_login_returns_token_and_user(client):
    resp = client.post("/api/auth/login", json={"email": "vet@vet.clinic", "password": DEMO_DEFAULT_PASSWORD})
    data = resp.get_json()["data"]
    assert data["user"]["role"] == "vet"
    assert data["token"]


def test_login_bad_password(client):
    resp = client.post("/api/auth/login", json={"email": "vet@vet.clinic", "password": "nope"})
    assert resp.status_code == 401


def test_login_requires_fields(client):
    assert client.post("/api/auth/login", json={"email": ""}).status_code == 400


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": "Bearer junk"}).status_code == 401


def test_me_returns_user(client):
    resp = client.get("/api/auth/me", headers=login(client, "owner@vet.clinic"))
    assert resp.get_json()["data"]["user"]["email"] == "owner@vet.clinic"


def test_token_roundtrip():
    token = generate_token({"id": "u1", "role": "vet", "name": "V"}, "k" * 32)
    assert verify_token(token, "k" * 32)["sub"] == "u1"
    assert verify_token(token, "x" * 32) is None


def test_expired_token_rejected():
    token = generate_token({"id": "u1", "role": "vet", "name": "V"}, "k" * 32, expiry_hours=-1)
    assert verify_token(token, "k" * 32) is None


# ── Tests: animals ───────────────────────────────────────────────────

def test_staff_sees_all_animals_owner_sees_own(client):
    vet = client.get("/api/animals", headers=login(client, "vet@vet.clinic")).get_json()
    owner = client.get("/api/animals", headers=login(client, "owner@vet.clinic")).get_json()
    assert len(vet["data"]["animals"]) == 6
    assert len(owner["data"]["animals"]) == 2


def test_owner_cannot_open_foreign_animal(client):
    animals = client.get("/api/animals", headers=login(client, "vet@vet.clinic")).get_json()["data"]["animals"]
    foreign = next(a for a in animals if a["owner_id"] is None)
    resp = client.get(f"/api/animals/{foreign['id']}", headers=login(client, "owner@vet.clinic"))
    assert resp.status_code == 404


def test_owner_cannot_create(client):
    headers = login(client, "owner@vet.clinic")
    assert client.post("/api/animals", json={"name": "Rex", "species": "dog"}, headers=headers).status_code == 403
    assert client.post("/api/records", json={}, headers=headers).status_code == 403


def test_create_animal_validation(client):
    resp = client.post("/api/animals", json={"name": "", "species": "dog"},
                       headers=login(client, "vet@vet.clinic"))
    assert resp.status_code == 422
    assert resp.get_json()["field"] == "name"


def test_create_and_fetch_animal(client):
    headers = login(client, "vet@vet.clinic")
    resp = client.post("/api/animals", json={"name": "Rex", "species": "dog", "age": 3,
                                             "weight": None, "gender": "male"}, headers=headers)
    assert resp.status_code == 201
    animal = resp.get_json()["data"]["animal"]
    fetched = client.get(f"/api/animals/{animal['id']}", headers=headers).get_json()["data"]["animal"]
    assert fetched["name"] == "Rex"
    assert fetched["age"] == 3


# ── Tests: records ───────────────────────────────────────────────────

def test_records_keep_insertion_order_and_prescriptions(client):
    headers = login(client, "vet@vet.clinic")
    animal = client.post("/api/animals", json={"name": "Kiwi", "species": "bird"},
                         headers=headers).get_json()["data"]["animal"]

    for diagnosis, rx in (("First", ["B", "A", "B"]), ("Second", [])):
        resp = client.post("/api/records", json={
            "animal_id": animal["id"], "diagnosis": diagnosis, "treatment": "T",
            "prescription": rx,
        }, headers=headers)
        assert resp.status_code == 201
        assert resp.get_json()["data"]["record"]["vet_name"] == "Sarah Chen"

    records = client.get(f"/api/records/{animal['id']}", headers=headers).get_json()["data"]["records"]
    assert [r["diagnosis"] for r in records] == ["First", "Second"]
    assert records[0]["prescription"] == ["B", "A", "B"]


def test_create_record_validation(client):
    headers = login(client, "vet@vet.clinic")
    resp = client.post("/api/records", json={"animal_id": "nope", "diagnosis": "", "treatment": "T",
                                             "prescription": "A, B"}, headers=headers)
    assert resp.status_code == 422
    errors = resp.get_json()["errors"]
    assert set(errors) == {"animal_id", "diagnosis", "prescription"}


def test_unknown_endpoint(client):
    assert client.get("/api/nothing").status_code == 404
