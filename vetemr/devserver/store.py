"""
SQLite-backed storage for the demo records API (users, animals, records).
"""

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool
from werkzeug.security import check_password_hash, generate_password_hash

from vetemr.config import DEV_DB_URI

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        email TEXT NOT NULL UNIQUE,
        role TEXT NOT NULL,
        password_hash TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS animals (
        seq INTEGER PRIMARY KEY AUTOINCREMENT,
        id TEXT NOT NULL UNIQUE,
        name TEXT NOT NULL,
        species TEXT NOT NULL,
        breed TEXT,
        age REAL,
        weight REAL,
        gender TEXT NOT NULL,
        owner_id TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS medical_records (
        seq INTEGER PRIMARY KEY AUTOINCREMENT,
        id TEXT NOT NULL UNIQUE,
        animal_id TEXT NOT NULL REFERENCES animals(id),
        vet_id TEXT,
        diagnosis TEXT NOT NULL,
        treatment TEXT NOT NULL,
        notes TEXT,
        prescription TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def init_engine(db_uri: str = DEV_DB_URI):
    """Create a SQLAlchemy engine and make sure the tables exist."""
    kwargs: Dict[str, Any] = {"echo": False, "future": True}
    if db_uri.startswith("sqlite") and ":memory:" in db_uri:
        # One shared connection, otherwise every checkout sees an empty database.
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    engine = create_engine(db_uri, **kwargs)
    with engine.begin() as conn:
        for ddl in SCHEMA:
            conn.execute(text(ddl))
    return engine


class ClinicStore:

    def __init__(self, engine):
        self.engine = engine

    # ── Users ────────────────────────────────────────────────────────

    def add_user(self, name: str, email: str, role: str, password: str) -> Dict[str, Any]:
        user = {"id": str(uuid.uuid4()), "name": name, "email": email.strip().lower(), "role": role}
        with self.engine.begin() as conn:
            conn.execute(
                text("""
                    INSERT INTO users (id, name, email, role, password_hash)
                    VALUES (:id, :name, :email, :role, :pw)
                """),
                {**user, "pw": generate_password_hash(password)},
            )
        return user

    def authenticate(self, email: str, password: str) -> Optional[Dict[str, Any]]:
        with self.engine.connect() as conn:
            row = conn.execute(
                text("SELECT id, name, email, role, password_hash FROM users WHERE email = :e"),
                {"e": (email or "").strip().lower()},
            ).mappings().first()
        if not row or not check_password_hash(row["password_hash"], password or ""):
            return None
        return {k: row[k] for k in ("id", "name", "email", "role")}

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        with self.engine.connect() as conn:
            row = conn.execute(
                text("SELECT id, name, email, role FROM users WHERE id = :id"),
                {"id": user_id},
            ).mappings().first()
        return dict(row) if row else None

    # ── Animals ──────────────────────────────────────────────────────

    def list_animals(self, owner_id: Optional[str] = None) -> List[Dict[str, Any]]:
        sql = "SELECT id, name, species, breed, age, weight, gender, owner_id, created_at FROM animals"
        params: Dict[str, Any] = {}
        if owner_id is not None:
            sql += " WHERE owner_id = :owner"
            params["owner"] = owner_id
        sql += " ORDER BY seq"
        with self.engine.connect() as conn:
            return [dict(r) for r in conn.execute(text(sql), params).mappings()]

    def get_animal(self, animal_id: str) -> Optional[Dict[str, Any]]:
        with self.engine.connect() as conn:
            row = conn.execute(
                text("""
                    SELECT id, name, species, breed, age, weight, gender, owner_id, created_at
                    FROM animals WHERE id = :id
                """),
                {"id": animal_id},
            ).mappings().first()
        return dict(row) if row else None

    def add_animal(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        animal = {
            "id": str(uuid.uuid4()),
            "name": fields["name"],
            "species": fields["species"],
            "breed": fields.get("breed") or None,
            "age": fields.get("age"),
            "weight": fields.get("weight"),
            "gender": fields["gender"],
            "owner_id": fields.get("owner_id"),
            "created_at": _now_iso(),
        }
        with self.engine.begin() as conn:
            conn.execute(
                text("""
                    INSERT INTO animals (id, name, species, breed, age, weight, gender, owner_id, created_at)
                    VALUES (:id, :name, :species, :breed, :age, :weight, :gender, :owner_id, :created_at)
                """),
                animal,
            )
        return animal

    # ── Medical records ──────────────────────────────────────────────

    def list_records(self, animal_id: str) -> List[Dict[str, Any]]:
        """Oldest first, in insertion order for equal timestamps."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                text("""
                    SELECT r.id, r.animal_id, r.diagnosis, r.treatment, r.notes,
                           r.prescription, r.created_at, u.name AS vet_name
                    FROM medical_records r
                    LEFT JOIN users u ON u.id = r.vet_id
                    WHERE r.animal_id = :a
                    ORDER BY r.created_at, r.seq
                """),
                {"a": animal_id},
            ).mappings().all()
        return [self._record_out(r) for r in rows]

    def add_record(self, fields: Dict[str, Any], vet: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        record = {
            "id": str(uuid.uuid4()),
            "animal_id": fields["animal_id"],
            "vet_id": vet["id"] if vet else None,
            "diagnosis": fields["diagnosis"],
            "treatment": fields["treatment"],
            "notes": fields.get("notes") or None,
            "prescription": json.dumps(list(fields.get("prescription") or [])),
            "created_at": fields.get("created_at") or _now_iso(),
        }
        with self.engine.begin() as conn:
            conn.execute(
                text("""
                    INSERT INTO medical_records
                        (id, animal_id, vet_id, diagnosis, treatment, notes, prescription, created_at)
                    VALUES
                        (:id, :animal_id, :vet_id, :diagnosis, :treatment, :notes, :prescription, :created_at)
                """),
                record,
            )
        out = {k: v for k, v in record.items() if k != "vet_id"}
        out["vet_name"] = vet["name"] if vet else None
        return self._record_out(out)

    @staticmethod
    def _record_out(row) -> Dict[str, Any]:
        rec = dict(row)
        try:
            rec["prescription"] = json.loads(rec.get("prescription") or "[]")
        except ValueError:
            rec["prescription"] = []
        return rec
