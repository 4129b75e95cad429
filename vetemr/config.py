"""
Centralised configuration constants and environment helpers.
"""

import os
import sys

from dotenv import load_dotenv

load_dotenv()

# ── Records API ──────────────────────────────────────────────────────
API_BASE_URL = os.getenv("VETEMR_API_URL", "http://localhost:8000/api")
REQUEST_TIMEOUT_SECONDS = float(os.getenv("VETEMR_TIMEOUT", "10"))

# ── Roles ────────────────────────────────────────────────────────────
OWNER_ROLE = "owner"
KNOWN_ROLES = {"admin", "vet", "owner"}

# ── Patient registration choices ─────────────────────────────────────
SPECIES_CHOICES = ("dog", "cat", "bird", "reptile", "other")
DEFAULT_SPECIES = "dog"
GENDER_CHOICES = ("male", "female", "unknown")
DEFAULT_GENDER = "unknown"

# Free-text prescription field is split on this character.
PRESCRIPTION_DELIMITER = ","

# ── Demo records API ─────────────────────────────────────────────────
SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production")
TOKEN_EXPIRY_HOURS = 24
DEMO_DEFAULT_PASSWORD = os.getenv("DEMO_DEFAULT_PASSWORD", "Demo@123")
DEV_DB_URI = os.getenv("VETEMR_DEV_DB_URI", "sqlite+pysqlite:///:memory:")


def get_env(name: str) -> str:
    """Return an environment variable or exit with an error message."""
    value = os.getenv(name)
    if not value:
        print(f"ERROR: env var {name} is not set", file=sys.stderr)
        sys.exit(1)
    return value
