"""
Flask route handlers for the demo records API.
"""

import sys
import traceback

from flask import jsonify, request

from vetemr.config import GENDER_CHOICES, OWNER_ROLE, SPECIES_CHOICES
from vetemr.devserver.auth import error, generate_token, token_required


def ok(data, status: int = 200):
    return jsonify({"status": "success", "data": data}), status


def _number(value, field_name, errors):
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        errors[field_name] = f"{field_name} must be a number"
        return None
    if number < 0:
        errors[field_name] = f"{field_name} cannot be negative"
    return number


def _invalid(errors):
    field = next(iter(errors))
    return error(errors[field], 422, field=field, errors=errors)


def register_routes(app, store):
    """Register all API routes on the Flask *app*."""

    def visible_animal(animal_id):
        animal = store.get_animal(animal_id)
        if animal is None:
            return None
        user = request.user
        if user["role"] == OWNER_ROLE and animal["owner_id"] != user["id"]:
            return None
        return animal

    # ── Health ───────────────────────────────────────────────────────

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "healthy"}), 200

    # ── Auth ─────────────────────────────────────────────────────────

    @app.route("/api/auth/login", methods=["POST"])
    def login():
        if not request.is_json:
            return error("Content-Type must be application/json", 400)

        data = request.get_json(silent=True) or {}
        email = str(data.get("email") or "").strip()
        password = str(data.get("password") or "")
        if not email or not password:
            return error("email and password are required", 400)

        try:
            user = store.authenticate(email, password)
        except Exception as e:
            print(f"[ERROR] Login error: {e}", file=sys.stderr)
            traceback.print_exc()
            return error("Internal server error during login", 500)

        if not user:
            return error("Invalid credentials", 401)
        token = generate_token(user, app.config["SECRET_KEY"], app.config["TOKEN_EXPIRY_HOURS"])
        return ok({"token": token, "user": user})

    @app.route("/api/auth/me", methods=["GET"])
    @token_required
    def me():
        return ok({"user": request.user})

    # ── Animals ──────────────────────────────────────────────────────

    @app.route("/api/animals", methods=["GET"])
    @token_required
    def list_animals():
        user = request.user
        owner = user["id"] if user["role"] == OWNER_ROLE else None
        return ok({"animals": store.list_animals(owner_id=owner)})

    @app.route("/api/animals/<animal_id>", methods=["GET"])
    @token_required
    def get_animal(animal_id):
        animal = visible_animal(animal_id)
        if animal is None:
            return error("Animal not found", 404)
        return ok({"animal": animal})

    @app.route("/api/animals", methods=["POST"])
    @token_required
    def create_animal():
        if request.user["role"] == OWNER_ROLE:
            return error("Owners cannot register patients", 403)

        data = request.get_json(silent=True) or {}
        errors = {}
        name = str(data.get("name") or "").strip()
        if not name:
            errors["name"] = "name is required"
        species = str(data.get("species") or "").strip().lower()
        if species not in SPECIES_CHOICES:
            errors["species"] = "unsupported species"
        gender = str(data.get("gender") or "unknown").strip().lower()
        if gender not in GENDER_CHOICES:
            errors["gender"] = "unsupported gender"
        age = _number(data.get("age"), "age", errors)
        weight = _number(data.get("weight"), "weight", errors)
        if errors:
            return _invalid(errors)

        animal = store.add_animal({
            "name": name,
            "species": species,
            "breed": str(data.get("breed") or "").strip(),
            "age": age,
            "weight": weight,
            "gender": gender,
            "owner_id": data.get("owner_id"),
        })
        return ok({"animal": animal}, 201)

    # ── Medical records ──────────────────────────────────────────────

    @app.route("/api/records/<animal_id>", methods=["GET"])
    @token_required
    def list_records(animal_id):
        if visible_animal(animal_id) is None:
            return error("Animal not found", 404)
        return ok({"records": store.list_records(animal_id)})

    @app.route("/api/records", methods=["POST"])
    @token_required
    def create_record():
        if request.user["role"] == OWNER_ROLE:
            return error("Owners cannot add medical records", 403)

        data = request.get_json(silent=True) or {}
        errors = {}
        animal_id = str(data.get("animal_id") or "").strip()
        if not animal_id:
            errors["animal_id"] = "animal_id is required"
        elif store.get_animal(animal_id) is None:
            errors["animal_id"] = "animal does not exist"
        for field in ("diagnosis", "treatment"):
            if not str(data.get(field) or "").strip():
                errors[field] = f"{field} is required"
        prescription = data.get("prescription") or []
        if not isinstance(prescription, list) or not all(isinstance(x, str) for x in prescription):
            errors["prescription"] = "prescription must be a list of strings"
        if errors:
            return _invalid(errors)

        record = store.add_record({
            "animal_id": animal_id,
            "diagnosis": str(data["diagnosis"]).strip(),
            "treatment": str(data["treatment"]).strip(),
            "notes": str(data.get("notes") or "").strip(),
            "prescription": prescription,
        }, vet=request.user)
        return ok({"record": record}, 201)

    # ── Error handlers ───────────────────────────────────────────────

    @app.errorhandler(404)
    def not_found(e):
        return error("Endpoint not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return error("Method not allowed", 405)

    @app.errorhandler(500)
    def internal_error(e):
        return error("Internal server error", 500)
