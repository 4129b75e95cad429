"""
Flask application factory and entry-point for the demo records API.
"""

import os
import sys
import traceback

from flask import Flask
from flask_cors import CORS

from vetemr.config import DEMO_DEFAULT_PASSWORD, DEV_DB_URI, SECRET_KEY, TOKEN_EXPIRY_HOURS
from vetemr.devserver.routes import register_routes
from vetemr.devserver.seed import seed_demo
from vetemr.devserver.store import ClinicStore, init_engine


def create_app(engine=None, seed: bool = True, secret_key: str = SECRET_KEY):
    """Build and return a configured Flask application."""
    app = Flask(__name__)
    CORS(app)

    # ── Initialise shared resources ──────────────────────────────────
    if engine is None:
        try:
            print("[init] Initializing database...")
            engine = init_engine(DEV_DB_URI)
        except Exception as e:
            print(f"[FATAL] Failed to initialize: {e}", file=sys.stderr)
            traceback.print_exc()
            sys.exit(1)

    store = ClinicStore(engine)
    if seed:
        seed_demo(store)

    app.config["SECRET_KEY"] = secret_key
    app.config["TOKEN_EXPIRY_HOURS"] = TOKEN_EXPIRY_HOURS
    app.config["STORE"] = store

    # ── Register routes ──────────────────────────────────────────────
    register_routes(app, store)

    return app


def main():
    """Run the development server."""
    print("=" * 60)
    print("VetEMR – Demo Records API")
    print("=" * 60)

    app = create_app()

    host = os.getenv("API_HOST", "127.0.0.1")
    port = int(os.getenv("API_PORT", "8000"))
    debug = os.getenv("FLASK_ENV") == "development"

    print(f"\n[server] Starting Flask API on {host}:{port}")
    print(f"[server] Debug mode: {debug}")
    print(f"[server] Demo logins: admin@vet.clinic, vet@vet.clinic, owner@vet.clinic "
          f"(password {DEMO_DEFAULT_PASSWORD})")
    print("\nAPI Endpoints:")
    print(f"  - POST http://{host}:{port}/api/auth/login")
    print(f"  - GET  http://{host}:{port}/api/auth/me")
    print(f"  - GET  http://{host}:{port}/api/animals")
    print(f"  - POST http://{host}:{port}/api/animals")
    print(f"  - GET  http://{host}:{port}/api/animals/<id>")
    print(f"  - GET  http://{host}:{port}/api/records/<animal_id>")
    print(f"  - POST http://{host}:{port}/api/records")
    print(f"  - GET  http://{host}:{port}/health")
    print("\n" + "=" * 60)

    app.run(host=host, port=port, debug=debug, threaded=True)


if __name__ == "__main__":
    main()
