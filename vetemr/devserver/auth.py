"""
JWT helpers and the token_required decorator for the demo records API.
"""

from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Any, Dict, Optional

import jwt
from flask import current_app, jsonify, request

from vetemr.config import SECRET_KEY, TOKEN_EXPIRY_HOURS


def generate_token(user: Dict[str, Any], secret: str = SECRET_KEY,
                   expiry_hours: float = TOKEN_EXPIRY_HOURS) -> str:
    """Issue a signed JWT for an authenticated user."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user["id"],
        "role": user["role"],
        "name": user["name"],
        "iat": now,
        "exp": now + timedelta(hours=expiry_hours),
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def verify_token(token: str, secret: str = SECRET_KEY) -> Optional[Dict[str, Any]]:
    """Verify a JWT and return its payload, or None when invalid or expired."""
    try:
        return jwt.decode(token, secret, algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def error(message: str, status: int, **extra):
    return jsonify({"status": "error", "message": message, **extra}), status


def token_required(f):
    """Protect an endpoint with bearer-token authentication."""
    @wraps(f)
    def decorated(*args, **kwargs):
        auth_header = request.headers.get("Authorization", "")
        parts = auth_header.split(" ")
        if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
            return error("Authentication token is missing", 401)

        payload = verify_token(parts[1], current_app.config["SECRET_KEY"])
        if not payload:
            return error("Invalid or expired token", 401)

        user = current_app.config["STORE"].get_user(payload.get("sub"))
        if not user:
            return error("User no longer exists", 401)

        request.user = user
        return f(*args, **kwargs)

    return decorated
