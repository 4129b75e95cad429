"""
Process-wide session state: who is logged in, and with what role.

The store is the single writer of the current Identity. Readers subscribe
and are told when the session appears or disappears.
"""

import sys
from datetime import datetime, timezone
from typing import Callable, List, Optional

import jwt

from vetemr.errors import AuthError
from vetemr.models import Identity

Listener = Callable[[Optional[Identity]], None]


def token_expiry(token: str) -> Optional[datetime]:
    """Read the ``exp`` claim of a JWT without verifying it (None if absent)."""
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        return None
    exp = claims.get("exp")
    if exp is None:
        return None
    return datetime.fromtimestamp(int(exp), tz=timezone.utc)


class SessionStore:

    def __init__(self, auth_client, clock: Callable[[], datetime] = None):
        self._auth = auth_client
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._identity: Optional[Identity] = None
        self._token: Optional[str] = None
        self._expires_at: Optional[datetime] = None
        self._listeners: List[Listener] = []

    # ── Lifecycle ────────────────────────────────────────────────────

    async def login(self, email: str, password: str) -> Identity:
        """Authenticate; on failure the current session is left untouched."""
        token, identity = await self._auth.login(email, password)
        if self._identity is not None:
            self._clear()
        self._set(token, identity)
        print(f"[auth] Logged in as: {identity.name} (role={identity.role})", file=sys.stderr)
        return identity

    async def restore(self, token: str) -> Optional[Identity]:
        """Bootstrap the session from an earlier token. Returns None if it is no longer valid."""
        if not token:
            return None
        expires_at = token_expiry(token)
        if expires_at is not None and expires_at <= self._clock():
            return None
        try:
            identity = await self._auth.current_user(token)
        except AuthError as e:
            print(f"[WARN] {e}", file=sys.stderr)
            return None
        if self._identity is not None:
            self._clear()
        self._set(token, identity)
        return identity

    def logout(self) -> None:
        """Drop the session. Safe to call when nobody is logged in."""
        if self._identity is not None:
            self._clear()

    # ── Queries ──────────────────────────────────────────────────────

    def current_identity(self) -> Optional[Identity]:
        if self._identity is not None and self._expired():
            print("[auth] Session expired", file=sys.stderr)
            self._clear()
        return self._identity

    @property
    def token(self) -> Optional[str]:
        return self._token if self.current_identity() is not None else None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ── Internals ────────────────────────────────────────────────────

    def _expired(self) -> bool:
        return self._expires_at is not None and self._expires_at <= self._clock()

    def _set(self, token: str, identity: Identity) -> None:
        self._token = token
        self._identity = identity
        self._expires_at = token_expiry(token)
        self._notify(identity)

    def _clear(self) -> None:
        self._token = None
        self._identity = None
        self._expires_at = None
        self._notify(None)

    def _notify(self, identity: Optional[Identity]) -> None:
        for listener in list(self._listeners):
            listener(identity)
