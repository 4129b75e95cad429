"""
Client for the authentication endpoints of the records API.
"""

from typing import Tuple

from vetemr.api.client import ApiClient
from vetemr.errors import AuthError, GatewayError, ValidationError
from vetemr.models import Identity


def _identity_from(data) -> Identity:
    user = data.get("user") or data.get("identity")
    if not isinstance(user, dict):
        raise AuthError("Authentication response did not include a user.")
    identity = Identity.from_dict(user)
    if not identity.role:
        raise AuthError("Authenticated user has no role.")
    return identity


class AuthClient(ApiClient):

    async def login(self, email: str, password: str) -> Tuple[str, Identity]:
        """Exchange credentials for ``(token, identity)``."""
        try:
            data = await self.request(
                "POST", "/auth/login", json={"email": email, "password": password}
            )
        except GatewayError as e:
            if e.status in (401, 403):
                raise AuthError("Invalid credentials. Please try again.") from e
            raise AuthError(f"Login failed: {e.message}") from e
        except ValidationError as e:
            raise AuthError(f"Login failed: {e}") from e

        token = data.get("token")
        if not token:
            raise AuthError("Authentication response did not include a token.")
        return str(token), _identity_from(data)

    async def current_user(self, token: str) -> Identity:
        """Resolve the identity behind a previously issued token."""
        try:
            data = await self.request("GET", "/auth/me", token=token)
        except GatewayError as e:
            raise AuthError(f"Session could not be restored: {e.message}") from e
        except ValidationError as e:
            raise AuthError(f"Session could not be restored: {e}") from e
        return _identity_from(data)
