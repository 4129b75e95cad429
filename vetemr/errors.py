"""
Error taxonomy shared by the gateway, session store and view-models.
"""

from typing import Dict, Optional


class VetEMRError(Exception):
    """Base class for every error raised by this package."""


class AuthError(VetEMRError):
    """Raised when login or session restore fails."""


class ValidationError(VetEMRError):
    """A draft was rejected, either locally or by the records API."""

    def __init__(self, errors: Dict[str, str], status: Optional[int] = None):
        self.errors = dict(errors)
        self.field = next(iter(self.errors), None)
        self.status = status
        message = "; ".join(f"{k}: {v}" for k, v in self.errors.items()) or "invalid input"
        super().__init__(message)


class GatewayError(VetEMRError):
    """Transport failure or non-2xx response from the records API."""

    def __init__(self, status: Optional[int], message: str):
        self.status = status
        self.message = message
        prefix = f"HTTP {status}" if status is not None else "transport error"
        super().__init__(f"{prefix}: {message}")


class NotFound(GatewayError):
    """The requested entity does not exist."""

    def __init__(self, message: str = "not found", status: Optional[int] = 404):
        super().__init__(status, message)
