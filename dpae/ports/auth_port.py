"""
ports/auth_port.py
──────────────────────────────────────────────────────────────────────────────
Abstract interface for the authentication phase.

Current implementation: UrssafAuthenticator (adapters/authenticator.py)
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from dpae.domain.models import Credentials


@runtime_checkable
class AuthPort(Protocol):
    """Contract for obtaining a session token."""

    def authenticate(self, credentials: Credentials) -> str:
        """Exchange credentials for a session token.

        The password is erased from ``credentials`` once the request body
        has been built, whatever the outcome.

        Returns:
            Opaque session token.

        Raises:
            InputValidationError: SIRET or password missing.
            AuthenticationError:  Credentials rejected.
            NetworkError:         Transport failure or unexpected status.
            ProtocolError:        Token too short to be genuine.
        """
        ...
