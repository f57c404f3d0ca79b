"""
ports/submission_port.py
──────────────────────────────────────────────────────────────────────────────
Abstract interface for the submission phase.

Current implementation: UrssafTransmitter (adapters/transmitter.py)
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from dpae.domain.models import DeclarationSession


@runtime_checkable
class SubmissionPort(Protocol):
    """Contract for transmitting a declaration."""

    def send(self, session: DeclarationSession) -> str:
        """Render, encode and post the declaration held by ``session``.

        Sets ``session.sent_document`` and ``session.flow_id``.

        Returns:
            The 23-character flow id.

        Raises:
            InputValidationError: No token, missing field, unencodable text.
            NetworkError:         Transport failure or unexpected status.
            ProtocolError:        No valid idflux in the response.
        """
        ...
