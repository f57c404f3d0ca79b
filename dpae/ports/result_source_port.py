"""
ports/result_source_port.py
──────────────────────────────────────────────────────────────────────────────
Abstract interface for the result consultation endpoints.

Current implementation: UrssafConsultationAdapter (adapters/consultation.py)
The poller only speaks to this Protocol, so tests drive it with in-memory
fakes.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from dpae.domain.models import PollResult


@runtime_checkable
class ResultSourcePort(Protocol):
    """Contract for listing and fetching result documents of a flow."""

    def list_results(self, flow_id: str, token: str) -> PollResult:
        """Return the result-document URLs currently published for a flow.

        Raises:
            NetworkError:  Transport failure or unexpected status.
            ProtocolError: Body is not the expected JSON structure.
        """
        ...

    def fetch_document(self, url: str, token: str) -> str:
        """Return the text of one result document.

        Raises:
            NetworkError: Transport failure or unexpected status.
        """
        ...
