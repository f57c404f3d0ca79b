"""
services/declaration.py
──────────────────────────────────────────────────────────────────────────────
Pipeline orchestrator: authenticate → send → poll on one DeclarationSession.

This is the primary entry point for all interfaces (CLI, future API).
It knows nothing about HTTP — it only speaks to Ports and domain objects.
Phases run strictly in sequence on the calling thread; the session is
mutated in place and remains the caller's handle on everything received.
"""
from __future__ import annotations

import logging

from dpae.config.settings import Settings
from dpae.domain.models import DeclarationSession, PollOutcome
from dpae.ports.auth_port import AuthPort
from dpae.ports.submission_port import SubmissionPort
from dpae.services.poller import ResultPoller

logger = logging.getLogger(__name__)


class DeclarationPipeline:
    """Three-phase DPAE submission.

    Inject via services/container.py — do not instantiate directly in
    application code.

    Args:
        authenticator: Any object satisfying AuthPort.
        transmitter:   Any object satisfying SubmissionPort.
        poller:        ResultPoller bound to a ResultSourcePort.
        settings:      Shared application settings; supplies the test
                       indicator when the session carries none.
    """

    def __init__(
        self,
        authenticator: AuthPort,
        transmitter: SubmissionPort,
        poller: ResultPoller,
        settings: Settings,
    ) -> None:
        self._authenticator = authenticator
        self._transmitter = transmitter
        self._poller = poller
        self._settings = settings

    # ── Public API ─────────────────────────────────────────────────────────

    def authenticate(self, session: DeclarationSession) -> str:
        session.token = self._authenticator.authenticate(session.credentials)
        return session.token

    def send(self, session: DeclarationSession) -> str:
        if session.test_indicator is None:
            session.test_indicator = self._settings.test_indicator
        return self._transmitter.send(session)

    def poll(self, session: DeclarationSession) -> PollOutcome:
        return self._poller.poll(session)

    def submit(self, session: DeclarationSession) -> PollOutcome:
        """Run all three phases for one declaration.

        Returns:
            PollOutcome — CERTIFIED, REJECTED or TIMED_OUT.  Call
            ``raise_for_status()`` on it to turn the last two into errors.

        Raises:
            DPAEError subclasses from whichever phase failed.
        """
        logger.info("submit | %s", session)
        self.authenticate(session)
        self.send(session)
        outcome = self.poll(session)
        logger.info(
            "submit | flow_id=%s status=%s attempts=%d",
            outcome.flow_id, outcome.status.value, outcome.attempts,
        )
        return outcome
