"""
services/poller.py
──────────────────────────────────────────────────────────────────────────────
Third phase of the protocol: wait for URSSAF's verdict on a flow.

URSSAF processes declarations asynchronously, so the poller loops:

  1. wait           poll_first_delay before the first attempt, poll_delay after
  2. budget check   attempt > poll_max_attempts → TIMED_OUT
  3. list results   NetworkError / ProtocolError → next attempt
  4. no URL yet     → next attempt
  5. each URL       fetch (NetworkError → next attempt), then classify:
                      other profile → skip
                      KO            → REJECTED (terminal, never retried)
                      OK            → CERTIFIED, stop scanning
  6. no certificate among the URLs → next attempt

With poll_max_attempts = N and no result ever published, the result list is
requested exactly N + 1 times.  A session that already holds a verdict is
answered from memory, without sleeping or calling URSSAF.
"""
from __future__ import annotations

import logging
import time
from typing import Callable

from dpae.config.settings import Settings
from dpae.domain.exceptions import InputValidationError, NetworkError, ProtocolError
from dpae.domain.models import DeclarationSession, PollOutcome, PollStatus
from dpae.domain.result_document import DocumentVerdict, classify_result_document
from dpae.ports.result_source_port import ResultSourcePort

logger = logging.getLogger(__name__)


class ResultPoller:
    """Bounded polling loop over a ResultSourcePort.

    Args:
        source:   Any object satisfying ResultSourcePort.
        settings: Delays and attempt budget.
        sleep:    Blocking wait, injectable so tests run instantly.
    """

    def __init__(
        self,
        source: ResultSourcePort,
        settings: Settings,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._source = source
        self._first_delay = settings.poll_first_delay
        self._delay = settings.poll_delay
        self._max_attempts = settings.poll_max_attempts
        self._sleep = sleep

    # ── Public API ─────────────────────────────────────────────────────────

    def poll(self, session: DeclarationSession) -> PollOutcome:
        """Poll until certified, rejected or out of attempts.

        Returns:
            PollOutcome; the certificate or rejection message is also stored
            on the session.

        Raises:
            InputValidationError: No token or no flow id on the session.
            ProtocolError:        A DPAE result document is malformed.
        """
        if session.resolved:
            logger.debug("poll | %s already resolved", session)
            return _outcome_from_session(session)
        if not session.token:
            raise InputValidationError("Jeton vide (authenticate first)")
        if not session.flow_id:
            raise InputValidationError("no IdFlux (send the declaration first)")

        attempt = 0
        while True:
            self._sleep(self._first_delay if attempt == 0 else self._delay)
            if attempt > self._max_attempts:
                logger.warning(
                    "poll | no answer for flow_id=%s after %d tries",
                    session.flow_id, attempt,
                )
                return PollOutcome(
                    status=PollStatus.TIMED_OUT,
                    flow_id=session.flow_id,
                    attempts=attempt,
                )
            attempt += 1

            outcome = self._attempt(session, attempt)
            if outcome is not None:
                return outcome

    # ── Private helpers ────────────────────────────────────────────────────

    def _attempt(self, session: DeclarationSession, attempt: int) -> PollOutcome | None:
        """One listing + scan.  None means: try again later."""
        try:
            result = self._source.list_results(session.flow_id, session.token)
        except (NetworkError, ProtocolError) as exc:
            logger.warning("poll | attempt %d list failed, retrying: %s", attempt, exc)
            return None

        if not result.urls:
            logger.debug("poll | attempt %d flow_id=%s no result yet", attempt, session.flow_id)
            return None

        for url in result.urls:
            try:
                text = self._source.fetch_document(url, session.token)
            except NetworkError as exc:
                logger.warning("poll | attempt %d fetch failed, retrying: %s", attempt, exc)
                return None

            try:
                document = classify_result_document(text)
            except ProtocolError as exc:
                exc.endpoint = url
                exc.flow_id = session.flow_id
                raise

            if document.verdict is DocumentVerdict.OTHER_PROFILE:
                continue

            if document.verdict is DocumentVerdict.NON_COMPLIANT:
                session.rejection_message = document.message
                logger.info("poll | flow_id=%s non conforme", session.flow_id)
                return PollOutcome(
                    status=PollStatus.REJECTED,
                    flow_id=session.flow_id,
                    message=document.message,
                    attempts=attempt,
                )

            session.certificate = document.certificate
            logger.info("poll | flow_id=%s certified after %d tries", session.flow_id, attempt)
            return PollOutcome(
                status=PollStatus.CERTIFIED,
                flow_id=session.flow_id,
                certificate=document.certificate,
                attempts=attempt,
            )

        return None


def _outcome_from_session(session: DeclarationSession) -> PollOutcome:
    if session.certificate:
        return PollOutcome(
            status=PollStatus.CERTIFIED,
            flow_id=session.flow_id,
            certificate=session.certificate,
        )
    return PollOutcome(
        status=PollStatus.REJECTED,
        flow_id=session.flow_id,
        message=session.rejection_message,
    )
