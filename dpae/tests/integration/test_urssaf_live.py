"""
tests/integration/test_urssaf_live.py
──────────────────────────────────────────────────────────────────────────────
Integration tests against the URSSAF DPAE service (test indicator 1).

Requires:
  • A net-entreprises account enabled for DPAE
  • DPAE_TEST_JSON pointing at a declaration file (same format as the CLI)
  • Network access to URSSAF

Run with:
  DPAE_TEST_JSON=dpae_test.json pytest -m integration dpae/tests/integration -v

Declarations are sent with TestIndicator=1 and are never registered, but
each run still waits for URSSAF's asynchronous verdict (minutes).
"""
from __future__ import annotations

import os
from dataclasses import replace
from pathlib import Path

import pytest
from pydantic import SecretStr

from dpae.config.settings import get_settings
from dpae.domain.exceptions import AuthenticationError
from dpae.domain.models import DeclarationSession, PollStatus
from dpae.interfaces.cli import load_session
from dpae.services.container import build_pipeline

pytestmark = pytest.mark.integration

_TEST_JSON = os.getenv("DPAE_TEST_JSON", "dpae_test.json")


@pytest.fixture
def live_session() -> DeclarationSession:
    path = Path(_TEST_JSON)
    if not path.exists():
        pytest.skip(f"{path} not found; set DPAE_TEST_JSON")
    session = load_session(path)
    session.test_indicator = 1
    return session


@pytest.fixture(scope="module")
def live_pipeline():
    # faster cadence than production, same budget
    return build_pipeline(replace(get_settings(), poll_delay=1.0))


class TestAuthentication:
    def test_token_received(self, live_pipeline, live_session):
        token = live_pipeline.authenticate(live_session)
        assert len(token) >= 10
        assert live_session.credentials.password.get_secret_value() == ""

    def test_wrong_password(self, live_pipeline, live_session):
        live_session.credentials.password = SecretStr("xxx")
        with pytest.raises(AuthenticationError, match="Authentification"):
            live_pipeline.authenticate(live_session)


class TestSubmission:
    def test_send_returns_flow_id(self, live_pipeline, live_session):
        live_pipeline.authenticate(live_session)
        assert len(live_pipeline.send(live_session)) == 23

    def test_send_with_foreign_birth_department(self, live_pipeline, live_session):
        live_pipeline.authenticate(live_session)
        live_session.employee.birth_department = "99"
        assert len(live_pipeline.send(live_session)) == 23

    def test_certified_and_stable(self, live_pipeline, live_session):
        outcome = live_pipeline.submit(live_session)
        assert outcome.status is PollStatus.CERTIFIED, live_session.sent_document
        assert live_pipeline.poll(live_session).certificate == outcome.certificate

    def test_invalid_nir_key_rejected(self, live_pipeline, live_session):
        live_session.employee.nir_key = "xx"
        outcome = live_pipeline.submit(live_session)
        assert outcome.status is PollStatus.REJECTED
        assert "Numero de securite sociale invalide" in live_session.rejection_message

    def test_invalid_urssaf_code_rejected(self, live_pipeline, live_session):
        live_session.employer.urssaf_code = "12345"
        outcome = live_pipeline.submit(live_session)
        assert outcome.status is PollStatus.REJECTED
        assert "Code URSSAF invalide" in live_session.rejection_message
