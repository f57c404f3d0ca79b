"""
tests/conftest.py
──────────────────────────────────────────────────────────────────────────────
Shared pytest fixtures and mock adapter implementations.

Mock adapters implement the Port Protocols via structural subtyping — they do
NOT inherit from any base class.  pytest uses them to test service logic
without any connection to URSSAF.

Fixture hierarchy:
  settings       → Settings with tiny delays and a small attempt budget
  session        → DeclarationSession built from SESSION_DATA
  sleeper        → records requested delays instead of sleeping
  mock_auth      → implements AuthPort (fixed token, erases password)
  mock_submitter → implements SubmissionPort (renders, fixed flow id)
  fake_source    → implements ResultSourcePort (scripted list / documents)
  pipeline       → DeclarationPipeline wired with all three mocks
"""
from __future__ import annotations

import copy
from typing import Any

import pytest

from dpae.config.settings import Settings
from dpae.domain.exceptions import NetworkError
from dpae.domain.models import Credentials, DeclarationSession, PollResult
from dpae.services.declaration import DeclarationPipeline
from dpae.services.poller import ResultPoller
from dpae.services.renderer import DocumentRenderer

FLOW_ID = "DPAE20231015120000ABCDE"  # 23 chars
TOKEN = "T" * 408
CERTIFICATE = "CERT-0123456789-ABCDEF"
DPAE_URL = "https://consultation.test/retour/1"


# ── Settings fixture ───────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def settings() -> Settings:
    """Return a Settings instance with sane test defaults."""
    return Settings(
        url_auth="https://auth.test/authentifier_dpae",
        url_depot="https://depot.test/deposer-dsn/1.0/",
        url_consultation="https://consultation.test/lister-retours-flux/2.0/",
        request_timeout=5.0,
        poll_first_delay=1.0,
        poll_delay=10.0,
        poll_max_attempts=3,
        test_indicator=1,
    )


# ── Declaration data ───────────────────────────────────────────────────────

SESSION_DATA: dict[str, Any] = {
    "credentials": {
        "siret": "12345678900011",
        "surname": "Dupont",
        "first_name": "Jeanne",
        "password": "s3cr3t-pa55",
        "service": "25",
    },
    "employer": {
        "designation": "Boulangerie Dupont & Fils",
        "siret": "12345678900011",
        "ape": "1071C",
        "urssaf_code": "117",
        "address": "12 rue de l'Église",
        "town": "Besançon",
        "postal_code": "25000",
        "phone": "0381000000",
    },
    "employee": {
        "surname": "Martin",
        "first_name": "Hélène",
        "sex": 2,
        "nir": "2850525056012",
        "nir_key": "34",
        "birth_date": "1985-05-25",
        "birth_town": "Besançon",
        "birth_department": "25",
    },
    "contract": {
        "start_date": "2023-10-16",
        "start_time": "08:30",
        "end_date": "2023-12-31",
        "nature_code": "CDD",
    },
    "test_indicator": 1,
}


def make_session(**overrides: Any) -> DeclarationSession:
    """DeclarationSession from SESSION_DATA; ``employee={...}`` etc. merge in."""
    data = copy.deepcopy(SESSION_DATA)
    for key, value in overrides.items():
        if isinstance(value, dict):
            data[key].update(value)
        else:
            data[key] = value
    return DeclarationSession.model_validate(data)


@pytest.fixture
def session() -> DeclarationSession:
    return make_session()


# ── Result documents ───────────────────────────────────────────────────────

def result_document(state: str | None, *, profile: str = "DPAE", body: str = "") -> str:
    """Loosely structured result document as URSSAF publishes them."""
    state_tag = f"<etat_conformite>{state}</etat_conformite>" if state else ""
    return (
        f'<?xml version="1.0" encoding="ISO-8859-1"?>\n'
        f'<retour profil="{profile}" version="1.0">\n'
        f"  {state_tag}\n"
        f"  {body}\n"
        f"</retour>\n"
    )


def certified_document(certificate: str = CERTIFICATE) -> str:
    return result_document(
        "OK", body=f"<certificat_conformite>{certificate}</certificat_conformite>"
    )


def rejected_document(message: str) -> str:
    return result_document("KO", body=f"<message>\n  {message}\n</message>")


# ── Mock adapters ──────────────────────────────────────────────────────────

class MockAuthAdapter:
    """Returns a fixed token and erases the password like the real one."""

    def __init__(self) -> None:
        self.calls = 0

    def authenticate(self, credentials: Credentials) -> str:
        self.calls += 1
        DocumentRenderer().render_auth(credentials)
        return TOKEN


class MockSubmissionAdapter:
    """Renders the declaration and hands back a fixed flow id."""

    def __init__(self) -> None:
        self.tokens: list[str] = []

    def send(self, session: DeclarationSession) -> str:
        self.tokens.append(session.token)
        DocumentRenderer().render_declaration(session)
        session.flow_id = FLOW_ID
        return FLOW_ID


class FakeResultSource:
    """Scripted ResultSourcePort.

    Args:
        listings:  One entry per list_results call: a list of URLs or an
                   exception instance to raise.  The last entry repeats.
        documents: URL → document text, or exception instance to raise.
    """

    def __init__(
        self,
        listings: list[Any] | None = None,
        documents: dict[str, Any] | None = None,
    ) -> None:
        self._listings = listings or [[]]
        self._documents = documents or {}
        self.list_calls = 0
        self.fetched: list[str] = []

    def list_results(self, flow_id: str, token: str) -> PollResult:
        entry = self._listings[min(self.list_calls, len(self._listings) - 1)]
        self.list_calls += 1
        if isinstance(entry, Exception):
            raise entry
        return PollResult(flow_id=flow_id, urls=list(entry))

    def fetch_document(self, url: str, token: str) -> str:
        self.fetched.append(url)
        entry = self._documents[url]
        if isinstance(entry, Exception):
            raise entry
        return entry


class Sleeper:
    """Stands in for time.sleep; records each delay."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


# ── pytest fixtures ────────────────────────────────────────────────────────

@pytest.fixture
def sleeper() -> Sleeper:
    return Sleeper()


@pytest.fixture
def mock_auth() -> MockAuthAdapter:
    return MockAuthAdapter()


@pytest.fixture
def mock_submitter() -> MockSubmissionAdapter:
    return MockSubmissionAdapter()


@pytest.fixture
def fake_source() -> FakeResultSource:
    """Publishes nothing on the first attempt, a certificate afterwards."""
    return FakeResultSource(
        listings=[[], [DPAE_URL]],
        documents={DPAE_URL: certified_document()},
    )


@pytest.fixture
def pipeline(mock_auth, mock_submitter, fake_source, settings, sleeper):
    return DeclarationPipeline(
        authenticator=mock_auth,
        transmitter=mock_submitter,
        poller=ResultPoller(fake_source, settings, sleep=sleeper),
        settings=settings,
    )


def network_error() -> NetworkError:
    return NetworkError("connection reset", endpoint="https://consultation.test/")
