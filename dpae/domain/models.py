"""
domain/models.py
──────────────────────────────────────────────────────────────────────────────
Pure domain objects — Pydantic models with no imports from adapters or ports.

These models are the lingua franca of the entire system:
  • the CLI builds a DeclarationSession from a JSON file
  • services render and mutate it phase by phase
  • adapters read the token / flow id from it

DeclarationSession is the single mutable handle passed through
authenticate → send → poll; callers inspect it afterwards.
"""
from __future__ import annotations

from datetime import date, time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, SecretStr

from dpae.domain.exceptions import DeclarationTimeoutError, NonConformityError

FLOW_ID_LENGTH = 23
CERTIFICATE_MIN_LENGTH = 10


# ── Input ──────────────────────────────────────────────────────────────────────

class Credentials(BaseModel):
    """net-entreprises credentials used to obtain a session token.

    The password is consumed once: the renderer erases it right after the
    authentication document is built.
    """

    siret:      str
    surname:    str
    first_name: str
    password:   SecretStr = SecretStr("")
    service:    str = "25"

    @property
    def is_complete(self) -> bool:
        return bool(self.siret) and bool(self.password.get_secret_value())

    def erase_password(self) -> None:
        self.password = SecretStr("")


class Employer(BaseModel):
    designation:    str
    siret:          str
    ape:            str
    urssaf_code:    str
    address:        str
    town:           str
    postal_code:    str
    phone:          str = ""
    health_service: str = ""


class Employee(BaseModel):
    surname:          str
    first_name:       str
    sex:              int = Field(..., description="1 = male, 2 = female")
    nir:              str = Field(..., description="Social security number")
    nir_key:          str
    birth_date:       date
    birth_town:       str
    birth_department: str


class Contract(BaseModel):
    start_date:  date
    start_time:  time
    end_date:    Optional[date] = None
    nature_code: str


# ── Session aggregate ──────────────────────────────────────────────────────────

class DeclarationSession(BaseModel):
    """One DPAE and everything received about it."""

    credentials:    Credentials
    employer:       Employer
    employee:       Employee
    contract:       Contract
    test_indicator: Optional[int] = None

    # answers
    token:         str = Field("", repr=False)
    flow_id:       str = ""
    sent_document: str = Field("", repr=False)

    # verdict
    certificate:       str = ""
    rejection_message: str = ""

    @property
    def resolved(self) -> bool:
        return bool(self.certificate or self.rejection_message)

    def __str__(self) -> str:
        return f"dpae employer={self.employer.designation} flux={self.flow_id}"


# ── Polling ────────────────────────────────────────────────────────────────────

class PollResult(BaseModel):
    """Result-document URLs discovered for a flow id in one attempt."""

    flow_id: str
    urls:    list[str] = Field(default_factory=list)


class PollStatus(str, Enum):
    CERTIFIED = "certified"
    REJECTED  = "rejected"
    TIMED_OUT = "timed_out"


class PollOutcome(BaseModel):
    """Terminal state of ResultPoller.poll()."""

    status:      PollStatus
    flow_id:     str
    certificate: str = ""
    message:     str = ""
    attempts:    int = 0

    @property
    def ok(self) -> bool:
        return self.status is PollStatus.CERTIFIED

    def raise_for_status(self) -> None:
        """Raise NonConformityError or DeclarationTimeoutError unless certified."""
        if self.status is PollStatus.REJECTED:
            raise NonConformityError(self.message, flow_id=self.flow_id)
        if self.status is PollStatus.TIMED_OUT:
            raise DeclarationTimeoutError(self.flow_id, self.attempts)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


# ── Consultation endpoint payload ──────────────────────────────────────────────

class Retour(BaseModel):
    """One result record of a flow."""

    url:         str
    id:          str = ""
    nature:      str = ""
    statut:      str = ""
    publication: str = ""
    production:  str = ""


class Flux(BaseModel):
    id:     str = ""
    retour: list[Retour] = Field(default_factory=list)


class Retours(BaseModel):
    flux: list[Flux] = Field(default_factory=list)


class ConsultationResponse(BaseModel):
    """JSON body of lister-retours-flux: ``{"retours": {"flux": [...]}}``."""

    retours: Retours = Field(default_factory=Retours)

    def result_urls(self) -> list[str]:
        return [retour.url for flux in self.retours.flux for retour in flux.retour]
