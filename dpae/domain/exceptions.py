"""
domain/exceptions.py
──────────────────────────────────────────────────────────────────────────────
Custom exception hierarchy and error classification.

All exceptions are rooted at DPAEError so callers can catch broadly
(except DPAEError) or narrowly (except NonConformityError).  Every error also
carries an ErrorKind so callers can branch on the category without matching
message text:

  INPUT_VALIDATION  → fatal, caller's fault (missing credentials/token/flow id,
                      template field missing, unencodable character)
  AUTHENTICATION    → URSSAF rejected the credentials
  NETWORK           → connection failure, timeout, unexpected HTTP status
                      (retried while polling, fatal elsewhere)
  PROTOCOL          → response does not have the expected shape
  NON_CONFORMITY    → definitive negative verdict on the declaration
  TIMEOUT           → polling budget exhausted without a verdict

Messages never contain the password or the session token.
"""
from __future__ import annotations

from enum import Enum

import requests
from pydantic import ValidationError

# Raw response excerpts attached to errors are cut to this length.
DETAIL_MAX_CHARS = 300


class ErrorKind(str, Enum):
    """Failure categories shared by every phase of the protocol."""
    INPUT_VALIDATION = "input_validation"
    AUTHENTICATION   = "authentication"
    NETWORK          = "network"
    PROTOCOL         = "protocol"
    NON_CONFORMITY   = "non_conformity"
    TIMEOUT          = "timeout"


class DPAEError(Exception):
    """Base exception for all application errors.

    Args:
        message:  Human readable description.
        endpoint: URL involved, when there is one.
        flow_id:  Flow identifier, once assigned.
        detail:   Raw response fragment (truncated), when safe to expose.
    """

    kind: ErrorKind = ErrorKind.PROTOCOL

    def __init__(
        self,
        message: str,
        *,
        endpoint: str | None = None,
        flow_id: str | None = None,
        detail: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.endpoint = endpoint
        self.flow_id = flow_id
        self.detail = detail[:DETAIL_MAX_CHARS] if detail else detail

    @property
    def retryable(self) -> bool:
        """True for transient failures worth another polling attempt."""
        return self.kind is ErrorKind.NETWORK

    def __str__(self) -> str:
        parts = [f"URSSAF: {self.message}"]
        if self.endpoint:
            parts.append(f"endpoint={self.endpoint}")
        if self.flow_id:
            parts.append(f"flow_id={self.flow_id}")
        if self.detail:
            parts.append(f"response={self.detail!r}")
        return " | ".join(parts)


class InputValidationError(DPAEError):
    """Raised when input data is missing or unusable before any request."""

    kind = ErrorKind.INPUT_VALIDATION


class TemplateError(InputValidationError):
    """Raised when a document template references a field that is absent."""


class EncodingError(InputValidationError):
    """Raised when the declaration contains a character Latin-1 cannot hold."""


class AuthenticationError(DPAEError):
    """Raised when URSSAF rejects the credentials (HTTP 422)."""

    kind = ErrorKind.AUTHENTICATION


class NetworkError(DPAEError):
    """Raised on connection failure, timeout or unexpected HTTP status."""

    kind = ErrorKind.NETWORK

    def __init__(self, message: str, *, status_code: int | None = None, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.status_code = status_code


class ProtocolError(DPAEError):
    """Raised when a response does not match the expected shape."""

    kind = ErrorKind.PROTOCOL


class NonConformityError(DPAEError):
    """Raised when URSSAF declares the DPAE non-compliant.

    Not a system failure: ``reason`` holds URSSAF's own explanation.
    """

    kind = ErrorKind.NON_CONFORMITY

    def __init__(self, reason: str, **kwargs) -> None:
        super().__init__(f"Non conforme : {reason}", **kwargs)
        self.reason = reason


class DeclarationTimeoutError(DPAEError):
    """Raised when no verdict arrived within the polling budget."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, flow_id: str, attempts: int) -> None:
        super().__init__(
            f"No answer with idflux {flow_id} after {attempts} tries",
            flow_id=flow_id,
        )
        self.attempts = attempts


def classify_error(exc: BaseException) -> ErrorKind | None:
    """Map any exception raised during a submission to an ErrorKind.

    Unwrapped pydantic errors come from the caller's declaration data (the
    adapters wrap response parsing failures into ProtocolError themselves),
    and unwrapped UnicodeErrors from text Latin-1 cannot hold.  Both are
    input validation.

    Returns:
        The matching ErrorKind, or ``None`` for exceptions outside the
        taxonomy (programming errors, which should propagate untouched).
    """
    if isinstance(exc, DPAEError):
        return exc.kind
    if isinstance(exc, requests.RequestException):
        return ErrorKind.NETWORK
    if isinstance(exc, (ValidationError, UnicodeError)):
        return ErrorKind.INPUT_VALIDATION
    return None
