"""
domain/result_document.py
──────────────────────────────────────────────────────────────────────────────
Parsing of URSSAF result documents and submission acknowledgements.

These responses are loosely structured XML-ish text with no published schema,
so values are located by their markers rather than by a strict XML parser:

  profil="DPAE"                                     document concerns a DPAE
  <etat_conformite>OK|KO</etat_conformite>          compliance verdict
  <certificat_conformite>…</certificat_conformite>  certificate (OK only)
  <message>…</message>                              rejection reason (KO only)
  idflux>…</idflux                                  flow id (submission reply)

Extracted values are trimmed.  Pure functions — no I/O.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from dpae.domain.exceptions import ProtocolError
from dpae.domain.models import CERTIFICATE_MIN_LENGTH, FLOW_ID_LENGTH

PROFILE_MARKER = 'profil="DPAE"'

_RE_KO = re.compile(r"<etat_conformite>\s*KO\s*</etat_conformite>")
_RE_OK = re.compile(r"<etat_conformite>\s*OK\s*</etat_conformite>")
_RE_CERTIFICATE = re.compile(r"<certificat_conformite>(.*?)</certificat_conformite>", re.S)
_RE_MESSAGE = re.compile(r"<message>(.*)</message>", re.S)
_RE_FLOW_ID = re.compile(r"idflux>(.*?)</idflux", re.S)


class DocumentVerdict(str, Enum):
    OTHER_PROFILE = "other_profile"
    COMPLIANT     = "compliant"
    NON_COMPLIANT = "non_compliant"


@dataclass(frozen=True)
class ResultDocument:
    """Classified result document."""

    verdict: DocumentVerdict
    certificate: str = ""
    message: str = ""


def classify_result_document(text: str) -> ResultDocument:
    """Classify one result document fetched from the consultation endpoint.

    Returns:
        ResultDocument with verdict OTHER_PROFILE (ignore it), NON_COMPLIANT
        (with message) or COMPLIANT (with certificate).

    Raises:
        ProtocolError: If a DPAE document has no verdict, a KO document has
                       no message, or an OK document has no usable certificate.
    """
    if PROFILE_MARKER not in text:
        return ResultDocument(DocumentVerdict.OTHER_PROFILE)

    # KO anywhere in the document wins over an OK tag
    if _RE_KO.search(text):
        message = _RE_MESSAGE.search(text)
        if message is None:
            raise ProtocolError(
                "non-compliant result document has no message",
                detail=text,
            )
        return ResultDocument(DocumentVerdict.NON_COMPLIANT, message=message.group(1).strip())

    if not _RE_OK.search(text):
        raise ProtocolError(
            "result document carries no etat_conformite OK/KO",
            detail=text,
        )

    certificate = _RE_CERTIFICATE.search(text)
    if certificate is None:
        raise ProtocolError("compliant result document has no certificate", detail=text)
    value = certificate.group(1).strip()
    if len(value) < CERTIFICATE_MIN_LENGTH:
        raise ProtocolError(
            f"certificate shorter than {CERTIFICATE_MIN_LENGTH} characters",
            detail=text,
        )
    return ResultDocument(DocumentVerdict.COMPLIANT, certificate=value)


def extract_flow_id(text: str) -> str:
    """Pull the 23-character flow id out of a submission response.

    Raises:
        ProtocolError: If the idflux marker is absent or the value has the
                       wrong length.
    """
    found = _RE_FLOW_ID.search(text)
    if found is None:
        raise ProtocolError("idflux not found in submission response", detail=text)
    flow_id = found.group(1).strip()
    if len(flow_id) != FLOW_ID_LENGTH:
        raise ProtocolError(
            f"idflux length should be {FLOW_ID_LENGTH}, got {len(flow_id)}",
            detail=text,
        )
    return flow_id
