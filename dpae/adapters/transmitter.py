"""
adapters/transmitter.py
──────────────────────────────────────────────────────────────────────────────
Implements SubmissionPort against the URSSAF deposit endpoint.

Pipeline, strictly in this order:
  render (UTF-8 text, kept on session.sent_document)
    → transcode to ISO-8859-1
    → gzip
    → POST with Content-Encoding: gzip and the DSNLogin token
    → extract the 23-character idflux from the response
"""
from __future__ import annotations

import gzip
import logging
from contextlib import closing

import requests

from dpae.adapters.headers import XML_CONTENT_TYPE, dsn_login_headers
from dpae.config.settings import Settings
from dpae.domain.exceptions import EncodingError, InputValidationError, NetworkError, ProtocolError
from dpae.domain.models import DeclarationSession
from dpae.domain.result_document import extract_flow_id
from dpae.services.renderer import DocumentRenderer

logger = logging.getLogger(__name__)

WIRE_ENCODING = "iso-8859-1"


def encode_document(document: str) -> bytes:
    """Transcode to ISO-8859-1 and gzip.

    Raises:
        EncodingError: If a character has no ISO-8859-1 representation.
    """
    try:
        latin1 = document.encode(WIRE_ENCODING)
    except UnicodeEncodeError as exc:
        bad = exc.object[exc.start:exc.end]
        raise EncodingError(
            f"character {bad!r} at position {exc.start} cannot be encoded in ISO-8859-1"
        ) from exc
    return gzip.compress(latin1)


class UrssafTransmitter:
    """Sends the declaration and records the flow id.

    Injected into DeclarationPipeline via services/container.py.
    """

    def __init__(self, settings: Settings, renderer: DocumentRenderer | None = None) -> None:
        self._settings = settings
        self._url = settings.url_depot
        self._renderer = renderer or DocumentRenderer()
        logger.debug("UrssafTransmitter ready | url=%s", self._url)

    # ── SubmissionPort implementation ──────────────────────────────────────

    def send(self, session: DeclarationSession) -> str:
        """Render, encode and post the declaration.

        Returns:
            The flow id, also stored on ``session.flow_id``.

        Raises:
            InputValidationError: No token on the session, missing field,
                                  or unencodable character.
            NetworkError:         Transport failure or non-2xx status.
            ProtocolError:        No valid idflux in the response.
        """
        if not session.token:
            raise InputValidationError("Jeton vide (authenticate first)", endpoint=self._url)

        document = self._renderer.render_declaration(session)
        payload = encode_document(document)
        headers = {
            "Content-Type": XML_CONTENT_TYPE,
            "Content-Encoding": "gzip",
            **dsn_login_headers(session.token),
        }
        logger.info("send | %s bytes=%d", session, len(payload))

        try:
            with closing(
                requests.post(
                    self._url,
                    data=payload,
                    headers=headers,
                    timeout=self._settings.request_timeout,
                )
            ) as resp:
                ok = resp.ok
                status_code = resp.status_code
                text = resp.text
        except requests.RequestException as exc:
            raise NetworkError(f"Network error at sending: {exc}", endpoint=self._url) from exc

        if not ok:
            raise NetworkError(
                f"deposit answered HTTP {status_code}",
                status_code=status_code,
                endpoint=self._url,
                detail=text,
            )

        try:
            flow_id = extract_flow_id(text)
        except ProtocolError as exc:
            exc.endpoint = self._url
            raise

        session.flow_id = flow_id
        logger.info("send | flow_id=%s", flow_id)
        return flow_id
