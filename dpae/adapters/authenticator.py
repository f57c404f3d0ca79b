"""
adapters/authenticator.py
──────────────────────────────────────────────────────────────────────────────
Implements AuthPort against the URSSAF authentication endpoint.

Key behaviour:
  - POSTs the rendered <identifiants> document as application/xml
  - The password is erased from Credentials once the body is built
  - HTTP 422 → AuthenticationError (bad credentials)
  - Any other non-200 status → NetworkError
  - A body shorter than 10 characters is not a token → ProtocolError
  - One shot: no automatic retry
"""
from __future__ import annotations

import logging
from contextlib import closing

import requests

from dpae.adapters.headers import XML_CONTENT_TYPE
from dpae.config.settings import Settings
from dpae.domain.exceptions import (
    AuthenticationError,
    InputValidationError,
    NetworkError,
    ProtocolError,
)
from dpae.domain.models import Credentials
from dpae.services.renderer import DocumentRenderer

logger = logging.getLogger(__name__)

TOKEN_MIN_LENGTH = 10
_UNPROCESSABLE = 422


class UrssafAuthenticator:
    """Obtains a DSNLogin session token.

    Injected into DeclarationPipeline via services/container.py.
    """

    def __init__(self, settings: Settings, renderer: DocumentRenderer | None = None) -> None:
        self._settings = settings
        self._url = settings.url_auth
        self._renderer = renderer or DocumentRenderer()
        logger.debug("UrssafAuthenticator ready | url=%s", self._url)

    # ── AuthPort implementation ────────────────────────────────────────────

    def authenticate(self, credentials: Credentials) -> str:
        """Exchange credentials for a session token.

        Args:
            credentials: SIRET, names, password and service code.  The
                         password is erased during the call.

        Returns:
            The token, verbatim from the response body.

        Raises:
            InputValidationError: SIRET or password empty.
            AuthenticationError:  URSSAF answered 422.
            NetworkError:         Transport failure or non-200 status.
            ProtocolError:        Response too short to be a token.
        """
        if not credentials.is_complete:
            credentials.erase_password()
            raise InputValidationError(
                "Informations non renseignées (SIRET and password are required)",
                endpoint=self._url,
            )

        body = self._renderer.render_auth(credentials)
        logger.info("authenticate | siret=%s", credentials.siret)

        try:
            with closing(
                requests.post(
                    self._url,
                    data=body.encode("utf-8"),
                    headers={"content-type": XML_CONTENT_TYPE},
                    timeout=self._settings.request_timeout,
                )
            ) as resp:
                status_code = resp.status_code
                text = resp.text
        except requests.RequestException as exc:
            raise NetworkError(f"Erreur réseau: {exc}", endpoint=self._url) from exc

        if status_code == _UNPROCESSABLE:
            logger.warning("authenticate | credentials rejected for siret=%s", credentials.siret)
            raise AuthenticationError("Authentification incorrecte", endpoint=self._url)

        if status_code != 200:
            raise NetworkError(
                f"Erreur réseau status : {status_code}",
                status_code=status_code,
                endpoint=self._url,
                detail=text,
            )

        if len(text) < TOKEN_MIN_LENGTH:
            raise ProtocolError(
                f"token too short ({len(text)} chars)",
                endpoint=self._url,
            )

        logger.info("authenticate | token received (%d chars)", len(text))
        return text
