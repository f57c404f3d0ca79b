"""
adapters/consultation.py
──────────────────────────────────────────────────────────────────────────────
Implements ResultSourcePort against the URSSAF consultation endpoints.

  list_results   GET <url_consultation><flow_id>  → JSON retours.flux[].retour[]
  fetch_document GET <result url>                 → result document text

Both calls carry the DSNLogin token.  Failures are raised, never retried
here: the retry policy belongs to services/poller.py.
"""
from __future__ import annotations

import logging
from contextlib import closing

import requests
from pydantic import ValidationError

from dpae.adapters.headers import dsn_login_headers
from dpae.config.settings import Settings
from dpae.domain.exceptions import NetworkError, ProtocolError
from dpae.domain.models import ConsultationResponse, PollResult

logger = logging.getLogger(__name__)


class UrssafConsultationAdapter:
    """Lists and downloads result documents of a flow.

    Injected into ResultPoller via services/container.py.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._base_url = settings.url_consultation
        logger.debug("UrssafConsultationAdapter ready | url=%s", self._base_url)

    # ── ResultSourcePort implementation ────────────────────────────────────

    def list_results(self, flow_id: str, token: str) -> PollResult:
        url = self._base_url + flow_id
        text = self._get(url, token, flow_id=flow_id)
        try:
            consultation = ConsultationResponse.model_validate_json(text)
        except ValidationError as exc:
            raise ProtocolError(
                f"unmarshal retours failed: {exc.error_count()} error(s)",
                endpoint=url,
                flow_id=flow_id,
                detail=text,
            ) from exc

        urls = consultation.result_urls()
        logger.debug("list_results | flow_id=%s urls=%d", flow_id, len(urls))
        return PollResult(flow_id=flow_id, urls=urls)

    def fetch_document(self, url: str, token: str) -> str:
        return self._get(url, token)

    # ── Private helpers ────────────────────────────────────────────────────

    def _get(self, url: str, token: str, flow_id: str | None = None) -> str:
        try:
            with closing(
                requests.get(
                    url,
                    headers=dsn_login_headers(token),
                    timeout=self._settings.request_timeout,
                )
            ) as resp:
                ok = resp.ok
                status_code = resp.status_code
                text = resp.text
        except requests.RequestException as exc:
            raise NetworkError(f"GET failed: {exc}", endpoint=url, flow_id=flow_id) from exc

        if not ok:
            raise NetworkError(
                f"GET answered HTTP {status_code}",
                status_code=status_code,
                endpoint=url,
                flow_id=flow_id,
                detail=text,
            )
        return text
