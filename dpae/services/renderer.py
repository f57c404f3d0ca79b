"""
services/renderer.py
──────────────────────────────────────────────────────────────────────────────
Fills the XML templates of config/templates.py from domain objects.

Responsibilities:
  1. Business normalisation of the declaration before rendering
     (health service code, provisional / overseas birth departments).
  2. Rendering with a strict formatter: a missing field raises TemplateError
     instead of leaving a blank in the document.
  3. Credential hygiene: the password is erased from Credentials as soon as
     the authentication document exists, even when rendering fails.
"""
from __future__ import annotations

import logging
import string
from typing import Any, Mapping
from xml.sax.saxutils import escape

from dpae.config.templates import AUTH_TEMPLATE, DECLARATION_TEMPLATE, END_DATE_TEMPLATE
from dpae.domain.exceptions import TemplateError
from dpae.domain.models import Credentials, DeclarationSession
from dpae.domain.sanitizer import sanitize

logger = logging.getLogger(__name__)

HEALTH_SERVICE_CODE = "01"
PROVISIONAL_DEPARTMENT = "00"
FOREIGN_DEPARTMENT = "99"
DEPARTMENT_WIDTH = 2

_XML_QUOTES = {"'": "&#39;", '"': "&#34;"}


class _DocumentFormatter(string.Formatter):
    """str.format with two extra specs: ``xml`` (sanitise) and ``raw``."""

    def get_value(self, key: int | str, args: Any, kwargs: Mapping[str, Any]) -> Any:
        try:
            return super().get_value(key, args, kwargs)
        except (KeyError, IndexError) as exc:
            raise TemplateError(f"template field '{key}' is missing") from exc

    def format_field(self, value: Any, format_spec: str) -> str:
        if format_spec == "xml":
            return sanitize(str(value))
        if format_spec == "raw":
            return str(value)
        rendered = super().format_field(value, format_spec)
        return escape(rendered, _XML_QUOTES)


_formatter = _DocumentFormatter()


def _render(template: str, context: Mapping[str, Any]) -> str:
    return _formatter.vformat(template, (), context)


def _flatten(prefix: str, values: Mapping[str, Any]) -> dict[str, Any]:
    """Prefix keys and drop None so absent values surface as missing fields."""
    return {f"{prefix}_{k}": v for k, v in values.items() if v is not None}


def normalize_declaration(session: DeclarationSession) -> None:
    """Apply URSSAF business rules to the session in place."""
    session.employer.health_service = HEALTH_SERVICE_CODE
    employee = session.employee
    if employee.birth_department == PROVISIONAL_DEPARTMENT:
        employee.birth_department = FOREIGN_DEPARTMENT
    # overseas departments (9xx) are declared as 9x
    if len(employee.birth_department) > DEPARTMENT_WIDTH:
        employee.birth_department = employee.birth_department[:DEPARTMENT_WIDTH]


class DocumentRenderer:
    """Builds the authentication and declaration documents."""

    def render_auth(self, credentials: Credentials) -> str:
        """Render the authentication request, then erase the password.

        Raises:
            TemplateError: If a credential field is absent.
        """
        try:
            context = {
                "siret": credentials.siret,
                "surname": credentials.surname,
                "first_name": credentials.first_name,
                "password": credentials.password.get_secret_value(),
                "service": credentials.service,
            }
            return _render(AUTH_TEMPLATE, _drop_none(context))
        finally:
            credentials.erase_password()

    def render_declaration(self, session: DeclarationSession) -> str:
        """Normalise and render the declaration; keep the text on the session.

        Returns:
            The declaration document (UTF-8 text, before transcoding).

        Raises:
            TemplateError: If a required field is absent.
        """
        normalize_declaration(session)

        employer = session.employer.model_dump()
        employee = session.employee.model_dump()
        contract = session.contract.model_dump()

        context: dict[str, Any] = {
            **_flatten("employer", employer),
            **_flatten("employee", employee),
            **_flatten("contract", contract),
        }
        if session.test_indicator is not None:
            context["test_indicator"] = session.test_indicator
        context["end_date_block"] = (
            _render(END_DATE_TEMPLATE, context) if "contract_end_date" in context else ""
        )

        document = _render(DECLARATION_TEMPLATE, context)
        session.sent_document = document
        logger.debug(
            "render_declaration | %s chars=%d", session, len(document)
        )
        return document


def _drop_none(context: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in context.items() if v is not None}
