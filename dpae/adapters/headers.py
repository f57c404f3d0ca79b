"""
adapters/headers.py
──────────────────────────────────────────────────────────────────────────────
HTTP headers shared by the URSSAF adapters.
"""
from __future__ import annotations

XML_CONTENT_TYPE = "application/xml"


def dsn_login_headers(token: str) -> dict[str, str]:
    """Authorization header for every request made after authentication."""
    return {"Authorization": f"DSNLogin jeton={token}"}
