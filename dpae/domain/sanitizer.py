"""
domain/sanitizer.py
──────────────────────────────────────────────────────────────────────────────
Free-text field sanitiser for the declaration document.

URSSAF fields are 32 characters wide and the service rejects anything but a
narrow French character set, so free text is cut, filtered, then escaped.
"""
from __future__ import annotations

import re
from xml.sax.saxutils import escape

FIELD_WIDTH = 32

_FORBIDDEN = re.compile(r"[^0-9a-zA-ZéèêëàâäùûüîïôöçÉÈÊËÀÂÄÙÛÜÎÏÔÖÇ'\- ]")

_XML_QUOTES = {"'": "&#39;", '"': "&#34;"}


def sanitize(text: str) -> str:
    """Return ``text`` ready to embed in the declaration document.

    Truncates to 32 characters, replaces each character outside the
    whitelist with one space, then XML-escapes the result.
    """
    text = text[:FIELD_WIDTH]
    text = _FORBIDDEN.sub(" ", text)
    return escape(text, _XML_QUOTES)
