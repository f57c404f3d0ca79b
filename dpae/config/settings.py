"""
config/settings.py
──────────────────────────────────────────────────────────────────────────────
Single source of truth for all tuneable parameters.

All values can be overridden via environment variables or a .env file placed
at the project root.  The frozen dataclass ensures settings are never mutated
at runtime; tests build their own Settings(...) instead of patching globals.

To point at another URSSAF environment, change the relevant env var:
  DPAE_URL_AUTH          → authentication endpoint
  DPAE_URL_DEPOT         → submission endpoint
  DPAE_URL_CONSULTATION  → result listing endpoint (flow id is appended)
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root (two levels up from this file)
load_dotenv(Path(__file__).parent.parent.parent / ".env")


def _env(key: str, default: str) -> str:
    return os.getenv(key, default)


def _env_int(key: str, default: int) -> int:
    return int(os.getenv(key, str(default)))


def _env_float(key: str, default: float) -> float:
    return float(os.getenv(key, str(default)))


@dataclass(frozen=True)
class Settings:
    """Immutable application settings loaded from environment variables."""

    # ── URSSAF endpoints ───────────────────────────────────────────────────
    url_auth: str = field(
        default_factory=lambda: _env(
            "DPAE_URL_AUTH", "https://mon.urssaf.fr/authentifier_dpae"
        )
    )
    url_depot: str = field(
        default_factory=lambda: _env(
            "DPAE_URL_DEPOT", "https://depot.dpae-edi.urssaf.fr/deposer-dsn/1.0/"
        )
    )
    url_consultation: str = field(
        default_factory=lambda: _env(
            "DPAE_URL_CONSULTATION",
            "https://consultation.dpae-edi.urssaf.fr/lister-retours-flux/2.0/",
        )
    )

    # ── HTTP timeouts (seconds) ────────────────────────────────────────────
    request_timeout: float = field(
        default_factory=lambda: _env_float("DPAE_REQUEST_TIMEOUT", 60.0)
    )

    # ── Result polling ─────────────────────────────────────────────────────
    # poll_first_delay before the first attempt, poll_delay before each later one
    poll_first_delay: float = field(
        default_factory=lambda: _env_float("DPAE_POLL_FIRST_DELAY", 1.0)
    )
    poll_delay: float = field(
        default_factory=lambda: _env_float("DPAE_POLL_DELAY", 10.0)
    )
    poll_max_attempts: int = field(
        default_factory=lambda: _env_int("DPAE_POLL_MAX_ATTEMPTS", 60)
    )

    # ── Declaration ────────────────────────────────────────────────────────
    # 1 = test submission, 120 = real declaration
    test_indicator: int = field(
        default_factory=lambda: _env_int("DPAE_TEST_INDICATOR", 1)
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Returns a cached singleton Settings instance.

    Use this everywhere instead of instantiating Settings() directly —
    it guarantees a single object is shared across the entire process.
    """
    return Settings()
