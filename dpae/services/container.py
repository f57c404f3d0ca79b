"""
services/container.py
──────────────────────────────────────────────────────────────────────────────
Dependency Injection container.

THIS IS THE ONLY FILE THAT NAMES CONCRETE ADAPTER CLASSES.

Endpoints, timeouts and the polling budget come from Settings (environment
variables / .env), so pointing at another URSSAF environment needs no code
change.

@lru_cache(maxsize=1) makes get_pipeline() return the same instance across
calls.  The pipeline holds no per-declaration state: everything received
lives on the DeclarationSession passed to it.
"""
from __future__ import annotations

import logging
import time
from functools import lru_cache
from typing import Callable

from dpae.adapters.authenticator import UrssafAuthenticator
from dpae.adapters.consultation import UrssafConsultationAdapter
from dpae.adapters.transmitter import UrssafTransmitter
from dpae.config.settings import Settings, get_settings
from dpae.services.declaration import DeclarationPipeline
from dpae.services.poller import ResultPoller
from dpae.services.renderer import DocumentRenderer

logger = logging.getLogger(__name__)


def build_pipeline(
    settings: Settings,
    sleep: Callable[[float], None] = time.sleep,
) -> DeclarationPipeline:
    """Wire the URSSAF adapters around the given settings.

    ``sleep`` is the poller's wait between attempts.
    """
    renderer = DocumentRenderer()

    authenticator = UrssafAuthenticator(settings, renderer=renderer)
    transmitter   = UrssafTransmitter(settings, renderer=renderer)
    poller        = ResultPoller(UrssafConsultationAdapter(settings), settings, sleep=sleep)

    logger.info(
        "DeclarationPipeline ready | depot=%s max_attempts=%d",
        settings.url_depot,
        settings.poll_max_attempts,
    )
    return DeclarationPipeline(
        authenticator=authenticator,
        transmitter=transmitter,
        poller=poller,
        settings=settings,
    )


@lru_cache(maxsize=1)
def get_pipeline() -> DeclarationPipeline:
    """Build and return the fully wired DeclarationPipeline singleton."""
    return build_pipeline(get_settings())
