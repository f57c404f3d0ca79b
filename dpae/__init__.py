"""
DPAE Submission Client — Production Package
============================================
Submits a pre-hire declaration (DPAE) to the URSSAF web service and polls
for the compliance certificate.  Hexagonal (Ports & Adapters) architecture.

Layer map
─────────────────────────────────────────────────────
  config/       Tuneable settings & XML document templates
  domain/       Pure business objects (models, exceptions, parsing) — no I/O
  ports/        Abstract interfaces (Python Protocols)
  adapters/     Concrete HTTP implementations of each Port (URSSAF endpoints)
  services/     Rendering, polling and orchestration; depends only on Ports
  interfaces/   Delivery layer: CLI
  tests/        Full test suite: unit / integration / e2e

Protocol, in order:
  1. authenticate  → session token
  2. send          → flow id (idflux)
  3. poll          → compliance certificate, or rejection message
"""
__version__ = "1.0.0"
