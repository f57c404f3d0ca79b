"""
interfaces/cli.py
──────────────────────────────────────────────────────────────────────────────
Command-line interface for the DPAE submission client.

Usage:
  # Submit the declaration described in dpae.json
  python -m dpae.interfaces.cli dpae.json

  # Also print the XML document that was sent
  python -m dpae.interfaces.cli dpae.json --xml      (or -x, -v)

  # Outcome as JSON
  python -m dpae.interfaces.cli dpae.json --json

  # Debug logging
  python -m dpae.interfaces.cli dpae.json --debug

  # Via installed entry-point (pyproject.toml [project.scripts])
  dpae-submit dpae.json

Input file (JSON):
  {"credentials": {...}, "employer": {...}, "employee": {...},
   "contract": {...}, "test_indicator": 1}
  Dates are YYYY-MM-DD, times HH:MM.

Exit codes:
  0 — certificate received
  1 — fatal error (auth, network, protocol, etc.)
  2 — argument or input file error
  3 — declaration rejected (non conforme)
  4 — no verdict within the polling budget
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from dpae.domain.exceptions import DPAEError, ErrorKind
from dpae.domain.models import DeclarationSession, PollOutcome, PollStatus
from dpae.services.container import get_pipeline

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_REJECTED = 3
EXIT_TIMED_OUT = 4

_EXIT_BY_STATUS = {
    PollStatus.CERTIFIED: EXIT_OK,
    PollStatus.REJECTED: EXIT_REJECTED,
    PollStatus.TIMED_OUT: EXIT_TIMED_OUT,
}


# ── Argument parser ────────────────────────────────────────────────────────

def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="dpae-submit",
        description="Submit a DPAE to URSSAF and wait for the compliance certificate.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument(
        "file",
        metavar="FILE",
        type=Path,
        help="JSON file describing the declaration.",
    )
    p.add_argument(
        "--xml", "-x", "-v",
        action="store_true",
        dest="show_xml",
        help="Also print the XML document sent to URSSAF.",
    )
    p.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output the outcome as JSON.",
    )
    p.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging.",
    )
    return p


# ── Input ──────────────────────────────────────────────────────────────────

def load_session(path: Path) -> DeclarationSession:
    """Build a DeclarationSession from a JSON file.

    Without ``test_indicator`` the pipeline uses DPAE_TEST_INDICATOR.

    Raises:
        OSError:         File cannot be read.
        ValidationError: Content does not describe a declaration.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    return DeclarationSession.model_validate(data)


# ── Formatting helpers ─────────────────────────────────────────────────────

def _print_outcome_text(session: DeclarationSession, outcome: PollOutcome) -> None:
    print(session.flow_id, session.certificate, session.rejection_message)
    if outcome.status is PollStatus.TIMED_OUT:
        print(
            f"No answer with idflux {outcome.flow_id} after {outcome.attempts} tries",
            file=sys.stderr,
        )


def _print_outcome_json(session: DeclarationSession, outcome: PollOutcome) -> None:
    print(json.dumps(outcome.to_dict(), indent=2, ensure_ascii=False))


# ── Main logic ─────────────────────────────────────────────────────────────

def run(args: argparse.Namespace) -> int:
    """Submit the declaration described by ``args.file``.

    Returns:
        Exit code (see module docstring).
    """
    try:
        session = load_session(args.file)
    except ValidationError as exc:
        # field errors only: pydantic's message would echo input values
        fields = ", ".join(".".join(map(str, e["loc"])) for e in exc.errors())
        print(f"ERROR: {args.file} is not a valid declaration: {fields}", file=sys.stderr)
        return EXIT_USAGE
    except (OSError, ValueError) as exc:
        print(f"ERROR: cannot load {args.file}: {exc}", file=sys.stderr)
        return EXIT_USAGE

    printer = _print_outcome_json if args.json_output else _print_outcome_text

    try:
        outcome = get_pipeline().submit(session)
    except DPAEError as exc:
        if exc.kind is ErrorKind.INPUT_VALIDATION:
            logger.error("Declaration input rejected: %s", exc)
        else:
            logger.exception("Submission failed for %s", session)
        print(f"Erreur : {exc}", file=sys.stderr)
        return EXIT_ERROR

    printer(session, outcome)
    if args.show_xml:
        print(session.sent_document)
    return _EXIT_BY_STATUS[outcome.status]


def main() -> None:
    """Entry point for the dpae-submit console script."""
    parser = _build_parser()
    args = parser.parse_args()

    log_level = logging.DEBUG if args.debug else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    sys.exit(run(args))


if __name__ == "__main__":
    main()
