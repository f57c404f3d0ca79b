"""
tests/unit/test_cli.py
──────────────────────────────────────────────────────────────────────────────
Unit tests for the dpae-submit command line.

get_pipeline() is patched to return the mock-wired pipeline from conftest.py.
"""
from __future__ import annotations

import argparse
import json
from unittest.mock import patch

import pytest

from dpae.domain.exceptions import AuthenticationError
from dpae.interfaces.cli import (
    EXIT_ERROR,
    EXIT_OK,
    EXIT_REJECTED,
    EXIT_TIMED_OUT,
    EXIT_USAGE,
    _build_parser,
    load_session,
    run,
)
from dpae.services.declaration import DeclarationPipeline
from dpae.services.poller import ResultPoller
from dpae.tests.conftest import (
    CERTIFICATE,
    DPAE_URL,
    FLOW_ID,
    SESSION_DATA,
    FakeResultSource,
    rejected_document,
)


@pytest.fixture
def input_file(tmp_path):
    path = tmp_path / "dpae.json"
    path.write_text(json.dumps(SESSION_DATA), encoding="utf-8")
    return path


def _args(path, **kwargs) -> argparse.Namespace:
    defaults = {"file": path, "show_xml": False, "json_output": False, "debug": False}
    defaults.update(kwargs)
    return argparse.Namespace(**defaults)


def _run_with(pipeline, args) -> int:
    with patch("dpae.interfaces.cli.get_pipeline", return_value=pipeline):
        return run(args)


class TestLoadSession:
    def test_loads_declaration(self, input_file):
        session = load_session(input_file)
        assert session.employee.surname == "Martin"
        assert session.credentials.password.get_secret_value() == "s3cr3t-pa55"

    def test_missing_test_indicator_left_unset(self, tmp_path):
        data = {k: v for k, v in SESSION_DATA.items() if k != "test_indicator"}
        path = tmp_path / "dpae.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        assert load_session(path).test_indicator is None


class TestParser:
    @pytest.mark.parametrize("flag", ["--xml", "-x", "-v"])
    def test_xml_flags(self, flag):
        args = _build_parser().parse_args(["dpae.json", flag])
        assert args.show_xml
        assert not args.debug

    def test_debug_flag(self):
        args = _build_parser().parse_args(["dpae.json", "--debug"])
        assert args.debug
        assert not args.show_xml


class TestRun:
    def test_certified(self, pipeline, input_file, capsys):
        assert _run_with(pipeline, _args(input_file)) == EXIT_OK
        out = capsys.readouterr().out
        assert FLOW_ID in out
        assert CERTIFICATE in out

    def test_show_xml(self, pipeline, input_file, capsys):
        _run_with(pipeline, _args(input_file, show_xml=True))
        assert "<FR_DUE_Upload>" in capsys.readouterr().out

    def test_json_output(self, pipeline, input_file, capsys):
        _run_with(pipeline, _args(input_file, json_output=True))
        payload = json.loads(capsys.readouterr().out)
        assert payload["status"] == "certified"
        assert payload["certificate"] == CERTIFICATE

    def test_rejected(self, mock_auth, mock_submitter, settings, sleeper, input_file, capsys):
        source = FakeResultSource(
            listings=[[DPAE_URL]],
            documents={DPAE_URL: rejected_document("Code URSSAF invalide")},
        )
        pipeline = DeclarationPipeline(
            mock_auth, mock_submitter, ResultPoller(source, settings, sleep=sleeper), settings
        )
        assert _run_with(pipeline, _args(input_file)) == EXIT_REJECTED
        assert "Code URSSAF invalide" in capsys.readouterr().out

    def test_timed_out(self, mock_auth, mock_submitter, settings, sleeper, input_file, capsys):
        pipeline = DeclarationPipeline(
            mock_auth, mock_submitter,
            ResultPoller(FakeResultSource(), settings, sleep=sleeper), settings,
        )
        assert _run_with(pipeline, _args(input_file)) == EXIT_TIMED_OUT
        assert "No answer with idflux" in capsys.readouterr().err

    def test_fatal_error(self, pipeline, input_file, capsys):
        with patch.object(pipeline, "submit", side_effect=AuthenticationError("Authentification incorrecte")):
            assert _run_with(pipeline, _args(input_file)) == EXIT_ERROR
        assert "Authentification incorrecte" in capsys.readouterr().err

    def test_missing_file(self, pipeline, tmp_path, capsys):
        assert _run_with(pipeline, _args(tmp_path / "absent.json")) == EXIT_USAGE

    def test_invalid_json(self, pipeline, tmp_path):
        path = tmp_path / "dpae.json"
        path.write_text("{not json", encoding="utf-8")
        assert _run_with(pipeline, _args(path)) == EXIT_USAGE

    def test_invalid_declaration_never_echoes_password(self, pipeline, tmp_path, capsys):
        data = json.loads(json.dumps(SESSION_DATA))
        data["employee"]["birth_date"] = "not a date"
        path = tmp_path / "dpae.json"
        path.write_text(json.dumps(data), encoding="utf-8")

        assert _run_with(pipeline, _args(path)) == EXIT_USAGE
        err = capsys.readouterr().err
        assert "employee.birth_date" in err
        assert "s3cr3t-pa55" not in err
