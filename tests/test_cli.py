"""Tests for agrivoice.apps.cli — commands that need no model."""

from __future__ import annotations

import json

import pytest

from agrivoice.apps.cli import build_arg_parser, main


@pytest.fixture
def offline_config(tmp_path, monkeypatch):
    monkeypatch.setenv("AGRIVOICE_CONFIG_DIR", str(tmp_path))
    data_dir = tmp_path / "data"
    (tmp_path / "config.json").write_text(
        json.dumps({"backend": {"kind": "none", "data_dir": str(data_dir)}}),
        encoding="utf-8",
    )
    return data_dir


class TestArgParser:
    def test_route_arguments(self) -> None:
        args = build_arg_parser().parse_args(
            ["--backend", "litellm", "route", "mausam batao", "--language", "hindi", "--json"]
        )
        assert args.subcommand == "route"
        assert args.backend == "litellm"
        assert args.transcript == "mausam batao"
        assert args.language == "hindi"
        assert args.json
        assert not args.ai

    def test_quiet_flag(self) -> None:
        args = build_arg_parser().parse_args(["-q", "features"])
        assert args.quiet
        assert not args.verbose

    def test_verbose_and_quiet_conflict(self) -> None:
        with pytest.raises(SystemExit):
            build_arg_parser().parse_args(["-v", "-q", "features"])

    def test_subcommand_required(self) -> None:
        with pytest.raises(SystemExit):
            build_arg_parser().parse_args([])


class TestCommands:
    def test_features(self, capsys) -> None:
        assert main(["features"]) == 0
        out = capsys.readouterr().out
        assert "diagnose" in out
        assert "weather" in out

    def test_route_json(self, offline_config, capsys) -> None:
        assert main(["route", "will it rain tomorrow", "--json"]) == 0
        decision = json.loads(capsys.readouterr().out)
        assert decision["action"] == "navigate"
        assert decision["targetId"] == "weather"
        assert decision["language"] == "english"

    def test_route_table(self, offline_config, capsys) -> None:
        assert main(["route", "aaj ka mausam", "--language", "hindi"]) == 0
        assert "keywords" in capsys.readouterr().out

    def test_init_without_backend_fails(self, offline_config, capsys) -> None:
        assert main(["init"]) == 1
        assert "keyword mode" in capsys.readouterr().out

    def test_status(self, offline_config, capsys) -> None:
        assert main(["status"]) == 0
        out = capsys.readouterr().out
        assert "none" in out
        assert "keywords" in out

    def test_clear_cache(self, offline_config, capsys) -> None:
        assert main(["clear-cache", "--yes"]) == 0
        assert "cleared" in capsys.readouterr().out
