"""
Tests for the console front end.
"""

import sys

import pytest
import requests
from matchboard import __version__, app
from matchboard import animation as animation_module

from fakes import FakeResponse, FakeSession


@pytest.fixture
def run_cli(monkeypatch, tmp_path):
    """Run main() with argv against a fake backend."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("MATCHBOARD_LOG_DIR", raising=False)

    def run(argv, *outcomes):
        if outcomes:
            session = FakeSession(*outcomes)
            monkeypatch.setattr(requests, "Session", lambda: session)
        monkeypatch.setattr(sys, "argv", ["matchboard", *argv])
        app.main()

    return run


class TestCli:
    """Test subcommands against a fake backend."""

    def test_version(self, run_cli, capsys):
        run_cli(["--version"])
        assert capsys.readouterr().out.strip() == __version__

    def test_stats(self, run_cli, capsys, example_payload):
        run_cli(["stats"], FakeResponse(200, example_payload))
        out = capsys.readouterr().out

        assert "Freelancers: 1" in out
        assert "Projects: 2" in out
        assert "Success rate: 100.0%" in out
        assert "Poor (<40%): 1" in out

    def test_matches(self, run_cli, capsys, mixed_matches):
        run_cli(["matches"], FakeResponse(200, {"matches": mixed_matches}))
        out = capsys.readouterr().out

        assert "Matched (4):" in out
        assert out.index("Alice <-> Billing") < out.index("Bob <-> Search")
        assert "Unmatched freelancers (0):" in out

    def test_load_failure_exits(self, run_cli, capsys):
        with pytest.raises(SystemExit) as excinfo:
            run_cli(["--retries", "0", "stats"], FakeResponse(500))

        assert excinfo.value.code == 1
        out = capsys.readouterr().out
        assert "Server Status: Error" in out
        assert "Attempted 1 times" in out

    def test_skill_not_found_exits(self, run_cli, capsys):
        with pytest.raises(SystemExit) as excinfo:
            run_cli(["skill", "--name", "cobol"], FakeResponse(200, []))

        assert excinfo.value.code == 2
        assert 'No freelancers found with skill "cobol".' in capsys.readouterr().out

    def test_animate(self, run_cli, example_payload):
        before = animation_module.logger.metrics["animation_steps"]
        run_cli(["animate", "--dwell-ms", "0"], FakeResponse(200, example_payload))
        assert animation_module.logger.metrics["animation_steps"] == before + 1

    def test_negative_retries_rejected(self, run_cli, capsys):
        with pytest.raises(SystemExit) as excinfo:
            run_cli(["--retries", "-1", "stats"])

        assert excinfo.value.code == 2
        assert "must not be negative" in capsys.readouterr().err

    def test_matches_filtered_list(self, run_cli, capsys, mixed_matches):
        run_cli(["matches", "--filter", "matched"], FakeResponse(200, {"matches": mixed_matches}))
        out = capsys.readouterr().out

        assert "Matches (1):" in out
        assert "Alice <-> Billing | score 92 | matched: python, sql | missing: -" in out

    def test_matches_search(self, run_cli, capsys, mixed_matches):
        run_cli(["matches", "--search", "search"], FakeResponse(200, {"matches": mixed_matches}))
        out = capsys.readouterr().out

        assert "Matches (1):" in out
        assert "Bob <-> Search | score 65 | matched: python | missing: java" in out
