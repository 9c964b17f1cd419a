"""
Tests for the TraceMap command line interface.
"""

import pytest
from typer.testing import CliRunner

from tracemap.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def keep_default_logging(monkeypatch: pytest.MonkeyPatch):
    """Leave structlog unconfigured so later tests can still capture logs."""
    monkeypatch.setattr("tracemap.core.logging.setup_logging", lambda *args, **kwargs: None)


class TestCli:
    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "TraceMap" in result.output

    def test_analyze_json(self):
        result = runner.invoke(app, ["analyze", "admin@example.com", "--no-ai", "--json"])

        assert result.exit_code == 0
        assert '"risk_level": "HIGH"' in result.output
        assert "Analyzing digital footprints..." in result.output

    def test_analyze_table(self):
        result = runner.invoke(app, ["analyze", "admin@example.com", "--no-ai"])

        assert result.exit_code == 0
        assert "HIGH" in result.output
        assert "Significant Public Footprint" in result.output

    def test_analyze_rejects_missing_at(self):
        result = runner.invoke(app, ["analyze", "admin", "--no-ai"])

        assert result.exit_code == 1
        assert "Valid Gmail ID required" in result.output

    def test_analyze_unauthorized(self):
        result = runner.invoke(app, ["analyze", "admin@example.com", "--no-authorized"])

        assert result.exit_code == 1
        assert "Authorization required" in result.output

    def test_module(self):
        result = runner.invoke(app, ["module", "location", "default", "--no-ai", "--json"])

        assert result.exit_code == 0
        assert '"risk_score": 1.7' in result.output

    def test_unknown_module(self):
        result = runner.invoke(app, ["module", "audio", "x", "--no-ai"])

        assert result.exit_code == 1
        assert "Unknown module" in result.output

    def test_config(self):
        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "AI provider" in result.output
