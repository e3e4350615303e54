"""Tests for the command-line interface."""

import httpx
import pytest
from click.testing import CliRunner
from rich.console import Console

from pvdash import cli as cli_module
from pvdash.api.client import DashboardClient
from pvdash.cli import cli


@pytest.fixture
def runner(monkeypatch, test_settings, generator):
    """CLI runner whose provider uses an unreachable backend."""

    def offline(request):
        raise httpx.ConnectError("Connection refused", request=request)

    from pvdash import provider as provider_module

    original = provider_module.DataProvider

    def make_provider(settings):
        client = DashboardClient(settings, transport=httpx.MockTransport(offline))
        return original(settings, client=client, generator=generator)

    monkeypatch.setattr(provider_module, "DataProvider", make_provider)
    monkeypatch.setattr(cli_module, "load_settings", lambda config_path=None: test_settings)
    monkeypatch.setattr(cli_module, "console", Console(width=200))
    return CliRunner()


class TestCli:
    """Test CLI commands against the fallback data."""

    def test_installations(self, runner):
        """Test installation table."""
        result = runner.invoke(cli, ["installations"])

        assert result.exit_code == 0, result.output
        assert "inst-001" in result.output
        assert "fallback" in result.output
        assert "Found 3 installation(s)" in result.output

    def test_installations_for_client(self, runner):
        """Test client filter option."""
        result = runner.invoke(cli, ["installations", "--client", "client-002"])

        assert result.exit_code == 0, result.output
        assert "inst-002" in result.output
        assert "Found 1 installation(s)" in result.output

    def test_detail_not_found(self, runner):
        """Test unknown installation exits with status 1."""
        result = runner.invoke(cli, ["detail", "does-not-exist"])

        assert result.exit_code == 1
        assert "Installation not found" in result.output

    def test_report_with_pdf(self, runner, tmp_path):
        """Test report command saves the PDF."""
        target = tmp_path / "report.pdf"
        result = runner.invoke(cli, ["report", "inst-001", "6", "2024", "--pdf", str(target)])

        assert result.exit_code == 0, result.output
        assert "2024-06" in result.output
        assert target.read_bytes().startswith(b"%PDF")

    def test_issues_summary(self, runner):
        """Test issue listing and summary line."""
        result = runner.invoke(cli, ["issues"])

        assert result.exit_code == 0, result.output
        assert "2 active, 1 resolved" in result.output

    def test_compare(self, runner):
        """Test comparison table and fleet line."""
        result = runner.invoke(cli, ["compare", "--period", "yearly"])

        assert result.exit_code == 0, result.output
        assert "160.5 kW installed" in result.output

    def test_invalid_granularity(self, runner):
        """Test click rejects unknown granularity."""
        result = runner.invoke(cli, ["power", "inst-001", "--granularity", "weekly"])
        assert result.exit_code == 2
