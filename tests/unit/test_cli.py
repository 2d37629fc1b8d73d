"""Unit tests for the command line interface"""

import pytest
from typer.testing import CliRunner

from jobfeed.cli import app

runner = CliRunner()


@pytest.mark.unit
class TestSourcesCommand:
    """Tests for the sources listing"""

    def test_lists_configured_sources(self):
        result = runner.invoke(app, ["sources"])

        assert result.exit_code == 0
        assert "Stripe" in result.output
        assert "Tier 1 companies" in result.output

    def test_filters_by_tier(self):
        result = runner.invoke(app, ["sources", "--tier", "3"])

        assert result.exit_code == 0
        assert "Revolut" in result.output
        assert "Stripe" not in result.output
