import pytest
from click.testing import CliRunner

from html_indent import Indenter


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Provides a reusable Click CLI runner."""
    return CliRunner()


@pytest.fixture()
def indenter() -> Indenter:
    """Provides an engine with the default configuration."""
    return Indenter()
