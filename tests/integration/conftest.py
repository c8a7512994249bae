"""Fixtures for integration tests."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from groot.cli.main import app


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def initialized_repo(in_workspace: Path, runner: CliRunner) -> Path:
    """Create a workspace with an initialized Groot repository.

    Returns:
        Path: Path to the workspace root (also the current directory)
    """
    result = runner.invoke(app, ["init"])
    if result.exit_code != 0:
        raise RuntimeError(f"Failed to initialize repo: {result.stdout}")
    return in_workspace
