"""Pytest configuration and fixtures for mayorwest tests."""

import subprocess
from pathlib import Path

import pytest
from click.testing import CliRunner

from mayorwest.templates import RenderOptions, default_registry


@pytest.fixture
def cli_runner():
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def options():
    return RenderOptions(owner="octo", repo="app")


@pytest.fixture
def git_repo(tmp_path: Path, monkeypatch) -> Path:
    """A real git repository whose origin points at github.com/octo/app.

    The working directory is changed to the repository for the test.
    """
    repo = tmp_path / "app"
    repo.mkdir()
    for args in (
        ["init", "-q", "-b", "main"],
        ["config", "user.email", "test@example.com"],
        ["config", "user.name", "Test"],
        ["remote", "add", "origin", "https://github.com/octo/app.git"],
    ):
        subprocess.run(["git", *args], cwd=repo, check=True, capture_output=True)
    monkeypatch.chdir(repo)
    return repo
