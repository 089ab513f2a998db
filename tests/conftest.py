"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from buildgate.adapters.mock import MockCommandAdapter
from buildgate.adapters.package_managers import PackageManagerSpec
from buildgate.core.models.stage import Stage


@pytest.fixture
def mock_adapter() -> MockCommandAdapter:
    """A mock adapter with nothing on PATH and every command succeeding."""
    return MockCommandAdapter()


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A book-shaped project tree; the test starts with cwd inside it."""
    root = tmp_path / "book"
    (root / "packages" / "trpl").mkdir(parents=True)
    (root / "packages" / "mdbook-trpl").mkdir(parents=True)
    (root / "ci").mkdir()
    (root / "scripts").mkdir()
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def make_stage():
    """Factory for stages; the command defaults to ``echo <label>``."""

    def _make(label: str, *command: str, directory: str | None = None, **kwargs) -> Stage:
        return Stage(
            label=label,
            command=command or ("echo", label),
            working_directory=directory,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_manager():
    """Factory for sudo-free package managers installing with ``<name> install <pkg>``."""

    def _make(name: str) -> PackageManagerSpec:
        return PackageManagerSpec(
            name=name,
            binary=name,
            label=name,
            install_template=(name, "install", "{package}"),
            needs_sudo=False,
        )

    return _make
