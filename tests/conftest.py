"""Shared test fixtures for usage-skills.

Provides reusable fixtures for building sample Mix projects on disk and in
memory, creating isolated config environments, managing output state, and
running CLI commands. These fixtures are automatically discovered by pytest
and available to all test modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from usage_skills.output import OutputManager, configure_logging, reset_output, set_output
from usage_skills.workspace import MemoryFileSource, Workspace


ASH_RULES = "# Ash usage rules\n\nUse `Ash.Resource` for every resource.\n"
PHOENIX_RULES = "# Phoenix LiveView\n\n- Prefer streams for large collections.\n"

SIMPLE_MIX_EXS = """\
defmodule MyApp.MixProject do
  use Mix.Project

  def project do
    [
      app: :my_app,
      version: "0.1.0",
      deps: deps()
    ]
  end

  defp deps do
    [
      {:ash, "~> 3.0"},
      {:phoenix_live_view, "~> 1.0"},
      # {:commented_out, "~> 1.0"},
      {:jason, "~> 1.4"}
    ]
  end
end
"""


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches a reference to sys.stderr at creation time.
    When Typer's CliRunner redirects the streams during a test and the test
    finishes, the cached reference becomes stale ("I/O operation on closed
    file"). Resetting forces a fresh manager to be created on next use.
    The package logger is detached from any verbose handler for the same
    reason.
    """
    yield
    reset_output()
    configure_logging(OutputManager(no_color=True))


# ---------------------------------------------------------------------------
# Project fixtures
# ---------------------------------------------------------------------------


def _write_files(root: Path, files: dict[str, str]) -> None:
    """Write ``{relative_path: content}`` below *root*, creating parent dirs."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8", newline="")


@pytest.fixture
def simple_project_files() -> dict[str, str]:
    """A single-app project: two of three deps ship usage rules."""
    return {
        "mix.exs": SIMPLE_MIX_EXS,
        "deps/ash/usage-rules.md": ASH_RULES,
        "deps/ash/mix.exs": (
            "defmodule Ash.MixProject do\n"
            "  def project do\n"
            "    [app: :ash, description: \"A declarative framework\"]\n"
            "  end\n"
            "end\n"
        ),
        "deps/phoenix_live_view/usage-rules.md": PHOENIX_RULES,
        "deps/jason/mix.exs": "defmodule Jason.MixProject do\nend\n",
    }


@pytest.fixture
def write_project(isolated_config: Path):
    """Return a helper that writes a project into the isolated directory.

    The helper takes ``{relative_path: content}`` and returns the project
    root.
    """

    def _write(files: dict[str, str]) -> Path:
        _write_files(isolated_config, files)
        return isolated_config

    return _write


@pytest.fixture
def memory_workspace(simple_project_files: dict[str, str]) -> Workspace:
    """A workspace over an in-memory copy of the simple project."""
    return Workspace(MemoryFileSource(simple_project_files))


@pytest.fixture
def simple_project(isolated_config: Path, simple_project_files: dict[str, str]) -> Path:
    """The simple project written into the isolated working directory."""
    _write_files(isolated_config, simple_project_files)
    return isolated_config


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    so that tests never touch real user config. Clears all USAGE_SKILLS_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("usage_skills.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / ".xdg" / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / ".xdg" / "data"))

    for var in ["USAGE_SKILLS_OUTPUT_DIR", "USAGE_SKILLS_DEPS_DIR", "NO_COLOR"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, colourless output manager for the duration of a test."""
    output = OutputManager(no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()
