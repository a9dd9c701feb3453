"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for usage-skills:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.usage-skills/`` on macOS and Windows. See :func:`get_config_dir`
  and :func:`get_data_dir`.
* **Global config** -- A single :class:`~usage_skills.models.GlobalConfig`
  JSON file storing defaults (output directory, deps directory).
* **Project config** -- An optional ``.usage-skills.json`` at the project
  root that overrides the global defaults for one repository.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from usage_skills.exceptions import ConfigError
from usage_skills.models import GlobalConfig

_APP_NAME = "usage-skills"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = ".usage-skills.json"

ENV_OUTPUT_DIR = "USAGE_SKILLS_OUTPUT_DIR"
ENV_DEPS_DIR = "USAGE_SKILLS_DEPS_DIR"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform follows the XDG Base Directory layout (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/usage-skills/`` (default
    ``~/.config/usage-skills/``). On macOS/Windows: ``~/.usage-skills/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_CONFIG_HOME", (".config",))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/usage-skills/`` (default
    ``~/.local/share/usage-skills/``). On macOS/Windows:
    ``~/.usage-skills/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_DATA_HOME", (".local", "share"))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On success the temp file is renamed over *path*; on any failure the temp
    file is cleaned up. Parent directories are created as needed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
            errors="surrogateescape",
            newline="",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~usage_skills.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk.

    Args:
        config: The configuration to save.
    """
    data = config.model_dump(mode="json")
    atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config(project_dir: Optional[Path] = None) -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``<project_dir>/.usage-skills.json``.

    Project-local config sits between global config and environment variables
    in the precedence chain. It typically pins ``output_dir`` so that every
    contributor generates skills into the same place.

    Args:
        project_dir: Project root. Defaults to the current working directory.

    Returns:
        The parsed JSON object as a dict, or ``None`` if the file does not
        exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = (project_dir or Path.cwd()) / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def resolve_config(
    cli_output_dir: Optional[str] = None,
    project_dir: Optional[Path] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_output_dir``)
        2. Environment variables (``USAGE_SKILLS_OUTPUT_DIR``,
           ``USAGE_SKILLS_DEPS_DIR``)
        3. Project config (``<project_dir>/.usage-skills.json``)
        4. User config (``~/.config/usage-skills/config.json``)
        5. Defaults

    Returns:
        The effective :class:`~usage_skills.models.GlobalConfig`.

    Raises:
        ConfigError: If any config layer is invalid.
    """
    # 5 + 4. Load base global config (fills in defaults automatically)
    data = load_global_config().model_dump()

    # 3. Layer in project-local config
    project = load_project_config(project_dir)
    if project is not None:
        data.update(project)

    # 2. Environment variables
    env_output_dir = os.environ.get(ENV_OUTPUT_DIR)
    if env_output_dir:
        data["output_dir"] = env_output_dir
    env_deps_dir = os.environ.get(ENV_DEPS_DIR)
    if env_deps_dir:
        data["deps_dir"] = env_deps_dir

    # 1. CLI flag (highest precedence)
    if cli_output_dir is not None:
        data["output_dir"] = cli_output_dir

    try:
        return GlobalConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
