"""Canonical Pydantic models shared across all usage-skills modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into two groups:

**Configuration models** -- serialised as JSON in the user's config directory
or in a project-local ``.usage-skills.json``:
    :class:`GlobalConfig`.

**Discovery and sync models** -- produced while enumerating dependencies and
staging skill files:
    :class:`Dependency`, :class:`DeclaredDependency`, :class:`MixManifest`,
    :class:`ChangeStatus`, and :class:`FileChange`.

All models use Pydantic v2.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_OUTPUT_DIR = ".claude/skills"
"""Directory (relative to the project root) that receives generated skills."""

DEFAULT_DEPS_DIR = "deps"
"""Directory (relative to the project root) holding fetched dependencies."""


# --- Configuration ---


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/usage-skills/config.json``.

    Loaded and saved by :func:`~usage_skills.config.load_global_config` and
    :func:`~usage_skills.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~usage_skills.config.resolve_config`
    for the full precedence chain.
    """

    output_dir: str = Field(
        default=DEFAULT_OUTPUT_DIR,
        description="Directory where SKILL.md files are written",
    )
    deps_dir: str = Field(
        default=DEFAULT_DEPS_DIR,
        description="Directory containing fetched dependencies",
    )
    scan_deps_dir: bool = Field(
        default=False,
        description="Also include packages found in the deps directory that "
        "the manifest does not declare",
    )


# --- Discovery ---


class Dependency(BaseModel):
    """A direct dependency of the host project.

    ``path`` is relative to the project root and points at the directory the
    dependency was fetched into. It is empty when the dependency could not be
    resolved on disk, in which case it is never considered to have usage
    rules.

    Example::

        Dependency(name="phoenix_live_view", path="deps/phoenix_live_view")
    """

    model_config = ConfigDict(frozen=True)

    name: str
    path: str = ""


# --- Staged changes ---


class ChangeStatus(str, enum.Enum):
    """Outcome of staging a write against the current file contents."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


class FileChange(BaseModel):
    """A single file write staged on a :class:`~usage_skills.workspace.Workspace`."""

    path: str
    status: ChangeStatus
    content: str = Field(repr=False)


# --- Project manifests ---


class DeclaredDependency(BaseModel):
    """A dependency tuple as written in a ``mix.exs`` deps list.

    Only the parts that matter for locating the dependency on disk are kept:
    an explicit ``path:`` option, or ``in_umbrella: true`` for sibling apps.
    """

    name: str
    path: Optional[str] = None
    in_umbrella: bool = False


class MixManifest(BaseModel):
    """The subset of a ``mix.exs`` project definition used for discovery.

    Produced by :func:`~usage_skills.project.manifest.parse_manifest`.
    ``deps_path`` and ``apps_path`` are relative to the directory holding the
    manifest and are ``None`` when the project does not set them.
    """

    app: Optional[str] = None
    deps: list[DeclaredDependency] = Field(default_factory=list)
    deps_path: Optional[str] = None
    apps_path: Optional[str] = None

    @property
    def is_umbrella(self) -> bool:
        """Whether the project aggregates sub-projects under ``apps_path``."""
        return self.apps_path is not None
