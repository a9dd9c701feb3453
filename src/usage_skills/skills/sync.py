"""Generate skill files for a selection of packages.

This module is the core of the sync pipeline. :func:`sync_skills` selects
packages (explicit names, every package with usage rules, or nothing), then
either lists them or stages one ``<output_dir>/<package>/SKILL.md`` per
package on a :class:`~usage_skills.workspace.Workspace`.

Problems with individual packages never abort the batch. A package without a
usage-rules file, or whose file cannot be read, is recorded as a workspace
warning and the next package is processed. Informational messages are
recorded as workspace notices. Nothing is written to disk here; the caller
decides whether to :meth:`~usage_skills.workspace.Workspace.apply`.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from usage_skills.models import DEFAULT_DEPS_DIR, DEFAULT_OUTPUT_DIR, FileChange, GlobalConfig
from usage_skills.project.sources import USAGE_RULES_FILENAME, DependencySource, default_sources
from usage_skills.skills.discovery import (
    enumerate_dependencies,
    find_packages_with_usage_rules,
    get_package_description,
)
from usage_skills.skills.formatter import format_skill_file
from usage_skills.workspace import Workspace, join_path

logger = logging.getLogger(__name__)

SKILL_FILENAME = "SKILL.md"

NO_PACKAGES_NOTICE = "No packages found with usage-rules.md files"

CREATED_NOTICE_PREFIX = "Created skill for:"

LIST_NOTICE_HEADER = "Packages with usage rules:"


def normalize_package_names(packages: Sequence[str]) -> list[str]:
    """Turn positional arguments into package names.

    Surrounding whitespace is stripped and repeated names are dropped,
    keeping the first occurrence. Names are not validated here;
    :func:`sync_skills` warns about unusable ones per package.
    """
    names: list[str] = []
    for raw in packages:
        name = raw.strip()
        if name not in names:
            names.append(name)
    return names


def is_valid_package_name(name: str) -> bool:
    """Return ``True`` if *name* can be used as a single directory name."""
    return bool(name) and name not in (".", "..") and not any(
        sep in name for sep in ("/", "\\")
    )


def select_packages(
    workspace: Workspace,
    packages: Sequence[str] = (),
    *,
    all_packages: bool = False,
    deps_dir: str = DEFAULT_DEPS_DIR,
    sources: Optional[Sequence[DependencySource]] = None,
) -> list[str]:
    """Decide which packages a sync should process.

    Precedence: explicit *packages* (used as given, *all_packages* is
    ignored), then every dependency with usage rules when *all_packages* is
    set, otherwise nothing.

    Args:
        workspace: Workspace over the project.
        packages: Explicit package names.
        all_packages: Discover every package with usage rules.
        deps_dir: Deps directory used by the default sources.
        sources: Dependency sources for discovery. Defaults to
            :func:`~usage_skills.project.sources.default_sources`.

    Returns:
        The selected package names in processing order.
    """
    if packages:
        return normalize_package_names(packages)
    if not all_packages:
        return []
    if sources is None:
        sources = default_sources(workspace.files, GlobalConfig(deps_dir=deps_dir))
    dependencies = enumerate_dependencies(sources)
    logger.debug("Enumerated %d dependencies", len(dependencies))
    return find_packages_with_usage_rules(workspace, dependencies)


def sync_skills(
    workspace: Workspace,
    packages: Sequence[str] = (),
    *,
    all_packages: bool = False,
    list_only: bool = False,
    output_dir: str = DEFAULT_OUTPUT_DIR,
    deps_dir: str = DEFAULT_DEPS_DIR,
    sources: Optional[Sequence[DependencySource]] = None,
) -> list[FileChange]:
    """Select packages and stage a skill file for each of them.

    Args:
        workspace: Workspace over the project. Receives the staged files,
            notices and warnings.
        packages: Explicit package names.
        all_packages: Process every dependency with usage rules.
        list_only: Only record a notice listing the selection.
        output_dir: Directory that receives ``<package>/SKILL.md``.
        deps_dir: Directory holding ``<package>/usage-rules.md``.
        sources: Dependency sources for ``all_packages`` discovery.

    Returns:
        The changes staged by this call, in selection order.

    Raises:
        ProjectError: If discovery needs the project manifest and it cannot
            be read.
    """
    selection = select_packages(
        workspace,
        packages,
        all_packages=all_packages,
        deps_dir=deps_dir,
        sources=sources,
    )

    if list_only:
        if selection:
            lines = "\n".join(f"  - {name}" for name in selection)
            workspace.add_notice(f"{LIST_NOTICE_HEADER}\n{lines}")
        else:
            workspace.add_notice(NO_PACKAGES_NOTICE)
        return []

    if not selection:
        workspace.add_notice(NO_PACKAGES_NOTICE)
        return []

    changes = []
    for package in selection:
        change = _process_package(workspace, package, output_dir, deps_dir)
        if change is not None:
            changes.append(change)
    return changes


def _process_package(
    workspace: Workspace, package: str, output_dir: str, deps_dir: str
) -> Optional[FileChange]:
    """Stage the skill file for one package, recording any problem as a warning."""
    if not is_valid_package_name(package):
        workspace.add_warning(f"Invalid package name: {package!r}")
        return None

    rules_path = join_path(deps_dir, package, USAGE_RULES_FILENAME)

    if not workspace.exists(rules_path):
        workspace.add_warning(f"Package {package} has no {USAGE_RULES_FILENAME} file")
        return None

    try:
        content = workspace.read(rules_path)
    except (OSError, UnicodeDecodeError) as exc:
        workspace.add_warning(f"Failed to read {rules_path}: {_reason(exc)}")
        return None

    description = get_package_description(workspace, package, deps_dir)
    skill_path = skill_path_for(package, output_dir)
    change = workspace.create_or_update(
        skill_path, format_skill_file(package, description, content)
    )
    workspace.add_notice(f"{CREATED_NOTICE_PREFIX} {package}")
    return change


def skill_path_for(package: str, output_dir: str = DEFAULT_OUTPUT_DIR) -> str:
    """Return the project-relative path of *package*'s skill file."""
    return join_path(output_dir, package, SKILL_FILENAME)


def _reason(exc: BaseException) -> str:
    if isinstance(exc, OSError) and exc.strerror:
        return exc.strerror.lower()
    return str(exc)
