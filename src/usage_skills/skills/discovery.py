"""Find the dependencies that ship a usage-rules file.

Two stages sit between the project adapters in
:mod:`usage_skills.project.sources` and skill generation:

1. :func:`enumerate_dependencies` merges what every source reports into one
   list, unique by name.
2. :func:`find_packages_with_usage_rules` keeps the dependencies whose
   directory directly contains ``usage-rules.md``.

:func:`get_package_description` looks up the description a package declares
about itself. Skill formatting does not use it, but it is resolved for every
generated skill so callers have it available.
"""

from __future__ import annotations

import logging
import re
import textwrap
from typing import Iterable, Sequence

from usage_skills.models import DEFAULT_DEPS_DIR, Dependency
from usage_skills.project.sources import USAGE_RULES_FILENAME, DependencySource
from usage_skills.workspace import FileSource, Workspace, join_path

logger = logging.getLogger(__name__)

_HEX_DESCRIPTION_RE = re.compile(r'\{<<"description">>,\s*<<"((?:[^"\\]|\\.)*)">>\}', re.S)
_MIX_DESCRIPTION_RE = re.compile(r'\bdescription:\s*"((?:[^"\\]|\\.)*)"', re.S)
_MIX_HEREDOC_DESCRIPTION_RE = re.compile(r'\bdescription:\s*"""\s*\n(.*?)"""', re.S)


def enumerate_dependencies(sources: Iterable[DependencySource]) -> list[Dependency]:
    """Merge the dependencies reported by *sources* into one list.

    Dependencies are unique by name. When several sources report the same
    name, the first one with a non-empty path wins, so a dependency that one
    sub-project could not resolve is still found through another.

    Args:
        sources: Dependency sources to aggregate, in priority order.

    Returns:
        The merged dependencies sorted by name.
    """
    merged: dict[str, Dependency] = {}
    for source in sources:
        for dep in source.list_dependencies():
            current = merged.get(dep.name)
            if current is None or (not current.path and dep.path):
                merged[dep.name] = dep
    return [merged[name] for name in sorted(merged)]


def has_usage_rules(files: FileSource | Workspace, dependency: Dependency) -> bool:
    """Return ``True`` if *dependency* has a usage-rules file in its directory."""
    if not dependency.path:
        return False
    return files.exists(join_path(dependency.path, USAGE_RULES_FILENAME))


def find_packages_with_usage_rules(
    files: FileSource | Workspace,
    dependencies: Sequence[Dependency],
    allow: Sequence[str] = (),
) -> list[str]:
    """Return the names of the dependencies that ship usage rules.

    Args:
        files: File source (or workspace) used for existence checks.
        dependencies: Enumerated dependencies.
        allow: Optional allow-list. When non-empty only these names are
            returned, and they still need a usage-rules file.

    Returns:
        Matching names in the order of *dependencies*.
    """
    allowed = set(allow)
    names = []
    for dep in dependencies:
        if allowed and dep.name not in allowed:
            continue
        if has_usage_rules(files, dep):
            names.append(dep.name)
        else:
            logger.debug("No %s for %s (path %r)", USAGE_RULES_FILENAME, dep.name, dep.path)
    return names


def get_package_description(
    files: FileSource | Workspace,
    package: str,
    deps_dir: str = DEFAULT_DEPS_DIR,
) -> str:
    """Return the description *package* declares about itself.

    Looks at ``hex_metadata.config`` (written when the package is fetched
    from Hex) and then at the package's own ``mix.exs``.

    Returns:
        The description with trailing whitespace removed (heredocs are
        also dedented), or ``""`` when it is unavailable.
    """
    package_dir = join_path(deps_dir, package)

    try:
        metadata = files.read(join_path(package_dir, "hex_metadata.config"))
    except (OSError, UnicodeDecodeError):
        metadata = ""
    match = _HEX_DESCRIPTION_RE.search(metadata)
    if match:
        return _unescape(match.group(1)).rstrip()

    try:
        manifest = files.read(join_path(package_dir, "mix.exs"))
    except (OSError, UnicodeDecodeError):
        return ""
    match = _MIX_HEREDOC_DESCRIPTION_RE.search(manifest)
    if match:
        return _unescape(textwrap.dedent(match.group(1))).strip()
    match = _MIX_DESCRIPTION_RE.search(manifest)
    if match:
        return _unescape(match.group(1)).rstrip()
    return ""


def _unescape(text: str) -> str:
    return re.sub(r"\\(.)", r"\1", text)
