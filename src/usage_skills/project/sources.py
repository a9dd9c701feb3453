"""Dependency sources -- adapters that list a project's direct dependencies.

Every source implements :class:`DependencySource` and returns
:class:`~usage_skills.models.Dependency` records whose paths are relative to
the project root. The enumerator in :mod:`usage_skills.skills.discovery`
aggregates any number of sources, so each adapter only has to describe one
kind of project layout:

* :class:`MixProjectSource` -- the dependencies declared in a single
  ``mix.exs``, resolved against that project's deps directory.
* :class:`UmbrellaProjectSource` -- the union over every sub-project of an
  umbrella (``apps_path``) project.
* :class:`VendoredDepsSource` -- packages found by listing
  ``deps/*/usage-rules.md``, for projects without a manifest or when
  undeclared dependencies should be included.

:func:`default_sources` picks the sources for a project directory.
"""

from __future__ import annotations

import logging
import posixpath
from abc import ABC, abstractmethod
from typing import Optional

from usage_skills.models import DEFAULT_DEPS_DIR, Dependency, GlobalConfig, MixManifest
from usage_skills.project.manifest import MANIFEST_FILENAME, load_manifest
from usage_skills.workspace import FileSource, join_path

logger = logging.getLogger(__name__)

USAGE_RULES_FILENAME = "usage-rules.md"
"""Name of the documentation file a package ships to describe its usage."""


class DependencySource(ABC):
    """Base class for adapters that list a project's direct dependencies.

    Implementations never fail because a dependency cannot be located: such a
    dependency is returned with an empty ``path`` and filtered out later.
    """

    @property
    def name(self) -> str:
        """Short label used in debug logging."""
        return type(self).__name__

    @abstractmethod
    def list_dependencies(self) -> list[Dependency]:
        """Return the dependencies this source knows about.

        Returns:
            Dependencies in a stable order, unique by name.
        """
        ...


class MixProjectSource(DependencySource):
    """Dependencies declared in one ``mix.exs`` manifest.

    Registry and git dependencies resolve to ``<deps_path>/<name>`` when that
    directory has been fetched. ``path:`` dependencies resolve to their
    declared path and ``in_umbrella`` dependencies to the sibling app
    directory. Everything is expressed relative to the root of *files*.

    Args:
        files: File source rooted at the top-level project.
        project_dir: Directory of this project relative to the source root
            (``""`` for the top-level project, ``"apps/web"`` for an umbrella
            child).
        deps_dir: Deps directory used when the manifest does not set
            ``deps_path``. Relative to the source root.
    """

    def __init__(
        self,
        files: FileSource,
        project_dir: str = "",
        deps_dir: str = DEFAULT_DEPS_DIR,
    ) -> None:
        self._files = files
        self._project_dir = project_dir
        self._deps_dir = deps_dir
        self._manifest: Optional[MixManifest] = None
        self._loaded = False

    @property
    def project_dir(self) -> str:
        """Directory of this project relative to the source root."""
        return self._project_dir

    @property
    def manifest(self) -> Optional[MixManifest]:
        """The parsed manifest, loaded on first access (``None`` if absent)."""
        if not self._loaded:
            self._manifest = load_manifest(self._files, self._project_dir)
            self._loaded = True
        return self._manifest

    def deps_dir(self) -> str:
        """The deps directory this project fetches into, relative to the source root."""
        manifest = self.manifest
        if manifest is not None and manifest.deps_path:
            return join_path(self._project_dir, manifest.deps_path)
        return join_path(self._deps_dir)

    def declared_names(self) -> list[str]:
        """Names of the dependencies declared in the manifest."""
        manifest = self.manifest
        return [dep.name for dep in manifest.deps] if manifest else []

    def dependency_paths(self) -> dict[str, str]:
        """Map every locatable dependency name to its directory.

        This covers everything fetched into the deps directory (including
        transitive dependencies) plus the manifest's path and umbrella
        dependencies, which live outside it.
        """
        deps_dir = self.deps_dir()
        paths = {
            entry: join_path(deps_dir, entry)
            for entry in self._files.list_dir(deps_dir)
            if not entry.startswith(".")
        }
        manifest = self.manifest
        if manifest is not None:
            for dep in manifest.deps:
                if dep.path is not None:
                    paths[dep.name] = join_path(self._project_dir, dep.path)
                elif dep.in_umbrella:
                    paths[dep.name] = join_path(self._project_dir, "..", dep.name)
        return paths

    def list_dependencies(self) -> list[Dependency]:
        declared = self.declared_names()
        paths = self.dependency_paths()
        deps = [Dependency(name=name, path=paths.get(name, "")) for name in declared]
        logger.debug(
            "%s %r declares %d dependencies",
            self.name,
            self._project_dir or ".",
            len(deps),
        )
        return deps


class UmbrellaProjectSource(DependencySource):
    """Dependencies of every sub-project of an umbrella project.

    Sub-projects are the directories under the top-level manifest's
    ``apps_path`` that contain their own ``mix.exs``. Declared names are
    unioned across sub-projects and then resolved, so a dependency declared
    by several apps appears once. Returns nothing for a project that is not
    an umbrella.

    Args:
        files: File source rooted at the umbrella project.
        deps_dir: Fallback deps directory, relative to the source root.
    """

    def __init__(self, files: FileSource, deps_dir: str = DEFAULT_DEPS_DIR) -> None:
        self._files = files
        self._deps_dir = deps_dir

    def projects(self) -> list[MixProjectSource]:
        """One :class:`MixProjectSource` per umbrella child, sorted by directory."""
        manifest = load_manifest(self._files)
        if manifest is None or manifest.apps_path is None:
            return []
        apps_dir = join_path(manifest.apps_path)
        return [
            MixProjectSource(self._files, join_path(apps_dir, app), self._deps_dir)
            for app in self._files.list_dir(apps_dir)
            if self._files.is_file(join_path(apps_dir, app, MANIFEST_FILENAME))
        ]

    def list_dependencies(self) -> list[Dependency]:
        declared: list[str] = []
        paths: dict[str, str] = {}
        for project in self.projects():
            for name in project.declared_names():
                if name not in declared:
                    declared.append(name)
            for name, path in project.dependency_paths().items():
                paths.setdefault(name, path)
        logger.debug("%s found %d distinct dependencies", self.name, len(declared))
        return [Dependency(name=name, path=paths.get(name, "")) for name in declared]


class VendoredDepsSource(DependencySource):
    """Packages whose usage-rules file is present under the deps directory.

    Lists ``<deps_dir>/*/usage-rules.md`` and synthesises one dependency per
    match, named after the directory. Works against any
    :class:`~usage_skills.workspace.FileSource`, including an in-memory one.

    Args:
        files: File source rooted at the project.
        deps_dir: Deps directory relative to the source root.
    """

    def __init__(self, files: FileSource, deps_dir: str = DEFAULT_DEPS_DIR) -> None:
        self._files = files
        self._deps_dir = deps_dir

    def list_dependencies(self) -> list[Dependency]:
        deps_dir = join_path(self._deps_dir)
        pattern = join_path(deps_dir, "*", USAGE_RULES_FILENAME)
        deps = []
        for match in self._files.glob(pattern):
            name = posixpath.basename(posixpath.dirname(match))
            deps.append(Dependency(name=name, path=join_path(deps_dir, name)))
        logger.debug("%s matched %d files for %s", self.name, len(deps), pattern)
        return deps


def default_sources(
    files: FileSource, config: Optional[GlobalConfig] = None
) -> list[DependencySource]:
    """Choose the dependency sources for the project at the root of *files*.

    * With a ``mix.exs``: the top-level project, plus its umbrella children
      when it declares ``apps_path``.
    * Without one, or when ``scan_deps_dir`` is enabled: the vendored deps
      listing.

    Args:
        files: File source rooted at the project.
        config: Effective configuration (defaults when ``None``).

    Raises:
        ProjectError: If the manifest exists but cannot be read.
    """
    config = config or GlobalConfig()
    sources: list[DependencySource] = []

    top_level = MixProjectSource(files, deps_dir=config.deps_dir)
    manifest = top_level.manifest
    if manifest is not None:
        sources.append(top_level)
        if manifest.is_umbrella:
            sources.append(UmbrellaProjectSource(files, deps_dir=config.deps_dir))

    if manifest is None or config.scan_deps_dir:
        sources.append(VendoredDepsSource(files, deps_dir=config.deps_dir))

    logger.debug("Dependency sources: %s", ", ".join(s.name for s in sources))
    return sources
