"""File sources and the staged-change workspace.

Everything that touches project files goes through a :class:`FileSource`.
Paths are always POSIX-style strings relative to the project root
(``"deps/ash/usage-rules.md"``), which keeps discovery code independent of
where the project lives and lets tests run entirely in memory:

* :class:`LocalFileSource` -- the real filesystem under a root directory.
* :class:`MemoryFileSource` -- a ``dict`` of path to content.

A :class:`Workspace` layers a set of staged writes over a file source and
collects the notices and warnings produced while a command runs. Nothing is
written to the underlying source until :meth:`Workspace.apply` is called,
which is what makes ``--dry-run`` possible.

Example::

    files = MemoryFileSource({"deps/ash/usage-rules.md": "# Ash"})
    workspace = Workspace(files)
    workspace.create_or_update(".claude/skills/ash/SKILL.md", "...")
    workspace.apply()
"""

from __future__ import annotations

import fnmatch
import logging
import posixpath
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Mapping, Optional

from usage_skills.models import ChangeStatus, FileChange

logger = logging.getLogger(__name__)


def normalize_path(path: str) -> str:
    """Normalise a project-relative path (``./a//b/../c`` becomes ``a/c``)."""
    normalized = posixpath.normpath(path.replace("\\", "/"))
    return "" if normalized == "." else normalized


def join_path(*parts: str) -> str:
    """Join path segments and normalise the result."""
    return normalize_path(posixpath.join(*parts))


class FileSource(ABC):
    """Read/write access to files addressed by project-relative paths.

    Implementations must never raise from :meth:`exists`, :meth:`is_file`,
    :meth:`list_dir` or :meth:`glob`; a path that cannot be inspected is
    reported as absent. :meth:`read` raises :class:`OSError` (usually
    :class:`FileNotFoundError`) when the content is unavailable.
    """

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Return ``True`` if *path* is an existing file or directory."""

    @abstractmethod
    def is_file(self, path: str) -> bool:
        """Return ``True`` if *path* is an existing regular file."""

    @abstractmethod
    def read(self, path: str) -> str:
        """Return the text content of the file at *path*."""

    @abstractmethod
    def write(self, path: str, content: str) -> None:
        """Create or replace the file at *path*, creating parent directories."""

    @abstractmethod
    def list_dir(self, path: str) -> list[str]:
        """Return the sorted names of entries directly inside directory *path*."""

    @abstractmethod
    def glob(self, pattern: str) -> list[str]:
        """Return sorted file paths matching a glob *pattern*.

        ``*`` never crosses a ``/`` boundary, so ``deps/*/usage-rules.md``
        only matches files exactly one directory below ``deps``.
        """


class LocalFileSource(FileSource):
    """A :class:`FileSource` backed by the real filesystem under *root*.

    Args:
        root: Project root directory. Relative paths passed to every method
            are resolved against it.
    """

    def __init__(self, root: Path | str = ".") -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        """The project root directory."""
        return self._root

    def _resolve(self, path: str) -> Path:
        return self._root / normalize_path(path)

    def exists(self, path: str) -> bool:
        try:
            return self._resolve(path).exists()
        except OSError:
            return False

    def is_file(self, path: str) -> bool:
        try:
            return self._resolve(path).is_file()
        except OSError:
            return False

    def read(self, path: str) -> str:
        with open(
            self._resolve(path), encoding="utf-8", errors="surrogateescape", newline=""
        ) as f:
            return f.read()

    def write(self, path: str, content: str) -> None:
        from usage_skills.config import atomic_write

        atomic_write(self._resolve(path), content)

    def list_dir(self, path: str) -> list[str]:
        try:
            return sorted(entry.name for entry in self._resolve(path).iterdir())
        except OSError:
            return []

    def glob(self, pattern: str) -> list[str]:
        base, rest = _split_glob(normalize_path(pattern))
        if not rest:
            return [base] if self.is_file(base) else []
        try:
            found = [p for p in (self._root / base).glob(rest) if p.is_file()]
        except (OSError, ValueError, NotImplementedError):
            return []
        return sorted(self._relative(p) for p in found)

    def _relative(self, path: Path) -> str:
        """Root-relative POSIX path, or the absolute path when outside the root."""
        try:
            return path.relative_to(self._root).as_posix()
        except ValueError:
            return path.as_posix()


class MemoryFileSource(FileSource):
    """A :class:`FileSource` holding files in a dictionary.

    Directories are implied by the file paths. Used by tests and by callers
    that want to preview a sync against synthetic content.

    Args:
        files: Initial mapping of project-relative path to file content.
    """

    def __init__(self, files: Optional[Mapping[str, str]] = None) -> None:
        self._files: dict[str, str] = {
            normalize_path(path): content for path, content in (files or {}).items()
        }

    @property
    def files(self) -> dict[str, str]:
        """A copy of the stored files."""
        return dict(self._files)

    def _is_dir(self, path: str) -> bool:
        prefix = f"{path}/" if path else ""
        return any(name.startswith(prefix) for name in self._files)

    def exists(self, path: str) -> bool:
        path = normalize_path(path)
        return path in self._files or self._is_dir(path)

    def is_file(self, path: str) -> bool:
        return normalize_path(path) in self._files

    def read(self, path: str) -> str:
        path = normalize_path(path)
        try:
            return self._files[path]
        except KeyError:
            raise FileNotFoundError(f"No such file: '{path}'") from None

    def write(self, path: str, content: str) -> None:
        self._files[normalize_path(path)] = content

    def list_dir(self, path: str) -> list[str]:
        path = normalize_path(path)
        prefix = f"{path}/" if path else ""
        entries = {
            name[len(prefix):].split("/", 1)[0]
            for name in self._files
            if name.startswith(prefix)
        }
        return sorted(entries)

    def glob(self, pattern: str) -> list[str]:
        pattern_parts = normalize_path(pattern).split("/")
        return sorted(
            name
            for name in self._files
            if _match_parts(name.split("/"), pattern_parts)
        )


def _split_glob(pattern: str) -> tuple[str, str]:
    """Split *pattern* into its literal directory prefix and the wildcard rest."""
    parts = pattern.split("/")
    for index, part in enumerate(parts):
        if any(ch in part for ch in "*?["):
            return "/".join(parts[:index]), "/".join(parts[index:])
    return pattern, ""


def _match_parts(parts: list[str], pattern_parts: list[str]) -> bool:
    """Segment-wise glob match so that ``*`` stays within one path segment."""
    if len(parts) != len(pattern_parts):
        return False
    return all(fnmatch.fnmatchcase(p, pat) for p, pat in zip(parts, pattern_parts))


class Workspace:
    """Staged writes, notices and warnings layered over a :class:`FileSource`.

    Reads prefer content staged earlier in the same run and fall back to the
    underlying source. Writes are recorded as :class:`FileChange` entries and
    only reach the source when :meth:`apply` is called.

    Args:
        files: The underlying file source.
    """

    def __init__(self, files: FileSource) -> None:
        self._files = files
        self._staged: dict[str, FileChange] = {}
        self.notices: list[str] = []
        self.warnings: list[str] = []

    @property
    def files(self) -> FileSource:
        """The underlying file source."""
        return self._files

    @property
    def changes(self) -> list[FileChange]:
        """Staged changes in the order they were first staged."""
        return list(self._staged.values())

    # ------------------------------------------------------------------ #
    # Reading
    # ------------------------------------------------------------------ #

    def exists(self, path: str) -> bool:
        """Return ``True`` if *path* is staged or exists in the source."""
        path = normalize_path(path)
        return path in self._staged or self._files.exists(path)

    def is_staged(self, path: str) -> bool:
        """Return ``True`` if a write to *path* was staged in this run."""
        return normalize_path(path) in self._staged

    def read(self, path: str) -> str:
        """Return staged content for *path*, or the source's content.

        Raises:
            OSError: If the file is neither staged nor readable from the
                underlying source.
        """
        path = normalize_path(path)
        staged = self._staged.get(path)
        if staged is not None:
            return staged.content
        return self._files.read(path)

    # ------------------------------------------------------------------ #
    # Writing
    # ------------------------------------------------------------------ #

    def create_or_update(self, path: str, content: str) -> FileChange:
        """Stage *content* for *path*, creating or replacing the file.

        The change status compares against the current content (staged or on
        the source): ``created`` when the file does not exist yet,
        ``unchanged`` when the content is identical, ``updated`` otherwise.
        Staging the same path twice keeps the first status unless the file
        has since become unchanged.

        Returns:
            The staged :class:`FileChange`.
        """
        path = normalize_path(path)
        previous = self._staged.get(path)
        if previous is not None and previous.status == ChangeStatus.CREATED:
            status = ChangeStatus.CREATED
        elif self._files.is_file(path):
            try:
                current: Optional[str] = self._files.read(path)
            except OSError:
                current = None
            status = ChangeStatus.UNCHANGED if current == content else ChangeStatus.UPDATED
        else:
            status = ChangeStatus.CREATED

        change = FileChange(path=path, status=status, content=content)
        self._staged[path] = change
        logger.debug("Staged %s (%s)", path, status.value)
        return change

    def apply(self) -> list[FileChange]:
        """Write every staged change that differs from the source.

        A change that cannot be written is recorded as a warning and the
        remaining changes are still written.

        Returns:
            The changes that were written (``unchanged`` and failed entries
            are skipped).
        """
        written: list[FileChange] = []
        for change in self._staged.values():
            if change.status == ChangeStatus.UNCHANGED:
                continue
            try:
                self._files.write(change.path, change.content)
            except OSError as exc:
                self.add_warning(f"Failed to write {change.path}: {exc.strerror or exc}")
                continue
            written.append(change)
            logger.debug("Wrote %s", change.path)
        return written

    # ------------------------------------------------------------------ #
    # Messages
    # ------------------------------------------------------------------ #

    def add_notice(self, message: str) -> None:
        """Record an informational message for the user."""
        self.notices.append(message)

    def add_warning(self, message: str) -> None:
        """Record a non-fatal problem for the user."""
        self.warnings.append(message)

