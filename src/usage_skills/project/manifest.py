"""Read the dependency declarations of a Mix project manifest (``mix.exs``).

``mix.exs`` is Elixir source, so this is not a general parser. It recognises
the shapes that project definitions use in practice:

* a ``deps: [...]`` keyword entry, or ``deps: deps()`` pointing at a
  ``defp deps do [...] end`` function;
* dependency tuples ``{:name, ...}`` whose options may include
  ``path: "..."`` or ``in_umbrella: true``;
* the ``deps_path:``, ``apps_path:`` and ``app:`` project options.

The two public functions are:

* :func:`parse_manifest` -- Turn manifest text into a
  :class:`~usage_skills.models.MixManifest`.
* :func:`load_manifest` -- Read and parse the manifest of a project
  directory through a :class:`~usage_skills.workspace.FileSource`.
"""

from __future__ import annotations

import re
from typing import Optional

from usage_skills.exceptions import ProjectError
from usage_skills.models import DeclaredDependency, MixManifest
from usage_skills.workspace import FileSource, join_path

MANIFEST_FILENAME = "mix.exs"

_DEPS_FUNCTION_RE = re.compile(r"\bdefp?\s+deps\s*(?:\(\s*\))?\s*,?\s*do\b")
_DEPS_KEYWORD_RE = re.compile(r"\bdeps:\s*\[")
_DEP_TUPLE_RE = re.compile(r"\{\s*:([a-z_][a-zA-Z0-9_]*)\s*(,[^{}]*)?\}")
_PATH_OPTION_RE = re.compile(r'\bpath:\s*"([^"]*)"')
_IN_UMBRELLA_RE = re.compile(r"\bin_umbrella:\s*true\b")
_APP_RE = re.compile(r"\bapp:\s*:([a-z_][a-zA-Z0-9_]*)")


def _string_option(text: str, key: str) -> Optional[str]:
    match = re.search(rf'\b{key}:\s*"([^"]*)"', text)
    return match.group(1) if match else None


def _strip_comments(text: str) -> str:
    """Remove ``#`` comments while leaving string literals intact."""
    out: list[str] = []
    in_string = False
    i = 0
    while i < len(text):
        char = text[i]
        if in_string:
            out.append(char)
            if char == "\\" and i + 1 < len(text):
                out.append(text[i + 1])
                i += 1
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
            out.append(char)
        elif char == "#":
            while i < len(text) and text[i] != "\n":
                i += 1
            continue
        else:
            out.append(char)
        i += 1
    return "".join(out)


def _balanced_list(text: str, start: int) -> Optional[str]:
    """Return the ``[...]`` literal opening at or after *start*.

    Brackets inside string literals are ignored. Returns ``None`` when no
    list opens there or the list is never closed.
    """
    open_at = text.find("[", start)
    if open_at == -1:
        return None
    depth = 0
    in_string = False
    i = open_at
    while i < len(text):
        char = text[i]
        if in_string:
            if char == "\\":
                i += 1
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return text[open_at : i + 1]
        i += 1
    return None


def _deps_list(text: str) -> str:
    """Locate the deps list literal, preferring the ``deps`` function body."""
    function = _DEPS_FUNCTION_RE.search(text)
    if function:
        body = _balanced_list(text, function.end())
        if body is not None:
            return body
    keyword = _DEPS_KEYWORD_RE.search(text)
    if keyword:
        body = _balanced_list(text, keyword.end() - 1)
        if body is not None:
            return body
    return ""


def parse_manifest(text: str) -> MixManifest:
    """Parse the text of a ``mix.exs`` file.

    Unrecognised content is ignored rather than rejected: a manifest with
    no deps list yields a manifest with no dependencies.

    Args:
        text: Full manifest source.

    Returns:
        The parsed :class:`~usage_skills.models.MixManifest`. Dependency
        order follows the manifest and duplicate names keep their first
        declaration.

    Example::

        >>> parse_manifest('defp deps do [{:ash, "~> 3.0"}] end').deps[0].name
        'ash'
    """
    source = _strip_comments(text)

    deps: list[DeclaredDependency] = []
    seen: set[str] = set()
    for match in _DEP_TUPLE_RE.finditer(_deps_list(source)):
        name = match.group(1)
        if name in seen:
            continue
        seen.add(name)
        options = match.group(2) or ""
        path_match = _PATH_OPTION_RE.search(options)
        deps.append(
            DeclaredDependency(
                name=name,
                path=path_match.group(1) if path_match else None,
                in_umbrella=bool(_IN_UMBRELLA_RE.search(options)),
            )
        )

    # Project options live outside the deps list; blank it out so a path
    # dependency's options are never mistaken for them.
    project_text = source.replace(_deps_list(source), "[]", 1) if deps else source
    app_match = _APP_RE.search(project_text)

    return MixManifest(
        app=app_match.group(1) if app_match else None,
        deps=deps,
        deps_path=_string_option(project_text, "deps_path"),
        apps_path=_string_option(project_text, "apps_path"),
    )


def load_manifest(files: FileSource, project_dir: str = "") -> Optional[MixManifest]:
    """Read and parse ``<project_dir>/mix.exs``.

    Args:
        files: File source the project lives in.
        project_dir: Project directory relative to the source root.

    Returns:
        The parsed manifest, or ``None`` if the project has no manifest.

    Raises:
        ProjectError: If the manifest exists but cannot be read.
    """
    path = join_path(project_dir, MANIFEST_FILENAME)
    if not files.is_file(path):
        return None
    try:
        text = files.read(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise ProjectError(f"Failed to read {path}: {exc}") from exc
    return parse_manifest(text)
