"""Format Claude Code skill files from package usage rules.

A skill file is a short YAML frontmatter block followed by the package's
``usage-rules.md`` content, copied verbatim::

    ---
    name: phoenix_live_view
    description: Guidance on working with Phoenix Live View
    ---

    <usage-rules.md content>

The frontmatter is rendered from ``templates/frontmatter.md.j2``. The
description is always the fixed "Guidance on working with ..." phrase; the
package's own description is accepted by the public functions but not used,
so every skill reads the same way regardless of how the package describes
itself.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined


TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``skills/templates/``)."""

FRONTMATTER_TEMPLATE = "frontmatter.md.j2"

DESCRIPTION_PREFIX = "Guidance on working with"


@lru_cache(maxsize=1)
def _create_jinja_env() -> Environment:
    """Create the Jinja2 environment for skill templates.

    Autoescape is off because the output is Markdown, and the trailing
    newline of the template is kept so the frontmatter ends with ``---\\n``.
    """
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )


def format_skill_name(package: str) -> str:
    """Convert a snake_case package name into a human readable title.

    Only the first character of each segment is upper-cased; the rest of the
    segment is left as is.

    Examples:
        ash               -> Ash
        phoenix_live_view -> Phoenix Live View
        ex_doc            -> Ex Doc

    Args:
        package: Package identifier.

    Returns:
        The segments joined with single spaces.
    """
    return " ".join(segment[:1].upper() + segment[1:] for segment in package.split("_"))


def format_skill_frontmatter(package: str, description: str = "") -> str:
    """Render the YAML frontmatter block for *package*.

    Args:
        package: Package identifier, written unchanged as ``name``.
        description: The package's own description. Ignored; kept so callers
            can pass what they have.

    Returns:
        The frontmatter, from the opening ``---`` to the closing ``---``
        line including its newline.
    """
    template = _create_jinja_env().get_template(FRONTMATTER_TEMPLATE)
    return template.render(
        name=package,
        description=f"{DESCRIPTION_PREFIX} {format_skill_name(package)}",
    )


def format_skill_file(package: str, description: str, content: str) -> str:
    """Assemble the complete ``SKILL.md`` content.

    Args:
        package: Package identifier.
        description: The package's own description (ignored, see
            :func:`format_skill_frontmatter`).
        content: The usage-rules text. Appended byte for byte.

    Returns:
        Frontmatter, a blank line, then *content*.
    """
    return format_skill_frontmatter(package, description) + "\n" + content
