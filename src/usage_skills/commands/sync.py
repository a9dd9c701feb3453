"""Sync command -- generate Claude Code skills from dependency usage rules.

Implements the ``usage-skills sync`` command. It resolves the effective
configuration, builds a :class:`~usage_skills.workspace.Workspace` over the
project directory, delegates to :func:`~usage_skills.skills.sync_skills`,
and then writes the staged files (unless ``--dry-run`` is active) and
reports the notices and warnings collected along the way.

Usage::

    usage-skills sync ash phoenix
    usage-skills sync --all
    usage-skills sync --all --list
    usage-skills sync --all --output-dir docs/skills
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from usage_skills.output import debug, error, info, print_data, success, suggest, warning


def sync_command(
    ctx: typer.Context,
    packages: Optional[list[str]] = typer.Argument(
        None,
        help="Packages to generate skills for (e.g. ash phoenix_live_view).",
        show_default=False,
    ),
    output_dir: Optional[str] = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Output directory for skill files (default: .claude/skills).",
    ),
    all_packages: bool = typer.Option(
        False, "--all", help="Process all packages with usage rules."
    ),
    list_only: bool = typer.Option(
        False, "--list", help="List packages without generating files."
    ),
) -> None:
    """Generate skills from package usage rules.

    Explicit package names take precedence over ``--all``. With ``--list``
    the selected packages are reported and nothing is written. A package
    without a readable ``usage-rules.md`` produces a warning and the
    remaining packages are still processed.

    Args:
        ctx: Typer context carrying the global ``project_dir`` and
            ``dry_run`` options.
        packages: Explicit package names.
        output_dir: Override for the configured output directory.
        all_packages: Process every dependency that ships usage rules.
        list_only: Report the selection instead of generating files.

    Raises:
        typer.Exit: With the error's exit code if the configuration or
            project manifest is invalid.

    Example::

        usage-skills sync ash
        usage-skills sync --all --output-dir custom/path
        usage-skills --dry-run sync --all
    """
    from usage_skills.config import resolve_config
    from usage_skills.exceptions import UsageSkillsError
    from usage_skills.models import ChangeStatus
    from usage_skills.project import default_sources
    from usage_skills.skills import sync_skills
    from usage_skills.skills.sync import CREATED_NOTICE_PREFIX, LIST_NOTICE_HEADER
    from usage_skills.workspace import LocalFileSource, Workspace

    obj = ctx.obj or {}
    project_dir = Path(obj.get("project_dir") or ".")
    dry_run = bool(obj.get("dry_run", False))

    if not project_dir.is_dir():
        error(f"Project directory not found: {project_dir}")
        raise typer.Exit(code=2)

    try:
        config = resolve_config(cli_output_dir=output_dir, project_dir=project_dir)
        debug(f"Output directory: {config.output_dir}")

        files = LocalFileSource(project_dir)
        workspace = Workspace(files)
        sources = None
        if all_packages and not packages:
            sources = default_sources(files, config)

        sync_skills(
            workspace,
            packages or [],
            all_packages=all_packages,
            list_only=list_only,
            output_dir=config.output_dir,
            deps_dir=config.deps_dir,
            sources=sources,
        )
    except UsageSkillsError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    written = []
    if dry_run:
        for change in workspace.changes:
            if change.status == ChangeStatus.UNCHANGED:
                info(f"Unchanged: {change.path}")
            else:
                info(f"Would write {change.path} ({change.status.value})")
    else:
        written = workspace.apply()
        for change in workspace.changes:
            if change.status == ChangeStatus.UNCHANGED:
                debug(f"Unchanged: {change.path}")

    for notice in workspace.notices:
        if notice.startswith(CREATED_NOTICE_PREFIX):
            success(notice)
        elif notice.startswith(LIST_NOTICE_HEADER):
            print_data(notice)
        else:
            info(notice)
    for message in workspace.warnings:
        warning(message)

    if written:
        suggest(f"Review: ls {config.output_dir}")
