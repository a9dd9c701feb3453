"""usage-skills -- Generate Claude Code skills from dependency usage rules.

Many packages ship a ``usage-rules.md`` file describing how they should be
used. This package discovers the dependencies of a Mix project (including
umbrella projects) that carry such a file and turns each one into a
Claude Code skill at ``.claude/skills/<package>/SKILL.md``.

Typical workflow::

    usage-skills sync --all --list    # see which packages have rules
    usage-skills sync --all           # generate a skill for each one
    usage-skills sync ash ecto        # or only for selected packages

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    workspace: File sources and the staged-change workspace.
    project: Mix manifest parsing and dependency sources.
    skills: Discovery, formatting and generation of skill files.
"""

__version__ = "0.1.0"
