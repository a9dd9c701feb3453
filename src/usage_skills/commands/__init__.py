"""Built-in CLI sub-commands for usage-skills.

This package groups the Typer sub-command modules that form the CLI's
top-level command tree:

* :mod:`~usage_skills.commands.sync` -- generate skills from usage rules.
* :mod:`~usage_skills.commands.config` -- view and modify global settings.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``config``) or a plain callback function
registered directly on the root app (for single commands like ``sync``).
"""
