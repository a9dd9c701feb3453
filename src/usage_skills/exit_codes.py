"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~usage_skills.exceptions.UsageSkillsError` subclass.
Per-package problems during a sync (missing or unreadable rules files) are
reported as warnings and never change the exit code.

Example::

    $ usage-skills sync "not/a-package"
    $ echo $?
    2   # EXIT_INVALID_USAGE -- the package name was rejected
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_PROJECT_ERROR = 3
"""The project manifest could not be read."""
