"""Exception hierarchy for usage-skills.

All exceptions inherit from :class:`UsageSkillsError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`usage_skills.exit_codes`. The top-level error handler in
:func:`usage_skills.app.main` catches ``UsageSkillsError`` and exits with
the appropriate code, while unexpected exceptions produce a crash log and
exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    UsageSkillsError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- ProjectError        (exit 3)
    +-- ConfigError         (exit 1)
"""

from usage_skills.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PROJECT_ERROR,
)


class UsageSkillsError(Exception):
    """Base exception for all usage-skills errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`usage_skills.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(UsageSkillsError):
    """Raised for invalid CLI arguments such as malformed package names."""

    exit_code = EXIT_INVALID_USAGE


class ProjectError(UsageSkillsError):
    """Raised when a project manifest exists but cannot be read."""

    exit_code = EXIT_PROJECT_ERROR


class ConfigError(UsageSkillsError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE
