"""Config commands -- view and modify global configuration.

Provides the ``usage-skills config`` sub-command group for reading,
updating, and resetting the user's global configuration file
(:class:`~usage_skills.models.GlobalConfig`). Settings are persisted in
the usage-skills config directory and supply defaults such as the output
directory; a project's ``.usage-skills.json`` and the environment can still
override them.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer

from usage_skills.output import error, info, print_data, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(
    ctx: typer.Context,
    effective: bool = typer.Option(
        False,
        "--effective",
        help="Show the configuration after project and environment overrides.",
    ),
) -> None:
    """Show current configuration.

    Prints the config directory path to stderr and the configuration as
    JSON to stdout.

    Example::

        usage-skills config show
        usage-skills config show --effective
    """
    from usage_skills.config import get_config_dir, load_global_config, resolve_config
    from usage_skills.exceptions import ConfigError

    try:
        if effective:
            project_dir = Path((ctx.obj or {}).get("project_dir") or ".")
            config = resolve_config(project_dir=project_dir)
        else:
            config = load_global_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    info(f"Config directory: {get_config_dir()}")
    print_data(json.dumps(config.model_dump(mode="json"), indent=2))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key (e.g. 'output_dir')."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    The value is coerced to match the existing field's type (bool or str)
    and the updated config is validated against
    :class:`~usage_skills.models.GlobalConfig` before saving.

    Args:
        key: Config key.
        value: String value to set; coerced to the target field type.

    Raises:
        typer.Exit: With code 2 if the key is unknown or validation fails.

    Example::

        usage-skills config set output_dir docs/skills
        usage-skills config set scan_deps_dir true
    """
    from usage_skills.config import load_global_config, save_global_config
    from usage_skills.exceptions import ConfigError
    from usage_skills.models import GlobalConfig

    try:
        config = load_global_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    data = config.model_dump(mode="json")

    if key not in data:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    # Type coerce the value to match the current field type.
    current = data[key]
    if isinstance(current, bool):
        lowered = value.lower()
        if lowered not in ("true", "1", "yes", "false", "0", "no"):
            error(f"Expected boolean for {key}, got: {value}")
            raise typer.Exit(code=2)
        coerced: object = lowered in ("true", "1", "yes")
    else:
        coerced = value

    data[key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except Exception as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(
    ctx: typer.Context,
) -> None:
    """Reset configuration to defaults.

    Replaces the persisted global config with a fresh
    :class:`~usage_skills.models.GlobalConfig` instance containing all
    default values. Asks for confirmation unless ``--force`` is active.

    Args:
        ctx: Typer context carrying the ``force`` flag.

    Raises:
        typer.Exit: If the user declines confirmation.

    Example::

        usage-skills config reset
        usage-skills --force config reset
    """
    from usage_skills.config import save_global_config
    from usage_skills.models import GlobalConfig

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
