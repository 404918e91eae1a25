"""``specedit config``: inspect and change the user's settings file.

Keys are ``SECTION.FIELD`` pairs of :class:`~specedit.models.GlobalConfig`,
for example ``export.indent`` or ``storage.key``. Changing
``storage.key`` switches to a different stored document in the same store
directory.
"""

from __future__ import annotations

from typing import Any

import typer

from specedit.commands import context_option, reporting_errors
from specedit.output import info, print_document, success

config_app = typer.Typer(no_args_is_help=True)


def _coerce(key: str, current: Any, value: str) -> Any:
    """Convert *value* to the type of the field's current value."""
    from specedit.exceptions import InvalidValueError

    if isinstance(current, int) and not isinstance(current, bool):
        try:
            return int(value)
        except ValueError:
            raise InvalidValueError(f"Expected integer for {key}, got: {value}") from None
    return value


def _apply(data: dict[str, Any], key: str, value: str) -> Any:
    from specedit.exceptions import InvalidValueError

    section, _, field = key.partition(".")
    fields = data.get(section)
    if not field or not isinstance(fields, dict) or field not in fields:
        raise InvalidValueError(f"Unknown config key: {key}")
    fields[field] = _coerce(key, fields[field], value)
    return fields[field]


@config_app.command("show")
def config_show() -> None:
    """Print the settings file (or the defaults) as JSON.

    Example::

        specedit config show
    """
    from specedit.config import get_config_dir, load_global_config

    with reporting_errors():
        config = load_global_config()
    info(f"Config directory: {get_config_dir()}")
    print_document(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="SECTION.FIELD, e.g. export.indent."),
    value: str = typer.Argument(help="New value."),
) -> None:
    """Change one setting; integer fields only accept integers.

    Example::

        specedit config set export.filename api.json
        specedit config set export.indent 4
        specedit config set storage.key petstore
    """
    from pydantic import ValidationError

    from specedit.config import load_global_config, save_global_config
    from specedit.exceptions import InvalidValueError
    from specedit.models import GlobalConfig

    with reporting_errors():
        data = load_global_config().model_dump(mode="json")
        new_value = _apply(data, key, value)
        try:
            config = GlobalConfig.model_validate(data)
        except ValidationError as exc:
            raise InvalidValueError(f"Invalid value for {key}: {exc}") from None
        save_global_config(config)
    success(f"Set {key} = {new_value}")


@config_app.command("reset")
def config_reset(ctx: typer.Context) -> None:
    """Restore the default settings. Asks first unless ``--force`` is given.

    Example::

        specedit --force config reset
    """
    from specedit.config import save_global_config
    from specedit.models import GlobalConfig

    if not context_option(ctx, "force", False) and not typer.confirm(
        "Reset all config to defaults?"
    ):
        info("Cancelled.")
        raise typer.Exit()
    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
