"""Where specedit keeps its files, and how settings are layered.

Linux and the BSDs follow the XDG base directory layout
(``~/.config/specedit`` and ``~/.local/share/specedit``); other systems get
a single ``~/.specedit`` tree with data under ``data/``. The user's
settings are one JSON file holding a :class:`~specedit.models.GlobalConfig`.
:func:`resolve_config` lays ``SPECEDIT_STORE`` and the root CLI flags on top
of it, and :func:`get_store_dir` turns the result into the directory that
holds the document snapshot.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from specedit.exceptions import ConfigError
from specedit.models import GlobalConfig

_APP_NAME = "specedit"
_CONFIG_FILENAME = "config.json"
_STORE_ENV = "SPECEDIT_STORE"

# kind -> (XDG variable, default location under $HOME, fallback subdir)
_DIRS = {
    "config": ("XDG_CONFIG_HOME", (".config",), None),
    "data": ("XDG_DATA_HOME", (".local", "share"), "data"),
}


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(kind: str) -> Path:
    env_var, home_segments, fallback_subdir = _DIRS[kind]
    if _is_xdg_platform():
        base = os.environ.get(env_var) or Path.home().joinpath(*home_segments)
        path = Path(base) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
        if fallback_subdir:
            path = path / fallback_subdir
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Directory of ``config.json``; created on first use."""
    return _app_dir("config")


def get_data_dir() -> Path:
    """Directory for the default snapshot store and crash logs; created on first use."""
    return _app_dir("data")


def atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* without ever exposing a partial file.

    The text goes to a sibling temp file that is fsynced and then renamed
    over *path*. If anything fails, the temp file is deleted and *path*
    keeps its previous content.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    handle = tempfile.NamedTemporaryFile(
        mode="w",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
        encoding="utf-8",
    )
    try:
        with handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(handle.name, path)
    except BaseException:
        Path(handle.name).unlink(missing_ok=True)
        raise


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Read the user's settings, or the defaults when no file exists yet.

    Raises:
        ConfigError: The file is not JSON or does not match the model.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except ValueError as exc:
        # json.JSONDecodeError and pydantic.ValidationError are both ValueErrors
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    payload = json.dumps(config.model_dump(mode="json"), indent=2) + "\n"
    atomic_write(_global_config_path(), payload)


def resolve_config(
    cli_store: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> GlobalConfig:
    """Return the effective settings for one invocation.

    Lowest to highest: built-in defaults, ``config.json``,
    ``$SPECEDIT_STORE``, then the ``--store`` and output-format flags.
    """
    config = load_global_config()
    store = cli_store if cli_store is not None else os.environ.get(_STORE_ENV) or None
    if store is not None:
        config.storage.path = store
    if cli_format is not None:
        config.output.format = cli_format
    return config


def get_store_dir(config: GlobalConfig) -> Path:
    if config.storage.path:
        return Path(config.storage.path).expanduser()
    return get_data_dir() / "store"
