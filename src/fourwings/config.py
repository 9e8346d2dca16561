"""Configuration management for the fourwings decoder.

This module handles loading and managing configuration settings using
Dynaconf. Settings are loaded from multiple locations in order of
increasing priority:

1. Global settings (/etc/fourwings/)
2. User settings (~/.config/fourwings/)
3. Current directory settings (./)
4. Environment variable specified file (FOURWINGS_SETTINGS_FILE_FOR_DYNACONF)

Recognised keys are ``no_data_value``, ``scale_value``, ``offset_value``,
``framing`` and ``max_workers``. Missing keys fall back to the format
defaults in :mod:`fourwings.constants`.

Attributes
----------
USER_DIR : pathlib.Path
    Path to user configuration directory.
GLOB_DIR : pathlib.Path
    Path to global configuration directory.
CURR_DIR : pathlib.Path
    Path to current working directory.
settings : Dynaconf
    The Dynaconf settings object with loaded configuration.
"""
import os
import pathlib

from dynaconf import Dynaconf

from . import constants

USER_DIR = pathlib.Path("~/.config/fourwings").expanduser()
GLOB_DIR = pathlib.Path("/etc/fourwings/")
CURR_DIR = pathlib.Path("./").absolute()
settings_files = [
    GLOB_DIR / "settings.toml",
    GLOB_DIR / ".secrets.toml",
    USER_DIR / "settings.toml",
    USER_DIR / ".secrets.toml",
    CURR_DIR / "settings.toml",
    CURR_DIR / ".secrets.toml"
    ]
extra_file = os.getenv("FOURWINGS_SETTINGS_FILE_FOR_DYNACONF")
if extra_file:
    settings_files.append(pathlib.Path(extra_file).absolute())

settings = Dynaconf(
    merge_enabled = True,
    envvar_prefix="FOURWINGS",
    settings_files=settings_files,
    environments=True,
    load_dotenv=True,
)

DEFAULTS = {
    "no_data_value": constants.NO_DATA_VALUE,
    "scale_value": constants.SCALE_VALUE,
    "offset_value": constants.OFFSET_VALUE,
    "framing": constants.RAW_FRAMING,
    "max_workers": 1,
}


def get(key):
    """Return a setting, falling back to the format default.

    Parameters
    ----------
    key : str
        One of the keys in ``DEFAULTS``.

    Returns
    -------
    object
        The configured value, or the default when unset.
    """
    return settings.get(key, DEFAULTS[key])


def change_env(new_env):
    """Change the active Dynaconf environment.

    Parameters
    ----------
    new_env : str
        The environment name to switch to (e.g., 'development', 'production').
    """
    settings.setenv(new_env)
    settings.reload()
