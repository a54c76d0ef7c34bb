"""Loading the ini configuration that sits next to the program."""

from __future__ import annotations

import configparser
import re
import sys
from pathlib import Path
from typing import Any

CONFIG_NAME = "config.ini"

DEFAULT_CONFIG = """[Main]
update = 100
path = auto
cgodisable = false
memdebug = false
memcycletest = false
wine = false
minimize_to_tray = true
"""

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}
_OCTAL = re.compile(r"[+-]?0[0-7_]+")


def _program_directory() -> Path:
    return Path(sys.argv[0] or ".").resolve().parent


def _parse(text: str) -> dict[str, str]:
    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str  # keep keys as written
    try:
        parser.read_string(text)
    except configparser.MissingSectionHeaderError:
        parser = configparser.ConfigParser(interpolation=None)
        parser.optionxform = str
        parser.read_string("[Main]\n" + text)
    values: dict[str, str] = {}
    for section in parser.sections():
        for key, value in parser.items(section):
            values[key] = value.strip()
    return values


def load_config(directory: str | Path | None = None) -> dict[str, str]:
    """Read ``config.ini`` from ``directory``, writing the defaults first if it is missing.

    ``directory`` defaults to the directory of the running program.
    """
    base = Path(directory) if directory is not None else _program_directory()
    path = base / CONFIG_NAME
    if not path.exists():
        path.write_text(DEFAULT_CONFIG, encoding="utf-8")
    return _parse(path.read_text(encoding="utf-8"))


def _parse_bool(value: str) -> bool:
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"invalid boolean {value!r}")


def to_bool(value: Any) -> bool:
    """Convert a config value to bool; anything unrecognised is False."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    try:
        return _parse_bool(str(value))
    except ValueError:
        return False


def to_int(value: Any) -> int:
    """Convert a config value to int, accepting 0x/0o/0b prefixes; failures give 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if value is None:
        return 0
    text = str(value)
    try:
        return int(text, 0)
    except ValueError:
        pass
    if _OCTAL.fullmatch(text):
        try:
            return int(text.replace("_", ""), 8)
        except ValueError:
            return 0
    return 0