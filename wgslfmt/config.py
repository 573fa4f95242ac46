"""Formatting options and TOML configuration discovery."""

from __future__ import annotations
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from wgslfmt.errors import ConfigError

CONFIG_FILENAME = ".wgslfmt.toml"
PRAGMA_SCOPES = ("literal", "file")


@dataclass(frozen=True)
class FormatOptions:
    print_width: int = 80
    tab_width: int = 2
    use_tabs: bool = False
    # "literal": a /*wgsl*/ comment marks only the template right after it.
    # "file": any /*wgsl*/ comment marks every template in the file.
    pragma_scope: str = "literal"

    def __post_init__(self) -> None:
        validate(self)

    def with_overrides(self, **overrides: Any) -> "FormatOptions":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


def validate(options: FormatOptions) -> None:
    for name in ("print_width", "tab_width"):
        value = getattr(options, name)
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ConfigError(f"{name.replace('_', '-')} must be a positive integer, got {value!r}")
    if not isinstance(options.use_tabs, bool):
        raise ConfigError(f"use-tabs must be true or false, got {options.use_tabs!r}")
    if options.pragma_scope not in PRAGMA_SCOPES:
        raise ConfigError(
            f"pragma-scope must be one of {', '.join(PRAGMA_SCOPES)}, got {options.pragma_scope!r}"
        )


_OPTION_NAMES = frozenset(f.name for f in fields(FormatOptions))


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read config file {path}: {e.strerror}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"invalid TOML in {path}: {e}") from e


def find_config(start_dir: Path) -> Path | None:
    """Search start_dir and its parents for a config file.

    A `.wgslfmt.toml` wins over a `pyproject.toml` in the same directory; a
    `pyproject.toml` only counts if it has a `[tool.wgslfmt]` table.
    """
    for directory in (start_dir.resolve(), *start_dir.resolve().parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        pyproject = directory / "pyproject.toml"
        if pyproject.is_file() and "wgslfmt" in _read_toml(pyproject).get("tool", {}):
            return pyproject
    return None


def load_config(config_path: Path | None, start_dir: Path) -> dict[str, Any]:
    """Load option values from TOML, returning an empty dict when none is found.

    Keys are normalised to snake case. Unknown keys raise ConfigError.
    """
    if config_path is not None:
        if not config_path.is_file():
            raise ConfigError(f"config file not found: {config_path}")
        path = config_path
    else:
        path = find_config(start_dir)
        if path is None:
            return {}

    data = _read_toml(path)
    if path.name == "pyproject.toml":
        data = data.get("tool", {}).get("wgslfmt", {})

    config: dict[str, Any] = {}
    for key, value in data.items():
        name = key.replace("-", "_")
        if name not in _OPTION_NAMES:
            raise ConfigError(f"unknown option {key!r} in {path}")
        config[name] = value
    return config


def resolve_options(config: dict[str, Any], **cli_overrides: Any) -> FormatOptions:
    """Merge defaults, config file values and CLI flags, in that order."""
    return FormatOptions(**config).with_overrides(**cli_overrides)
