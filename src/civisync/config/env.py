"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import InvalidConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence

_YES_VALUES = frozenset({"yes", "true", "1", "on"})
_NO_VALUES = frozenset({"no", "false", "0", "off", ""})


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Return the given environment variables or raise if any are missing/blank."""

    missing: list[str] = []
    values: dict[str, str] = {}
    for name in names:
        value = os.getenv(name)
        if value is None or not value.strip():
            missing.append(name)
            continue
        values[name] = value

    if missing:
        missing_list = ", ".join(sorted(missing))
        raise MissingConfigurationError(f"Missing configuration for: {missing_list}")

    return values


def optional_env_int(name: str) -> int | None:
    """Return an integer environment variable, ``None`` when unset or blank."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    try:
        return int(value.strip())
    except ValueError as exc:
        raise InvalidConfigurationError(name, value, "an integer") from exc


def env_flag(name: str, *, default: bool = False) -> bool:
    """Parse a yes/no style flag the way the shop settings store them."""

    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _YES_VALUES:
        return True
    if normalized in _NO_VALUES:
        return False
    raise InvalidConfigurationError(name, value, "yes or no")


def env_list(name: str) -> tuple[str, ...]:
    """Split a comma separated environment variable into trimmed, non-empty entries."""

    value = os.getenv(name) or ""
    return tuple(part.strip() for part in value.split(",") if part.strip())


def env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()
