"""Reading configuration values from the process environment.

Blank values count as unset everywhere, so an empty ``FOO=`` line in a
``.env`` file behaves like a missing one.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import ConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable


def _read(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    return raw.strip() or None


def require_env_vars(names: Iterable[str]) -> dict[str, str]:
    """Read every name at once so a single error lists all that are missing."""

    found = {name: _read(name) for name in names}
    absent = sorted(name for name, value in found.items() if value is None)
    if absent:
        raise MissingConfigurationError(absent)
    return {name: value for name, value in found.items() if value is not None}


def require_env_var(name: str) -> str:
    return require_env_vars((name,))[name]


def optional_env_var(name: str, default: str | None = None) -> str | None:
    value = _read(name)
    return default if value is None else value


def float_env_var(name: str, default: float) -> float:
    """Non-negative float, e.g. a delay in seconds."""

    raw = _read(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ConfigurationError(f"{name} must be non-negative, got {raw!r}")
    return value
