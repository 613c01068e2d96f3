from __future__ import annotations

import os
import warnings
from enum import StrEnum
from functools import cache
from typing import TypeVar

T = TypeVar("T")

# Checked in order; the first one set wins.
ENV_VARS: tuple[str, ...] = ("APP_ENV", "NODE_ENV")


class Env(StrEnum):
    LOCAL = "local"
    DEV = "dev"
    TEST = "test"
    PROD = "prod"


ALIASES: dict[str, Env] = {
    "development": Env.DEV,
    "testing": Env.TEST,
    "ci": Env.TEST,
    "production": Env.PROD,
}


def resolve_env(raw: str | None) -> Env | None:
    """Map a raw environment name (``prod``, ``Production``, ``ci``...) to an Env."""
    if not raw:
        return None
    name = raw.strip().lower()
    try:
        return Env(name)
    except ValueError:
        return ALIASES.get(name)


@cache
def get_env() -> Env:
    """
    The deployment environment, resolved once per process from ``APP_ENV`` or
    ``NODE_ENV``. Unset means ``local``; an unknown name also falls back to
    ``local`` with a RuntimeWarning.
    """
    raw = next((os.environ[name] for name in ENV_VARS if os.environ.get(name)), None)
    env = resolve_env(raw)
    if env is not None:
        return env
    if raw:
        warnings.warn(f"Unrecognized environment '{raw}', defaulting to 'local'.", RuntimeWarning, stacklevel=2)
    return Env.LOCAL


def is_prod() -> bool:
    return get_env() is Env.PROD


def pick(*, prod: T, nonprod: T, **per_env: T) -> T:
    """
    Choose a value for the active environment.

    ``per_env`` takes overrides keyed by env name, e.g.
    ``pick(prod="json", nonprod="plain", test="json")``.
    """
    env = get_env()
    if env is Env.PROD:
        return prod
    return per_env.get(env.value, nonprod)


__all__ = ["ALIASES", "Env", "get_env", "is_prod", "pick", "resolve_env"]
