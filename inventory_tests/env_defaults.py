"""Read fallback configuration values from the workspace ``.env.defaults``.

Environment variables always win; this file only supplies values that are
not set in the environment (credentials of the seeded demo actors, the
storage key, timeouts).
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Dict


def _defaults_path() -> Path:
    explicit = os.getenv("INVENTORY_ENV_DEFAULTS")
    if explicit:
        return Path(explicit)
    return Path(__file__).resolve().parents[1] / ".env.defaults"


@lru_cache(maxsize=1)
def _load_env_defaults() -> Dict[str, str]:
    env_defaults = _defaults_path()
    if not env_defaults.exists():
        return {}

    defaults: Dict[str, str] = {}
    for raw in env_defaults.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        value = value.strip()
        if len(value) >= 2 and value[0] in ('"', "'") and value[-1] == value[0]:
            value = value[1:-1]
        defaults[key.strip()] = value
    return defaults


def get_env_default(key: str) -> str | None:
    return _load_env_defaults().get(key)


def get_setting(key: str, fallback: str) -> str:
    """Environment, then ``.env.defaults``, then ``fallback``."""
    return os.getenv(key) or get_env_default(key) or fallback
