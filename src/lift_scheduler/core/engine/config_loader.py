"""
Engine tunables from rules.yaml.

Two sources are read, the second overriding the first key by key:

    <package>/rules.yaml             shipped defaults
    ~/.lift-scheduler/rules.yaml     optional per-user overrides

Callers never see the raw mapping; they ask for one value and pass the
constant from core.config to use when the key is absent:

    threshold = engine_setting("progression", "deload_threshold", 2)

A file that is missing contributes nothing.  A file that exists but fails
to load raises a UserWarning and is skipped, so lookups fall back to the
caller's constant.  The merged result is cached for the process; tests
reset it with load_engine_config.cache_clear().
"""

from __future__ import annotations

import importlib.resources
import os
import warnings
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

RULES_FILENAME = "rules.yaml"
USER_RULES_DIR = ".lift-scheduler"


def _read_rules(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"lift-scheduler: ignoring {path} ({exc})", stacklevel=2)
        return {}
    return data if isinstance(data, dict) else {}


def _overlay(defaults: dict, overrides: dict) -> dict:
    """New dict with *overrides* applied over *defaults*, nested sections merged per key."""
    merged = dict(defaults)
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            merged[key] = _overlay(current, value)
        else:
            merged[key] = value
    return merged


def bundled_rules_path() -> Path | None:
    """The rules.yaml shipped inside the package, if present."""
    ref = importlib.resources.files("lift_scheduler").joinpath(RULES_FILENAME)
    with importlib.resources.as_file(ref) as p:
        return p if p.exists() else None


def user_rules_path() -> Path | None:
    """The user's override file under $HOME, if present."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / USER_RULES_DIR / RULES_FILENAME
    return p if p.exists() else None


@lru_cache(maxsize=1)
def load_engine_config() -> dict[str, Any]:
    """Shipped rules with the user's overrides applied; {} when neither exists."""
    config: dict[str, Any] = {}
    for path in (bundled_rules_path(), user_rules_path()):
        if path is not None:
            config = _overlay(config, _read_rules(path))
    return config


def engine_setting(section: str, key: str, default: Any) -> Any:
    """Value of *key* in *section*, or *default* when either is missing."""
    value = load_engine_config().get(section, {})
    if not isinstance(value, dict):
        return default
    return value.get(key, default)
