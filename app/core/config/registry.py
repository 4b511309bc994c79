from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

_REGISTRY_CONFIG_CACHE: dict[str, Any] | None = None
_REGISTRY_CONFIG_PATH = Path(__file__).resolve().parents[3] / "config" / "registry.yaml"


def get_registry_config() -> dict[str, Any]:
    """Load variant/industry/component registry from repo-level config/registry.yaml and cache it."""
    global _REGISTRY_CONFIG_CACHE

    if _REGISTRY_CONFIG_CACHE is not None:
        return _REGISTRY_CONFIG_CACHE

    if not _REGISTRY_CONFIG_PATH.exists():
        raise RuntimeError(
            f"Registry config not found at '{_REGISTRY_CONFIG_PATH}'. "
            "Expected file: config/registry.yaml"
        )

    try:
        raw = _REGISTRY_CONFIG_PATH.read_text(encoding="utf-8")
    except OSError as exc:
        raise RuntimeError(
            f"Failed to read registry config '{_REGISTRY_CONFIG_PATH}': {exc}"
        ) from exc

    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise RuntimeError(
            f"Invalid YAML in registry config '{_REGISTRY_CONFIG_PATH}': {exc}"
        ) from exc

    if not isinstance(parsed, dict):
        raise RuntimeError(
            f"Invalid registry config '{_REGISTRY_CONFIG_PATH}': expected a top-level mapping."
        )

    _REGISTRY_CONFIG_CACHE = parsed
    return _REGISTRY_CONFIG_CACHE


def get_registry_value(path: str, default: Any = None) -> Any:
    """Get nested config value using dot path notation, e.g. 'theme_defaults.colors.primary'."""
    if not path:
        return default

    current: Any = get_registry_config()
    for key in path.split("."):
        if not isinstance(current, dict):
            return default
        if key not in current:
            return default
        current = current[key]
    return current
