"""Read dispatcher settings from YAML."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from loguru import logger

# Settings a dispatcher understands, with the values used when a file omits them.
DEFAULTS: dict[str, Any] = {
    "valid_event_types": None,
    "trigger_last_event": False,
}


def _read_yaml(path: Path) -> Any:
    with open(path) as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as exc:
            logger.error("Failed to parse dispatcher config {}: {}", path, exc)
            raise


def load_config(path: str | Path, *, section: str | None = None) -> dict[str, Any]:
    """Load dispatcher settings from a YAML file.

    ``section`` selects a top-level key when the settings live inside a larger
    application file. Missing settings fall back to DEFAULTS; unknown keys are
    dropped with a warning. A missing file yields the defaults.
    """
    path = Path(path)
    settings = dict(DEFAULTS)
    if not path.exists():
        logger.warning("Dispatcher config not found: {}; using defaults", path)
        return settings

    data = _read_yaml(path)
    if section is not None:
        data = data.get(section) if isinstance(data, dict) else None
        if data is None:
            logger.warning("Dispatcher config {} has no {!r} section; using defaults", path, section)
            return settings
    if data is None:
        return settings
    if not isinstance(data, dict):
        logger.warning("Dispatcher config {} has invalid structure (expected mapping)", path)
        return settings

    unknown = sorted(str(k) for k in data if k not in DEFAULTS)
    if unknown:
        logger.warning("Ignoring unknown dispatcher settings in {}: {}", path, unknown)
    settings.update({k: v for k, v in data.items() if k in DEFAULTS})
    logger.debug("Loaded dispatcher config {}", path)
    return settings


def load_config_with_env(path: str | Path, *, section: str | None = None) -> dict[str, Any]:
    """Load .env into the process environment, then the YAML settings.

    EVDISPATCH_* overrides from the environment are applied by Config.
    """
    from dotenv import find_dotenv, load_dotenv

    load_dotenv(find_dotenv(usecwd=True))
    return load_config(path, section=section)
