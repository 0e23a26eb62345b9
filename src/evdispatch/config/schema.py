"""Config schema and accessor."""

from __future__ import annotations

import os
import re
from re import Pattern
from typing import Any

from loguru import logger

from evdispatch.core.errors import DispatcherConfigurationError

_ENV_OVERRIDE_KEYS = ("EVDISPATCH_TRIGGER_LAST_EVENT",)

_REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
}


def _load_env_overrides() -> dict[str, str]:
    """Load env overrides once per reload."""
    return {k: os.environ.get(k, "") for k in _ENV_OVERRIDE_KEYS}


def _parse_bool(val: str) -> bool | None:
    """Parse an env or YAML string to bool; None if not a recognized bool."""
    v = val.lower()
    if v in ("1", "true", "yes"):
        return True
    if v in ("0", "false", "no"):
        return False
    return None


def _as_bool(value: Any) -> bool | None:
    """Booleans as-is, recognized strings such as a quoted YAML 'false' parsed; None otherwise."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return _parse_bool(value.strip())
    return None


def _compile_rule(index: int, item: Any) -> str | Pattern[str]:
    """Plain strings are exact labels; ``{pattern: ..., flags: ...}`` mappings become regexes."""
    if isinstance(item, str):
        return item
    if not isinstance(item, dict) or not isinstance(item.get("pattern"), str):
        raise DispatcherConfigurationError(
            f"valid_event_types[{index}] must be a string or a mapping with a 'pattern' string",
            code="invalid_rule",
            details={"index": index, "type": type(item).__name__},
        )
    flags = 0
    for letter in str(item.get("flags", "")):
        if letter not in _REGEX_FLAGS:
            raise DispatcherConfigurationError(
                f"valid_event_types[{index}] has unknown regex flag {letter!r}",
                code="invalid_rule",
                details={"index": index, "flag": letter},
            )
        flags |= _REGEX_FLAGS[letter]
    try:
        return re.compile(item["pattern"], flags)
    except re.error as exc:
        raise DispatcherConfigurationError(
            f"valid_event_types[{index}] is not a valid regular expression: {exc}",
            code="invalid_pattern",
            details={"index": index, "pattern": item["pattern"]},
            original_error=exc,
        ) from exc


class Config:
    """Config accessor for dispatcher settings."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data = data or {}
        self._env: dict[str, str] = _load_env_overrides()

    def reload(self, data: dict[str, Any], *, validate: bool = True) -> None:
        """Replace config data."""
        self._data = data or {}
        self._env = _load_env_overrides()
        if validate:
            self._validate()
        rules = self._data.get("valid_event_types")
        logger.debug("Config reloaded: {} rules", len(rules) if isinstance(rules, list) else "default")

    def _validate(self) -> None:
        """Validate config structure; raise DispatcherConfigurationError on failure."""
        rules = self._data.get("valid_event_types")
        if rules is not None and not isinstance(rules, list):
            raise DispatcherConfigurationError(
                "valid_event_types must be a list",
                code="invalid_valid_event_types",
                details={"type": type(rules).__name__},
            )
        for i, item in enumerate(rules or []):
            _compile_rule(i, item)
        replay = self._data.get("trigger_last_event")
        if replay is not None and _as_bool(replay) is None:
            raise DispatcherConfigurationError(
                "trigger_last_event must be a boolean",
                code="invalid_trigger_last_event",
                details={"value": replay},
            )

    @property
    def raw(self) -> dict[str, Any]:
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Get value by dot-separated path."""
        parts = key.split(".")
        obj: Any = self._data
        for part in parts:
            if isinstance(obj, dict) and part in obj:
                obj = obj[part]
            else:
                return default
        return obj

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __contains__(self, key: str) -> bool:
        return key in self._data

    @property
    def valid_event_types(self) -> list[str | Pattern[str]] | None:
        """Compiled ruleset, or None for the dispatcher's match-anything default."""
        raw = self._data.get("valid_event_types")
        if not isinstance(raw, list):
            return None
        return [_compile_rule(i, item) for i, item in enumerate(raw)]

    @property
    def trigger_last_event(self) -> bool:
        env_val = self._env.get("EVDISPATCH_TRIGGER_LAST_EVENT", "")
        parsed = _parse_bool(env_val)
        if parsed is not None:
            return parsed
        return _as_bool(self._data.get("trigger_last_event")) is True
