"""Dispatcher domain exceptions."""

from __future__ import annotations

from collections.abc import Sequence
from re import Pattern


class DispatcherError(Exception):
    """Base for dispatcher domain errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, object] | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}
        self.original_error = original_error


class DispatcherConfigurationError(DispatcherError):
    """Config validation or load failure."""


def describe_rule(rule: str | Pattern[str]) -> str:
    """Render a validity rule the way it reads in diagnostics: labels as-is, patterns as /.../."""
    if isinstance(rule, Pattern):
        return f"/{rule.pattern}/"
    return rule


class InvalidEventType(DispatcherError, ValueError):
    """Event type(s) rejected by the dispatcher's validity ruleset."""

    def __init__(self, event_types: Sequence[object], rules: Sequence[str | Pattern[str]]) -> None:
        self.event_types = tuple(event_types)
        self.rules = tuple(rules)
        offending = ", ".join(repr(t) for t in self.event_types) or "<none>"
        valid = "|".join(describe_rule(r) for r in self.rules)
        super().__init__(
            f"Invalid event type: {offending}. Event type should be any of: {valid}.",
            code="invalid_event_type",
            details={"event_types": self.event_types, "rules": valid},
        )
