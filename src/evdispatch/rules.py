"""Validity ruleset: which event types a dispatcher accepts."""

from __future__ import annotations

import re
from collections.abc import Iterable
from re import Pattern
from typing import Union

from evdispatch.core.errors import InvalidEventType
from evdispatch.core.guards import assert_sequence, is_pattern, is_sequence, is_string

ValidityRule = Union[str, Pattern[str]]
EventTypes = Union[str, Iterable[str]]

# Any non-empty event type.
MATCH_ANY: Pattern[str] = re.compile(r".+", re.DOTALL)


def as_event_types(event_type: object) -> tuple[object, ...]:
    """Normalize one type or a collection of types into a tuple (members unchecked)."""
    if is_sequence(event_type):
        return tuple(event_type)
    return (event_type,)


class Ruleset:
    """Ordered, immutable collection of exact labels and patterns."""

    __slots__ = ("_rules",)

    def __init__(self, rules: Iterable[ValidityRule] | None = None) -> None:
        if rules is None:
            checked: tuple[ValidityRule, ...] = (MATCH_ANY,)
        else:
            checked = tuple(assert_sequence(rules))
            for rule in checked:
                if not (is_string(rule) or is_pattern(rule)):
                    raise TypeError(f"Value should be a string or a compiled regular expression, got {type(rule).__name__}.")
        self._rules = checked

    @property
    def rules(self) -> tuple[ValidityRule, ...]:
        return self._rules

    def matches(self, candidate: object) -> bool:
        """True once any rule accepts ``candidate``."""
        if not is_string(candidate):
            return False
        for rule in self._rules:
            if is_pattern(rule):
                if rule.search(candidate) is not None:
                    return True
            elif candidate == rule:
                return True
        return False

    def is_valid(self, event_type: object) -> bool:
        """True if every type in ``event_type`` is accepted; empty collections are invalid."""
        types = as_event_types(event_type)
        return bool(types) and all(self.matches(t) for t in types)

    def validate(self, event_type: object) -> tuple[str, ...]:
        """Return the normalized types, or raise InvalidEventType naming the rejected ones."""
        types = as_event_types(event_type)
        rejected = [t for t in types if not self.matches(t)]
        if rejected or not types:
            raise InvalidEventType(rejected, self._rules)
        return types  # type: ignore[return-value]

    def __iter__(self):
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"Ruleset({list(self._rules)!r})"
