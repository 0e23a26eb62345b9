"""Type guards and assertions used at the dispatcher's call boundary."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from re import Pattern
from typing import Any, TypeGuard


def is_string(obj: Any) -> TypeGuard[str]:
    return isinstance(obj, str)


def is_pattern(obj: Any) -> TypeGuard[Pattern[str]]:
    return isinstance(obj, Pattern)


def is_callable(obj: Any) -> TypeGuard[Callable[..., Any]]:
    return callable(obj)


def is_sequence(obj: Any) -> TypeGuard[Iterable[Any]]:
    """True for iterable containers, excluding strings and bytes."""
    return isinstance(obj, Iterable) and not isinstance(obj, (str, bytes, bytearray))


def assert_string(obj: Any) -> str:
    if is_string(obj):
        return obj
    raise TypeError(f"Value should be a string, got {type(obj).__name__}.")


def assert_pattern(obj: Any) -> Pattern[str]:
    if is_pattern(obj):
        return obj
    raise TypeError(f"Value should be a compiled regular expression, got {type(obj).__name__}.")


def assert_callable(obj: Any) -> Callable[..., Any]:
    if is_callable(obj):
        return obj
    raise TypeError(f"Value should be a callable, got {type(obj).__name__}.")


def assert_sequence(obj: Any) -> list[Any]:
    """Return a list of the container's items; strings are not sequences here."""
    if is_sequence(obj):
        return list(obj)
    raise TypeError(f"Value should be a sequence, got {type(obj).__name__}.")
