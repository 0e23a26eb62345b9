"""Event value object and typed event factories."""

from __future__ import annotations

import functools
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any

from evdispatch.core.guards import assert_string


@dataclass(frozen=True, repr=False)
class Event:
    """Immutable event delivered to handlers.

    ``type`` is the event type it was dispatched under; everything else the
    trigger supplied lives in ``payload`` and is readable as attributes::

        evt = Event("click", {"x": 1})
        evt.x  # 1

    Payload keys may not be ``type`` or shadow an attribute of the event
    class (``get``, ``payload``, ``as_dict``, subclass fields, ...).
    """

    type: str
    payload: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        assert_string(self.type)
        payload = dict(self.payload or {})
        if "type" in payload:
            raise ValueError("Event payload must not contain a 'type' field")
        # Keys that would be shadowed by a field or method of the event class.
        shadowed = sorted(k for k in payload if k in _reserved_names(type(self)))
        if shadowed:
            raise ValueError(f"Event payload keys clash with {type(self).__name__} attributes: {shadowed}")
        object.__setattr__(self, "payload", MappingProxyType(payload))

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails; never resolve dunders or
        # the payload slot itself through the payload.
        if name.startswith("__") or name == "payload":
            raise AttributeError(name)
        try:
            return self.payload[name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}") from None

    def __getitem__(self, name: str) -> Any:
        return self.payload[name]

    def get(self, name: str, default: Any = None) -> Any:
        return self.payload.get(name, default)

    def as_dict(self) -> dict[str, Any]:
        """Flat view: ``{"type": ..., **payload}`` plus any subclass fields."""
        data: dict[str, Any] = {"type": self.type}
        data.update(self.payload)
        for f in fields(self):
            if f.name not in ("type", "payload"):
                data[f.name] = getattr(self, f.name)
        return data

    def __reduce__(self) -> tuple[Any, ...]:
        values = {f.name: getattr(self, f.name) for f in fields(self) if f.init}
        values["payload"] = dict(self.payload)
        return (_restore_event, (type(self), values))

    def __repr__(self) -> str:
        parts = ", ".join(f"{k}={v!r}" for k, v in self.as_dict().items())
        return f"{type(self).__name__}({parts})"


@functools.lru_cache(maxsize=None)
def _reserved_names(cls: type) -> frozenset[str]:
    return frozenset(dir(cls)) | {f.name for f in fields(cls)}


def _restore_event(cls: type[Event], values: dict[str, Any]) -> Event:
    return cls(**values)


def event(type_name: str):
    """Decorator to turn a payload-returning function into an Event factory for ``type_name``."""

    def decorator(f: Any) -> Any:
        @functools.wraps(f)
        def wrapper(*args: Any, **kwargs: Any) -> Event:
            payload = f(*args, **kwargs)
            return Event(type_name, payload or {})

        wrapper.TYPE = type_name  # type: ignore[attr-defined]
        return wrapper

    return decorator
