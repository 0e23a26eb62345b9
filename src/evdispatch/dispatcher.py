"""Synchronous, validated publish/subscribe dispatcher."""

from __future__ import annotations

import inspect
import threading
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger

from evdispatch.api import EmbeddableApi
from evdispatch.config import Config, load_config_with_env
from evdispatch.core.errors import InvalidEventType
from evdispatch.core.guards import assert_callable, is_string
from evdispatch.events import Event
from evdispatch.rules import EventTypes, Ruleset, ValidityRule

Handler = Callable[..., Any]


def _handler_name(handler: Handler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


def _same_handler(a: Handler, b: Handler) -> bool:
    """Identity match; bound methods match on the same function and the same instance."""
    if a is b:
        return True
    if inspect.ismethod(a) and inspect.ismethod(b):
        return a.__self__ is b.__self__ and a.__func__ is b.__func__
    return False


@dataclass(frozen=True)
class _Registration:
    """One bucket entry. Handlers are matched with ``_same_handler``."""

    handler: Handler
    with_context: bool = False


class Subscription:
    """Unsubscribe capability returned by ``on``/``one``.

    Calling it removes exactly the registration it was created for. Calling it
    again is a no-op.
    """

    __slots__ = ("_dispatcher", "_cancelled", "event_types", "handler")

    def __init__(self, dispatcher: Dispatcher, event_types: tuple[str, ...], handler: Handler) -> None:
        self._dispatcher = dispatcher
        self._cancelled = False
        self.event_types = event_types
        self.handler = handler

    @property
    def active(self) -> bool:
        """True while the handler is still registered for at least one of its types."""
        if self._cancelled:
            return False
        return any(self._dispatcher._is_registered(t, self.handler) for t in self.event_types)

    def __call__(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._dispatcher.off(self.event_types, self.handler)

    unsubscribe = __call__

    def __repr__(self) -> str:
        state = "active" if self.active else "inactive"
        return f"<Subscription {_handler_name(self.handler)} on {list(self.event_types)} ({state})>"


class _Once:
    """Wrapper that deregisters itself, then forwards to the wrapped handler, at most once."""

    def __init__(self, dispatcher: Dispatcher, event_types: tuple[str, ...], handler: Handler) -> None:
        self._dispatcher = dispatcher
        self._event_types = event_types
        self._fired = False
        self.__wrapped__ = handler
        self.__qualname__ = f"once({_handler_name(handler)})"

    def __call__(self, *args: Any) -> Any:
        # An outer trigger's snapshot may still hold this wrapper after a
        # re-entrant trigger already consumed it.
        with self._dispatcher._lock:
            if self._fired:
                return None
            self._fired = True
        self._dispatcher.off(self._event_types, self)
        return self.__wrapped__(*args)


class Dispatcher:
    """Registry of handlers keyed by event type, with validation and last-event replay.

    ``valid_event_types`` is an ordered collection of exact labels (``str``) and
    compiled patterns (``re.Pattern``, matched with ``search``). It defaults to
    accepting any non-empty type and is fixed for the dispatcher's lifetime.

    Handlers run synchronously, in registration order, on the caller's thread.
    A handler that raises aborts the trigger; later handlers are not called.
    """

    def __init__(
        self,
        valid_event_types: Iterable[ValidityRule] | None = None,
        *,
        trigger_last_event: bool = False,
    ) -> None:
        self._rules = Ruleset(valid_event_types)
        self._trigger_last_event = bool(trigger_last_event)
        self._handlers: dict[str, list[_Registration]] = {}
        self._last_events: dict[str, Event] = {}
        self._enabled = True
        self._context: object | None = None
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config: Config | Mapping[str, Any]) -> Dispatcher:
        """Build a dispatcher from a Config (or a raw config dict, validated first)."""
        if not isinstance(config, Config):
            data = dict(config)
            config = Config()
            config.reload(data)
        return cls(config.valid_event_types, trigger_last_event=config.trigger_last_event)

    @classmethod
    def from_file(cls, path: str | Path, *, section: str | None = None) -> Dispatcher:
        """Build a dispatcher from a YAML settings file, with .env and EVDISPATCH_* overrides applied."""
        return cls.from_config(load_config_with_env(path, section=section))

    # -- validation ---------------------------------------------------------

    @property
    def valid_event_types(self) -> tuple[ValidityRule, ...]:
        return self._rules.rules

    def is_valid(self, event_type: EventTypes) -> bool:
        """Determine if every given event type is accepted by the ruleset."""
        return self._rules.is_valid(event_type)

    def validate(self, event_type: EventTypes) -> tuple[str, ...]:
        """Raise InvalidEventType unless every given event type is valid; return them as a tuple."""
        return self._rules.validate(event_type)

    def _validate_single(self, event_type: str) -> str:
        if not is_string(event_type):
            raise InvalidEventType([event_type], self._rules.rules)
        return self._rules.validate(event_type)[0]

    # -- context / enable ---------------------------------------------------

    @property
    def invocation_context(self) -> object:
        """Value passed first to handlers registered with ``with_context=True``."""
        return self if self._context is None else self._context

    def set_invocation_context(self, context: object) -> Dispatcher:
        """Set the context handed to context-aware handlers. ``None`` restores the dispatcher itself."""
        self._context = context
        return self

    @property
    def enabled(self) -> bool:
        return self._enabled

    def disable(self) -> Dispatcher:
        """Suppress delivery. Registration, removal and the last-event cache keep working."""
        self._enabled = False
        return self

    def enable(self) -> Dispatcher:
        self._enabled = True
        return self

    # -- registration -------------------------------------------------------

    def on(
        self,
        event_type: EventTypes,
        handler: Handler,
        *,
        trigger_last_event: bool | None = None,
        with_context: bool = False,
    ) -> Subscription:
        """Register ``handler`` for one or more event types.

        Registering a handler already present for a type is a no-op for that
        type. With ``trigger_last_event`` (or the dispatcher default), the
        handler is immediately called with each type's cached last event.
        """
        types = self.validate(event_type)
        assert_callable(handler)
        registration = _Registration(handler, with_context)

        with self._lock:
            for t in types:
                bucket = self._handlers.setdefault(t, [])
                if any(_same_handler(r.handler, handler) for r in bucket):
                    logger.debug("Handler {} already registered for {}", _handler_name(handler), t)
                    continue
                bucket.append(registration)
            logger.debug("Registered {} for {}", _handler_name(handler), list(types))

        replay = self._trigger_last_event if trigger_last_event is None else trigger_last_event
        if replay:
            self._replay_last_events(types, registration)

        return Subscription(self, types, handler)

    def one(
        self,
        event_type: EventTypes,
        handler: Handler,
        *,
        trigger_last_event: bool | None = None,
        with_context: bool = False,
    ) -> Subscription:
        """Like ``on``, but ``handler`` runs at most once across all the given types."""
        types = self.validate(event_type)
        assert_callable(handler)
        wrapper = _Once(self, types, handler)
        return self.on(types, wrapper, trigger_last_event=trigger_last_event, with_context=with_context)

    def off(self, event_type: EventTypes, handler: Handler | None = None) -> Dispatcher:
        """Remove ``handler`` for the given type(s), or every handler if ``handler`` is omitted."""
        types = self.validate(event_type)

        with self._lock:
            for t in types:
                bucket = self._handlers.get(t)
                if bucket is None:
                    continue
                if handler is None:
                    del self._handlers[t]
                    logger.debug("Removed all handlers for {}", t)
                    continue
                remaining = [r for r in bucket if not _same_handler(r.handler, handler)]
                if remaining:
                    self._handlers[t] = remaining
                else:
                    del self._handlers[t]
                if len(remaining) != len(bucket):
                    logger.debug("Removed {} from {}", _handler_name(handler), t)
        return self

    def clear(self) -> Dispatcher:
        """Remove every handler for every event type. The last-event cache is kept."""
        with self._lock:
            self._handlers.clear()
        logger.debug("Cleared all handlers")
        return self

    # -- introspection ------------------------------------------------------

    @property
    def event_types(self) -> tuple[str, ...]:
        """Event types that currently have handlers, in first-registration order."""
        with self._lock:
            return tuple(self._handlers)

    def has_handlers(self, event_type: str) -> bool:
        return event_type in self._handlers

    def handlers_for(self, event_type: str) -> tuple[Handler, ...]:
        with self._lock:
            return tuple(r.handler for r in self._handlers.get(event_type, ()))

    def _is_registered(self, event_type: str, handler: Handler) -> bool:
        with self._lock:
            return any(_same_handler(r.handler, handler) for r in self._handlers.get(event_type, ()))

    # -- triggering ---------------------------------------------------------

    def trigger(self, event_type: str, payload: Mapping[str, Any] | None = None, /, **fields: Any) -> list[Any] | None:
        """Build an Event from ``event_type`` and payload fields and deliver it.

        Returns the handlers' return values in registration order, or ``None``
        when nothing ran (dispatcher disabled or no handlers for the type).
        """
        event_type = self._validate_single(event_type)
        data = dict(payload or {})
        data.update(fields)
        return self._dispatch(event_type, Event(event_type, data))

    def trigger_event(self, event: Event) -> list[Any] | None:
        """Deliver a pre-built Event as-is, under its own ``type``."""
        if not isinstance(event, Event):
            raise TypeError(f"Value should be an Event, got {type(event).__name__}.")
        return self._dispatch(self._validate_single(event.type), event)

    def _dispatch(self, event_type: str, event: Event) -> list[Any] | None:
        with self._lock:
            self._last_events[event_type] = event
            if not self._enabled:
                logger.debug("Dispatcher disabled; not delivering {}", event_type)
                return None
            bucket = self._handlers.get(event_type)
            if not bucket:
                return None
            snapshot = tuple(bucket)
            context = self.invocation_context

        return [self._invoke(r, event, context) for r in snapshot]

    @staticmethod
    def _invoke(registration: _Registration, event: Event, context: object) -> Any:
        if registration.with_context:
            return registration.handler(context, event)
        return registration.handler(event)

    def _replay_last_events(self, types: tuple[str, ...], registration: _Registration) -> None:
        with self._lock:
            if not self._enabled:
                return
            cached = [self._last_events[t] for t in types if t in self._last_events]
            context = self.invocation_context
        for event in cached:
            self._invoke(registration, event, context)

    # -- last-event cache ---------------------------------------------------

    def get_last_event(self, event_type: str) -> Event | None:
        """Most recently triggered event for ``event_type``, delivered or not."""
        return self._last_events.get(event_type)

    def remove_last_event(self, event_type: str) -> Event | None:
        """Drop and return the cached last event for ``event_type``."""
        with self._lock:
            return self._last_events.pop(event_type, None)

    def clear_last_events(self) -> Dispatcher:
        with self._lock:
            self._last_events.clear()
        return self

    # -- embedding ----------------------------------------------------------

    def as_embeddable_api(self) -> EmbeddableApi:
        """Restricted on/one/off/trigger view sharing this dispatcher's state."""
        return EmbeddableApi(self)

    def __repr__(self) -> str:
        state = "enabled" if self._enabled else "disabled"
        return f"<Dispatcher {state} types={list(self._handlers)}>"
