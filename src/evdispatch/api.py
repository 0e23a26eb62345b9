"""Embeddable API: attach a dispatcher's on/one/off/trigger to an unrelated host."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from evdispatch.dispatcher import Dispatcher, Handler, Subscription
    from evdispatch.events import Event
    from evdispatch.rules import EventTypes

API_METHODS = ("on", "one", "off", "trigger", "trigger_event")


class EmbeddableApi:
    """Restricted view of a Dispatcher.

    Every call goes to the same dispatcher instance, so several hosts carrying
    the API share one registry, cache and enabled flag.
    """

    __slots__ = ("_dispatcher",)

    def __init__(self, dispatcher: Dispatcher) -> None:
        self._dispatcher = dispatcher

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    def on(self, event_type: EventTypes, handler: Handler, **options: Any) -> Subscription:
        return self._dispatcher.on(event_type, handler, **options)

    def one(self, event_type: EventTypes, handler: Handler, **options: Any) -> Subscription:
        return self._dispatcher.one(event_type, handler, **options)

    def off(self, event_type: EventTypes, handler: Handler | None = None) -> EmbeddableApi:
        self._dispatcher.off(event_type, handler)
        return self

    def trigger(self, event_type: str, payload: Mapping[str, Any] | None = None, /, **fields: Any) -> list[Any] | None:
        return self._dispatcher.trigger(event_type, payload, **fields)

    def trigger_event(self, event: Event) -> list[Any] | None:
        return self._dispatcher.trigger_event(event)

    def attach(self, host: Any) -> Any:
        """Install the forwarding callables as attributes of ``host`` and return it.

        ``host.off`` returns the host so calls chain from the host's side.
        """
        for name in API_METHODS:
            setattr(host, name, getattr(self, name))

        def off(event_type: EventTypes, handler: Handler | None = None) -> Any:
            self._dispatcher.off(event_type, handler)
            return host

        host.off = off
        return host

    def __repr__(self) -> str:
        return f"<EmbeddableApi of {self._dispatcher!r}>"


def _forwarder(attribute: str, name: str):
    def method(self: Any, *args: Any, **kwargs: Any) -> Any:
        result = getattr(getattr(self, attribute), name)(*args, **kwargs)
        # Mirror the dispatcher's chaining, but from the host.
        return self if name == "off" else result

    method.__name__ = name
    method.__qualname__ = name
    method.__doc__ = f"Forward ``{name}`` to ``self.{attribute}``."
    return method


def forward_events(attribute: str = "events"):
    """Class decorator giving a host class on/one/off/trigger/trigger_event methods.

    The generated methods delegate to ``getattr(self, attribute)``, which may be a
    Dispatcher or an EmbeddableApi. Methods the class already defines are kept.
    """

    def decorator(cls: type) -> type:
        for name in API_METHODS:
            if name not in cls.__dict__:
                setattr(cls, name, _forwarder(attribute, name))
        return cls

    return decorator
