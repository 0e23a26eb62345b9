"""Test the embeddable API and host composition."""

import pytest

from evdispatch import Dispatcher, EmbeddableApi, Event, InvalidEventType, forward_events


@pytest.fixture
def ed():
    return Dispatcher(["click", "touch", "sentResponse"])


class TestEmbeddableApi:
    """Test the restricted dispatcher view."""

    def test_shares_dispatcher_state(self, ed):
        api = ed.as_embeddable_api()
        received = []

        api.on("touch", received.append)
        ed.trigger("touch", {"foo": "foobar"})

        assert api.dispatcher is ed
        assert [e.as_dict() for e in received] == [{"type": "touch", "foo": "foobar"}]
        assert ed.has_handlers("touch")

    def test_two_views_share_one_registry(self, ed):
        first, second = ed.as_embeddable_api(), ed.as_embeddable_api()
        received = []

        first.on("click", received.append)
        second.trigger("click")

        assert len(received) == 1

    def test_trigger_returns_results(self, ed):
        api = EmbeddableApi(ed)
        api.on("touch", lambda e: False)

        assert api.trigger("touch") == [False]
        assert api.trigger_event(Event("touch")) == [False]

    def test_one_and_off(self, ed):
        api = ed.as_embeddable_api()
        received = []

        api.one("click", received.append)
        api.trigger("click")
        api.trigger("click")
        assert len(received) == 1

        api.on("click", received.append)
        assert api.off("click") is api
        assert api.trigger("click") is None

    def test_on_passes_options(self, ed):
        api = ed.as_embeddable_api()
        ed.trigger("click")
        received = []

        api.on("click", received.append, trigger_last_event=True)

        assert len(received) == 1

    def test_validation_applies(self, ed):
        api = ed.as_embeddable_api()
        with pytest.raises(InvalidEventType):
            api.on("scroll", print)

    def test_attach_to_instance(self, ed):
        class Host:
            pass

        host = ed.as_embeddable_api().attach(Host())
        received = []

        unsubscribe = host.on("click", received.append)
        host.trigger("click")
        unsubscribe()
        host.trigger("click")

        assert len(received) == 1
        assert host.off("click") is host


class TestForwardEvents:
    """Test class-level composition without inheritance."""

    def test_host_gains_methods(self, ed):
        @forward_events("events")
        class Widget:
            def __init__(self, events):
                self.events = events

            def listen_sent_response(self, sink):
                return self.on("sentResponse", sink)

        widget = Widget(ed.as_embeddable_api())
        received = []

        widget.listen_sent_response(received.append)
        results = widget.trigger("sentResponse", {"foo": "foobar"})

        assert results == [None]
        assert received[0].as_dict() == {"type": "sentResponse", "foo": "foobar"}
        assert Widget.__mro__ == (Widget, object)

    def test_forward_to_dispatcher_and_chain_off(self, ed):
        @forward_events("bus")
        class Host:
            def __init__(self):
                self.bus = ed

        host = Host()
        host.on("click", print)

        assert host.off("click") is host
        assert not ed.has_handlers("click")

    def test_existing_methods_kept(self, ed):
        @forward_events()
        class Host:
            def __init__(self):
                self.events = ed

            def trigger(self, name):
                return f"own {name}"

        host = Host()

        assert host.trigger("click") == "own click"
        assert Host.one.__name__ == "one"

    def test_hosts_share_dispatcher(self, ed):
        @forward_events()
        class Host:
            def __init__(self, events):
                self.events = events

        api = ed.as_embeddable_api()
        a, b = Host(api), Host(api)
        received = []

        a.on("click", received.append)
        b.trigger("click")

        assert len(received) == 1
