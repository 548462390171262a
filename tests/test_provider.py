import pytest

from netdisplays.provider import Provider
from netdisplays.sink import Signal, Sink


class FakeSink(Sink):
    def start_stream(self):
        return self

    def stop_stream(self):
        pass

    def to_uri(self):
        return "gnome-network-displays://sink?protocol=2"


class FakeProvider(Provider):
    def __init__(self):
        super().__init__()
        self._sinks = []

    def get_sinks(self):
        return list(self._sinks)


def _add(provider, sink):
    provider._sinks.append(sink)
    return Signal.emit(provider.sink_added, sink)


def _remove(provider, sink):
    provider._sinks.remove(sink)
    return Signal.emit(provider.sink_removed, sink)


def test_provider_is_abstract():
    with pytest.raises(TypeError):
        Provider()


def test_discover_defaults_to_true():
    provider = FakeProvider()
    added = []
    Signal.connect(provider.sink_added, added.append)
    sink = FakeSink()
    assert Signal.emit(provider.sink_added, sink) is None
    assert added == [sink]
    assert provider.discover is True


def test_get_sinks_returns_new_list():
    provider = FakeProvider()
    sink = FakeSink()
    assert _add(provider, sink) is None
    sinks = provider.get_sinks()
    sinks.clear()
    assert provider.get_sinks() == [sink]


def test_sink_signals_carry_sink():
    provider = FakeProvider()
    added, removed = [], []
    Signal.connect(provider.sink_added, added.append)
    Signal.connect(provider.sink_removed, removed.append)
    sink = FakeSink()
    _add(provider, sink)
    _remove(provider, sink)
    assert added == [sink]
    assert removed == [sink]
    assert provider.get_sinks() == []