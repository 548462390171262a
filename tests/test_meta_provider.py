import pytest

from netdisplays.meta_provider import MetaProvider
from netdisplays.meta_sink import MetaSink
from netdisplays.provider import Provider
from netdisplays.sink import Sink


class FakeSink(Sink):
    def __init__(self, name, matches, priority=0):
        super().__init__()
        self.display_name = name
        self.matches = tuple(matches)
        self.priority = priority

    def start_stream(self):
        return self

    def stop_stream(self):
        pass

    def to_uri(self):
        return f"fake://{self.display_name}"


class FakeProvider(Provider):
    def __init__(self, sinks=()):
        super().__init__()
        self.sinks = list(sinks)

    def get_sinks(self):
        return list(self.sinks)

    def add(self, sink):
        self.sinks.append(sink)
        self.sink_added.emit(sink)

    def remove(self, sink):
        self.sinks.remove(sink)
        self.sink_removed.emit(sink)


def record(signal):
    events = []
    signal.connect(events.append)
    return events


def test_existing_sinks_become_meta_sinks():
    a = FakeSink("a", ["ma"])
    b = FakeSink("b", ["mb"])
    meta = MetaProvider()
    meta.add_provider(FakeProvider([a, b]))
    sinks = meta.get_sinks()
    assert len(sinks) == 2
    assert all(isinstance(s, MetaSink) for s in sinks)
    assert {s.sink for s in sinks} == {a, b}


def test_get_sinks_newest_first():
    a = FakeSink("a", ["ma"])
    b = FakeSink("b", ["mb"])
    meta = MetaProvider()
    meta.add_provider(FakeProvider([a, b]))
    assert [s.sink for s in meta.get_sinks()] == [b, a]


def test_matching_sinks_grouped():
    low = FakeSink("low", ["shared"], priority=1)
    high = FakeSink("high", ["shared"], priority=5)
    meta = MetaProvider()
    meta.add_provider(FakeProvider([low]))
    meta.add_provider(FakeProvider([high]))
    sinks = meta.get_sinks()
    assert len(sinks) == 1
    assert sinks[0].has_sink(low) and sinks[0].has_sink(high)
    assert sinks[0].sink is high


def test_sink_added_signal_values():
    provider = FakeProvider()
    meta = MetaProvider()
    meta.add_provider(provider)
    events = record(meta.sink_added)
    first = FakeSink("first", ["x"])
    provider.add(first)
    assert isinstance(events[0], MetaSink)
    assert events[0].sink is first
    provider.add(FakeSink("second", ["x"]))
    assert events[1] is None
    assert len(meta.get_sinks()) == 1


def test_bridging_sink_merges_meta_sinks():
    provider = FakeProvider()
    meta = MetaProvider()
    meta.add_provider(provider)
    a = FakeSink("a", ["ma"])
    b = FakeSink("b", ["mb"])
    provider.add(a)
    provider.add(b)
    removed = record(meta.sink_removed)
    bridge = FakeSink("bridge", ["ma", "mb"])
    provider.add(bridge)
    sinks = meta.get_sinks()
    assert len(sinks) == 1
    assert set(sinks[0].sinks) == {a, b, bridge}
    assert len(removed) == 1
    assert removed[0] is not sinks[0]
    assert removed[0].sinks == []


def test_removing_last_sink_removes_meta_sink():
    a = FakeSink("a", ["ma"])
    provider = FakeProvider([a])
    meta = MetaProvider()
    meta.add_provider(provider)
    meta_sink = meta.get_sinks()[0]
    removed = record(meta.sink_removed)
    provider.remove(a)
    assert removed == [meta_sink]
    assert meta.get_sinks() == []


def test_removing_one_of_group_emits_none():
    a = FakeSink("a", ["m"])
    b = FakeSink("b", ["m"])
    provider = FakeProvider([a, b])
    meta = MetaProvider()
    meta.add_provider(provider)
    removed = record(meta.sink_removed)
    provider.remove(a)
    assert removed == [None]
    assert meta.get_sinks()[0].sinks == [b]


def test_removing_unknown_sink_is_ignored():
    provider = FakeProvider([FakeSink("a", ["m"])])
    meta = MetaProvider()
    meta.add_provider(provider)
    removed = record(meta.sink_removed)
    provider.sink_removed.emit(FakeSink("stranger", ["other"]))
    assert removed == []
    assert len(meta.get_sinks()) == 1


def test_discover_propagates():
    provider = FakeProvider()
    meta = MetaProvider()
    meta.discover = False
    meta.add_provider(provider)
    assert provider.discover is False
    meta.discover = True
    assert provider.discover is True


def test_get_providers_newest_first():
    p1, p2 = FakeProvider(), FakeProvider()
    meta = MetaProvider()
    meta.add_provider(p1)
    meta.add_provider(p2)
    assert meta.get_providers() == [p2, p1]


def test_duplicate_provider_rejected():
    provider = FakeProvider()
    meta = MetaProvider()
    meta.add_provider(provider)
    with pytest.raises(ValueError):
        meta.add_provider(provider)


def test_remove_unknown_provider_rejected():
    meta = MetaProvider()
    with pytest.raises(ValueError):
        meta.remove_provider(FakeProvider())


def test_remove_provider_drops_sinks_and_disconnects():
    a = FakeSink("a", ["ma"])
    provider = FakeProvider([a])
    meta = MetaProvider()
    meta.add_provider(provider)
    meta.remove_provider(provider)
    assert meta.get_sinks() == []
    assert meta.get_providers() == []
    provider.add(FakeSink("later", ["ml"]))
    assert meta.get_sinks() == []