import pytest

from netdisplays.sink import (
    ScreenCastSourceType,
    Signal,
    Sink,
    SinkProtocol,
    SinkState,
)


class FakeSink(Sink):
    display_name = "Fake"

    def __init__(self):
        super().__init__()
        self.state = SinkState.DISCONNECTED

    def start_stream(self):
        self.state = SinkState.STREAMING
        self.notify("state")
        return self

    def stop_stream(self):
        self.state = SinkState.DISCONNECTED
        self.notify("state")

    def to_uri(self):
        return "gnome-network-displays://sink?protocol=1"


def test_signal_calls_all_handlers_in_order():
    signal = Signal()
    calls = []
    signal.connect(lambda value: calls.append(("a", value)))
    signal.connect(lambda value: calls.append(("b", value)))
    assert signal.emit(7) is None
    assert calls == [("a", 7), ("b", 7)]


def test_signal_disconnect_stops_calls():
    signal = Signal()
    calls = []

    def handler(value):
        calls.append(value)

    signal.connect(handler)
    signal.emit(1)
    signal.disconnect(handler)
    signal.emit(2)
    assert calls == [1]
    assert len(signal) == 0


def test_signal_disconnect_unknown_is_ignored():
    signal = Signal()
    signal.connect(print)
    signal.disconnect(len)
    assert len(signal) == 1


def test_first_wins_signal_returns_first_result_only():
    signal = Signal(first_wins=True)
    calls = []

    def first():
        calls.append("first")
        return "element-1"

    def second():
        calls.append("second")
        return "element-2"

    signal.connect(first)
    signal.connect(second)
    assert signal.emit() == "element-1"
    assert calls == ["first"]


def test_first_wins_signal_without_handlers():
    assert Signal(first_wins=True).emit() is None


def test_handler_may_disconnect_during_emit():
    signal = Signal()
    calls = []

    def once():
        calls.append("once")
        signal.disconnect(once)

    signal.connect(once)
    assert signal.emit() is None
    assert len(signal) == 0
    signal.emit()
    assert calls == ["once"]


def test_state_values_fixed_by_source():
    assert SinkState(0x0) is SinkState.DISCONNECTED
    assert SinkState(0x120) is SinkState.WAIT_STREAMING
    assert SinkState(0x10000) is SinkState.ERROR
    with pytest.raises(ValueError):
        SinkState(0x7)


def test_protocol_ordering():
    assert [SinkProtocol(value).name for value in range(6)] == [
        "META",
        "DUMMY_WFD_P2P",
        "DUMMY_CC",
        "WFD_P2P",
        "WFD_MICE",
        "CC",
    ]
    assert SinkProtocol(1) is SinkProtocol.DUMMY_WFD_P2P


def test_screen_cast_source_type_flags_combine():
    combined = ScreenCastSourceType(3)
    assert combined == ScreenCastSourceType.MONITOR | ScreenCastSourceType.WINDOW
    assert ScreenCastSourceType.WINDOW in combined
    assert ScreenCastSourceType.VIRTUAL not in combined


def test_sink_is_abstract():
    with pytest.raises(TypeError):
        Sink()


def test_sink_defaults():
    sink = FakeSink()
    seen = []
    Signal.connect(sink.notified, lambda s, name: seen.append(name))
    Sink.notify(sink, "priority")
    assert seen == ["priority"]
    assert sink.priority == 0
    assert sink.protocol is SinkProtocol(0)
    assert sink.matches == ()
    assert sink.missing_firewall_zone is None


def test_notify_unknown_property_raises():
    sink = FakeSink()
    with pytest.raises(ValueError):
        Sink.notify(sink, "no-such-property")


def test_create_source_signal_is_first_wins():
    sink = FakeSink()
    Signal.connect(sink.create_source, lambda: "video")
    Signal.connect(sink.create_source, lambda: "other")
    assert Signal.emit(sink.create_source) == "video"