# netdisplays

A small, dependency-free library for the bookkeeping side of a
network-displays service. It covers the following:

- the model of sinks (displays that can be streamed to) and providers
  (things that discover sinks);
- the merging of sinks that several providers find for the same display;
- sink URIs;
- descriptions of the transient systemd units that run streams;
- the firewalld zone that Wi-Fi Display connections need.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

### `netdisplays.sink`

- `Sink` is the abstract base class for a display. Subclasses set
  `uuid`, `display_name`, `matches`, `priority`, `state`, `protocol`,
  `missing_video_codec`, `missing_audio_codec` and `missing_firewall_zone`.
  They implement `start_stream()`, `stop_stream()` and `to_uri()`.
  - `notify(name)` emits the sink's `notified` signal as `(sink, name)`.
    It raises `ValueError` for a name that is not one of the sink's
    properties.
  - `create_source` and `create_audio_source` are signals that return
    the result of their first handler.
- `SinkState`, `SinkProtocol` and `ScreenCastSourceType` are the
  enumerations of states, protocols and screencast source kinds.
- `Signal` is a callback list with `connect`, `disconnect` and `emit`.

### `netdisplays.provider`

`Provider` is the abstract base class for sink discovery. It has:

- `sink_added` and `sink_removed` signals;
- a `discover` flag, which defaults to `True`;
- an abstract `get_sinks()`.

### `netdisplays.meta_sink`

`MetaSink` groups several sinks and selects the one with the highest
`priority`.

- `display_name`, `priority`, `state`, `protocol` and the `missing_*`
  values are read from the selected sink. Its notifications are forwarded.
- `matches` is the union of the match strings of all grouped sinks.
- `add_sink` and `remove_sink` change the group. `remove_sink` returns
  `True` when the group is left empty.
- `has_sink` and `matches_sink` test membership and shared match strings.
- `start_stream()` and `to_uri()` are delegated to the selected sink.
- `stop_stream()` always raises `RuntimeError`. Stop the sink that
  `start_stream()` returned instead.

### `netdisplays.meta_provider`

`MetaProvider` is a `Provider` that collects the sinks of every provider
given to `add_provider`.

- Sinks that share a match string end up in one `MetaSink`. If a new sink
  matches several meta sinks, they are merged into one.
- `sink_added` and `sink_removed` receive the affected `MetaSink`, or
  `None` when an existing one only changed.
- Setting `discover` passes the value on to every provider.
- `has_providers` reports whether any provider is registered.
- `remove_provider` drops the sinks that the provider contributed.

### `netdisplays.uri`

- `generate_uri(params)` builds a URI such as
  `gnome-network-displays://sink?protocol=1`.
- `parse_uri(uri)` returns the decoded query parameters.
- `register_sink_factory(protocol, factory)` sets the callable that
  recreates sinks of a protocol.
- `uri_to_sink(uri)` uses the registered factory to rebuild a sink.
- Failures raise `UriError`.

### `netdisplays.systemd`

- `unit_name_for(uuid)` returns `gnome-network-displays-stream-<uuid>.service`.
- `build_properties(uuid, uri, display_name)` returns the `ExecStart`
  and `Description` unit properties. `ExecStart` runs
  `/usr/libexec/gnome-network-displays-stream <uri>`.
- `build_aux()` returns the (empty) list of auxiliary units.

### `netdisplays.firewalld`

- `build_zone_settings()` returns the settings of the
  `P2P-WiFi-Display` zone. The zone accepts DHCP, DNS, TCP port 7236 and
  ICMP, and rejects everything else.
- `ensure_wfd_zone(bus)` asks firewalld for that zone through `bus`.
  `bus` is any object with a
  `call(bus_name, object_path, interface, method, args, reply_type, *, interactive, timeout_ms)`
  method, which raises `RemoteError` for remote failures. The function
  works as follows:
  - If firewalld is not running (`ServiceUnknown`), it returns `True`.
  - On any other remote error it adds the zone and reloads firewalld.
  - Errors from those calls propagate.

### `netdisplays.manager`

`Manager` watches a provider and keeps `displays`, a list of dictionaries
produced by `sink_to_dict` with the keys `uuid`, `display-name`,
`priority`, `state` and `protocol`. The list is refreshed by
`update_exposed_sinks()`, which also emits `displays_changed`.

- `start_stream(uuid)` finds the sink by UUID and asks the `systemd`
  object to start a transient unit for it. It returns the unit name, or
  raises `SinkNotFoundError`. The `systemd` object must have
  `start_transient_unit(name, mode, properties, aux)` and
  `kill_unit(name, who, signal_number)`.
- `stop_stream(unit_name)` sends `SIGTERM` to the unit. It raises
  `ValueError` for units that are not stream units.
- Failures of the `systemd` object itself are logged, not raised.

## Example

```python
from netdisplays.manager import Manager
from netdisplays.meta_provider import MetaProvider
from netdisplays.provider import Provider
from netdisplays.sink import Sink, SinkProtocol
from netdisplays.uri import generate_uri


class DemoSink(Sink):
    protocol = SinkProtocol.DUMMY_WFD_P2P

    def __init__(self, name, match, priority=0):
        super().__init__()
        self.uuid = name
        self.display_name = name
        self.matches = (match,)
        self.priority = priority

    def start_stream(self):
        return self

    def stop_stream(self):
        pass

    def to_uri(self):
        return generate_uri({"protocol": str(int(self.protocol))})


class ListProvider(Provider):
    def __init__(self, sinks):
        super().__init__()
        self.sinks = list(sinks)

    def get_sinks(self):
        return list(self.sinks)


class PrintingSystemd:
    def start_transient_unit(self, name, mode, properties, aux):
        print("start", name, properties)
        return "/job/1"

    def kill_unit(self, name, who, signal_number):
        print("kill", name, signal_number)


meta = MetaProvider()
meta.add_provider(ListProvider([DemoSink("Living room (P2P)", "tv-1", priority=10)]))
meta.add_provider(ListProvider([DemoSink("Living room (LAN)", "tv-1", priority=20)]))

(tv,) = meta.get_sinks()
print(tv.display_name)          # Living room (LAN)

manager = Manager(meta, systemd=PrintingSystemd())
print(manager.update_exposed_sinks())
unit = manager.start_stream(tv.uuid)
manager.stop_stream(unit)
```

## What it does not do

This package holds the model and the helpers only. It has:

- no concrete sinks or providers: no Wi-Fi Display, Miracast or Chromecast
  discovery, and no streaming or media pipeline;
- no message bus connection: `ensure_wfd_zone` and `Manager` are handed
  objects that make the calls;
- no command-line program, no service to run and no user interface.