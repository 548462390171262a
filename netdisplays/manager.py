"""Exposing discovered sinks and starting streams to them as transient units."""

from __future__ import annotations

import logging
import signal
from typing import Any, Protocol

from netdisplays.provider import Provider
from netdisplays.sink import Signal, Sink
from netdisplays.systemd import UNIT_PREFIX, build_aux, build_properties, unit_name_for

logger = logging.getLogger(__name__)

BUS_NAME = "org.gnome.NetworkDisplays.Manager"
OBJECT_PATH = "/org/gnome/NetworkDisplays/Manager"

_UINT32_MASK = 0xFFFFFFFF


class SinkNotFoundError(LookupError):
    """No sink with the requested UUID is known to the provider."""


class _SystemdManager(Protocol):
    def start_transient_unit(
        self, name: str, mode: str, properties: list[Any], aux: list[Any]
    ) -> str | None:
        """Start a transient unit; return the job path."""

    def kill_unit(self, name: str, who: str, signal_number: int) -> None:
        """Send a signal to the processes of a unit."""


def sink_to_dict(sink: Sink) -> dict[str, Any]:
    """Describe ``sink`` the way the manager exposes it (signature a{sv})."""
    return {
        "uuid": sink.uuid,
        "display-name": sink.display_name,
        "priority": int(sink.priority) & _UINT32_MASK,
        "state": int(sink.state) & _UINT32_MASK,
        "protocol": int(sink.protocol) & _UINT32_MASK,
    }


class Manager:
    """Publishes the sinks of a provider and starts or stops streams to them.

    ``displays`` holds the exposed sink descriptions; ``displays_changed``
    handlers receive the new list whenever it is updated. ``systemd`` is the
    systemd manager used to run stream units, or ``None`` while unavailable.
    """

    def __init__(
        self,
        provider: Provider | None = None,
        systemd: _SystemdManager | None = None,
    ) -> None:
        self._provider: Provider | None = None
        self.systemd = systemd
        self.displays: list[dict[str, Any]] = []
        self.displays_changed = Signal()
        self.set_provider(provider)

    @property
    def provider(self) -> Provider | None:
        """The sink provider that populates the manager."""
        return self._provider

    @provider.setter
    def provider(self, value: Provider | None) -> None:
        self.set_provider(value)

    def _on_sinks_changed(self, sink: Sink | None) -> None:
        self.update_exposed_sinks()

    def set_provider(self, provider: Provider | None) -> None:
        """Set the provider whose sinks are exposed, replacing any previous one."""
        if self._provider is not None:
            self._provider.sink_added.disconnect(self._on_sinks_changed)
            self._provider.sink_removed.disconnect(self._on_sinks_changed)
            self._provider = None

        if provider is not None:
            self._provider = provider
            provider.sink_added.connect(self._on_sinks_changed)
            provider.sink_removed.connect(self._on_sinks_changed)

    def update_exposed_sinks(self) -> list[dict[str, Any]]:
        """Refresh ``displays`` from the provider and return it."""
        sinks = self._provider.get_sinks() if self._provider is not None else []
        self.displays = [sink_to_dict(sink) for sink in sinks]
        self.displays_changed.emit(self.displays)
        return self.displays

    def start_transient_unit(self, uri: str, uuid: str, display_name: str | None) -> str:
        """Start the stream unit for the sink ``uuid``; return the unit name.

        Failures to start the unit are logged; the unit name is returned anyway.
        """
        unit_name = unit_name_for(uuid)
        properties = build_properties(uuid, uri, display_name)
        aux = build_aux()

        job: str | None = None
        error: Exception | None = None
        if self.systemd is None:
            error = RuntimeError("systemd manager is not available")
        else:
            try:
                job = self.systemd.start_transient_unit(unit_name, "replace", properties, aux)
            except Exception as exc:  # reported, as the stream unit is best effort
                error = exc

        if not job:
            logger.warning(
                "NdManager: Unable to spawn nd-stream with StartTransientUnit: %s",
                error if error is not None else "none",
            )
        return unit_name

    def stop_transient_unit(self, unit_name: str) -> None:
        """Terminate the stream unit ``unit_name``.

        Raises ValueError if the unit is not a stream unit. Failures of the
        kill request itself are logged.
        """
        if not unit_name.startswith(UNIT_PREFIX):
            raise ValueError(f"Unit {unit_name} is not a GNOME Network Displays stream")

        if self.systemd is None:
            logger.warning(
                "NdManager: Error stopping unit %s: systemd manager is not available",
                unit_name,
            )
            return
        try:
            self.systemd.kill_unit(unit_name, "all", int(signal.SIGTERM))
        except Exception as exc:  # reported, matching the bus handler's behaviour
            logger.warning("NdManager: Error stopping unit %s: %s", unit_name, exc)

    def start_stream(self, uuid: str) -> str:
        """Start streaming to the sink ``uuid``; return the name of its unit."""
        sinks = self._provider.get_sinks() if self._provider is not None else []
        sink = next((candidate for candidate in sinks if candidate.uuid == uuid), None)
        if sink is None:
            raise SinkNotFoundError(f"Failed to find sink with uuid {uuid}")

        uri = sink.to_uri()
        return self.start_transient_unit(uri, uuid, sink.display_name)

    def stop_stream(self, unit_name: str) -> None:
        """Stop the stream running in the unit ``unit_name``."""
        self.stop_transient_unit(unit_name)