"""A sink that groups several sinks which lead to the same display."""

from __future__ import annotations

import logging
import uuid as _uuid
from typing import ClassVar

from netdisplays.sink import Sink, SinkProtocol, SinkState

logger = logging.getLogger(__name__)

_MIN_PRIORITY = -(2**31)

_PASS_THROUGH = (
    "display_name",
    "priority",
    "state",
    "protocol",
    "missing_video_codec",
    "missing_audio_codec",
    "missing_firewall_zone",
)


class MetaSink(Sink):
    """Groups sinks that reach the same display and fronts the preferred one.

    The sink with the highest priority is selected. The pass-through
    properties read from it, and its change notifications are forwarded.
    """

    PROPERTIES: ClassVar[frozenset[str]] = Sink.PROPERTIES | {"sink", "sinks"}

    def __init__(self, sink: Sink | None = None) -> None:
        super().__init__()
        self.uuid = str(_uuid.uuid4())
        self._sinks: list[Sink] = []
        self._current: Sink | None = None
        if sink is not None:
            self.add_sink(sink)

    # -- selected sink and children -------------------------------------

    @property
    def sink(self) -> Sink | None:
        """The currently selected sink.

        Assigning a sink adds it to the group; it is not necessarily selected.
        """
        return self._current

    @sink.setter
    def sink(self, value: Sink) -> None:
        self.add_sink(value)

    @property
    def sinks(self) -> list[Sink]:
        """All sinks grouped into this meta sink."""
        return list(self._sinks)

    # -- pass-through properties ----------------------------------------

    @property
    def display_name(self) -> str | None:  # type: ignore[override]
        return self._current.display_name if self._current else None

    @property
    def priority(self) -> int:  # type: ignore[override]
        return self._current.priority if self._current else 0

    @property
    def state(self) -> SinkState:  # type: ignore[override]
        return self._current.state if self._current else SinkState.DISCONNECTED

    @property
    def protocol(self) -> SinkProtocol:  # type: ignore[override]
        return self._current.protocol if self._current else SinkProtocol.META

    @property
    def missing_video_codec(self) -> list[str] | None:  # type: ignore[override]
        return self._current.missing_video_codec if self._current else None

    @property
    def missing_audio_codec(self) -> list[str] | None:  # type: ignore[override]
        return self._current.missing_audio_codec if self._current else None

    @property
    def missing_firewall_zone(self) -> str | None:  # type: ignore[override]
        return self._current.missing_firewall_zone if self._current else None

    @property
    def matches(self) -> tuple[str, ...]:  # type: ignore[override]
        """The match strings of all child sinks, without duplicates."""
        seen: dict[str, None] = {}
        for child in self._sinks:
            for match in child.matches:
                seen.setdefault(match, None)
        return tuple(seen)

    # -- internals ------------------------------------------------------

    def _on_sink_notify(self, sink: Sink, name: str) -> None:
        if name in type(self).PROPERTIES:
            self.notify(name)

    def _update(self) -> None:
        best_priority = _MIN_PRIORITY
        best_sink: Sink | None = None

        for child in self._sinks:
            priority = child.priority
            if priority == best_priority:
                logger.debug(
                    "MetaSink: Found two sinks with identical priority! "
                    "Preferred order is undefined. Priority: %i",
                    priority,
                )
            if priority > best_priority:
                best_sink = child
                best_priority = priority

        if best_sink is self._current:
            return

        if self._current is not None:
            self._current.notified.disconnect(self._on_sink_notify)
            self._current = None

        if best_sink is not None:
            self._current = best_sink
            best_sink.notified.connect(self._on_sink_notify)
            logger.debug("MetaSink: Priority sink updated. Priority: %i", best_priority)
        else:
            logger.debug("MetaSink: No usable sink is left, object has become invalid.")

        for name in _PASS_THROUGH:
            self.notify(name)

    # -- group management -----------------------------------------------

    def add_sink(self, sink: Sink) -> None:
        """Add ``sink`` to the group."""
        if self.has_sink(sink):
            raise ValueError("Sink is already part of this meta sink")
        self._sinks.append(sink)
        self._update()
        self.notify("sinks")
        self.notify("matches")

    def remove_sink(self, sink: Sink) -> bool:
        """Remove ``sink``; returns True if no sinks are left and the group is invalid."""
        for index, child in enumerate(self._sinks):
            if child is sink:
                del self._sinks[index]
                break
        else:
            raise ValueError("Sink is not part of this meta sink")
        self._update()
        self.notify("sinks")
        self.notify("matches")
        return not self._sinks

    def has_sink(self, sink: Sink) -> bool:
        """Whether ``sink`` is one of the grouped sinks."""
        return any(child is sink for child in self._sinks)

    def matches_sink(self, sink: Sink) -> bool:
        """Whether ``sink`` shares a match string with any grouped sink."""
        needles = sink.matches
        if needles is None:
            return False
        return any(
            needle in child.matches for child in self._sinks for needle in needles
        )

    # -- Sink interface -------------------------------------------------

    def _require_current(self) -> Sink:
        if self._current is None:
            raise RuntimeError("MetaSink has no sinks left")
        return self._current

    def start_stream(self) -> Sink | None:
        """Start streaming on the selected sink and return the sink that streams."""
        return self._require_current().start_stream()

    def stop_stream(self) -> None:
        """Always fails: stop the sink returned by :meth:`start_stream` instead."""
        raise RuntimeError(
            "A MetaSink never streams itself; stop the sink returned by start_stream"
        )

    def to_uri(self) -> str:
        """Return the URI of the selected sink."""
        return self._require_current().to_uri()