"""Sinks: displays that a stream can be sent to."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar


class Signal:
    """A list of callbacks invoked, in connection order, when the signal is emitted.

    A signal created with ``first_wins=True`` only runs its first handler and
    returns that handler's result; otherwise every handler runs and ``emit``
    returns ``None``.
    """

    def __init__(self, first_wins: bool = False) -> None:
        self._handlers: list[Callable[..., Any]] = []
        self._first_wins = first_wins

    def connect(self, callback: Callable[..., Any]) -> Callable[..., Any]:
        """Add a handler; returns it so this can be used as a decorator."""
        self._handlers.append(callback)
        return callback

    def disconnect(self, callback: Callable[..., Any]) -> None:
        """Remove every connection of ``callback``; unknown callbacks are ignored."""
        self._handlers = [handler for handler in self._handlers if handler != callback]

    def emit(self, *args: Any) -> Any:
        """Invoke the handlers with ``args``."""
        handlers = list(self._handlers)
        if self._first_wins:
            return handlers[0](*args) if handlers else None
        for handler in handlers:
            handler(*args)
        return None

    def __len__(self) -> int:
        return len(self._handlers)


class SinkState(enum.IntEnum):
    DISCONNECTED = 0x0
    ENSURE_FIREWALL = 0x50
    WAIT_P2P = 0x100
    WAIT_SOCKET = 0x110
    WAIT_STREAMING = 0x120
    STREAMING = 0x1000
    ERROR = 0x10000


class ScreenCastSourceType(enum.IntFlag):
    MONITOR = 1
    WINDOW = 2
    VIRTUAL = 4


class SinkProtocol(enum.IntEnum):
    # internal protocols
    META = 0
    DUMMY_WFD_P2P = 1
    DUMMY_CC = 2
    # real protocols
    WFD_P2P = 3
    WFD_MICE = 4
    CC = 5


class Sink(ABC):
    """A display that can be streamed to.

    Subclasses override the property attributes below (as plain attributes or
    as properties) and call :meth:`notify` whenever one of them changes.
    """

    PROPERTIES: ClassVar[frozenset[str]] = frozenset(
        {
            "uuid",
            "display_name",
            "matches",
            "priority",
            "state",
            "protocol",
            "missing_video_codec",
            "missing_audio_codec",
            "missing_firewall_zone",
        }
    )

    uuid: str | None = None
    display_name: str | None = None
    # Strings that uniquely identify the sink, used for de-duplication.
    matches: tuple[str, ...] = ()
    # Higher priority is preferred when de-duplicating.
    priority: int = 0
    state: SinkState = SinkState.DISCONNECTED
    protocol: SinkProtocol = SinkProtocol.META
    missing_video_codec: list[str] | None = None
    missing_audio_codec: list[str] | None = None
    missing_firewall_zone: str | None = None

    def __init__(self) -> None:
        # Handlers receive (sink, property_name).
        self.notified = Signal()
        # Handlers return the element that produces the video/audio stream.
        self.create_source = Signal(first_wins=True)
        self.create_audio_source = Signal(first_wins=True)

    def notify(self, name: str) -> None:
        """Announce that the property ``name`` has changed."""
        if name not in type(self).PROPERTIES:
            raise ValueError(f"{type(self).__name__} has no property {name!r}")
        self.notified.emit(self, name)

    @abstractmethod
    def start_stream(self) -> Sink | None:
        """Start streaming; returns the sink that actually streams."""

    @abstractmethod
    def stop_stream(self) -> None:
        """Stop any active stream or connection attempt."""

    @abstractmethod
    def to_uri(self) -> str:
        """Return a URI from which this sink can be recreated."""