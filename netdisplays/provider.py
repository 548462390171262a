"""Providers: sources that discover sinks."""

from __future__ import annotations

from abc import ABC, abstractmethod

from netdisplays.sink import Signal, Sink


class Provider(ABC):
    """Something that finds sinks and announces their arrival and departure.

    ``sink_added`` and ``sink_removed`` handlers receive the sink concerned.
    ``discover`` tells whether discovery is turned on.
    """

    def __init__(self) -> None:
        self.sink_added = Signal()
        self.sink_removed = Signal()
        self.discover = True

    @abstractmethod
    def get_sinks(self) -> list[Sink]:
        """Return a new list of all sinks known to the provider."""