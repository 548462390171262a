"""A provider that merges the sinks of several providers into meta sinks."""

from __future__ import annotations

import logging

from netdisplays.meta_sink import MetaSink
from netdisplays.provider import Provider
from netdisplays.sink import Signal, Sink

logger = logging.getLogger(__name__)


class MetaProvider(Provider):
    """Collects sinks from several providers and groups duplicates.

    Sinks from the registered providers that share a match string are grouped
    into one :class:`MetaSink`. ``sink_added`` and ``sink_removed`` receive the
    meta sink concerned, or ``None`` when an existing meta sink only changed.
    ``notified`` handlers receive ``(meta_provider, property_name)``.
    """

    def __init__(self) -> None:
        self._providers: list[Provider] = []
        self._sinks: list[MetaSink] = []
        self._discover = True
        self.notified = Signal()
        super().__init__()

    # -- properties -----------------------------------------------------

    @property
    def discover(self) -> bool:
        """Whether discovery is turned on; setting it applies to every provider."""
        return self._discover

    @discover.setter
    def discover(self, value: bool) -> None:
        self._discover = bool(value)
        for provider in self._providers:
            provider.discover = self._discover

    @property
    def has_providers(self) -> bool:
        """Whether at least one provider is registered."""
        return bool(self._providers)

    # -- provider callbacks ---------------------------------------------

    def _on_sink_added(self, sink: Sink) -> None:
        logger.debug("NdMetaProvider: Provider sink added cb")

        meta_sinks = [meta for meta in self._sinks if meta.matches_sink(sink)]

        if len(meta_sinks) > 1:
            logger.warning(
                "NdMetaProvider: Found two meta sinks that belong to the same sink. "
                "This should not happen!"
            )

        if meta_sinks:
            meta_sink, *to_merge = meta_sinks
            for merge_meta in to_merge:
                logger.debug("NdMetaProvider: Removing previous meta sink from internal list")
                try:
                    self._sinks.remove(merge_meta)
                except ValueError:
                    logger.warning(
                        "NdMetaProvider: Could not remove previous meta sink from internal list!"
                    )
                self.sink_removed.emit(merge_meta)

                while (merge_sink := merge_meta.sink) is not None:
                    merge_meta.remove_sink(merge_sink)
                    meta_sink.add_sink(merge_sink)

            logger.debug("NdMetaProvider: Adding sink to meta sink")
            meta_sink.add_sink(sink)
            self.sink_added.emit(None)
            return

        logger.debug("NdMetaProvider: Creating meta sink with new sink")
        meta_sink = MetaSink(sink)
        self._sinks.append(meta_sink)
        self.sink_added.emit(meta_sink)

    def _on_sink_removed(self, sink: Sink) -> None:
        logger.debug("NdMetaProvider: provider sink removed cb")

        # Search by membership: a removed sink may no longer report its matches.
        meta_sink = next((meta for meta in self._sinks if meta.has_sink(sink)), None)
        if meta_sink is None:
            return

        if meta_sink.remove_sink(sink):
            logger.debug("NdMetaProvider: Removing empty meta sink")
            self._sinks.remove(meta_sink)
            self.sink_removed.emit(meta_sink)
            return

        self.sink_removed.emit(None)

    # -- Provider interface ---------------------------------------------

    def get_sinks(self) -> list[Sink]:
        """Return the meta sinks, most recently created first."""
        return list(reversed(self._sinks))

    # -- provider management --------------------------------------------

    def get_providers(self) -> list[Provider]:
        """Return the registered providers, most recently added first."""
        return list(reversed(self._providers))

    def add_provider(self, provider: Provider) -> None:
        """Register ``provider`` and take over the sinks it already knows."""
        if provider is None:
            raise ValueError("provider must not be None")
        if any(known is provider for known in self._providers):
            raise ValueError("Provider is already registered")

        self._providers.append(provider)
        provider.sink_added.connect(self._on_sink_added)
        provider.sink_removed.connect(self._on_sink_removed)

        provider.discover = self._discover

        for sink in provider.get_sinks():
            self._on_sink_added(sink)

        self.notified.emit(self, "has_providers")

    def remove_provider(self, provider: Provider) -> None:
        """Unregister ``provider`` and drop the sinks it contributed."""
        if provider is None:
            raise ValueError("provider must not be None")
        index = next(
            (i for i, known in enumerate(self._providers) if known is provider), None
        )
        if index is None:
            raise ValueError("Provider is not registered")

        provider.sink_added.disconnect(self._on_sink_added)
        provider.sink_removed.disconnect(self._on_sink_removed)

        for sink in provider.get_sinks():
            self._on_sink_removed(sink)

        del self._providers[index]

        self.notified.emit(self, "has_providers")