"""Sink and provider model for network displays: sinks, providers, meta sinks, sink URIs, and stream unit, firewall zone and manager helpers."""

__version__ = "0.97.0"