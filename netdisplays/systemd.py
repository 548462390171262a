"""Arguments for starting stream processes as transient systemd units."""

from __future__ import annotations

from typing import Any

STREAM_EXECUTABLE = "/usr/libexec/gnome-network-displays-stream"
UNIT_PREFIX = "gnome-network-displays-stream"


def unit_name_for(uuid: str) -> str:
    """Return the name of the transient unit that streams to the sink ``uuid``."""
    return f"{UNIT_PREFIX}-{uuid}.service"


def _build_execstart(uri: str) -> list[tuple[str, list[str], bool]]:
    # Signature a(sasb): executable, argv, ignore-failure.
    return [(STREAM_EXECUTABLE, [STREAM_EXECUTABLE, uri], False)]


def _build_description(name: str | None) -> str:
    return f"GNOME Network Displays stream for {name}"


def build_properties(
    uuid: str, uri: str, display_name: str | None
) -> list[tuple[str, Any]]:
    """Return the unit properties (signature a(sv)) for a stream unit."""
    return [
        ("ExecStart", _build_execstart(uri)),
        ("Description", _build_description(display_name)),
    ]


def build_aux() -> list[tuple[str, list[tuple[str, Any]]]]:
    """Return the auxiliary units (signature a(sa(sv))); there are none."""
    return []