"""Making sure firewalld has a zone that lets Wi-Fi Display connections through."""

from __future__ import annotations

import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)

FIREWALLD_NAME = "org.fedoraproject.FirewallD1"
FIREWALLD_PATH = "/org/fedoraproject/FirewallD1"
ZONE_TYPE = "(sssbsasa(ss)asba(ssss)asasasasa(ss)b)"

# Only digits, letters, '_', '-' and '/', at most 17 characters.
WFD_ZONE = "P2P-WiFi-Display"

SERVICE_UNKNOWN = "org.freedesktop.DBus.Error.ServiceUnknown"

# Zone settings are read without prompting and must answer quickly;
# changes may prompt for authorisation and so get a long timeout.
QUERY_TIMEOUT_MS = 500
CHANGE_TIMEOUT_MS = 60000


class RemoteError(Exception):
    """An error returned by the remote end of a bus call."""

    def __init__(self, name: str, message: str = "") -> None:
        super().__init__(f"{name}: {message}" if message else name)
        self.name = name
        self.message = message


class _Bus(Protocol):
    def call(
        self,
        bus_name: str,
        object_path: str,
        interface: str,
        method: str,
        args: tuple[Any, ...],
        reply_type: str,
        *,
        interactive: bool,
        timeout_ms: int,
    ) -> tuple[Any, ...]:
        """Call a method on the system bus; raise RemoteError for remote failures."""


def build_zone_settings() -> tuple[Any, ...]:
    """Return the settings of the Wi-Fi Display zone, in firewalld's zone layout."""
    return (
        "",  # version
        "GNOME Network Displays WiFi-Display",  # short
        "A zone intended to be used by GNOME Network Displays when establishing "
        "P2P connections to Wi-Fi Display (Miracast) sinks.",  # description
        False,  # unused
        "ACCEPT",  # target
        ["dhcp", "dns"],  # services
        [("7236", "tcp")],  # ports
        [],  # icmp blocks
        False,  # masquerade (set up by NetworkManager anyway)
        [],  # forward ports
        [],  # interfaces
        [],  # sources
        ['rule priority="32767" reject'],  # rules
        ["icmp", "ipv6-icmp"],  # protocols
        [],  # source ports: outgoing connections are allowed
        False,  # icmp block inversion
    )


def _create_wfd_zone(bus: _Bus) -> None:
    bus.call(
        FIREWALLD_NAME,
        FIREWALLD_PATH + "/config",
        FIREWALLD_NAME + ".config",
        "addZone",
        (WFD_ZONE, build_zone_settings()),
        "(o)",
        interactive=True,
        timeout_ms=CHANGE_TIMEOUT_MS,
    )
    # A new zone is not active until firewalld reloads its configuration.
    bus.call(
        FIREWALLD_NAME,
        FIREWALLD_PATH,
        FIREWALLD_NAME,
        "reload",
        (),
        "()",
        interactive=True,
        timeout_ms=CHANGE_TIMEOUT_MS,
    )


def ensure_wfd_zone(bus: _Bus) -> bool:
    """Make sure the Wi-Fi Display zone exists, creating it if needed.

    Returns True when the zone is usable or firewalld is not installed.
    Errors from creating the zone, and non-remote errors, are raised.
    """
    try:
        bus.call(
            FIREWALLD_NAME,
            FIREWALLD_PATH,
            FIREWALLD_NAME,
            "getZoneSettings",
            (WFD_ZONE,),
            "(" + ZONE_TYPE + ")",
            interactive=False,
            timeout_ms=QUERY_TIMEOUT_MS,
        )
    except RemoteError as error:
        if error.name == SERVICE_UNKNOWN:
            logger.debug(
                "NdFirewalld: Firewalld does not seem to be installed. "
                "Code will assume that no firewall will be configured."
            )
            return True
        logger.debug("Received error: %s", error.name)
        logger.debug("Will try to create the zone!")
        _create_wfd_zone(bus)
    return True