"""Encoding sinks as URIs and recreating sinks from them."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Callable, Optional
from urllib.parse import quote, unquote_to_bytes, urlsplit

from netdisplays.sink import Sink, SinkProtocol

logger = logging.getLogger(__name__)

SCHEME = "gnome-network-displays"
HOST = "sink"

# Generic delimiters are left as they are; every other reserved character is escaped.
_ALLOWED_RESERVED = ":/?#[]@"
_SCHEME_RE = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*:")
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")

SinkFactory = Callable[[str], Optional[Sink]]
_factories: dict[SinkProtocol, SinkFactory] = {}


class UriError(ValueError):
    """A URI could not be built, parsed or turned into a sink."""


def _escape(text: str) -> str:
    return quote(text, safe=_ALLOWED_RESERVED)


def _unescape(text: str) -> str:
    if _BAD_ESCAPE_RE.search(text):
        raise UriError(f"Invalid percent-encoding in {text!r}")
    try:
        return unquote_to_bytes(text).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise UriError(f"Parameter {text!r} is not valid UTF-8") from exc


def generate_uri(params: Mapping[str, str]) -> str:
    """Build a sink URI whose query holds ``params`` in their given order."""
    query = "&".join(f"{_escape(key)}={_escape(value)}" for key, value in params.items())
    return f"{SCHEME}://{HOST}?{query}"


def parse_uri(uri: str) -> dict[str, str]:
    """Return the query parameters of ``uri``, percent-decoded."""
    if not _SCHEME_RE.match(uri):
        raise UriError(f"URI {uri!r} has no valid scheme")
    try:
        parts = urlsplit(uri)
        parts.port
    except ValueError as exc:
        raise UriError(f"Failed to parse URI {uri!r}: {exc}") from exc

    if "?" not in uri.split("#", 1)[0]:
        raise UriError(f"URI {uri!r} has no query")

    params: dict[str, str] = {}
    if not parts.query:
        return params
    for item in parts.query.split("&"):
        key, sep, value = item.partition("=")
        if not sep:
            raise UriError(f"Missing '=' and parameter value in {item!r}")
        params[_unescape(key)] = _unescape(value)
    return params


def register_sink_factory(
    protocol: SinkProtocol | int, factory: SinkFactory | None
) -> SinkFactory | None:
    """Set the callable that recreates sinks of ``protocol`` from a URI.

    Passing ``None`` removes the registration. Returns the previous factory.
    """
    protocol = SinkProtocol(protocol)
    if protocol is SinkProtocol.META:
        raise ValueError("Meta sinks cannot be recreated from a URI")
    previous = _factories.get(protocol)
    if factory is None:
        _factories.pop(protocol, None)
    else:
        _factories[protocol] = factory
    return previous


def _protocol_number(text: str) -> int:
    match = _LEADING_INT_RE.match(text)
    return int(match.group(1)) if match else 0


def uri_to_sink(uri: str) -> Sink:
    """Recreate the sink that ``uri`` describes."""
    params = parse_uri(uri)
    try:
        raw_protocol = params["protocol"]
    except KeyError:
        raise UriError(f"URI {uri!r} names no protocol") from None

    number = _protocol_number(raw_protocol)
    try:
        protocol = SinkProtocol(number)
    except ValueError:
        raise UriError(f"Unknown sink protocol {number} in URI {uri!r}") from None
    if protocol is SinkProtocol.META:
        raise UriError("Meta sinks cannot be recreated from a URI")

    factory = _factories.get(protocol)
    if factory is None:
        raise UriError(f"No sink factory registered for {protocol.name}")

    sink = factory(uri)
    if sink is None:
        raise UriError(f"Failed to recreate sink from URI {uri}")

    logger.debug('Sink "%s" recreated successfully', sink.display_name)
    return sink