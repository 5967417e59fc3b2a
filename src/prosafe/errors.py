"""Exceptions raised by the ProSAFE statistics client.

Every failure in a query is reported as a subclass of ProSafeError, so a
caller polling several switches can catch one type per switch and carry
on with the rest. The intermediate classes group failures by stage:
resolving the local interface, talking to the switch, and decoding its
reply.
"""

from __future__ import annotations


class ProSafeError(Exception):
    """Base class for all query failures."""


# Interface resolution


class InterfaceError(ProSafeError):
    """The local network interface could not be used."""


class InterfaceNotFound(InterfaceError):
    """No network interface with the requested name exists."""


class NoIPv4Address(InterfaceError):
    """The interface exists but has no IPv4 address bound."""


class InterfaceQueryFailed(InterfaceError):
    """The OS refused to report the interface's addresses."""


# Transport


class TransportError(ProSafeError):
    """The request/response exchange with the switch failed."""


class SocketBindFailed(TransportError):
    """A UDP socket could not be bound to its NSDP port.

    Usually another exchange on the same interface holds the client port,
    or the process lacks the privileges to bind it.
    """


class HostnameResolutionFailed(TransportError):
    """The switch hostname did not resolve to an IPv4 address."""


class NoResponse(TransportError, TimeoutError):
    """No reply datagram arrived before the timeout."""


# Decoding


class DecodeError(ProSafeError, ValueError):
    """The switch reply could not be decoded."""


class MalformedHeader(DecodeError):
    """The reply is shorter than the header or has the wrong magic."""


class TruncatedRecord(DecodeError):
    """A record declares more bytes than remain in the reply."""


class MalformedPayload(DecodeError):
    """A record payload has the wrong size for its statistics type."""
