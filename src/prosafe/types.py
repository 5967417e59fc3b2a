"""Statistics types decoded from ProSAFE switch replies.

These frozen dataclasses are what the client hands back to callers. They
are immutable so a result list can be shared between threads or cached
without copying.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class LinkSpeed(Enum):
    """Negotiated port link speed (speed statistics record, byte 1).

    Half and full duplex codes collapse onto the same speed.
    """

    NONE = "none"
    SPEED_10MBPS = "10M"
    SPEED_100MBPS = "100M"
    SPEED_1GBPS = "1G"
    SPEED_10GBPS = "10G"
    UNKNOWN = "unknown"

    @classmethod
    def from_code(cls, code: int) -> LinkSpeed:
        """Map a raw link code to a speed, UNKNOWN for unrecognised codes."""
        return _LINK_CODES.get(code, cls.UNKNOWN)

    @property
    def speed_mbps(self) -> int:
        """Speed in Mbps (0 for no link or an unknown code)."""
        return _SPEED_MBPS[self]


_LINK_CODES = {
    0x00: LinkSpeed.NONE,
    0x01: LinkSpeed.SPEED_10MBPS,      # half duplex
    0x02: LinkSpeed.SPEED_10MBPS,      # full duplex
    0x03: LinkSpeed.SPEED_100MBPS,     # half duplex
    0x04: LinkSpeed.SPEED_100MBPS,     # full duplex
    0x05: LinkSpeed.SPEED_1GBPS,
    0x06: LinkSpeed.SPEED_10GBPS,
}

_SPEED_MBPS = {
    LinkSpeed.NONE: 0,
    LinkSpeed.SPEED_10MBPS: 10,
    LinkSpeed.SPEED_100MBPS: 100,
    LinkSpeed.SPEED_1GBPS: 1000,
    LinkSpeed.SPEED_10GBPS: 10000,
    LinkSpeed.UNKNOWN: 0,
}


@dataclass(frozen=True)
class PortStat:
    """Traffic counters for a single switch port.

    Attributes:
        port_no: 1-based port number.
        recv_bytes: Total bytes received on this port.
        send_bytes: Total bytes sent from this port.
        error_pkts: Packets received with errors.
    """

    port_no: int
    recv_bytes: int
    send_bytes: int
    error_pkts: int


@dataclass(frozen=True)
class SpeedStat:
    """Link state for a single switch port.

    Attributes:
        port_no: 1-based port number.
        link: Negotiated link speed.
    """

    port_no: int
    link: LinkSpeed
