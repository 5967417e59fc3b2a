"""Netgear ProSAFE switch statistics over NSDP.

Queries ProSAFE "Plus" switches for per-port traffic counters and link
speeds using the NSDP UDP broadcast protocol, and decodes the replies
into typed records.

Quick start:
    from prosafe import query_port_stats

    for stat in query_port_stats("192.168.0.239", "eth0"):
        print(f"port {stat.port_no}: {stat.recv_bytes} bytes in")
"""

__version__ = "0.1.0"

from prosafe.client import (  # noqa: E402
    ProSafeSwitch,
    interface_lock,
    query_port_stats,
    query_speed_stats,
)
from prosafe.errors import (  # noqa: E402
    DecodeError,
    HostnameResolutionFailed,
    InterfaceError,
    InterfaceNotFound,
    InterfaceQueryFailed,
    MalformedHeader,
    MalformedPayload,
    NoIPv4Address,
    NoResponse,
    ProSafeError,
    SocketBindFailed,
    TransportError,
    TruncatedRecord,
)
from prosafe.protocol import Command, decode_header, decode_records, encode_request  # noqa: E402
from prosafe.types import LinkSpeed, PortStat, SpeedStat  # noqa: E402

__all__ = [
    "Command",
    "DecodeError",
    "HostnameResolutionFailed",
    "InterfaceError",
    "InterfaceNotFound",
    "InterfaceQueryFailed",
    "LinkSpeed",
    "MalformedHeader",
    "MalformedPayload",
    "NoIPv4Address",
    "NoResponse",
    "PortStat",
    "ProSafeError",
    "ProSafeSwitch",
    "SocketBindFailed",
    "SpeedStat",
    "TransportError",
    "TruncatedRecord",
    "decode_header",
    "decode_records",
    "encode_request",
    "interface_lock",
    "query_port_stats",
    "query_speed_stats",
]
