"""Record payload parsers for statistics replies.

Each single-record parser turns the payload of one record into a typed
value and raises MalformedPayload for anything that is not exactly the
documented size. The list parsers apply them to a whole record stream,
keeping the switch's order and any duplicate ports as reported.

decode_records never yields the end marker, but the list parsers take any
iterable of Record (captured replies, hand-built fixtures), so an end
marker passed in that way is skipped rather than parsed as a port.
"""

from __future__ import annotations

import struct
from collections.abc import Iterable

from prosafe.errors import MalformedPayload
from prosafe.protocol import Record
from prosafe.types import LinkSpeed, PortStat, SpeedStat

PORT_STAT_SIZE = 1 + 6 * 8
SPEED_STAT_SIZE = 3


def parse_port_stat(data: bytes) -> PortStat:
    """Parse a port statistics payload (49 bytes: port + 6x uint64).

    Counters 0, 1 and 5 are received bytes, sent bytes and error packets.
    Counters 2-4 are not exposed.

    Raises MalformedPayload if data is not exactly 49 bytes.
    """
    if len(data) != PORT_STAT_SIZE:
        raise MalformedPayload(
            f"Port statistics must be {PORT_STAT_SIZE} bytes, got {len(data)}: {data!r}"
        )
    counters = struct.unpack_from(">6Q", data, 1)
    return PortStat(
        port_no=data[0],
        recv_bytes=counters[0],
        send_bytes=counters[1],
        error_pkts=counters[5],
    )


def parse_speed_stat(data: bytes) -> SpeedStat:
    """Parse a speed statistics payload (3 bytes: port, link code, unused).

    Raises MalformedPayload if data is not exactly 3 bytes.
    """
    if len(data) != SPEED_STAT_SIZE:
        raise MalformedPayload(
            f"Speed statistics must be {SPEED_STAT_SIZE} bytes, got {len(data)}: {data!r}"
        )
    return SpeedStat(port_no=data[0], link=LinkSpeed.from_code(data[1]))


def parse_port_stats(records: Iterable[Record]) -> list[PortStat]:
    """Parse every record of a port statistics reply."""
    return [parse_port_stat(r.payload) for r in records if not r.is_end]


def parse_speed_stats(records: Iterable[Record]) -> list[SpeedStat]:
    """Parse every record of a speed statistics reply."""
    return [parse_speed_stat(r.payload) for r in records if not r.is_end]
