"""NSDP statistics query encoding and reply decoding.

Implements the binary wire format used to read port statistics from
Netgear ProSAFE switches. A query is a fixed 40-byte packet naming one
statistics command; the reply is a 32-byte header followed by a stream
of tag/length/value records closed by an end marker.

All multi-byte integers are big-endian (network byte order).
"""

from __future__ import annotations

import random
import struct
from collections.abc import Iterator
from dataclasses import dataclass
from enum import IntEnum

from prosafe.errors import MalformedHeader, TruncatedRecord


NSDP_SIGNATURE = b"NSDP"
NSDP_MAGIC = NSDP_SIGNATURE + b"\x00" * 4

# Port assignments. The client sends from and receives on the same port;
# the switch listens on the next one up.
CLIENT_PORT = 63321
SERVER_PORT = 63322

REQUEST_TYPE = 0x0101
RESPONSE_MAGIC = b"\x01\x02"

END_OF_MARK = 0xFFFF

ZERO_MAC = b"\x00" * 6


class Command(IntEnum):
    """Statistics query opcodes.

    The high 16 bits are the record tag the switch answers with; the low
    16 bits are the (empty) request value length.
    """

    SPEED_STATISTICS = 0x0C000000
    PORT_STATISTICS = 0x10000000
    END = 0xFFFF0000

    @property
    def tag(self) -> int:
        """Record tag of the records answering this command."""
        return self.value >> 16


@dataclass(frozen=True)
class QueryRequest:
    """A single-command NSDP read request.

    Attributes:
        command: Statistics to ask the switch for.
        src_mac: 6-byte MAC of the querying interface.
        dst_mac: 6-byte MAC of the target switch (all zeros = any switch).
        sequence: 16-bit sequence number. Switches may echo it, but
            replies are never matched against it.
    """

    SIZE = 40
    FORMAT = ">H6s6s6s2sH8sII"

    command: Command
    src_mac: bytes
    dst_mac: bytes = ZERO_MAC
    sequence: int = 0

    def encode(self) -> bytes:
        """Encode the request to its fixed 40-byte wire format."""
        if len(self.src_mac) != 6:
            raise ValueError(f"Source MAC must be 6 bytes, got {len(self.src_mac)}: {self.src_mac!r}")
        if len(self.dst_mac) != 6:
            raise ValueError(f"Destination MAC must be 6 bytes, got {len(self.dst_mac)}: {self.dst_mac!r}")
        return struct.pack(
            self.FORMAT,
            REQUEST_TYPE,
            b"\x00" * 6,           # reserved
            self.src_mac,
            self.dst_mac,
            b"\x00" * 2,           # reserved
            self.sequence,
            NSDP_MAGIC,
            int(self.command),
            int(Command.END),
        )


@dataclass(frozen=True)
class ResponseHeader:
    """The fixed header at the start of every switch reply.

    Only the magic is checked; the two 16-bit fields are kept for
    diagnostics.
    """

    SIZE = 32
    FORMAT = ">2sHH26x"

    result: int
    reserved: int


@dataclass(frozen=True)
class Record:
    """One tag/length/value record from a reply body."""

    tag: int
    payload: bytes = b""

    @property
    def is_end(self) -> bool:
        return self.tag == END_OF_MARK


def encode_request(
    command: Command,
    src_mac: bytes,
    dst_mac: bytes = ZERO_MAC,
    sequence: int | None = None,
) -> bytes:
    """Build the wire bytes of a query for one statistics command.

    Args:
        command: Statistics to request.
        src_mac: 6-byte MAC of the local interface.
        dst_mac: 6-byte MAC of the switch, zeros for broadcast.
        sequence: Fixed sequence number; a random one is drawn if None.

    Returns:
        The 40-byte encoded request.
    """
    if sequence is None:
        sequence = random.getrandbits(16)
    return QueryRequest(
        command=command,
        src_mac=src_mac,
        dst_mac=dst_mac,
        sequence=sequence,
    ).encode()


def decode_header(data: bytes) -> tuple[ResponseHeader, bytes]:
    """Split a reply into its header and record stream.

    Raises:
        MalformedHeader: If data is shorter than the header or does not
            start with the response magic.
    """
    if len(data) < ResponseHeader.SIZE:
        raise MalformedHeader(
            f"Reply too short: {len(data)} bytes (need at least {ResponseHeader.SIZE})"
        )
    magic, result, reserved = struct.unpack_from(ResponseHeader.FORMAT, data, 0)
    if magic != RESPONSE_MAGIC:
        raise MalformedHeader(f"Invalid reply magic: {magic!r} (expected {RESPONSE_MAGIC!r})")
    return ResponseHeader(result=result, reserved=reserved), data[ResponseHeader.SIZE:]


def decode_records(data: bytes) -> Iterator[Record]:
    """Iterate the tag/length/value records of a reply body.

    Stops after the end marker (its payload is consumed, anything after
    it is ignored) or when the buffer runs out. The end marker itself is
    not yielded.

    Raises:
        TruncatedRecord: If a record header or payload runs past the end
            of the buffer.
    """
    offset = 0
    while offset < len(data):
        if len(data) - offset < 4:
            raise TruncatedRecord(
                f"Record header at offset {offset} needs 4 bytes, "
                f"only {len(data) - offset} available"
            )
        tag, length = struct.unpack_from(">HH", data, offset)
        offset += 4
        if len(data) - offset < length:
            raise TruncatedRecord(
                f"Record tag 0x{tag:04X} declares {length} bytes but only "
                f"{len(data) - offset} available"
            )
        payload = data[offset:offset + length]
        offset += length
        if tag == END_OF_MARK:
            return
        yield Record(tag=tag, payload=payload)
