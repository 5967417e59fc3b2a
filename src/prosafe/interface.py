"""Local network interface lookup.

The query needs two things from the interface the switch is reachable
through: its MAC address (written into the request) and its IPv4 address
(the send socket binds to it so the packet leaves on the right subnet).
Both are read fresh on every call since DHCP renewals or link changes
can alter them between queries.

Linux only: the MAC comes from sysfs and the IPv4 address from the
SIOCGIFADDR ioctl.
"""

from __future__ import annotations

import errno
import fcntl
import socket
import struct
from dataclasses import dataclass
from pathlib import Path

from prosafe.errors import InterfaceNotFound, InterfaceQueryFailed, NoIPv4Address

SIOCGIFADDR = 0x8915
IFNAMSIZ = 16


@dataclass(frozen=True)
class InterfaceAddress:
    """Addresses of a local network interface.

    Attributes:
        ipv4: IPv4 address as a dotted-quad string.
        mac: 6-byte hardware address.
    """

    ipv4: str
    mac: bytes


def _check_name(if_name: str) -> None:
    if not if_name or "/" in if_name or "\0" in if_name or len(if_name.encode()) >= IFNAMSIZ:
        raise InterfaceNotFound(f"Invalid network interface name: {if_name!r}")


def get_interface_mac(if_name: str) -> bytes:
    """Read the MAC address of a network interface from sysfs.

    Raises:
        InterfaceNotFound: If the interface does not exist.
        InterfaceQueryFailed: If the address cannot be read or parsed.
    """
    _check_name(if_name)
    mac_path = Path(f"/sys/class/net/{if_name}/address")
    try:
        mac_str = mac_path.read_text().strip()
    except FileNotFoundError as e:
        raise InterfaceNotFound(f"Network interface {if_name!r} not found") from e
    except OSError as e:
        raise InterfaceQueryFailed(f"Failed to read {mac_path}: {e}") from e
    try:
        octets = bytes.fromhex(mac_str.replace(":", ""))
    except ValueError as e:
        raise InterfaceQueryFailed(f"Invalid MAC from {mac_path}: {mac_str!r}") from e
    if len(octets) != 6:
        raise InterfaceQueryFailed(f"Invalid MAC from {mac_path}: {mac_str!r}")
    return octets


def get_interface_ipv4(if_name: str) -> str:
    """Return the primary IPv4 address bound to a network interface.

    Raises:
        InterfaceNotFound: If the interface does not exist.
        NoIPv4Address: If the interface has no IPv4 address.
        InterfaceQueryFailed: For any other OS error.
    """
    _check_name(if_name)
    request = struct.pack("256s", if_name.encode())
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            reply = fcntl.ioctl(sock.fileno(), SIOCGIFADDR, request)
    except OSError as e:
        if e.errno == errno.ENODEV:
            raise InterfaceNotFound(f"Network interface {if_name!r} not found") from e
        if e.errno == errno.EADDRNOTAVAIL:
            raise NoIPv4Address(f"Network interface {if_name!r} has no IPv4 address") from e
        raise InterfaceQueryFailed(f"Failed to query network interface {if_name!r}: {e}") from e
    # struct ifreq: 16-byte name, then sockaddr_in (family, port, addr)
    return socket.inet_ntoa(reply[20:24])


def resolve(if_name: str) -> InterfaceAddress:
    """Look up the IPv4 and MAC addresses of a network interface."""
    mac = get_interface_mac(if_name)
    ipv4 = get_interface_ipv4(if_name)
    return InterfaceAddress(ipv4=ipv4, mac=mac)
