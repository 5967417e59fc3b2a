"""Statistics queries against a single ProSAFE switch.

Usage:
    switch = ProSafeSwitch("192.168.0.239", "eth0")
    for stat in switch.port_stats():
        print(f"port {stat.port_no}: rx={stat.recv_bytes} tx={stat.send_bytes}")

Each query resolves the local interface, performs one request/response
exchange and decodes the whole reply. Any failure raises a ProSafeError;
a partial list of statistics is never returned.

Queries through the same interface share the fixed NSDP client port, so
concurrent callers should hold interface_lock(if_name) around each
query (or each group of queries that belong together).
"""

from __future__ import annotations

import threading

from prosafe.interface import resolve
from prosafe.parsers import parse_port_stats, parse_speed_stats
from prosafe.protocol import Command, Record, decode_header, decode_records
from prosafe.transport import DEFAULT_TIMEOUT, exchange
from prosafe.types import PortStat, SpeedStat

_interface_locks: dict[str, threading.Lock] = {}
_interface_locks_guard = threading.Lock()


def interface_lock(if_name: str) -> threading.Lock:
    """Return the process-wide lock serializing exchanges on an interface."""
    with _interface_locks_guard:
        lock = _interface_locks.get(if_name)
        if lock is None:
            lock = _interface_locks[if_name] = threading.Lock()
        return lock


class ProSafeSwitch:
    """A ProSAFE switch reachable through a local network interface.

    Holds no connection state; every query opens and closes its own
    sockets.

    Args:
        hostname: Switch hostname or IPv4 address.
        if_name: Local interface on the switch's subnet (e.g. "eth0").
        timeout: Seconds to wait for each reply.
    """

    def __init__(self, hostname: str, if_name: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        if timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {timeout!r}")
        self.hostname = hostname
        self.if_name = if_name
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"ProSafeSwitch({self.hostname!r}, {self.if_name!r}, timeout={self.timeout})"

    def _request(self, command: Command) -> list[Record]:
        iface = resolve(self.if_name)
        reply = exchange(iface.ipv4, iface.mac, self.hostname, command, timeout=self.timeout)
        _header, body = decode_header(reply)
        # Drain the stream so a truncated record fails before any parsing.
        return list(decode_records(body))

    def port_stats(self) -> list[PortStat]:
        """Query traffic counters for every port."""
        return parse_port_stats(self._request(Command.PORT_STATISTICS))

    def speed_stats(self) -> list[SpeedStat]:
        """Query the link speed of every port."""
        return parse_speed_stats(self._request(Command.SPEED_STATISTICS))


def query_port_stats(hostname: str, if_name: str, timeout: float = DEFAULT_TIMEOUT) -> list[PortStat]:
    """Query traffic counters for every port of a switch."""
    return ProSafeSwitch(hostname, if_name, timeout=timeout).port_stats()


def query_speed_stats(hostname: str, if_name: str, timeout: float = DEFAULT_TIMEOUT) -> list[SpeedStat]:
    """Query the link speed of every port of a switch."""
    return ProSafeSwitch(hostname, if_name, timeout=timeout).speed_stats()
