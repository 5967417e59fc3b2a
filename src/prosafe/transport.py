"""UDP request/response exchange with a ProSAFE switch.

Switches answer NSDP queries by broadcasting the reply to the client
port, so the exchange uses two sockets: one bound to the local interface
address for sending (so the packet leaves on the switch's subnet) and one
bound to the broadcast address for receiving. Both use the fixed client
port, which means only one exchange per interface can be in flight at a
time; see prosafe.client.interface_lock.

Binding to port 63321 may need elevated privileges on some systems.
"""

from __future__ import annotations

import socket

from prosafe.errors import (
    HostnameResolutionFailed,
    NoResponse,
    SocketBindFailed,
    TransportError,
)
from prosafe.protocol import CLIENT_PORT, SERVER_PORT, ZERO_MAC, Command, encode_request

BROADCAST_ADDRESS = "255.255.255.255"
DEFAULT_TIMEOUT = 1.0
# Larger replies are truncated and decoded as far as they go.
RECV_BUFFER_SIZE = 1024


def _bind(sock: socket.socket, address: tuple[str, int]) -> None:
    try:
        sock.bind(address)
    except OSError as e:
        raise SocketBindFailed(f"Failed to bind UDP socket to {address[0]}:{address[1]}: {e}") from e


def _resolve_switch(hostname: str) -> tuple[str, int]:
    try:
        infos = socket.getaddrinfo(hostname, SERVER_PORT, socket.AF_INET, socket.SOCK_DGRAM)
    except (OSError, ValueError) as e:
        # idna encoding rejects empty or over-long labels with UnicodeError
        raise HostnameResolutionFailed(f"Failed to resolve switch {hostname!r}: {e}") from e
    if not infos:
        raise HostnameResolutionFailed(f"Switch {hostname!r} has no IPv4 address")
    return infos[0][4]


def exchange(
    local_ipv4: str,
    local_mac: bytes,
    switch_hostname: str,
    command: Command,
    timeout: float = DEFAULT_TIMEOUT,
    bufsize: int = RECV_BUFFER_SIZE,
) -> bytes:
    """Send one statistics query and wait for one reply.

    The first datagram to arrive on the client port is returned whatever
    its source, and nothing is retried.

    Args:
        local_ipv4: IPv4 address of the interface facing the switch.
        local_mac: 6-byte MAC of that interface.
        switch_hostname: Switch hostname or IPv4 address.
        command: Statistics to request.
        timeout: Seconds to wait for the reply.
        bufsize: Maximum reply size kept.

    Returns:
        The raw reply datagram.

    Raises:
        SocketBindFailed: If either socket cannot be bound.
        HostnameResolutionFailed: If the switch hostname does not resolve.
        NoResponse: If no reply arrives within timeout.
        TransportError: If sending or receiving fails otherwise.
    """
    if timeout <= 0:
        raise ValueError(f"Timeout must be positive, got {timeout!r}")
    request = encode_request(command, local_mac, ZERO_MAC)

    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as send_sock, \
            socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as recv_sock:
        send_sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        _bind(send_sock, (local_ipv4, CLIENT_PORT))
        _bind(recv_sock, (BROADCAST_ADDRESS, CLIENT_PORT))
        recv_sock.settimeout(timeout)

        switch_addr = _resolve_switch(switch_hostname)
        try:
            send_sock.sendto(request, switch_addr)
        except OSError as e:
            raise TransportError(f"Failed to send query to {switch_hostname!r}: {e}") from e

        try:
            data, _addr = recv_sock.recvfrom(bufsize)
        except socket.timeout as e:
            raise NoResponse(f"No reply from {switch_hostname!r} within {timeout}s") from e
        except OSError as e:
            raise TransportError(f"Failed to receive reply from {switch_hostname!r}: {e}") from e

    return data
