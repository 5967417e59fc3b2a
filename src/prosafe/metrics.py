"""Prometheus exposition of switch statistics.

probe() queries "HOST:IFACE" targets and returns a freshly built
CollectorRegistry holding:

  prosafe_up                    1 if the port statistics query succeeded
  prosafe_receive_bytes_total   bytes received, per port
  prosafe_transmit_bytes_total  bytes sent, per port
  prosafe_error_packets_total   error packets, per port
  prosafe_link_speed            link speed in Mbps, per port
  prosafe_build_info            constant 1, labelled with version info

A new registry per probe keeps samples of one scrape from leaking into
the next. Query failures are reported on stderr and reflected in
prosafe_up; they never raise.
"""

from __future__ import annotations

import os
import platform
import sys

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from prosafe import __version__
from prosafe.client import ProSafeSwitch, interface_lock
from prosafe.errors import ProSafeError
from prosafe.transport import DEFAULT_TIMEOUT


def parse_target(target: str) -> tuple[str, str] | None:
    """Split a "HOST:IFACE" target, returning None if it has no colon."""
    if ":" not in target:
        return None
    host, _, if_name = target.partition(":")
    return host, if_name


class _SwitchGauges:
    """The gauges of one registry, filled in one target at a time."""

    def __init__(self, registry: CollectorRegistry, instance_label: bool) -> None:
        self.instance_label = instance_label
        up_labels = ["instance"] if instance_label else []
        port_labels = up_labels + ["port"]

        build_info = Gauge(
            "prosafe_build_info",
            "A metric with a constant '1' value labeled by version, revision and pythonversion.",
            labelnames=["version", "revision", "pythonversion"],
            registry=registry,
        )
        build_info.labels(
            __version__,
            os.environ.get("GIT_REVISION", ""),
            platform.python_version(),
        ).set(1)

        self.up = Gauge("prosafe_up", "The last query is successful.",
                        labelnames=up_labels, registry=registry)
        self.receive_bytes = Gauge("prosafe_receive_bytes_total", "Incoming transfer in bytes.",
                                   labelnames=port_labels, registry=registry)
        self.transmit_bytes = Gauge("prosafe_transmit_bytes_total", "Outgoing transfer in bytes.",
                                    labelnames=port_labels, registry=registry)
        self.error_packets = Gauge("prosafe_error_packets_total", "Transfer error in packets.",
                                   labelnames=port_labels, registry=registry)
        self.link_speed = Gauge("prosafe_link_speed", "Link speed in Mbps.",
                                labelnames=port_labels, registry=registry)

    def collect_target(self, target: str, timeout: float, verbose: bool) -> None:
        parsed = parse_target(target)
        if parsed is None:
            if verbose:
                print(f"Ignoring target without interface: {target!r}", file=sys.stderr)
            return
        host, if_name = parsed

        instance = [target] if self.instance_label else []
        up_gauge = self.up.labels(*instance) if instance else self.up

        if verbose:
            print(f"Access to switch: {host} through {if_name}", file=sys.stderr)

        switch = ProSafeSwitch(host, if_name, timeout=timeout)
        with interface_lock(if_name):
            try:
                port_stats = switch.port_stats()
            except ProSafeError as e:
                up_gauge.set(0)
                print(f"Fail to access: {e}", file=sys.stderr)
            else:
                for stat in port_stats:
                    labels = instance + [str(stat.port_no)]
                    self.receive_bytes.labels(*labels).set(stat.recv_bytes)
                    self.transmit_bytes.labels(*labels).set(stat.send_bytes)
                    self.error_packets.labels(*labels).set(stat.error_pkts)
                up_gauge.set(1)

            try:
                speed_stats = switch.speed_stats()
            except ProSafeError as e:
                print(f"Fail to access: {e}", file=sys.stderr)
            else:
                for stat in speed_stats:
                    labels = instance + [str(stat.port_no)]
                    self.link_speed.labels(*labels).set(stat.link.speed_mbps)


def probe_targets(
    targets: list[str],
    instance_label: bool = False,
    timeout: float = DEFAULT_TIMEOUT,
    verbose: bool = False,
) -> CollectorRegistry:
    """Query several switches into one new registry.

    Targets are queried one after another; a failing switch only affects
    its own samples.
    """
    registry = CollectorRegistry()
    gauges = _SwitchGauges(registry, instance_label)
    for target in targets:
        gauges.collect_target(target, timeout, verbose)
    return registry


def probe(
    target: str,
    instance_label: bool = False,
    timeout: float = DEFAULT_TIMEOUT,
    verbose: bool = False,
) -> CollectorRegistry:
    """Query a switch and return its statistics as a new registry.

    Args:
        target: "HOST:IFACE" string. Anything else yields build info only.
        instance_label: Label every sample with instance=target.
        timeout: Seconds to wait for each reply.
        verbose: Print progress to stderr.
    """
    return probe_targets([target], instance_label=instance_label, timeout=timeout, verbose=verbose)


def render(registry: CollectorRegistry) -> bytes:
    """Render a registry in the Prometheus text exposition format."""
    return generate_latest(registry)
