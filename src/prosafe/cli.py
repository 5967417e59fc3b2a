"""CLI entry point for prosafe.

Subcommands:
    ports   Show per-port traffic counters of a switch.
    speed   Show per-port link speeds of a switch.
    probe   Print Prometheus metrics for one or more HOST:IFACE targets.
    serve   Serve Prometheus metrics over HTTP.
"""

from __future__ import annotations

import argparse
import sys


def _load_config(args: argparse.Namespace):
    """Load config, handling errors."""
    from prosafe.config import load_config

    config_path = getattr(args, "config", None)
    try:
        return load_config(config_path)
    except FileNotFoundError:
        print(f"Error: config file not found: {config_path}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: invalid config file {config_path or 'prosafe.toml'}: {e}", file=sys.stderr)
        sys.exit(1)


def _positive_float(value: str) -> float:
    """argparse type for timeouts: a float greater than zero."""
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value!r}")
    return number


def _timeout(args: argparse.Namespace, config) -> float:
    if args.timeout is not None:
        return args.timeout
    return config.query.timeout


def cmd_ports(args: argparse.Namespace) -> int:
    """Print the traffic counters of every port."""
    from prosafe.client import query_port_stats
    from prosafe.errors import ProSafeError

    config = _load_config(args)
    if args.verbose:
        print(f"Access to switch: {args.host} through {args.interface}", file=sys.stderr)
    try:
        stats = query_port_stats(args.host, args.interface, timeout=_timeout(args, config))
    except ProSafeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"{'Port':>4}  {'Received':>20}  {'Sent':>20}  {'Errors':>12}")
    for s in stats:
        print(f"{s.port_no:>4d}  {s.recv_bytes:>20d}  {s.send_bytes:>20d}  {s.error_pkts:>12d}")
    return 0


def cmd_speed(args: argparse.Namespace) -> int:
    """Print the link speed of every port."""
    from prosafe.client import query_speed_stats
    from prosafe.errors import ProSafeError

    config = _load_config(args)
    if args.verbose:
        print(f"Access to switch: {args.host} through {args.interface}", file=sys.stderr)
    try:
        stats = query_speed_stats(args.host, args.interface, timeout=_timeout(args, config))
    except ProSafeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"{'Port':>4}  {'Link':<8}  {'Mbps':>6}")
    for s in stats:
        print(f"{s.port_no:>4d}  {s.link.value:<8}  {s.link.speed_mbps:>6d}")
    return 0


def cmd_probe(args: argparse.Namespace) -> int:
    """Print Prometheus metrics for each target."""
    from prosafe.metrics import probe_targets, render

    config = _load_config(args)
    targets = args.targets or config.exporter.targets
    if not targets:
        print("Error: no targets given and none configured.", file=sys.stderr)
        return 1

    instance_label = args.instance_label or config.exporter.instance_label
    registry = probe_targets(targets, instance_label=instance_label,
                             timeout=_timeout(args, config), verbose=args.verbose)
    sys.stdout.write(render(registry).decode())
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Serve Prometheus metrics over HTTP until interrupted."""
    from prosafe.exporter import parse_listen_address, serve

    config = _load_config(args)
    listen_address = args.listen_address or config.exporter.listen_address
    try:
        parse_listen_address(listen_address)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    targets = args.targets or config.exporter.targets
    try:
        serve(listen_address, targets, timeout=_timeout(args, config), verbose=args.verbose)
    except OSError as e:
        print(f"Error: cannot listen on {listen_address}: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        pass
    return 0


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="prosafe",
        description="Query Netgear ProSAFE switch port statistics over NSDP.",
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to prosafe.toml (default: ./prosafe.toml if present)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Show progress messages on stderr",
    )
    parser.add_argument(
        "--timeout", type=_positive_float, default=None,
        help="Seconds to wait for each switch reply (default: 1.0)",
    )

    subparsers = parser.add_subparsers(dest="command")

    # ports
    ports_parser = subparsers.add_parser("ports", help="Show per-port traffic counters")
    ports_parser.add_argument("host", help="Switch hostname or IPv4 address")
    ports_parser.add_argument("interface", help="Local network interface on the switch's subnet")

    # speed
    speed_parser = subparsers.add_parser("speed", help="Show per-port link speeds")
    speed_parser.add_argument("host", help="Switch hostname or IPv4 address")
    speed_parser.add_argument("interface", help="Local network interface on the switch's subnet")

    # probe
    probe_parser = subparsers.add_parser("probe", help="Print Prometheus metrics for HOST:IFACE targets")
    probe_parser.add_argument(
        "targets", nargs="*",
        help="HOST:IFACE targets (default: [exporter] targets from config)",
    )
    probe_parser.add_argument(
        "--instance-label", action="store_true",
        help="Label samples with instance=HOST:IFACE",
    )

    # serve
    serve_parser = subparsers.add_parser("serve", help="Serve Prometheus metrics over HTTP")
    serve_parser.add_argument(
        "targets", nargs="*",
        help="HOST:IFACE targets served on /metrics (default: [exporter] targets from config)",
    )
    serve_parser.add_argument(
        "--listen-address",
        help="[HOST]:PORT to listen on (default: :9493)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "ports": cmd_ports,
        "speed": cmd_speed,
        "probe": cmd_probe,
        "serve": cmd_serve,
    }

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
