"""Load query and exporter configuration from prosafe.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from prosafe.exporter import DEFAULT_LISTEN_ADDRESS, parse_listen_address
from prosafe.transport import DEFAULT_TIMEOUT

DEFAULT_CONFIG_PATH = Path("prosafe.toml")


@dataclass
class QueryConfig:
    """Settings applied to every switch query."""

    timeout: float = DEFAULT_TIMEOUT


@dataclass
class ExporterConfig:
    """Configuration for Prometheus exposition.

    Targets are "HOST:IFACE" strings: the switch to query and the local
    interface on its subnet. With instance_label set, every sample is
    labelled with the target string, which is what a scrape of several
    switches in one page needs.

    listen_address is where "prosafe serve" accepts scrapes, as
    "[HOST]:PORT"; the configured targets are served on /metrics.
    """

    targets: list[str] = field(default_factory=list)
    instance_label: bool = False
    listen_address: str = DEFAULT_LISTEN_ADDRESS


@dataclass
class ProSafeConfig:
    """Full configuration loaded from prosafe.toml."""

    query: QueryConfig = field(default_factory=QueryConfig)
    exporter: ExporterConfig = field(default_factory=ExporterConfig)


def _build_query(data: dict) -> QueryConfig:
    section = data.get("query", {})
    timeout = float(section.get("timeout", DEFAULT_TIMEOUT))
    if timeout <= 0:
        raise ValueError(f"Query timeout must be positive, got {timeout!r}")
    return QueryConfig(timeout=timeout)


def _build_exporter(data: dict) -> ExporterConfig:
    section = data.get("exporter", {})
    targets = [t.strip() for t in section.get("targets", [])]
    for target in targets:
        if ":" not in target:
            raise ValueError(f"Exporter target must be HOST:IFACE, got {target!r}")
    listen_address = section.get("listen_address", DEFAULT_LISTEN_ADDRESS)
    parse_listen_address(listen_address)
    return ExporterConfig(
        targets=targets,
        instance_label=bool(section.get("instance_label", False)),
        listen_address=listen_address,
    )


def load_config(config_path: Path | str | None = None) -> ProSafeConfig:
    """Load configuration from a TOML file.

    If config_path is None, looks for prosafe.toml in the current
    directory and falls back to the defaults when it is absent. An
    explicitly given path must exist.
    """
    if config_path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return ProSafeConfig()
        config_path = DEFAULT_CONFIG_PATH
    else:
        config_path = Path(config_path)

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    return ProSafeConfig(
        query=_build_query(data),
        exporter=_build_exporter(data),
    )
