"""HTTP exporter serving switch statistics to Prometheus.

Routes:
    /probe?target=HOST:IFACE   Query one switch (multi-target pattern).
    /metrics                   Query the configured targets, each sample
                               labelled with instance=HOST:IFACE.
    anything else              A landing page with a probe form.

Every request builds its own registry via prosafe.metrics. Queries on
the same interface are serialized by the interface lock, so concurrent
scrapes wait for each other instead of failing to bind the NSDP port.
"""

from __future__ import annotations

import sys
from socketserver import ThreadingMixIn
from urllib.parse import parse_qs
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import CONTENT_TYPE_LATEST

from prosafe.metrics import probe_targets, render
from prosafe.transport import DEFAULT_TIMEOUT

DEFAULT_LISTEN_ADDRESS = ":9493"

LANDING_PAGE = b"""<html>
<head><title>ProSAFE Exporter</title></head>
<body>
<h1>ProSAFE Exporter</h1>
<form action="/probe">
<label>Target:</label> <input type="text" name="target" placeholder="1.2.3.4:eth0"><br>
<input type="submit" value="Submit">
</form>
</body>
</html>
"""


def parse_listen_address(address: str) -> tuple[str, int]:
    """Split "HOST:PORT" or ":PORT" into a bind address.

    An empty host binds all IPv4 addresses.

    Raises ValueError if the port is missing or not a valid port number.
    """
    host, sep, port_str = address.rpartition(":")
    if not sep:
        raise ValueError(f"Listen address must be [HOST]:PORT, got {address!r}")
    try:
        port = int(port_str)
    except ValueError:
        raise ValueError(f"Invalid port in listen address {address!r}") from None
    if not 0 <= port <= 65535:
        raise ValueError(f"Invalid port in listen address {address!r}")
    return host or "0.0.0.0", port


def make_app(static_targets: list[str], timeout: float = DEFAULT_TIMEOUT, verbose: bool = False):
    """Build the WSGI application serving probes and the landing page."""

    def app(environ, start_response):
        path = environ.get("PATH_INFO", "/")

        if path == "/probe":
            query = parse_qs(environ.get("QUERY_STRING", ""))
            targets = [t for t in query.get("target", []) if ":" in t]
            registry = probe_targets(targets[-1:], instance_label=False,
                                     timeout=timeout, verbose=verbose)
        elif path == "/metrics" and static_targets:
            registry = probe_targets(static_targets, instance_label=True,
                                     timeout=timeout, verbose=verbose)
        else:
            start_response("200 OK", [("Content-Type", "text/html; charset=utf-8")])
            return [LANDING_PAGE]

        start_response("200 OK", [("Content-Type", CONTENT_TYPE_LATEST)])
        return [render(registry)]

    return app


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    daemon_threads = True


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        pass


def create_server(listen_address: str, app) -> WSGIServer:
    """Bind a threaded WSGI server for app on listen_address."""
    host, port = parse_listen_address(listen_address)
    return make_server(host, port, app,
                       server_class=_ThreadingWSGIServer,
                       handler_class=_QuietHandler)


def serve(
    listen_address: str = DEFAULT_LISTEN_ADDRESS,
    static_targets: list[str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    verbose: bool = False,
) -> None:
    """Serve the exporter until interrupted."""
    app = make_app(static_targets or [], timeout=timeout, verbose=verbose)
    with create_server(listen_address, app) as server:
        if verbose:
            host, port = server.server_address[:2]
            print(f"Server started: {host}:{port}", file=sys.stderr)
        server.serve_forever()
