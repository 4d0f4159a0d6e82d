"""HTTP side of the exporter: metrics endpoint plus a small landing page."""

from __future__ import annotations

import logging
from typing import Tuple
from wsgiref.simple_server import WSGIRequestHandler, make_server

from prometheus_client import make_wsgi_app
from prometheus_client.exposition import ThreadingWSGIServer
from prometheus_client.registry import CollectorRegistry

log = logging.getLogger(__name__)

DEFAULT_LISTEN_ADDRESS = ":9136"
DEFAULT_TELEMETRY_PATH = "/metrics"

LANDING_PAGE = """<html>
<head><title>Collins Exporter</title></head>
<body>
<h1>Collins Exporter</h1>
<p><a href='{path}'>Metrics</a></p>
</body>
</html>
"""


def parse_listen_address(address: str) -> Tuple[str, int]:
    """':9136' -> ('0.0.0.0', 9136), 'localhost:9136' -> ('localhost', 9136)."""
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"Invalid listen address {address!r}, expected [host]:port")
    host = host.strip("[]") or "0.0.0.0"
    return host, int(port)


def make_app(registry: CollectorRegistry, telemetry_path: str = DEFAULT_TELEMETRY_PATH):
    metrics_app = make_wsgi_app(registry)
    landing = LANDING_PAGE.format(path=telemetry_path).encode()

    def app(environ, start_response):
        path = environ.get("PATH_INFO") or "/"
        if path == telemetry_path:
            return metrics_app(environ, start_response)
        if path == "/":
            start_response("200 OK", [
                ("Content-Type", "text/html; charset=utf-8"),
                ("Content-Length", str(len(landing))),
            ])
            return [landing]
        start_response("404 Not Found", [("Content-Type", "text/plain")])
        return [b"Not Found\n"]

    return app


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        log.debug("%s - %s", self.address_string(), format % args)


def serve(registry: CollectorRegistry, listen_address: str, telemetry_path: str):
    """Serve until interrupted. Each request gets its own thread."""
    host, port = parse_listen_address(listen_address)
    app = make_app(registry, telemetry_path)
    httpd = make_server(host, port, app, ThreadingWSGIServer, handler_class=_QuietHandler)
    log.info("Listening on %s", listen_address)
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        httpd.server_close()
