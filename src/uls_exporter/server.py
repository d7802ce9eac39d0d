"""
HTTP wiring: registers the collector and serves the text exposition
at the configured path. Each scrape runs on its own thread.
"""

from __future__ import annotations

import logging
import socket
from typing import Callable, Iterable, Optional, Tuple
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import REGISTRY, CollectorRegistry, make_wsgi_app
from prometheus_client.exposition import ThreadingWSGIServer

from uls_exporter.collector.base import ExporterCollector
from uls_exporter.collector.uls_collector import ULSCollector
from uls_exporter.config import ExporterConfig, parse_listen_address

log = logging.getLogger(__name__)

WSGIApp = Callable[[dict, Callable], Iterable[bytes]]


class _SilentHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        pass  # no access log per scrape


def register_collector(
    collector: ExporterCollector,
    registry: CollectorRegistry = REGISTRY,
) -> None:
    """Raises ValueError if one of the collector's series is already registered."""
    registry.register(collector)
    log.debug("Registered %s", collector.name())


def build_app(path: str, registry: CollectorRegistry = REGISTRY) -> WSGIApp:
    """WSGI app serving the registry at `path` and 404 everywhere else."""
    metrics_app = make_wsgi_app(registry)

    def app(environ, start_response):
        if environ.get("PATH_INFO") == path:
            return metrics_app(environ, start_response)
        start_response("404 Not Found", [("Content-Type", "text/plain; charset=utf-8")])
        return [b"404 page not found\n"]

    return app


def _address_family(host: str, port: int) -> Tuple[socket.AddressFamily, str]:
    infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE)
    family, _, _, _, sockaddr = infos[0]
    return family, sockaddr[0]


def make_metrics_server(
    listen: str,
    path: str,
    registry: CollectorRegistry = REGISTRY,
) -> WSGIServer:
    """Bind the threading WSGI server. Raises OSError if the bind fails."""
    host, port = parse_listen_address(listen)

    class _Server(ThreadingWSGIServer):
        pass

    _Server.address_family, host = _address_family(host, port)
    return make_server(host, port, build_app(path, registry), _Server, handler_class=_SilentHandler)


def serve(config: ExporterConfig, registry: Optional[CollectorRegistry] = None) -> None:
    """Run the exporter until interrupted.

    Raises ValueError for a bad URI, listen address or duplicate
    registration, and OSError when the listen socket can't be bound.
    """
    registry = registry if registry is not None else REGISTRY
    collector = ULSCollector(base_url=config.uri)
    try:
        register_collector(collector, registry)
    except ValueError:
        collector.close()
        raise

    try:
        httpd = make_metrics_server(config.listen, config.path, registry)
    except (OSError, ValueError):
        registry.unregister(collector)
        collector.close()
        raise

    host, port = httpd.server_address[:2]
    log.info("Serving %s on %s:%d%s", collector.name(), host, port, config.path)
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        httpd.server_close()
        registry.unregister(collector)
        collector.close()
        log.info("Exporter stopped")
