"""HTTP exposition of the gauge registry."""

import threading
from collections.abc import Callable, Iterable
from typing import Any
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

import structlog
from prometheus_client import CollectorRegistry, make_wsgi_app
from prometheus_client.exposition import ThreadingWSGIServer

from src.config.constants import COMPONENT_EXPORTER


logger = structlog.get_logger()

WSGIApp = Callable[[dict[str, Any], Callable[..., Any]], Iterable[bytes]]

LANDING_PAGE_TEMPLATE = """<html>
<head><title>PuppetDB Exporter</title></head>
<body>
<h1>PuppetDB Exporter</h1>
<p><a href="{metrics_path}">Metrics</a></p>
</body>
</html>
"""


def build_wsgi_app(registry: CollectorRegistry, metrics_path: str) -> WSGIApp:
    """Build the WSGI application serving the registry.

    Serves the exposition format on ``metrics_path``, a small landing page
    on ``/`` and 404 everywhere else.

    Args:
        registry: Registry holding the gauge families.
        metrics_path: Path of the metrics endpoint.

    Returns:
        WSGI application.
    """
    metrics_app = make_wsgi_app(registry)
    landing_page = LANDING_PAGE_TEMPLATE.format(metrics_path=metrics_path).encode()

    def app(
        environ: dict[str, Any], start_response: Callable[..., Any]
    ) -> Iterable[bytes]:
        path = environ.get("PATH_INFO") or "/"
        if path == metrics_path:
            return metrics_app(environ, start_response)  # type: ignore[no-any-return]
        if path == "/":
            start_response("200 OK", [("Content-Type", "text/html; charset=utf-8")])
            return [landing_page]
        start_response("404 Not Found", [("Content-Type", "text/plain")])
        return [b"Not Found\n"]

    return app


class _LoggingRequestHandler(WSGIRequestHandler):
    """Route request logs through structlog instead of stderr."""

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        logger.debug(
            "http_request",
            component=COMPONENT_EXPORTER,
            client=self.address_string(),
            message=format % args,
        )


def start_exposition_server(
    host: str, port: int, app: WSGIApp
) -> tuple[WSGIServer, threading.Thread]:
    """Start serving ``app`` on a daemon thread.

    Scrapes are served concurrently with the reconciliation loop; they
    only read the published snapshot of each gauge family.

    Args:
        host: Interface to bind.
        port: TCP port to bind.
        app: WSGI application.

    Returns:
        Tuple of (server, serving thread).
    """
    server = make_server(
        host, port, app, ThreadingWSGIServer, handler_class=_LoggingRequestHandler
    )
    thread = threading.Thread(
        target=server.serve_forever, name="exposition-server", daemon=True
    )
    thread.start()
    logger.info(
        "exposition_server_started",
        component=COMPONENT_EXPORTER,
        host=host,
        port=server.server_port,
    )
    return server, thread
