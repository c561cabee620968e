"""Development server for the staging directory.

A small blocking static file server. Not meant for production: it exists
so a freshly built unit can be opened in a browser.
"""

from __future__ import annotations

import functools
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any, Protocol

import structlog
from rich.markup import escape

from run_wasm.errors import PortParseError
from run_wasm.output import info

logger = structlog.get_logger(__name__)

MAX_PORT = 65535


class StaticServer(Protocol):
    """Serves a directory over HTTP until the process is stopped."""

    def run(self, host: str, port: int, root_dir: Path, reload: bool, headers: str) -> None:
        """Serve ``root_dir`` on ``host:port``; blocks."""
        ...


def parse_headers(headers: str) -> list[tuple[str, str]]:
    """Parse ``"Name: value; Other: value"`` into header pairs.

    Raises:
        ValueError: If an entry has no ``:`` separator.
    """
    pairs: list[tuple[str, str]] = []
    for entry in headers.split(";"):
        if not entry.strip():
            continue
        name, sep, value = entry.partition(":")
        if not sep:
            raise ValueError(f"Invalid header '{entry.strip()}', expected 'Name: value'")
        pairs.append((name.strip(), value.strip()))
    return pairs


class StagingRequestHandler(SimpleHTTPRequestHandler):
    """Static handler with wasm/ES module MIME types and caching disabled."""

    extensions_map = {
        **SimpleHTTPRequestHandler.extensions_map,
        ".wasm": "application/wasm",
        ".js": "text/javascript",
        ".mjs": "text/javascript",
    }

    def __init__(
        self, *args: Any, extra_headers: list[tuple[str, str]] | None = None, **kwargs: Any
    ) -> None:
        self.extra_headers = extra_headers or []
        super().__init__(*args, **kwargs)

    def end_headers(self) -> None:
        self.send_header("Cache-Control", "no-store")
        for name, value in self.extra_headers:
            self.send_header(name, value)
        super().end_headers()

    def log_message(self, format: str, *args: Any) -> None:
        logger.info("http_request", client=self.address_string(), request=format % args)


class DevServer:
    """Default StaticServer backed by http.server."""

    def run(self, host: str, port: int, root_dir: Path, reload: bool, headers: str) -> None:
        """Serve ``root_dir`` until interrupted.

        Args:
            host: Address to bind.
            port: Port to bind.
            root_dir: Directory to serve.
            reload: Live reload toggle; always False, live reload is not supported.
            headers: Extra response headers, ``"Name: value"`` pairs separated by ``;``.
        """
        if reload:
            logger.warning("reload_unsupported")

        handler = functools.partial(
            StagingRequestHandler,
            directory=str(root_dir),
            extra_headers=parse_headers(headers),
        )
        httpd = ThreadingHTTPServer((host, port), handler)
        logger.info("dev_server_started", host=host, port=port, root_dir=str(root_dir))
        try:
            httpd.serve_forever()
        finally:
            httpd.server_close()
            logger.info("dev_server_stopped")


def parse_port(port: str) -> int:
    """Parse the --port value.

    Raises:
        PortParseError: If the value is not a decimal integer in 0-65535.
    """
    if not port.isascii() or not port.isdigit():
        raise PortParseError(port)
    value = int(port)
    if value > MAX_PORT:
        raise PortParseError(port)
    return value


def serve(host: str, port: str, root_dir: Path, server: StaticServer | None = None) -> None:
    """Serve the staging directory; blocks for the rest of the process.

    The port is parsed before anything is bound.

    Raises:
        PortParseError: If ``port`` is not a valid port number.
    """
    port_number = parse_port(port)
    info(f"\nServing `{escape(root_dir.name)}` on http://{escape(host)}:{port_number}")
    static_server = server if server is not None else DevServer()
    static_server.run(host, port_number, root_dir, False, "")
