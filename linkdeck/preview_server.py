"""Live catalog preview server.

Every request re-reads the manifest and renders the page on the fly, so edits
to ``categories.json`` (including ones made by ``resolve-channel``) show up on
the next reload without restarting the server.
"""

from __future__ import annotations

import contextlib
import logging
import threading
from dataclasses import dataclass
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Iterator
from urllib.parse import parse_qs, urlsplit

from .render import CatalogRenderer
from .urls import site_name_from_path

logger = logging.getLogger(__name__)

MANIFEST_ROUTE = "/categories.json"


class _ThreadingHTTPServer(ThreadingHTTPServer):
    daemon_threads = True
    allow_reuse_address = True


def make_request_handler(
    manifest_path: Path,
    renderer: CatalogRenderer | None = None,
) -> type[BaseHTTPRequestHandler]:
    """Create a request handler that renders ``manifest_path`` per request."""
    manifest_file = manifest_path.resolve()
    page_renderer = renderer or CatalogRenderer()

    class CatalogRequestHandler(BaseHTTPRequestHandler):
        def do_GET(self) -> None:  # noqa: N802 - http.server naming
            parts = urlsplit(self.path)
            path = parts.path or "/"
            if path == MANIFEST_ROUTE:
                self._send_manifest()
                return
            if path.endswith("/") or path.endswith("/index.html"):
                selector = parse_qs(parts.query).get("category", [None])[0]
                html = page_renderer.render_manifest_file(
                    manifest_file,
                    current_site=site_name_from_path(path),
                    selector=selector,
                    reload_href=self.path,
                )
                self._send(HTTPStatus.OK, html.encode("utf-8"), "text/html; charset=utf-8")
                return
            self._send(HTTPStatus.NOT_FOUND, b"Not found.", "text/plain; charset=utf-8")

        def _send_manifest(self) -> None:
            try:
                payload = manifest_file.read_bytes()
            except OSError as exc:
                logger.error("Unable to read %s: %s", manifest_file, exc)
                self._send(HTTPStatus.NOT_FOUND, b"Manifest not found.", "text/plain; charset=utf-8")
                return
            self._send(HTTPStatus.OK, payload, "application/json; charset=utf-8")

        def _send(self, status: HTTPStatus, body: bytes, content_type: str) -> None:
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            self.send_header("Cache-Control", "no-store")
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format: str, *args: object) -> None:  # noqa: A002
            logger.info("%s - %s", self.address_string(), format % args)

    return CatalogRequestHandler


@contextlib.contextmanager
def serve(
    host: str,
    port: int,
    handler: type[BaseHTTPRequestHandler],
) -> Iterator[ThreadingHTTPServer]:
    """Context manager that creates and cleans up the HTTP server."""
    server = _ThreadingHTTPServer((host, port), handler)
    try:
        yield server
    finally:
        try:
            server.shutdown()
        finally:
            server.server_close()


@dataclass(slots=True)
class PreviewServerHandle:
    server: ThreadingHTTPServer
    thread: threading.Thread
    host: str
    port: int

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}/"


def _run_forever(server: ThreadingHTTPServer) -> None:
    try:
        server.serve_forever()
    except Exception:
        logger.exception("Preview server stopped unexpectedly")


def start_preview(
    manifest_path: Path,
    *,
    host: str = "127.0.0.1",
    port: int = 8000,
    max_attempts: int = 20,
) -> PreviewServerHandle:
    """Start the preview server in a background thread.

    Tries ``port`` and increments until a free port is found, up to ``max_attempts``.
    Returns a handle that can be passed to ``stop_preview``.
    """
    handler = make_request_handler(manifest_path)

    attempt = 0
    last_exc: Exception | None = None
    while attempt <= max_attempts:
        candidate = port + attempt if port else 0
        try:
            server = _ThreadingHTTPServer((host, candidate), handler)
        except OSError as exc:  # port busy or permission error
            last_exc = exc
            attempt += 1
            continue
        raw_host = server.server_address[0]
        bound_host = raw_host.decode("utf-8", "ignore") if isinstance(raw_host, bytes) else str(raw_host)
        bound_port = int(server.server_address[1])
        th = threading.Thread(target=_run_forever, args=(server,), daemon=True)
        th.start()
        return PreviewServerHandle(server=server, thread=th, host=bound_host, port=bound_port)

    if last_exc:
        raise last_exc
    raise OSError("Unable to bind preview server to the requested port range")


def stop_preview(handle: PreviewServerHandle | None) -> None:
    """Stop a running preview server started by ``start_preview``."""
    if handle is None:
        return
    try:
        handle.server.shutdown()
    finally:
        handle.server.server_close()
    if handle.thread.is_alive():
        handle.thread.join(timeout=2.0)
