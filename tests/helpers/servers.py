"""Local HTTP and HTTPS servers for getter tests."""

import ssl
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path


class QuietHandler(BaseHTTPRequestHandler):
    """Request handler that keeps test output clean."""

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        """Suppress log messages during tests."""

    def send_body(
        self,
        body: bytes,
        status: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Send a complete response with a Content-Length."""
        self.send_response(status)
        self.send_header("Content-Type", "text/plain")
        for name, value in (headers or {}).items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def redirect(self, location: str, status: int = 307) -> None:
        """Send a redirect to ``location``."""
        self.send_response(status)
        self.send_header("Location", location)
        self.send_header("Content-Length", "0")
        self.end_headers()


class _TestServer(ThreadingHTTPServer):
    daemon_threads = True

    def finish_request(self, request: object, client_address: object) -> None:
        """Complete the TLS handshake on the handler thread, then serve."""
        if isinstance(request, ssl.SSLSocket):
            request.do_handshake()
        super().finish_request(request, client_address)

    def handle_error(self, request: object, client_address: object) -> None:
        """Swallow handshake failures provoked on purpose by the tests."""


def server_tls_context(
    cert_file: Path,
    key_file: Path,
    client_ca: Path | None = None,
) -> ssl.SSLContext:
    """Build a server-side TLS context.

    Args:
        cert_file: Server certificate.
        key_file: Server private key.
        client_ca: When given, clients must present a certificate it signed.
    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.load_cert_chain(certfile=cert_file, keyfile=key_file)
    if client_ca is not None:
        context.verify_mode = ssl.CERT_REQUIRED
        context.load_verify_locations(cafile=client_ca)
    return context


@contextmanager
def running_server(
    handler: type[BaseHTTPRequestHandler],
    tls: ssl.SSLContext | None = None,
) -> Iterator[ThreadingHTTPServer]:
    """Serve ``handler`` on 127.0.0.1 from a background thread.

    The TLS handshake is deferred to the handler thread so a client that
    rejects the server certificate cannot stall the accept loop.
    """
    server = _TestServer(("127.0.0.1", 0), handler)
    if tls is not None:
        server.socket = tls.wrap_socket(
            server.socket, server_side=True, do_handshake_on_connect=False
        )
    thread = threading.Thread(target=server.serve_forever)
    thread.daemon = True
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()


def server_url(
    server: ThreadingHTTPServer,
    path: str = "/",
    host: str = "127.0.0.1",
) -> str:
    """Get the URL for a test server.

    Args:
        server: The running server.
        path: The URL path.
        host: Host name to put in the URL; the server listens on 127.0.0.1.
    """
    scheme = "https" if isinstance(server.socket, ssl.SSLSocket) else "http"
    port = server.server_address[1]
    return f"{scheme}://{host}:{port}{path}"
