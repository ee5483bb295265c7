"""Shared test fixtures and configuration."""

import gzip
import json
import threading
from email.parser import BytesParser
from email.policy import HTTP
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Generator
from unittest.mock import MagicMock
from urllib.parse import parse_qsl, urlsplit

import pytest

from stealth_http import ClientConfig, CookieJar, HeaderMap, HttpClient, Request
from stealth_http.transport import HttpxTransport


# ============== Local HTTP Server ==============

class _Handler(BaseHTTPRequestHandler):
    """Routes used by the end-to-end tests."""

    protocol_version = "HTTP/1.1"

    def log_message(self, format, *args):
        pass

    def _read_body(self) -> bytes:
        if self.headers.get("Transfer-Encoding", "").lower() == "chunked":
            chunks = []
            while True:
                size = int(self.rfile.readline().strip().split(b";")[0], 16)
                if size == 0:
                    self.rfile.readline()
                    break
                chunks.append(self.rfile.read(size))
                self.rfile.readline()
            return b"".join(chunks)
        length = int(self.headers.get("Content-Length") or 0)
        return self.rfile.read(length) if length else b""

    def _send(self, status: int, body: bytes, headers: dict | None = None) -> None:
        self.send_response(status)
        for name, value in (headers or {}).items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _send_json(self, data, status: int = 200) -> None:
        self._send(status, json.dumps(data).encode(), {"Content-Type": "application/json"})

    def _handle(self) -> None:
        path = urlsplit(self.path).path
        body = self._read_body()
        self.server.requests.append(
            {"method": self.command, "path": self.path, "headers": dict(self.headers), "body": body}
        )

        if path == "/payload":
            self._send(200, self.server.payload)
        elif path == "/echo":
            self._send(200, body)
        elif path == "/headers":
            self._send_json(dict(self.headers))
        elif path == "/form":
            self._send_json(dict(parse_qsl(body.decode())))
        elif path == "/gzip":
            self._send(200, gzip.compress(b"hello gzip"), {"Content-Encoding": "gzip"})
        elif path == "/gzip-broken":
            self._send(200, b"definitely not gzip data", {"Content-Encoding": "gzip"})
        elif path == "/not-found":
            self._send(404, b"not found")
        elif path == "/api-error":
            self._send_json({"code": 42, "message": "bad input"}, status=400)
        elif path == "/set-cookie":
            self._send(200, b"ok", {"Set-Cookie": "session=abc123; Path=/"})
        elif path == "/slow":
            self._send_in_halves(b"a" * 100, b"b" * 100)
        elif path == "/upload":
            self._send_json(self._parse_multipart(body))
        else:
            self._send(404, b"no route")

    def _send_in_halves(self, first: bytes, second: bytes) -> None:
        """Send half the body, then wait for the test to release the rest."""
        self.send_response(200)
        self.send_header("Content-Length", str(len(first) + len(second)))
        self.end_headers()
        self.wfile.write(first)
        self.wfile.flush()
        self.server.first_half_sent.set()
        self.server.release.wait(timeout=5)
        self.wfile.write(second)

    def _parse_multipart(self, body: bytes) -> dict:
        raw = b"Content-Type: " + self.headers["Content-Type"].encode() + b"\r\n\r\n" + body
        message = BytesParser(policy=HTTP).parsebytes(raw)
        fields, files, order = {}, {}, []
        for part in message.iter_parts():
            name = part.get_param("name", header="content-disposition")
            payload = part.get_payload(decode=True) or b""
            filename = part.get_filename()
            order.append(name)
            if filename:
                files[name] = {"filename": filename, "content": payload.decode()}
            else:
                fields[name] = payload.decode()
        return {"fields": fields, "files": files, "order": order}

    do_GET = _handle
    do_POST = _handle
    do_PUT = _handle


@pytest.fixture(scope="session")
def http_server() -> Generator[ThreadingHTTPServer, None, None]:
    """Threaded HTTP server on an ephemeral localhost port."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    server.daemon_threads = True
    server.requests = []
    server.payload = b""
    server.first_half_sent = threading.Event()
    server.release = threading.Event()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


@pytest.fixture
def server(http_server: ThreadingHTTPServer) -> ThreadingHTTPServer:
    """The shared server with per-test state reset."""
    http_server.requests.clear()
    http_server.payload = b""
    http_server.first_half_sent = threading.Event()
    http_server.release = threading.Event()
    return http_server


@pytest.fixture
def server_url(server: ThreadingHTTPServer) -> str:
    """Base URL of the local server."""
    host, port = server.server_address[:2]
    return f"http://{host}:{port}"


# ============== Client Fixtures ==============

@pytest.fixture
def live_client(server_url: str) -> Generator[HttpClient, None, None]:
    """HttpClient pointed at the local server (platform-default TLS)."""
    client = HttpClient(server_url, timeout=5.0)
    yield client
    client.close()


@pytest.fixture
def fingerprint_client(server_url: str) -> Generator[HttpClient, None, None]:
    """HttpClient pointed at the local server, presenting a Firefox ClientHello."""
    client = HttpClient(server_url, timeout=5.0)
    client.enable_fingerprint("firefox")
    yield client
    client.close()


@pytest.fixture
def default_config() -> ClientConfig:
    """Default client configuration."""
    return ClientConfig()


@pytest.fixture
def header_map() -> HeaderMap:
    """Header map with a form Content-Type."""
    return HeaderMap({"Content-Type": "application/x-www-form-urlencoded"})


@pytest.fixture
def cookie_jar() -> CookieJar:
    """Empty cookie jar."""
    return CookieJar()


@pytest.fixture
def sample_request() -> Request:
    """Sample GET request."""
    return Request(
        method="GET",
        url="https://example.com/api/test",
        headers={"Accept": "application/json"},
    )


@pytest.fixture
def mock_transport() -> MagicMock:
    """Mock transport for testing without network."""
    transport = MagicMock(spec=HttpxTransport)
    transport.name = "mock"
    return transport
