"""httpx transport: platform-default TLS stack."""

from __future__ import annotations

import threading
import time
from contextlib import ExitStack, contextmanager
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Iterator

import httpx

from ..models import ConnectError, DecodeError, Request, TransportError
from .base import BaseTransport, RawResponse


def _no_cookie_jar() -> CookieJar:
    """Cookie jar that refuses every cookie.

    Cookie state lives in the client's own jar, never in the httpx client.
    """
    return CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))


class HttpxTransport(BaseTransport):
    """Transport using httpx and the interpreter's ssl module.

    The underlying httpx.Client is created lazily and recreated after
    close(), so closing only drops pooled connections. A client that still
    has streams open when it is detached is closed by its last stream.
    """

    name = "httpx"

    def __init__(
        self,
        proxy: str | None = None,
        verify_ssl: bool = True,
        follow_redirects: bool = True,
        max_redirects: int = 10,
        max_idle_connections: int = 100,
        keepalive_expiry: float = 30.0,
    ):
        """Initialize httpx transport.

        Args:
            proxy: Proxy URL ("http://..." or "socks5://...").
            verify_ssl: Whether to verify SSL certificates.
            follow_redirects: Whether to follow redirects.
            max_redirects: Maximum number of redirects.
            max_idle_connections: Keep-alive pool ceiling.
            keepalive_expiry: Seconds an idle connection is kept.
        """
        super().__init__(proxy, verify_ssl, follow_redirects, max_redirects)
        self._limits = httpx.Limits(
            max_connections=None,
            max_keepalive_connections=max_idle_connections,
            keepalive_expiry=keepalive_expiry,
        )
        self._client: httpx.Client | None = None
        # id(client) -> open streams
        self._in_flight: dict[int, int] = {}
        self._lock = threading.Lock()

    def _build_client(self) -> httpx.Client:
        return httpx.Client(
            proxy=self._proxy,
            verify=self._verify_ssl,
            follow_redirects=self._follow_redirects,
            max_redirects=self._max_redirects,
            limits=self._limits,
            cookies=_no_cookie_jar(),
            trust_env=False,
        )

    def _acquire(self) -> httpx.Client:
        """Get or create the current client and count one stream against it."""
        with self._lock:
            if self._client is None:
                self._client = self._build_client()
            client = self._client
            self._in_flight[id(client)] = self._in_flight.get(id(client), 0) + 1
            return client

    def _release(self, client: httpx.Client) -> None:
        """End one stream; close the client if it was detached and is now idle."""
        with self._lock:
            remaining = self._in_flight[id(client)] - 1
            if remaining:
                self._in_flight[id(client)] = remaining
                return
            del self._in_flight[id(client)]
            detached = client is not self._client
        if detached:
            client.close()

    @contextmanager
    def stream(self, request: Request, timeout: float) -> Iterator[RawResponse]:
        """Send a request and yield the response before its body is read.

        ``timeout`` bounds the whole exchange, body included.

        Raises:
            ConnectError: On dial, proxy or handshake failure.
            TransportError: On any other failure before the status line.
        """
        deadline = time.monotonic() + timeout
        client = self._acquire()

        try:
            with ExitStack() as stack:
                try:
                    if request.multipart is not None:
                        body = request.multipart
                        file_obj = stack.enter_context(open(body.file_path, "rb"))
                        headers = {
                            k: v for k, v in request.headers.items() if k.lower() != "content-type"
                        }
                        http_request = client.build_request(
                            request.method,
                            request.url,
                            headers=headers,
                            data=body.fields,
                            files={body.field_name: (body.filename, file_obj)},
                            timeout=timeout,
                        )
                    else:
                        http_request = client.build_request(
                            request.method,
                            request.url,
                            headers=request.headers,
                            content=request.content,
                            timeout=timeout,
                        )
                    resp = client.send(http_request, stream=True)
                except (httpx.ConnectError, httpx.ConnectTimeout, httpx.ProxyError) as e:
                    raise ConnectError("connection failed", original_error=e) from e
                except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
                    raise TransportError("request failed", original_error=e) from e

                stack.callback(resp.close)
                yield RawResponse(
                    status_code=resp.status_code,
                    headers=dict(resp.headers),
                    url=str(resp.url),
                    cookies=dict(resp.cookies),
                    chunks=self._iter_body(resp, deadline),
                )
        finally:
            self._release(client)

    @staticmethod
    def _iter_body(resp: httpx.Response, deadline: float) -> Iterator[bytes]:
        """Iterate decoded body chunks, translating read and decode failures.

        httpx timeouts apply per read; the deadline caps the total.
        """
        try:
            for chunk in resp.iter_bytes():
                if time.monotonic() > deadline:
                    raise httpx.ReadTimeout("request timeout exceeded", request=resp.request)
                yield chunk
        except httpx.HTTPError as e:
            raise DecodeError("failed to read response body", original_error=e) from e

    def close(self) -> None:
        """Detach the current client and close it once no stream uses it."""
        with self._lock:
            client, self._client = self._client, None
            idle = client is not None and id(client) not in self._in_flight
        if idle:
            client.close()
