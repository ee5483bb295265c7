"""curl_cffi transport implementation with TLS fingerprinting support."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Iterator

from curl_cffi import CurlError, CurlMime
from curl_cffi.const import CurlECode
from curl_cffi.requests import Session

from ..fingerprint import FingerprintProfile
from ..models import ConnectError, DecodeError, Request, TransportError
from .base import BaseTransport, RawResponse

# Failures that happen while dialing, talking to the proxy or handshaking.
_CONNECT_CODES = frozenset(
    {
        CurlECode.COULDNT_RESOLVE_PROXY,
        CurlECode.COULDNT_RESOLVE_HOST,
        CurlECode.COULDNT_CONNECT,
        CurlECode.SSL_CONNECT_ERROR,
        CurlECode.PEER_FAILED_VERIFICATION,
    }
)


class CurlTransport(BaseTransport):
    """Transport using curl_cffi to present a browser ClientHello.

    curl_cffi sessions are not thread-safe, so each thread gets its own
    session; all of them are tracked for close(). A session with a stream
    still open is left to its own thread, which closes it when the stream
    ends.
    """

    name = "curl_cffi"

    def __init__(
        self,
        profile: FingerprintProfile,
        proxy: str | None = None,
        verify_ssl: bool = True,
        follow_redirects: bool = True,
        max_redirects: int = 10,
    ):
        """Initialize curl transport.

        Args:
            profile: Fingerprint profile whose ClientHello is presented.
            proxy: Proxy URL ("http://..." or "socks5h://...").
            verify_ssl: Whether to verify SSL certificates.
            follow_redirects: Whether to follow redirects.
            max_redirects: Maximum number of redirects.
        """
        super().__init__(proxy, verify_ssl, follow_redirects, max_redirects)
        self._profile = profile
        self._local = threading.local()
        self._sessions: list[Session] = []
        # id(session) -> open streams
        self._in_flight: dict[int, int] = {}
        self._lock = threading.Lock()

    @property
    def profile(self) -> FingerprintProfile:
        """Fingerprint profile used for new connections."""
        return self._profile

    @property
    def impersonate(self) -> str:
        """curl_cffi impersonate target."""
        return self._profile.impersonate

    def _acquire(self) -> Session:
        """Get or create this thread's session and count one stream against it."""
        with self._lock:
            session = getattr(self._local, "session", None)
            if session is None:
                session = Session(impersonate=self._profile.impersonate, verify=self._verify_ssl)
                self._local.session = session
                self._sessions.append(session)
            self._in_flight[id(session)] = self._in_flight.get(id(session), 0) + 1
            return session

    def _release(self, session: Session) -> None:
        """End one stream; close the session if it was detached and is now idle."""
        with self._lock:
            remaining = self._in_flight[id(session)] - 1
            if remaining:
                self._in_flight[id(session)] = remaining
                return
            del self._in_flight[id(session)]
            detached = not any(s is session for s in self._sessions)
        if detached:
            session.close()

    def _build_request_kwargs(self, request: Request, timeout: float) -> dict[str, Any]:
        """Build kwargs for curl_cffi's Session.request."""
        kwargs: dict[str, Any] = {
            "method": request.method,
            "url": request.url,
            "headers": request.headers or {},
            "timeout": timeout,
            "allow_redirects": self._follow_redirects,
            "max_redirects": self._max_redirects,
            "stream": True,
        }

        if request.content is not None:
            kwargs["data"] = request.content

        if self._proxy:
            kwargs["proxy"] = self._proxy

        return kwargs

    @staticmethod
    def _build_multipart(request: Request) -> CurlMime:
        """Render the upload body; libcurl streams the file from disk."""
        body = request.multipart
        mime = CurlMime()
        for name, value in body.fields.items():
            mime.addpart(name=name, data=value.encode("utf-8"))
        mime.addpart(name=body.field_name, filename=body.filename, local_path=body.file_path)
        return mime

    @contextmanager
    def stream(self, request: Request, timeout: float) -> Iterator[RawResponse]:
        """Send a request and yield the response before its body is read.

        Raises:
            ConnectError: On dial, proxy or handshake failure.
            TransportError: On any other failure before the status line.
        """
        kwargs = self._build_request_kwargs(request, timeout)

        mime = None
        if request.multipart is not None:
            mime = self._build_multipart(request)
            kwargs["multipart"] = mime
            kwargs["headers"] = {
                k: v for k, v in kwargs["headers"].items() if k.lower() != "content-type"
            }

        session = self._acquire()
        try:
            try:
                resp = session.request(**kwargs)
            except CurlError as e:
                if getattr(e, "code", None) in _CONNECT_CODES:
                    raise ConnectError("connection failed", original_error=e) from e
                raise TransportError("request failed", original_error=e) from e

            # Cookie state lives in the client's jar, not the session.
            cookies = {name: value for name, value in resp.cookies.items()}
            session.cookies.clear()

            try:
                yield RawResponse(
                    status_code=resp.status_code,
                    headers=dict(resp.headers),
                    url=str(resp.url),
                    cookies=cookies,
                    chunks=self._iter_body(resp),
                )
            finally:
                resp.close()
        finally:
            if mime is not None:
                mime.close()
            self._release(session)

    @staticmethod
    def _iter_body(resp: Any) -> Iterator[bytes]:
        """Iterate body chunks decoded by libcurl, translating failures."""
        try:
            for chunk in resp.iter_content():
                if chunk:
                    yield chunk
        except CurlError as e:
            raise DecodeError("failed to read response body", original_error=e) from e

    def close(self) -> None:
        """Detach every session; idle ones are closed now, busy ones by their thread."""
        with self._lock:
            sessions, self._sessions = self._sessions, []
            self._local = threading.local()
            idle = [s for s in sessions if id(s) not in self._in_flight]
        for session in idle:
            session.close()
