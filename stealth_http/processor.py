"""Response processing: execution, decompression and status classification."""

from __future__ import annotations

import logging

from .cookies import CookieJar
from .models import DecodeError, HTTPStatusError, Request, Response, TransportError
from .transport.base import RawResponse, Transport


class ResponseProcessor:
    """Drives a request through a transport and classifies the outcome.

    One attempt per call. Transport failures surface with sanitized
    messages; the library error is only logged.

    Args:
        cookies: Jar receiving response cookies, or None to ignore them.
        logger: Logger for request and failure events.
    """

    def __init__(self, cookies: CookieJar | None, logger: logging.Logger):
        self.cookies = cookies
        self.logger = logger

    def _prepare(self, request: Request, transport: Transport) -> None:
        request.headers["Accept-Encoding"] = "gzip"
        self.logger.debug(
            "sending %s %s via %s", request.method, request.url, transport.name
        )

    def _persist_cookies(self, raw: RawResponse) -> None:
        if self.cookies is not None and raw.cookies:
            self.cookies.update_from_response(raw.url, raw.cookies)

    def _read_body(self, request: Request, raw: RawResponse) -> bytes:
        try:
            return b"".join(raw.chunks)
        except DecodeError as e:
            self.logger.error(
                "reading response from %s failed: %r", request.url, e.original_error
            )
            raise

    def _log_failure(self, request: Request, error: TransportError) -> None:
        self.logger.error(
            "%s %s failed: %s (%r)",
            request.method,
            request.url,
            error,
            error.original_error,
        )

    def execute(self, transport: Transport, request: Request, timeout: float) -> Response:
        """Send the request and read the full body.

        The body is read to completion for every status.

        Returns:
            The response, whatever its status.

        Raises:
            ConnectError: On dial, proxy or handshake failure.
            TransportError: On any other execution failure.
            DecodeError: On body read or gzip failure.
        """
        self._prepare(request, transport)

        try:
            with transport.stream(request, timeout) as raw:
                self._persist_cookies(raw)
                content = self._read_body(request, raw)
        except TransportError as e:
            self._log_failure(request, e)
            raise

        self.logger.debug(
            "received %d from %s (%d bytes)", raw.status_code, raw.url, len(content)
        )
        return Response(
            status_code=raw.status_code,
            headers=raw.headers,
            content=content,
            url=raw.url,
            cookies=raw.cookies,
        )

    def fetch(self, transport: Transport, request: Request, timeout: float) -> bytes:
        """Send the request and return the body of a 2xx response.

        Raises:
            HTTPStatusError: If the status is outside [200, 300); carries the body.
        """
        response = self.execute(transport, request, timeout)
        response.raise_for_status()
        return response.content

    def download(
        self,
        transport: Transport,
        request: Request,
        timeout: float,
        save_path: str,
    ) -> int:
        """Stream a 2xx response body into ``save_path``.

        The file is created fresh, truncating any existing one. Non-2xx
        responses leave the file untouched.

        Returns:
            Number of bytes written.

        Raises:
            HTTPStatusError: If the status is outside [200, 300).
        """
        self._prepare(request, transport)

        try:
            with transport.stream(request, timeout) as raw:
                self._persist_cookies(raw)

                if not 200 <= raw.status_code < 300:
                    body = self._read_body(request, raw)
                    raise HTTPStatusError(raw.status_code, body, raw.url)

                written = 0
                with open(save_path, "wb") as fh:
                    try:
                        for chunk in raw.chunks:
                            fh.write(chunk)
                            written += len(chunk)
                    except DecodeError as e:
                        self.logger.error(
                            "download of %s failed after %d bytes: %r",
                            request.url,
                            written,
                            e.original_error,
                        )
                        raise
        except TransportError as e:
            self._log_failure(request, e)
            raise

        self.logger.debug("saved %d bytes from %s to %s", written, request.url, save_path)
        return written
