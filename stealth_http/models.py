"""Request and Response dataclasses and the client exception taxonomy."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class MultipartBody:
    """File upload body, rendered by the transport's multipart writer.

    Attributes:
        field_name: Form field that carries the file.
        file_path: Path of the file streamed into the field.
        filename: File name announced in the part's Content-Disposition.
        fields: Extra form fields, written before the file part.
    """

    field_name: str
    file_path: str
    filename: str
    fields: dict[str, str] = field(default_factory=dict)


@dataclass
class Request:
    """HTTP request representation.

    Attributes:
        method: HTTP method (GET, POST, PUT).
        url: Absolute request URL.
        headers: Header snapshot taken when the request was built.
        content: Body bytes, sent verbatim.
        multipart: Multipart file upload body.
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    content: bytes | None = None
    multipart: MultipartBody | None = None

    def __post_init__(self) -> None:
        """Normalize method to uppercase."""
        self.method = self.method.upper()


@dataclass
class Response:
    """HTTP response representation.

    Attributes:
        status_code: HTTP status code.
        headers: Response headers.
        content: Response body, already decompressed.
        url: Final URL after redirects.
        cookies: Cookies set by the response.
    """

    status_code: int
    headers: dict[str, str]
    content: bytes
    url: str
    cookies: dict[str, str] = field(default_factory=dict)

    @property
    def text(self) -> str:
        """Decode content as UTF-8 text."""
        return self.content.decode("utf-8", errors="replace")

    @property
    def ok(self) -> bool:
        """Check if status code indicates success (2xx)."""
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Parse content as JSON."""
        import json as json_module
        return json_module.loads(self.content)

    def raise_for_status(self) -> None:
        """Raise HTTPStatusError if status code is outside [200, 300)."""
        if not self.ok:
            raise HTTPStatusError(self.status_code, self.content, self.url)


class HTTPClientError(Exception):
    """Base exception for HTTP client errors."""
    pass


class ConfigurationError(HTTPClientError):
    """Invalid client or proxy configuration. Raised before any network activity."""

    def __init__(self, message: str, config: dict[str, Any] | None = None):
        super().__init__(message)
        self.config = config


class EncodingError(HTTPClientError):
    """Request body could not be encoded. Raised before the request is sent."""
    pass


class TransportError(HTTPClientError):
    """Request execution failed.

    The message is safe to show to callers; the library exception is only
    kept on ``original_error`` for diagnostics.
    """

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class ConnectError(TransportError):
    """Dial, proxy or TLS handshake failure."""
    pass


class DecodeError(HTTPClientError):
    """Response body could not be read or decompressed."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class HTTPStatusError(HTTPClientError):
    """Response status outside [200, 300).

    The full response body is carried on ``body`` so callers can inspect
    application-level error payloads.
    """

    def __init__(self, status_code: int, body: bytes, url: str = ""):
        super().__init__(f"HTTP {status_code} for {url}" if url else f"HTTP {status_code}")
        self.status_code = status_code
        self.body = body
        self.url = url

    @property
    def text(self) -> str:
        """Decode the error body as UTF-8 text."""
        return self.body.decode("utf-8", errors="replace")
