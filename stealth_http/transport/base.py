"""Abstract transport protocol for HTTP requests."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import Any, Iterator, Protocol, runtime_checkable

from ..models import Request


@dataclass
class RawResponse:
    """Response whose body has not been read yet.

    Attributes:
        status_code: HTTP status code.
        headers: Response headers.
        url: Final URL after redirects.
        cookies: Cookies set by the response.
        chunks: Decompressed body chunks. Iterating may raise DecodeError.
    """

    status_code: int
    headers: dict[str, str]
    url: str
    chunks: Iterator[bytes]
    cookies: dict[str, str] = field(default_factory=dict)


@runtime_checkable
class Transport(Protocol):
    """Protocol defining the transport interface.

    A transport owns one dial strategy (direct or proxied) and one TLS
    behavior, plus the pool of connections they produce.
    """

    name: str

    def stream(self, request: Request, timeout: float) -> AbstractContextManager[RawResponse]:
        """Send a request and expose the response once the status line arrives.

        Args:
            request: The request to execute.
            timeout: Request timeout in seconds.

        Returns:
            Context manager yielding the response; leaving it releases the
            connection.

        Raises:
            ConnectError: On dial, proxy or handshake failure.
            TransportError: On any other failure before the status line.
        """
        ...

    def close(self) -> None:
        """Release idle pooled connections."""
        ...


class BaseTransport(ABC):
    """Abstract base class for transport implementations.

    Provides common configuration and enforces the transport interface.
    """

    name = "base"

    def __init__(
        self,
        proxy: str | None = None,
        verify_ssl: bool = True,
        follow_redirects: bool = True,
        max_redirects: int = 10,
    ):
        """Initialize transport.

        Args:
            proxy: Proxy URL, or None to dial directly.
            verify_ssl: Whether to verify SSL certificates.
            follow_redirects: Whether to follow redirects.
            max_redirects: Maximum number of redirects.
        """
        self._proxy = proxy
        self._verify_ssl = verify_ssl
        self._follow_redirects = follow_redirects
        self._max_redirects = max_redirects

    @property
    def proxy(self) -> str | None:
        """Proxy URL connections are dialed through."""
        return self._proxy

    @abstractmethod
    def stream(self, request: Request, timeout: float) -> AbstractContextManager[RawResponse]:
        """Send a request and yield the unread response."""
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        """Release idle pooled connections."""
        raise NotImplementedError

    def __enter__(self) -> "BaseTransport":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
