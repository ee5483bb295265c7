"""Transport layer for HTTP requests."""

from .base import BaseTransport, RawResponse, Transport
from .curl_transport import CurlTransport
from .httpx_transport import HttpxTransport

__all__ = ["BaseTransport", "RawResponse", "Transport", "CurlTransport", "HttpxTransport"]
