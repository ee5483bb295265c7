"""HTTP client core for a single backend domain with controllable transport.

This package provides a synchronous HTTP client that controls
connection-level behavior:

- TLS fingerprint impersonation via curl_cffi
- HTTP and SOCKS5 proxies
- Persistent, case-insensitive headers and a per-domain cookie jar
- Content-Type driven body encoding and transparent gzip decoding

Basic usage:

    from stealth_http import HttpClient, HTTPStatusError, ProxyConfig

    client = HttpClient("https://api.example.com")
    body = client.get("status")

    # Form or JSON body, chosen by the Content-Type header
    client.set_header({"Content-Type": "application/json"})
    client.post("login", {"user": "me"})

    # Browser ClientHello through a SOCKS5 proxy
    client.set_proxy(ProxyConfig(type="socks5", address="127.0.0.1:1080"))
    client.enable_fingerprint("chrome")

    # Failure payloads stay available
    try:
        client.get("missing")
    except HTTPStatusError as e:
        print(e.status_code, e.body)
"""

from .client import HttpClient
from .config import ClientConfig, DEFAULT_HEADERS
from .cookies import Cookie, CookieJar
from .fingerprint import FingerprintProfile, PROFILES, TLSProfile, list_profiles, resolve_profile
from .headers import HeaderMap, canonical_header_name
from .models import (
    Request,
    Response,
    MultipartBody,
    HTTPClientError,
    ConfigurationError,
    EncodingError,
    TransportError,
    ConnectError,
    DecodeError,
    HTTPStatusError,
)
from .proxy import ProxyConfig, ProxyType
from .utils import to_string

__version__ = "0.1.0"

__all__ = [
    # Main client
    "HttpClient",
    # Configuration
    "ClientConfig",
    "DEFAULT_HEADERS",
    "ProxyConfig",
    "ProxyType",
    # Fingerprinting
    "TLSProfile",
    "FingerprintProfile",
    "PROFILES",
    "list_profiles",
    "resolve_profile",
    # State
    "HeaderMap",
    "canonical_header_name",
    "Cookie",
    "CookieJar",
    # Models
    "Request",
    "Response",
    "MultipartBody",
    # Exceptions
    "HTTPClientError",
    "ConfigurationError",
    "EncodingError",
    "TransportError",
    "ConnectError",
    "DecodeError",
    "HTTPStatusError",
    # Helpers
    "to_string",
]
