"""HTTP client facade bound to a single backend domain."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Mapping

from .builder import RequestBuilder, resolve_url
from .config import ClientConfig
from .cookies import Cookie, CookieJar
from .fingerprint import FingerprintProfile, TLSProfile, resolve_profile
from .headers import HeaderMap
from .models import ConfigurationError
from .processor import ResponseProcessor
from .proxy import ProxyConfig
from .transport import CurlTransport, HttpxTransport
from .transport.base import BaseTransport

DEFAULT_LOGGER_NAME = "stealth_http"


class HttpClient:
    """HTTP client for one backend domain with controllable transport.

    Features:
    - Relative paths resolved against a base domain
    - Content-Type driven body encoding (JSON, form-urlencoded)
    - Persistent headers and per-domain cookie jar
    - HTTP and SOCKS5 proxies
    - Browser TLS fingerprint impersonation via curl_cffi

    Request methods may be called from several threads. Configuration
    setters are not synchronized with in-flight requests; each one that
    changes connection behavior builds a new transport and swaps it in.

    Examples:
        client = HttpClient("https://api.example.com")
        client.set_header({"Content-Type": "application/json"})
        body = client.post("login", {"user": "me", "password": "..."})

        # Impersonate a browser ClientHello through a SOCKS5 proxy
        client.set_proxy(ProxyConfig(type="socks5", address="127.0.0.1:1080"))
        client.enable_fingerprint("firefox")
        page = client.get("/dashboard")
    """

    def __init__(
        self,
        domain: str = "",
        timeout: float | None = None,
        headers: Mapping[str, str] | None = None,
        *,
        config: ClientConfig | None = None,
        logger: logging.Logger | None = None,
    ):
        """Initialize HttpClient.

        Args:
            domain: Base URL for relative paths. Overrides config.domain.
            timeout: Request timeout in seconds. Overrides config.timeout.
            headers: Headers merged over the configured defaults.
            config: Full configuration; defaults to ClientConfig().
            logger: Logger for client events.
        """
        overrides: dict[str, Any] = {}
        if domain:
            overrides["domain"] = domain
        if timeout is not None:
            overrides["timeout"] = timeout
        self._config = replace(config or ClientConfig(), **overrides)

        self._logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)

        self._headers = HeaderMap(self._config.headers)
        if headers:
            self._headers.update(headers)

        self._cookies = CookieJar()
        self._builder = RequestBuilder(self._headers, self._cookies)
        self._processor = ResponseProcessor(
            self._cookies if self._config.persist_cookies else None,
            self._logger,
        )

        self._proxy: ProxyConfig | None = None
        self._fingerprint: FingerprintProfile | None = None
        self._transport: BaseTransport = self._build_transport()

    # -------------------------------------------------------------------------
    # Transport lifecycle
    # -------------------------------------------------------------------------

    def _build_transport(self) -> BaseTransport:
        """Build a transport from the current proxy and fingerprint state."""
        config = self._config
        if self._fingerprint is not None:
            return CurlTransport(
                profile=self._fingerprint,
                proxy=self._proxy.to_url(remote_dns=True) if self._proxy else None,
                verify_ssl=config.verify_ssl,
                follow_redirects=config.follow_redirects,
                max_redirects=config.max_redirects,
            )
        return HttpxTransport(
            proxy=self._proxy.to_url() if self._proxy else None,
            verify_ssl=config.verify_ssl,
            follow_redirects=config.follow_redirects,
            max_redirects=config.max_redirects,
            max_idle_connections=config.max_idle_connections,
            keepalive_expiry=config.timeout,
        )

    def _swap_transport(self) -> None:
        """Replace the transport in one assignment and retire the old one.

        Requests already running on the old transport finish on it.
        """
        old, self._transport = self._transport, self._build_transport()
        old.close()

    @property
    def transport(self) -> BaseTransport:
        """Transport used for new requests."""
        return self._transport

    # -------------------------------------------------------------------------
    # HTTP Methods
    # -------------------------------------------------------------------------

    def get(self, path: str) -> bytes:
        """Make a GET request and return the response body."""
        url = resolve_url(self._config.domain, path)
        request = self._builder.build("GET", url)
        return self._processor.fetch(self._transport, request, self._config.timeout)

    def post(self, path: str, data: Mapping[str, Any]) -> bytes:
        """POST a map encoded per the configured Content-Type."""
        url = resolve_url(self._config.domain, path)
        request = self._builder.build_structured("POST", url, data)
        return self._processor.fetch(self._transport, request, self._config.timeout)

    def post_json(self, path: str, payload: Any) -> bytes:
        """POST any JSON-serializable payload.

        Requires the configured Content-Type to be application/json.
        """
        url = resolve_url(self._config.domain, path)
        request = self._builder.build_json("POST", url, payload)
        return self._processor.fetch(self._transport, request, self._config.timeout)

    def post_raw(self, path: str, body: str) -> bytes:
        """POST a string body verbatim under the configured Content-Type."""
        url = resolve_url(self._config.domain, path)
        request = self._builder.build("POST", url, body.encode("utf-8"))
        self._logger.debug("raw body for %s: %d bytes", url, len(request.content))
        return self._processor.fetch(self._transport, request, self._config.timeout)

    def put(self, path: str, data: Mapping[str, Any]) -> bytes:
        """PUT a map encoded per the configured Content-Type."""
        url = resolve_url(self._config.domain, path)
        request = self._builder.build_structured("PUT", url, data)
        return self._processor.fetch(self._transport, request, self._config.timeout)

    def put_raw(self, path: str, body: bytes) -> bytes:
        """PUT raw bytes verbatim under the configured Content-Type."""
        url = resolve_url(self._config.domain, path)
        request = self._builder.build("PUT", url, bytes(body))
        return self._processor.fetch(self._transport, request, self._config.timeout)

    def upload_file(
        self,
        path: str,
        field_name: str,
        file_path: str,
        extra_fields: Mapping[str, Any] | None = None,
    ) -> bytes:
        """Upload a file as multipart/form-data.

        Args:
            path: Request path or absolute URL.
            field_name: Form field carrying the file.
            file_path: File to upload; streamed, not loaded whole.
            extra_fields: Additional form fields, written before the file.
        """
        url = resolve_url(self._config.domain, path)
        request = self._builder.build_multipart(url, field_name, file_path, extra_fields)
        return self._processor.fetch(self._transport, request, self._config.timeout)

    def download_file(self, path: str, save_path: str) -> int:
        """GET a resource and stream it into ``save_path``.

        Returns:
            Number of bytes written.
        """
        url = resolve_url(self._config.domain, path)
        request = self._builder.build("GET", url)
        return self._processor.download(
            self._transport, request, self._config.timeout, save_path
        )

    # -------------------------------------------------------------------------
    # Domain, headers, timeout
    # -------------------------------------------------------------------------

    def set_domain(self, domain: str) -> None:
        """Set the base URL for relative paths."""
        self._config.domain = domain

    def get_domain(self) -> str:
        """Get the base URL for relative paths."""
        return self._config.domain

    def set_header(self, headers: Mapping[str, str]) -> None:
        """Merge headers into the persistent header map."""
        self._headers.update(headers)

    def add_header(self, name: str, value: str) -> None:
        """Set a single persistent header."""
        self._headers[name] = value

    def get_header(self) -> HeaderMap:
        """Return the live header map (not a copy)."""
        return self._headers

    def set_timeout(self, timeout: float) -> None:
        """Set the timeout applied to every request and to idle connections."""
        self._config = replace(self._config, timeout=timeout)
        self._swap_transport()
        self._logger.info("timeout set to %.1fs", timeout)

    def get_timeout(self) -> float:
        """Get the request timeout in seconds."""
        return self._config.timeout

    def set_logger(self, logger: logging.Logger) -> None:
        """Route client log events to ``logger``."""
        self._logger = logger
        self._processor.logger = logger

    # -------------------------------------------------------------------------
    # Proxy and TLS fingerprint
    # -------------------------------------------------------------------------

    def set_proxy(self, proxy: ProxyConfig | None) -> None:
        """Route connections through a proxy, or dial directly with None.

        Replaces any previous proxy.

        Raises:
            ConfigurationError: On unsupported type or malformed address.
        """
        if proxy is not None:
            proxy.validate()
            if proxy.is_direct:
                proxy = None

        self._proxy = proxy
        self._swap_transport()
        self._logger.info("proxy set to %s", proxy.masked_url() if proxy else "direct")

    def get_proxy(self) -> ProxyConfig | None:
        """Get the active proxy configuration."""
        return self._proxy

    def enable_fingerprint(self, profile: TLSProfile | str = TLSProfile.CHROME) -> None:
        """Present a browser ClientHello on new connections.

        Unknown profile names fall back to chrome.
        """
        resolved, known = resolve_profile(profile)
        if not known:
            self._logger.warning(
                "unknown TLS profile %r, using %s", profile, resolved.profile.value
            )
        self._fingerprint = resolved
        self._swap_transport()
        self._logger.info("TLS fingerprint enabled: %s", resolved.description)

    def disable_fingerprint(self) -> None:
        """Restore the platform-default TLS stack for new connections."""
        if self._fingerprint is None:
            return
        self._fingerprint = None
        self._swap_transport()
        self._logger.info("TLS fingerprint disabled")

    @property
    def fingerprint(self) -> TLSProfile | None:
        """Active TLS profile, or None when using the platform default."""
        return self._fingerprint.profile if self._fingerprint else None

    # -------------------------------------------------------------------------
    # Cookies
    # -------------------------------------------------------------------------

    def _cookie_domain(self) -> str:
        if not self._config.domain:
            raise ConfigurationError("no domain configured for cookies")
        return self._config.domain

    def set_cookies(self, cookies: Mapping[str, str], reset: bool = False) -> None:
        """Store cookies for the domain.

        Args:
            cookies: Cookie name to value.
            reset: Clear the domain's existing cookies first.

        Raises:
            ConfigurationError: If no domain is set.
        """
        self._cookies.set_for_url(self._cookie_domain(), cookies, reset=reset)

    def get_cookies(self) -> list[Cookie]:
        """List the cookies stored for the domain."""
        return self._cookies.cookies_for_domain(self._cookie_domain())

    def get_cookie_value(self, name: str) -> str:
        """Get a domain cookie's value, or "" if it is not set."""
        return self._cookies.get_value(self._cookie_domain(), name)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Release pooled connections. The client remains usable.

        Requests in flight are not interrupted.
        """
        self._transport.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
