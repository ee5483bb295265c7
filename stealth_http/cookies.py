"""Thread-safe per-domain cookie jar."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Mapping
from urllib.parse import urlsplit


@dataclass
class Cookie:
    """Cookie representation.

    Attributes:
        name: Cookie name.
        value: Cookie value.
        domain: Host the cookie belongs to.
        path: Cookie path.
        secure: Whether cookie requires HTTPS.
    """

    name: str
    value: str
    domain: str = ""
    path: str = "/"
    secure: bool = False

    def matches_domain(self, domain: str) -> bool:
        """Check if cookie matches the given host."""
        domain = domain.lower()
        cookie_domain = self.domain.lower().lstrip(".")

        if domain == cookie_domain:
            return True

        # Subdomain match
        return domain.endswith("." + cookie_domain)

    def matches_path(self, path: str) -> bool:
        """Check if cookie matches the given path."""
        if self.path == "/":
            return True
        return path == self.path or path.startswith(self.path.rstrip("/") + "/")


def host_of(url: str) -> str:
    """Extract the lower-cased host name (no port) from a URL."""
    return (urlsplit(url).hostname or "").lower()


def is_secure_url(url: str) -> bool:
    """Whether the URL's scheme is encrypted."""
    return urlsplit(url).scheme.lower() == "https"


class CookieJar:
    """Per-domain cookie storage guarded by a lock.

    Cookies are keyed by host name (without port), so one jar serves a
    domain regardless of the port it is reached on.
    """

    def __init__(self) -> None:
        # Domain -> {cookie_name: Cookie}
        self._cookies: dict[str, dict[str, Cookie]] = {}
        self._lock = threading.Lock()

    def set_for_url(
        self,
        url: str,
        cookies: Mapping[str, str],
        reset: bool = False,
    ) -> None:
        """Store cookies for the URL's host.

        Each cookie gets path "/" and a secure flag derived from the URL
        scheme.

        Args:
            url: URL whose host owns the cookies.
            cookies: Cookie name to value.
            reset: Drop the host's existing cookies first.
        """
        domain = host_of(url)
        secure = is_secure_url(url)

        with self._lock:
            if reset:
                self._cookies.pop(domain, None)
            if not cookies:
                return
            domain_cookies = self._cookies.setdefault(domain, {})
            for name, value in cookies.items():
                domain_cookies[name] = Cookie(
                    name=name,
                    value=value,
                    domain=domain,
                    secure=secure,
                )

    def update_from_response(self, url: str, response_cookies: Mapping[str, str]) -> None:
        """Store cookies set by a response to ``url``."""
        if response_cookies:
            self.set_for_url(url, response_cookies)

    def cookies_for_domain(self, url: str) -> list[Cookie]:
        """List the cookies stored for the URL's host."""
        domain = host_of(url)
        with self._lock:
            return list(self._cookies.get(domain, {}).values())

    def get_value(self, url: str, name: str) -> str:
        """Return a cookie value for the URL's host, or "" when absent."""
        for cookie in self.cookies_for_domain(url):
            if cookie.name == name:
                return cookie.value
        return ""

    def get_for_url(self, url: str) -> dict[str, str]:
        """Get cookies applicable to URL.

        Args:
            url: The request URL.

        Returns:
            Dict of cookie name to value.
        """
        parsed = urlsplit(url)
        domain = (parsed.hostname or "").lower()
        path = parsed.path or "/"
        is_secure = parsed.scheme.lower() == "https"

        result: dict[str, str] = {}

        with self._lock:
            for domain_cookies in self._cookies.values():
                for name, cookie in domain_cookies.items():
                    if not cookie.matches_domain(domain):
                        continue
                    if not cookie.matches_path(path):
                        continue
                    if cookie.secure and not is_secure:
                        continue
                    result[name] = cookie.value

        return result

    def header_for_url(self, url: str) -> str:
        """Render the Cookie header value for a request to ``url``."""
        return "; ".join(f"{name}={value}" for name, value in self.get_for_url(url).items())

    def __len__(self) -> int:
        """Return total number of cookies."""
        with self._lock:
            return sum(len(cookies) for cookies in self._cookies.values())
