"""Proxy configuration: which dial strategy routes outbound connections."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote

from .models import ConfigurationError


class ProxyType(str, Enum):
    """Supported dial strategies."""

    HTTP = "http"
    SOCKS5 = "socks5"
    NONE = "none"


@dataclass
class ProxyConfig:
    """Configuration for a single proxy.

    Attributes:
        type: Proxy type ("http", "socks5" or "none").
        address: Proxy "host:port".
        username: Auth username (optional).
        password: Auth password (optional).
    """

    type: ProxyType | str
    address: str = ""
    username: str = ""
    password: str = ""

    @property
    def proxy_type(self) -> ProxyType:
        """The validated proxy type.

        Raises:
            ConfigurationError: If the type is not supported.
        """
        if isinstance(self.type, ProxyType):
            return self.type
        try:
            return ProxyType(str(self.type).strip().lower())
        except ValueError:
            raise ConfigurationError(
                f"unsupported proxy type: {self.type}",
                config={"type": self.type, "address": self.address},
            ) from None

    @property
    def is_direct(self) -> bool:
        """Whether this config disables proxying."""
        return self.proxy_type is ProxyType.NONE

    def validate(self) -> None:
        """Check type and address.

        Raises:
            ConfigurationError: On unsupported type or malformed address.
        """
        if self.is_direct:
            return

        host, sep, port = self.address.strip().rpartition(":")
        if not sep or not host:
            raise ConfigurationError(
                f"proxy address must be host:port, got {self.address!r}",
                config={"type": self.proxy_type.value, "address": self.address},
            )
        if not port.isdigit() or not 0 < int(port) < 65536:
            raise ConfigurationError(
                f"invalid proxy port in {self.address!r}",
                config={"type": self.proxy_type.value, "address": self.address},
            )

    def to_url(self, remote_dns: bool = False) -> str | None:
        """Render the proxy URL, or None for direct connections.

        Credentials are embedded only when both username and password are
        set.

        Args:
            remote_dns: Use ``socks5h`` so host names resolve at the proxy.
        """
        self.validate()
        if self.is_direct:
            return None

        scheme = self.proxy_type.value
        if self.proxy_type is ProxyType.SOCKS5 and remote_dns:
            scheme = "socks5h"

        userinfo = ""
        if self.username and self.password:
            userinfo = f"{quote(self.username, safe='')}:{quote(self.password, safe='')}@"

        return f"{scheme}://{userinfo}{self.address.strip()}"

    def masked_url(self) -> str:
        """Proxy URL with the password masked, for logs."""
        url = self.to_url()
        if url is None:
            return "direct"
        if "@" not in url:
            return url
        protocol, rest = url.split("://", 1)
        creds, host = rest.rsplit("@", 1)
        user = creds.split(":", 1)[0]
        return f"{protocol}://{user}:****@{host}"
