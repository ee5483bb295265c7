"""Configuration dataclass and defaults for the HTTP client."""

from dataclasses import dataclass, field

from .models import ConfigurationError

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/58.0.3029.110 Safari/537.3"
)

DEFAULT_HEADERS: dict[str, str] = {
    "Content-Type": "application/x-www-form-urlencoded",
    "User-Agent": DEFAULT_USER_AGENT,
}


@dataclass
class ClientConfig:
    """Configuration for HttpClient.

    Attributes:
        domain: Base URL that relative request paths are joined to.
        timeout: Total request timeout in seconds, applied to every request
            from dialing through reading the last body byte.
            Idle pooled connections expire after the same duration.
        headers: Default headers sent with every request.
        persist_cookies: Whether cookies set by responses are stored in the
            cookie jar. Explicitly set cookies are always kept.
        verify_ssl: Whether to verify SSL certificates.
        follow_redirects: Whether to follow HTTP redirects.
        max_redirects: Maximum number of redirects to follow.
        max_idle_connections: Ceiling for pooled keep-alive connections.
    """

    domain: str = ""

    timeout: float = 30.0

    headers: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_HEADERS))

    # Session behavior
    persist_cookies: bool = True

    # SSL and redirects
    verify_ssl: bool = True
    follow_redirects: bool = True
    max_redirects: int = 10

    # Connection pool
    max_idle_connections: int = 100

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be > 0")
        if self.max_redirects < 0:
            raise ConfigurationError("max_redirects must be >= 0")
        if self.max_idle_connections < 1:
            raise ConfigurationError("max_idle_connections must be >= 1")
