"""Browser TLS fingerprint profiles for curl_cffi impersonation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TLSProfile(str, Enum):
    """Named ClientHello identities."""

    CHROME = "chrome"
    FIREFOX = "firefox"
    SAFARI = "safari"
    EDGE = "edge"
    IOS = "ios"
    DEFAULT = "default"


@dataclass(frozen=True)
class FingerprintProfile:
    """ClientHello template for one browser identity.

    The cipher suite order, extension list and supported TLS versions come
    from the curl_cffi impersonation target; curl-impersonate ships one
    fixed template per target.

    Attributes:
        profile: The identity this row describes.
        impersonate: curl_cffi impersonate target.
        description: Human readable browser and platform.
    """

    profile: TLSProfile
    impersonate: str
    description: str


PROFILES: dict[TLSProfile, FingerprintProfile] = {
    TLSProfile.CHROME: FingerprintProfile(
        TLSProfile.CHROME, "chrome124", "Chrome 124 on Windows"
    ),
    TLSProfile.FIREFOX: FingerprintProfile(
        TLSProfile.FIREFOX, "firefox133", "Firefox 133 on Windows"
    ),
    TLSProfile.SAFARI: FingerprintProfile(
        TLSProfile.SAFARI, "safari17_0", "Safari 17.0 on macOS"
    ),
    TLSProfile.EDGE: FingerprintProfile(
        TLSProfile.EDGE, "edge101", "Edge 101 on Windows"
    ),
    TLSProfile.IOS: FingerprintProfile(
        TLSProfile.IOS, "safari17_2_ios", "Safari 17.2 on iOS"
    ),
    # Newest Chrome the installed curl_cffi knows about.
    TLSProfile.DEFAULT: FingerprintProfile(
        TLSProfile.DEFAULT, "chrome", "latest Chrome known to curl_cffi"
    ),
}

FALLBACK_PROFILE = TLSProfile.CHROME


def resolve_profile(name: TLSProfile | str) -> tuple[FingerprintProfile, bool]:
    """Look up a profile by name.

    Unknown names resolve to the chrome profile instead of failing.

    Args:
        name: Profile name or TLSProfile member, case-insensitive.

    Returns:
        The profile and whether the name was recognized.
    """
    if isinstance(name, TLSProfile):
        return PROFILES[name], True
    try:
        return PROFILES[TLSProfile(name.strip().lower())], True
    except ValueError:
        return PROFILES[FALLBACK_PROFILE], False


def list_profiles() -> list[str]:
    """Get list of available profile names."""
    return [profile.value for profile in TLSProfile]
