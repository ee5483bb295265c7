"""Request assembly: URL resolution and body encoding negotiation."""

from __future__ import annotations

import json
import os
import re
from typing import Any, Mapping
from urllib.parse import urlencode

from .cookies import CookieJar
from .headers import HeaderMap
from .models import ConfigurationError, EncodingError, MultipartBody, Request
from .utils import to_string

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

_ABSOLUTE_URL = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")


def resolve_url(domain: str, path: str) -> str:
    """Join a request path to the base domain.

    Absolute URLs are returned verbatim. Otherwise exactly one slash
    separates domain and path, whatever slashes either side carries.

    Raises:
        ConfigurationError: If the path is relative and no domain is set.
    """
    if _ABSOLUTE_URL.match(path):
        return path
    if not domain:
        raise ConfigurationError(f"no domain configured for relative path {path!r}")
    return f"{domain.rstrip('/')}/{path.lstrip('/')}"


def effective_content_type(headers: Mapping[str, str]) -> str:
    """Content-Type used for structured bodies; JSON when none is set."""
    return headers.get("Content-Type") or JSON_CONTENT_TYPE


def encode_structured_body(content_type: str, data: Mapping[str, Any]) -> bytes:
    """Encode a key/value map according to the declared content type.

    The content type is matched case-insensitively by prefix, so trailing
    parameters such as "; charset=utf-8" are tolerated.

    Raises:
        EncodingError: On an unsupported content type or marshal failure.
    """
    media_type = content_type.strip().lower()

    if media_type.startswith(JSON_CONTENT_TYPE):
        return _marshal_json(data)

    if media_type.startswith(FORM_CONTENT_TYPE):
        return urlencode({k: to_string(v) for k, v in data.items()}).encode("ascii")

    raise EncodingError(f"unsupported Content-Type: {content_type}")


def _marshal_json(payload: Any) -> bytes:
    try:
        return json.dumps(payload, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodingError(f"failed to marshal JSON: {e}") from e


class RequestBuilder:
    """Builds fresh Request objects from the client's header and cookie state.

    Args:
        headers: Live header map; snapshotted per request.
        cookies: Cookie jar consulted for the Cookie header.
    """

    def __init__(self, headers: HeaderMap, cookies: CookieJar):
        self._headers = headers
        self._cookies = cookies

    def _snapshot_headers(self, url: str) -> dict[str, str]:
        headers = self._headers.copy()
        jar_cookies = self._cookies.header_for_url(url)
        if jar_cookies:
            explicit = headers.get("Cookie")
            headers["Cookie"] = f"{explicit}; {jar_cookies}" if explicit else jar_cookies
        return headers

    def build(self, method: str, url: str, content: bytes | None = None) -> Request:
        """Build a request whose body, if any, is sent verbatim."""
        return Request(
            method=method,
            url=url,
            headers=self._snapshot_headers(url),
            content=content,
        )

    def build_structured(self, method: str, url: str, data: Mapping[str, Any]) -> Request:
        """Build a request whose map body is encoded per the Content-Type.

        Raises:
            EncodingError: On an unsupported content type or marshal failure.
        """
        content_type = effective_content_type(self._headers)
        content = encode_structured_body(content_type, data)
        request = self.build(method, url, content)
        request.headers["Content-Type"] = content_type
        return request

    def build_json(self, method: str, url: str, payload: Any) -> Request:
        """Build a request carrying an arbitrary JSON payload.

        Raises:
            EncodingError: If the Content-Type is anything but
                application/json, or the payload cannot be marshaled.
        """
        content_type = effective_content_type(self._headers)
        if content_type.strip().lower() != JSON_CONTENT_TYPE:
            raise EncodingError(
                f"JSON payloads require Content-Type {JSON_CONTENT_TYPE}, got {content_type}"
            )
        request = self.build(method, url, _marshal_json(payload))
        request.headers["Content-Type"] = content_type
        return request

    def build_multipart(
        self,
        url: str,
        field_name: str,
        file_path: str,
        extra_fields: Mapping[str, Any] | None = None,
    ) -> Request:
        """Build a multipart upload request.

        Extra fields come first, then the file. The configured Content-Type
        is left out; the transport's multipart writer supplies one with its
        boundary.

        Raises:
            EncodingError: If the file cannot be read.
        """
        if not os.path.isfile(file_path) or not os.access(file_path, os.R_OK):
            raise EncodingError(f"cannot open upload file: {os.path.basename(file_path)}")

        request = self.build("POST", url)
        request.headers.pop("Content-Type", None)
        request.multipart = MultipartBody(
            field_name=field_name,
            file_path=file_path,
            filename=os.path.basename(file_path),
            fields={k: to_string(v) for k, v in (extra_fields or {}).items()},
        )
        return request
