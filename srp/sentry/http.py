"""HTTP client abstraction for the Sentry API.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Canned responses keyed by (method, url)
- encode_multipart: multipart/form-data body for file uploads
- next_page_url: cursor pagination from Sentry's Link header
"""

from __future__ import annotations

import json
import re
import ssl
import urllib.error
import urllib.request
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from srp import __version__
from srp.core.result import Err, Ok, Result

__all__ = [
    "FilePart",
    "HttpClient",
    "HttpError",
    "JsonPage",
    "MockHttpClient",
    "MockRequest",
    "RealHttpClient",
    "encode_multipart",
    "next_page_url",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
        body: Response body, if the server sent one
    """

    url: str
    status: int
    message: str
    body: str = ""

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@dataclass(frozen=True, slots=True)
class FilePart:
    """A file field in a multipart form."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass(frozen=True, slots=True)
class JsonPage:
    """One page of a paginated listing; next_url is None on the last page."""

    data: object
    next_url: str | None = None


_LINK = re.compile(r"<([^>]*)>([^,<]*)")
_LINK_PARAM = re.compile(r'([\w-]+)="([^"]*)"')


def next_page_url(link_header: str | None) -> str | None:
    """URL of the next page from a Sentry `Link` header.

    Sentry always sends a `rel="next"` link and marks whether it has
    anything behind it with `results="true"|"false"`.
    """
    if not link_header:
        return None
    for match in _LINK.finditer(link_header):
        params = dict(_LINK_PARAM.findall(match.group(2)))
        if params.get("rel") == "next" and params.get("results", "true") == "true":
            return match.group(1)
    return None


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations.

    JSON responses are returned undecoded-by-shape (`object`): the Sentry
    API answers with objects for single resources and arrays for listings.
    Callers validate shape with srp.core.structured.
    """

    def get_json(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> Result[object, HttpError]: ...

    def get_json_page(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> Result[JsonPage, HttpError]: ...

    def post_json(
        self,
        url: str,
        payload: Mapping[str, object],
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Result[object, HttpError]: ...

    def post_form(
        self,
        url: str,
        fields: Mapping[str, str],
        files: Mapping[str, FilePart],
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Result[object, HttpError]: ...

    def delete(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> Result[None, HttpError]: ...


def _quote_header_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def encode_multipart(
    fields: Mapping[str, str],
    files: Mapping[str, FilePart],
    *,
    boundary: str | None = None,
) -> tuple[bytes, str]:
    """Encode fields and files as multipart/form-data.

    Returns:
        (body, content_type) where content_type carries the boundary.
    """
    boundary = boundary or f"srp-{uuid.uuid4().hex}"
    chunks: list[bytes] = []

    for name, value in fields.items():
        chunks.append(f"--{boundary}\r\n".encode("ascii"))
        chunks.append(
            f'Content-Disposition: form-data; name="{_quote_header_value(name)}"\r\n\r\n'.encode(
                "utf-8"
            )
        )
        chunks.append(value.encode("utf-8"))
        chunks.append(b"\r\n")

    for name, part in files.items():
        chunks.append(f"--{boundary}\r\n".encode("ascii"))
        chunks.append(
            (
                f'Content-Disposition: form-data; name="{_quote_header_value(name)}"; '
                f'filename="{_quote_header_value(part.filename)}"\r\n'
                f"Content-Type: {part.content_type}\r\n\r\n"
            ).encode("utf-8")
        )
        chunks.append(part.content)
        chunks.append(b"\r\n")

    chunks.append(f"--{boundary}--\r\n".encode("ascii"))
    return b"".join(chunks), f"multipart/form-data; boundary={boundary}"


def _decode_json(url: str, raw: bytes) -> Result[object, HttpError]:
    if not raw.strip():
        return Ok(None)
    try:
        data: object = json.loads(raw.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}"))
    return Ok(data)


class RealHttpClient:
    """HTTP client using urllib.

    Handles:
    - HTTPS with system certificates
    - JSON request and response bodies
    - multipart uploads
    - Timeout handling
    """

    def __init__(self, timeout: float = 60.0, user_agent: str = f"srp/{__version__}") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def _request(
        self,
        method: str,
        url: str,
        *,
        data: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[tuple[bytes, str | None], HttpError]:
        """Send a request; returns the body and the `Link` header, if any."""
        all_headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        if headers:
            all_headers.update(headers)

        try:
            req = urllib.request.Request(url, data=data, headers=all_headers, method=method)
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok((response.read(), response.headers.get("Link")))
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace") if e.fp is not None else ""
            return Err(HttpError(url=url, status=e.code, message=str(e.reason), body=body))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

    def get_json(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> Result[object, HttpError]:
        result = self._request("GET", url, headers=headers)
        if isinstance(result, Err):
            return result
        return _decode_json(url, result.value[0])

    def get_json_page(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> Result[JsonPage, HttpError]:
        result = self._request("GET", url, headers=headers)
        if isinstance(result, Err):
            return result
        body, link = result.value
        decoded = _decode_json(url, body)
        if isinstance(decoded, Err):
            return decoded
        return Ok(JsonPage(data=decoded.value, next_url=next_page_url(link)))

    def post_json(
        self,
        url: str,
        payload: Mapping[str, object],
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Result[object, HttpError]:
        all_headers = {"Content-Type": "application/json"}
        if headers:
            all_headers.update(headers)
        data = json.dumps(dict(payload)).encode("utf-8")
        result = self._request("POST", url, data=data, headers=all_headers)
        if isinstance(result, Err):
            return result
        return _decode_json(url, result.value[0])

    def post_form(
        self,
        url: str,
        fields: Mapping[str, str],
        files: Mapping[str, FilePart],
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Result[object, HttpError]:
        body, content_type = encode_multipart(fields, files)
        all_headers = {"Content-Type": content_type}
        if headers:
            all_headers.update(headers)
        result = self._request("POST", url, data=body, headers=all_headers)
        if isinstance(result, Err):
            return result
        return _decode_json(url, result.value[0])

    def delete(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> Result[None, HttpError]:
        result = self._request("DELETE", url, headers=headers)
        if isinstance(result, Err):
            return result
        return Ok(None)


@dataclass(frozen=True, slots=True)
class MockRequest:
    """A request seen by MockHttpClient."""

    method: str
    url: str
    headers: dict[str, str]
    payload: object = None


def _empty_requests() -> list[MockRequest]:
    return []


@dataclass
class MockHttpClient:
    """Mock HTTP client for testing.

    Usage:
        client = MockHttpClient()
        client.set_response("GET", "https://sentry.io/api/0/x/", {"version": "1.0"})
        result = client.get_json("https://sentry.io/api/0/x/")
        assert result == Ok({"version": "1.0"})

    Unknown (method, url) pairs answer 404.
    """

    responses: dict[tuple[str, str], object] = field(default_factory=dict)
    requests: list[MockRequest] = field(default_factory=_empty_requests)
    next_urls: dict[str, str] = field(default_factory=dict)

    def set_response(
        self, method: str, url: str, response: object, *, next_url: str | None = None
    ) -> None:
        """Set the response (JSON value or HttpError) for a method and URL.

        next_url is what get_json_page reports as the following page.
        """
        self.responses[(method.upper(), url)] = response
        if next_url is not None:
            self.next_urls[url] = next_url

    @property
    def calls(self) -> list[tuple[str, str]]:
        return [(r.method, r.url) for r in self.requests]

    def _answer(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None,
        payload: object,
    ) -> Result[object, HttpError]:
        self.requests.append(MockRequest(method, url, dict(headers or {}), payload))
        key = (method, url)
        if key not in self.responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        response = self.responses[key]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def get_json(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> Result[object, HttpError]:
        return self._answer("GET", url, headers, None)

    def get_json_page(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> Result[JsonPage, HttpError]:
        result = self._answer("GET", url, headers, None)
        if isinstance(result, Err):
            return result
        return Ok(JsonPage(data=result.value, next_url=self.next_urls.get(url)))

    def post_json(
        self,
        url: str,
        payload: Mapping[str, object],
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Result[object, HttpError]:
        return self._answer("POST", url, headers, dict(payload))

    def post_form(
        self,
        url: str,
        fields: Mapping[str, str],
        files: Mapping[str, FilePart],
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Result[object, HttpError]:
        return self._answer("POST", url, headers, {"fields": dict(fields), "files": dict(files)})

    def delete(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> Result[None, HttpError]:
        result = self._answer("DELETE", url, headers, None)
        if isinstance(result, Err):
            return result
        return Ok(None)
