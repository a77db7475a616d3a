"""Simple API client for the icanhazdadjoke.com API.

Functions are small, raise APIError subclasses on failure, and never retry.
Network calls go through ``requests.get`` so tests can patch it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, TypeVar
from urllib.parse import quote

import requests

from .models import Joke, SearchResult

BASE_URL = "https://icanhazdadjoke.com"
USER_AGENT = "dad-jokes/0.1 (python-requests)"

log = logging.getLogger(__name__)

T = TypeVar("T")


class APIError(Exception):
    """Raised when an API request fails or returns an invalid response."""


class TransportError(APIError):
    """The network call itself failed (DNS, timeout, connection reset)."""

    def __init__(self, url: str, error: Exception) -> None:
        super().__init__(f"Request failed for {url}: {error}")
        self.url = url
        self.error = error


class NotHTTPResponseError(APIError):
    """The transport handed back something without an HTTP status."""

    def __init__(self, url: str, response: Any) -> None:
        super().__init__(f"Non-HTTP response for {url}: {response!r}")
        self.url = url
        self.response = response


class HTTPStatusError(APIError):
    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"HTTP {status_code} for {url}")
        self.url = url
        self.status_code = status_code


class DecodeError(APIError):
    """Body arrived but did not decode into the expected shape."""

    def __init__(self, url: str, body: bytes, error: Exception) -> None:
        super().__init__(f"Invalid JSON from {url}: {error}")
        self.url = url
        self.body = body
        self.error = error


@dataclass(frozen=True)
class ApiRequest:
    """A bodiless request descriptor: method, absolute URL, headers, query."""

    url: str
    method: str = "GET"
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, str] = field(default_factory=dict)


def _headers() -> Dict[str, str]:
    return {"Accept": "application/json", "User-Agent": USER_AGENT}


def random_joke_request(base_url: str = BASE_URL) -> ApiRequest:
    return ApiRequest(url=f"{base_url.rstrip('/')}/", headers=_headers())


def joke_request(joke_id: str, base_url: str = BASE_URL) -> ApiRequest:
    path = quote(str(joke_id), safe="")
    return ApiRequest(url=f"{base_url.rstrip('/')}/j/{path}", headers=_headers())


def search_request(term: str, base_url: str = BASE_URL) -> ApiRequest:
    return ApiRequest(
        url=f"{base_url.rstrip('/')}/search",
        headers=_headers(),
        params={"term": term or ""},
    )


def fetch_and_decode(
    request: ApiRequest,
    decode: Callable[[Any], T],
    timeout: Optional[float] = None,
) -> T:
    """Perform one GET round trip and decode the JSON body.

    Args:
        request: Descriptor built by one of the ``*_request`` helpers.
        decode: Turns the parsed JSON into the target type; KeyError,
            TypeError or ValueError mean "wrong shape".
        timeout: Seconds, or None for the transport default.

    Returns:
        Whatever ``decode`` returns.

    Raises:
        TransportError, NotHTTPResponseError, HTTPStatusError, DecodeError
        (checked in that order; only the first failure is reported).
    """
    if request.method != "GET":
        raise ValueError(f"Unsupported method {request.method!r}; only GET is sent")

    url = request.url
    try:
        resp = requests.get(
            url,
            params=request.params or None,
            headers=request.headers,
            timeout=timeout,
        )
    except requests.RequestException as e:
        log.warning("fetch error for %s: %s", url, e)
        raise TransportError(url, e) from e

    status = getattr(resp, "status_code", None)
    if not isinstance(status, int):
        log.warning("response error for %s: %r", url, resp)
        raise NotHTTPResponseError(url, resp)
    if status != 200:
        log.warning("status error code %s for %s", status, url)
        raise HTTPStatusError(url, status)

    try:
        return decode(resp.json())
    except (ValueError, KeyError, TypeError) as e:
        body = getattr(resp, "content", b"")
        log.warning("decoding error for %s: %s; body=%r", url, e, body)
        raise DecodeError(url, body, e) from e


def get_random_joke(base_url: str = BASE_URL, timeout: Optional[float] = None) -> Joke:
    """Fetch one random joke."""
    return fetch_and_decode(random_joke_request(base_url), Joke.from_dict, timeout)


def get_joke(joke_id: str, base_url: str = BASE_URL, timeout: Optional[float] = None) -> Joke:
    """Fetch a joke by id. Unknown ids surface as HTTPStatusError."""
    return fetch_and_decode(joke_request(joke_id, base_url), Joke.from_dict, timeout)


def search_jokes(term: str, base_url: str = BASE_URL, timeout: Optional[float] = None) -> SearchResult:
    """Search jokes containing ``term``.

    A term that matches nothing yields an empty ``results`` list, not an error.
    """
    return fetch_and_decode(search_request(term, base_url), SearchResult.from_dict, timeout)


class JokeClient:
    """Bundles host and timeout so callers can pass a single object around."""

    def __init__(self, base_url: str = BASE_URL, timeout: Optional[float] = None) -> None:
        self.base_url = base_url
        self.timeout = timeout

    def random(self) -> Joke:
        return get_random_joke(self.base_url, self.timeout)

    def by_id(self, joke_id: str) -> Joke:
        return get_joke(joke_id, self.base_url, self.timeout)

    def search(self, term: str) -> SearchResult:
        return search_jokes(term, self.base_url, self.timeout)
