# yt_digest/retrieval/http.py
"""
Thin HTTP transport used by channels and title lookup.

Every call carries an explicit timeout. Failures surface as distinct
TransportError subclasses so attempts can be logged by cause.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import requests

from yt_digest.retrieval.errors import (
    TransportError,
    TransportTimeout,
    UpstreamShapeError,
    UpstreamStatusError,
)
from yt_digest.retrieval.schema import DEFAULT_USER_AGENT, RetrievalConfig


class HttpClient:
    """requests.Session wrapper with browser-like default headers."""

    def __init__(
        self,
        timeout: float = 5.0,
        headers: Optional[Mapping[str, str]] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers: Dict[str, str] = {
            "User-Agent": DEFAULT_USER_AGENT,
            "Accept-Language": "en-US,en;q=0.9",
        }
        if headers:
            self.headers.update(headers)

    @classmethod
    def from_config(cls, config: RetrievalConfig) -> "HttpClient":
        headers = {"User-Agent": config.user_agent, "Accept-Language": config.accept_language}
        headers.update(config.extra_headers)
        return cls(timeout=config.request_timeout, headers=headers)

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        json_body: Any = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        merged = dict(self.headers)
        if headers:
            merged.update(headers)
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                headers=merged,
                json=json_body,
                timeout=timeout or self.timeout,
            )
        except requests.exceptions.Timeout as exc:
            raise TransportTimeout(f"Timed out requesting {url}") from exc
        except requests.exceptions.RequestException as exc:
            raise TransportError(f"Request to {url} failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise UpstreamStatusError(response.status_code, url)
        return response

    def get_text(self, url: str, **kwargs: Any) -> str:
        return self._request("GET", url, **kwargs).text

    def get_json(self, url: str, **kwargs: Any) -> Any:
        return _decode_json(self._request("GET", url, **kwargs), url)

    def post_json(self, url: str, payload: Any, **kwargs: Any) -> Any:
        response = self._request(
            "POST",
            url,
            json_body=payload,
            **kwargs,
        )
        return _decode_json(response, url)

    def close(self) -> None:
        self.session.close()


def _decode_json(response: requests.Response, url: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamShapeError(f"Response from {url} is not JSON") from exc
