# opportunity_hunter/http_client.py
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import requests

from opportunity_hunter.exceptions import SourceUnavailable

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "opportunity-hunter/0.1 (+rate-limited)"


class HttpClient:
    """
    Thin wrapper over a requests.Session.

    Every call carries an explicit timeout, and every transport/HTTP/decoding
    problem surfaces as SourceUnavailable so adapters only catch one thing.
    """

    def __init__(self, session: Optional[requests.Session] = None, user_agent: str = DEFAULT_USER_AGENT):
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", user_agent)

    def _get(
        self,
        platform: str,
        url: str,
        params: Optional[Mapping[str, Any]],
        headers: Optional[Mapping[str, str]],
        timeout: float,
    ) -> requests.Response:
        try:
            resp = self.session.get(url, params=params, headers=dict(headers or {}), timeout=timeout)
            resp.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            raise SourceUnavailable(platform, f"HTTP {status} for {url}") from e
        except requests.RequestException as e:
            raise SourceUnavailable(platform, f"request failed for {url} → {e}") from e
        return resp

    def get_json(
        self,
        platform: str,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: float = 30.0,
    ) -> Dict[str, Any]:
        resp = self._get(platform, url, params, headers, timeout)
        try:
            data = resp.json()
        except ValueError as e:
            raise SourceUnavailable(platform, f"invalid JSON from {url}") from e
        if not isinstance(data, dict):
            raise SourceUnavailable(platform, f"unexpected payload type {type(data).__name__} from {url}")
        return data

    def get_text(
        self,
        platform: str,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: float = 30.0,
    ) -> str:
        return self._get(platform, url, params, headers, timeout).text

    def close(self) -> None:
        self.session.close()
