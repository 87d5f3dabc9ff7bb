# opportunity_hunter/signing.py
"""
Request signers turn (method, url, params) into the auth headers a source
expects. Adapters receive one at construction so they can be exercised with
`NullSigner` and no live credentials.
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import time
import uuid
from typing import Any, Callable, Dict, Mapping, Optional, Protocol
from urllib.parse import quote


class RequestSigner(Protocol):
    def sign(self, method: str, url: str, params: Mapping[str, Any]) -> Dict[str, str]:
        ...


class NullSigner:
    def sign(self, method: str, url: str, params: Mapping[str, Any]) -> Dict[str, str]:
        return {}


class HeaderSigner:
    """Static header auth, e.g. an API key header or a bearer token."""

    def __init__(self, headers: Mapping[str, str]):
        self._headers = {k: v for k, v in headers.items() if v}

    @classmethod
    def bearer(cls, token: Optional[str]) -> "HeaderSigner":
        return cls({"Authorization": f"Bearer {token}"} if token else {})

    def sign(self, method: str, url: str, params: Mapping[str, Any]) -> Dict[str, str]:
        return dict(self._headers)


def _pct(value: Any) -> str:
    # RFC 3986 unreserved characters only
    return quote(str(value), safe="~")


class OAuth1Signer:
    """OAuth 1.0a HMAC-SHA1 signing (Upwork's legacy REST API)."""

    def __init__(
        self,
        consumer_key: str,
        consumer_secret: str,
        token: str = "",
        token_secret: str = "",
        timestamp: Optional[Callable[[], int]] = None,
        nonce: Optional[Callable[[], str]] = None,
    ):
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.token = token
        self.token_secret = token_secret
        self._timestamp = timestamp or (lambda: int(time.time()))
        self._nonce = nonce or (lambda: uuid.uuid4().hex)

    def signature(self, method: str, url: str, params: Mapping[str, Any]) -> str:
        pairs = sorted((_pct(k), _pct(v)) for k, v in params.items() if v is not None)
        param_str = "&".join(f"{k}={v}" for k, v in pairs)
        base = "&".join([method.upper(), _pct(url), _pct(param_str)])
        key = f"{_pct(self.consumer_secret)}&{_pct(self.token_secret or '')}"
        digest = hmac.new(key.encode("utf-8"), base.encode("utf-8"), hashlib.sha1).digest()
        return base64.b64encode(digest).decode("ascii")

    def sign(self, method: str, url: str, params: Mapping[str, Any]) -> Dict[str, str]:
        oauth: Dict[str, Any] = {
            "oauth_consumer_key": self.consumer_key,
            "oauth_nonce": self._nonce(),
            "oauth_signature_method": "HMAC-SHA1",
            "oauth_timestamp": str(self._timestamp()),
            "oauth_version": "1.0",
        }
        if self.token:
            oauth["oauth_token"] = self.token

        oauth["oauth_signature"] = self.signature(method, url, {**oauth, **params})
        header = ", ".join(f'{k}="{_pct(v)}"' for k, v in oauth.items())
        return {"Authorization": f"OAuth {header}"}
