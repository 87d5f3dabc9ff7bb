import pytest
import requests

from opportunity_hunter.exceptions import SourceUnavailable
from opportunity_hunter.http_client import HttpClient


class FakeResponse:
    def __init__(self, status=200, payload=None, text=""):
        self.status_code = status
        self._payload = payload
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, result):
        self.headers = {}
        self.result = result
        self.calls = []
        self.closed = False

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if isinstance(self.result, Exception):
            raise self.result
        return self.result

    def close(self):
        self.closed = True


def test_get_json_passes_timeout_and_headers():
    session = FakeSession(FakeResponse(payload={"jobs": []}))
    client = HttpClient(session=session)

    data = client.get_json("upwork", "https://x", params={"q": "py"}, headers={"A": "b"}, timeout=5)

    assert data == {"jobs": []}
    assert session.calls[0]["timeout"] == 5
    assert session.calls[0]["headers"] == {"A": "b"}
    assert "opportunity-hunter" in session.headers["User-Agent"]


@pytest.mark.parametrize(
    "result",
    [
        requests.ConnectionError("refused"),
        requests.Timeout("slow"),
        FakeResponse(status=503),
        FakeResponse(payload=ValueError("not json")),
        FakeResponse(payload=["not", "a", "dict"]),
    ],
)
def test_failures_become_source_unavailable(result):
    client = HttpClient(session=FakeSession(result))
    with pytest.raises(SourceUnavailable) as exc:
        client.get_json("freelancer", "https://x")
    assert exc.value.platform == "freelancer"


def test_get_text():
    session = FakeSession(FakeResponse(text="<html></html>"))
    client = HttpClient(session=session)
    assert client.get_text("weworkremotely", "https://x") == "<html></html>"
    client.close()
    assert session.closed
