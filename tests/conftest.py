import pytest

from opportunity_hunter.models import Skill
from opportunity_hunter.rate_limit import ManualClock


class FakeHttp:
    """
    Stands in for HttpClient. Responses are consumed in call order; an
    exception instance in the list is raised instead of returned.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def _next(self, platform, url, params, headers):
        self.calls.append(
            {
                "platform": platform,
                "url": url,
                "params": dict(params or {}),
                "headers": dict(headers or {}),
            }
        )
        if not self.responses:
            return None
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r

    def get_json(self, platform, url, params=None, headers=None, timeout=30.0):
        r = self._next(platform, url, params, headers)
        return r if r is not None else {}

    def get_text(self, platform, url, params=None, headers=None, timeout=30.0):
        r = self._next(platform, url, params, headers)
        return r if r is not None else ""


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def skills():
    return [
        Skill(name="Python", proficiency=9, category="programming", market_demand=0.9),
        Skill(name="Django", proficiency=8, category="programming", market_demand=0.7),
        Skill(name="PostgreSQL", proficiency=7, category="database", market_demand=0.7),
        Skill(name="React", proficiency=6, category="programming", market_demand=0.8),
    ]


@pytest.fixture
def python_only():
    return [Skill(name="Python", proficiency=9, category="programming")]


@pytest.fixture
def fake_http():
    return FakeHttp
