import pytest

from opportunity_hunter.config import WeWorkRemotelySourceCfg
from opportunity_hunter.exceptions import SourceUnavailable
from opportunity_hunter.models import Skill
from opportunity_hunter.sources.weworkremotely import (
    WeWorkRemotelySource,
    category_bonus,
    parse_category_page,
)

CATEGORY_PAGE = """
<section class="jobs">
  <ul>
    <li class="feature">
      <a href="/remote-jobs/acme-senior-python-engineer">
        <span class="company">Acme</span>
        <span class="title">Senior Python Engineer</span>
        <span class="region">Anywhere in the World</span>
      </a>
    </li>
    <li class="feature">
      <a href="/remote-jobs/beta-frontend-dev">
        <span class="company">Beta</span>
        <span class="title">Frontend Developer</span>
      </a>
    </li>
    <li class="feature"><span class="title">No link</span></li>
    <li class="view-all"><a href="/categories/remote-programming-jobs">View all</a></li>
  </ul>
</section>
"""


def test_parse_category_page():
    cards = parse_category_page(CATEGORY_PAGE)
    assert [c["href"] for c in cards] == [
        "/remote-jobs/acme-senior-python-engineer",
        "/remote-jobs/beta-frontend-dev",
    ]
    assert cards[0]["company"] == "Acme"
    assert cards[0]["region"] == "Anywhere in the World"
    assert cards[1]["region"] == ""


def test_scan_builds_category_urls(python_only, clock, fake_http):
    http = fake_http(CATEGORY_PAGE)
    src = WeWorkRemotelySource(WeWorkRemotelySourceCfg(), http=http, clock=clock)

    listings = src.scan(python_only)

    assert http.calls[0]["url"] == "https://weworkremotely.com/categories/remote-programming-jobs"
    assert listings[0].url == "https://weworkremotely.com/remote-jobs/acme-senior-python-engineer"
    assert listings[0].metadata["category"] == "programming"
    assert listings[0].client_info.name == "Acme"
    assert all(l.metadata["remote_type"] == "remote" for l in listings)


def test_scoring_favours_title_skill_hits(python_only, clock, fake_http):
    src = WeWorkRemotelySource(WeWorkRemotelySourceCfg(), http=fake_http(CATEGORY_PAGE), clock=clock)
    python_job, frontend_job = src.scan(python_only)

    assert src.score(python_job, python_only) == pytest.approx(1.0)
    # remote and category still count without a skill hit
    assert src.score(frontend_job, python_only) == pytest.approx(0.5)
    assert src.match([python_job, frontend_job], python_only)[0].external_id == python_job.external_id


def test_unavailable_category_is_skipped(clock, fake_http):
    skills = [Skill(name="Python", proficiency=9), Skill(name="Figma", proficiency=8, category="design")]
    http = fake_http(SourceUnavailable("weworkremotely", "HTTP 502"), CATEGORY_PAGE)
    src = WeWorkRemotelySource(WeWorkRemotelySourceCfg(), http=http, clock=clock)

    listings = src.scan(skills)

    assert [c["url"].rsplit("/", 1)[1] for c in http.calls] == [
        "remote-programming-jobs",
        "remote-design-jobs",
    ]
    assert {l.metadata["category"] for l in listings} == {"design"}
    assert clock.sleeps == [2.0]


def test_category_bonus():
    skills = [Skill(name="Python", proficiency=9, category="programming")]
    assert category_bonus("programming", skills) == 1.0
    assert category_bonus("marketing", skills) == 0.5
