from datetime import datetime, timedelta, timezone

import pytest

from opportunity_hunter.config import FreelancerSourceCfg
from opportunity_hunter.models import Skill
from opportunity_hunter.signing import HeaderSigner
from opportunity_hunter.sources.freelancer import FreelancerQuery, FreelancerSource, job_id_for_skill


def _project(pid, **extra):
    project = {
        "id": pid,
        "title": f"Project {pid}",
        "seo_url": f"python/project-{pid}",
        "type": "fixed",
        "budget": {"minimum": 250, "maximum": 750},
        "jobs": [{"name": "Python"}, {"name": "Django"}],
    }
    project.update(extra)
    return project


def test_build_queries_maps_skills_to_job_ids(skills, clock, fake_http):
    src = FreelancerSource(FreelancerSourceCfg(), http=fake_http(), clock=clock)

    queries = src.build_queries(skills)

    assert queries[0] == FreelancerQuery("Python", [3])
    assert queries[2] == FreelancerQuery("PostgreSQL", [8])
    assert queries[-1] == FreelancerQuery("Python Django", [3, 3])
    assert job_id_for_skill("Node.js") == 124
    assert job_id_for_skill("Haskell") is None


def test_scan_without_strong_skills_makes_no_requests(clock, fake_http):
    http = fake_http()
    src = FreelancerSource(FreelancerSourceCfg(), http=http, clock=clock)

    assert src.scan([Skill(name="Python", proficiency=4)]) == []
    assert http.calls == []


def test_parse_project(clock, fake_http):
    src = FreelancerSource(FreelancerSourceCfg(), http=fake_http(), clock=clock)

    listing = src.parse_project(
        _project(
            42,
            time_submitted=1700000000,
            bid_stats={"bid_count": 12, "bid_avg": 400},
            owner_reputation={"entire_history": {"overall": 4.9, "complete": 25}},
            owner={"status": {"payment_verified": True}, "location": {"country": {"name": "Germany"}}},
        )
    )

    assert listing.external_id == "42"
    assert listing.url == "https://www.freelancer.com/projects/python/project-42"
    assert (listing.pay_min, listing.pay_max, listing.pay_type) == (250.0, 750.0, "fixed")
    assert listing.required_skills == ["Python", "Django"]
    assert listing.client_info.projects_completed == 25
    assert listing.client_info.location == "Germany"
    assert listing.metadata["bid_count"] == 12
    assert listing.expires_at == datetime.fromtimestamp(1700000000, tz=timezone.utc) + timedelta(days=30)


def test_fetch_sends_key_header_and_job_filter(python_only, clock, fake_http):
    http = fake_http({"result": {"projects": [_project(1)]}})
    src = FreelancerSource(
        FreelancerSourceCfg(),
        http=http,
        signer=HeaderSigner({"Freelancer-Developer-Key": "k"}),
        clock=clock,
    )

    [listing] = src.scan(python_only)

    [call] = http.calls
    assert call["url"] == "https://www.freelancer.com/api/projects/0.1/projects/active/"
    assert call["params"]["jobs[]"] == [3]
    assert call["headers"] == {"Accept": "application/json", "Freelancer-Developer-Key": "k"}
    assert listing.external_id == "1"


def test_out_of_range_timestamp_only_drops_that_project(python_only, clock, fake_http):
    http = fake_http({"result": {"projects": [_project(2, time_submitted=10**20), _project(3)]}})
    src = FreelancerSource(FreelancerSourceCfg(), http=http, clock=clock)

    listings = src.scan(python_only)

    assert [l.external_id for l in listings] == ["3"]


def test_score_rewards_budget_and_low_competition(python_only, clock, fake_http):
    src = FreelancerSource(FreelancerSourceCfg(), http=fake_http(), clock=clock)

    busy = src.parse_project(_project(1, bid_stats={"bid_count": 40}))
    quiet = src.parse_project(_project(2, budget={"minimum": 900, "maximum": 1500}))

    b = src.score_breakdown(busy, python_only)
    q = src.score_breakdown(quiet, python_only)

    assert b.components["competition"] == 0.0
    assert q.components["competition"] == 1.0
    assert q.components["budget"] == 1.0
    assert b.components["budget"] == pytest.approx((750 - 200) / 800)
    assert q.total > b.total
