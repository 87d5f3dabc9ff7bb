# opportunity_hunter/sources/upwork.py
from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, List, Optional, Sequence

from opportunity_hunter.config import UpworkSourceCfg
from opportunity_hunter.models import ClientInfo, Listing, Skill, utcnow
from opportunity_hunter.scoring import (
    ScoreBreakdown,
    counterpart_score,
    linear_score,
    skill_match,
    weighted_score,
    workload_score,
)
from opportunity_hunter.skills import top_skills
from opportunity_hunter.sources.base import QuerySource
from opportunity_hunter.utils import safe_str, to_float

JOB_URL = "https://www.upwork.com/jobs/{id}"
LISTING_TTL = timedelta(days=30)

WEIGHTS: Dict[str, float] = {
    "skill": 0.40,
    "pay": 0.25,
    "client": 0.20,
    "workload": 0.10,
    "base": 0.05,
}
BASE_SUCCESS_PROBABILITY = 0.75

BIG_SPENDER = 10_000
GOOD_HIRE_RATE = 0.8


def _skill_names(raw: Any) -> List[str]:
    out: List[str] = []
    for s in raw or []:
        name = safe_str(s.get("name")) if isinstance(s, dict) else safe_str(s)
        if name:
            out.append(name)
    return out


class UpworkSource(QuerySource[UpworkSourceCfg, str]):
    """
    Hourly and fixed-price gigs from Upwork's job search API.

    Requests are OAuth 1.0a signed by the injected signer.
    """

    name = "upwork-scanner"
    platform = "upwork"
    weights = WEIGHTS

    def build_queries(self, skills: Sequence[Skill]) -> List[str]:
        primary = top_skills(skills)
        queries = [s.name for s in primary]
        if len(primary) >= 2:
            queries.append(f"{primary[0].name} {primary[1].name}")
        return queries or ["freelance"]

    def fetch(self, query: str) -> List[Listing]:
        url = self.config.search_url
        params = {
            "q": query,
            "sort": "recency",
            "paging": f"0;{self.config.page_size}",
            "budget": f"{self.config.min_hourly_rate:g}-",
        }
        headers = self.signer.sign("GET", url, params)
        data = self.http.get_json(self.platform, url, params=params, headers=headers, timeout=self.config.timeout_s)
        return self.parse_items(data.get("jobs") or [], self.parse_job)

    def parse_job(self, job: Dict[str, Any]) -> Listing:
        job_id = safe_str(str(job.get("id") or ""))
        if not job_id:
            raise ValueError("job without id")

        job_type = safe_str(job.get("job_type")).lower()
        pay_type = "fixed" if job_type == "fixed" else "hourly"
        if pay_type == "hourly":
            pay_min = to_float(job.get("hourly_rate_min"))
            pay_max = to_float(job.get("hourly_rate_max"))
        else:
            pay_min = pay_max = to_float(job.get("budget"))

        client = job.get("client") or {}
        discovered = utcnow()

        return Listing(
            platform=self.platform,
            external_id=job_id,
            url=JOB_URL.format(id=job_id),
            title=safe_str(job.get("title")),
            description=safe_str(job.get("description")),
            required_skills=_skill_names(job.get("skills")),
            pay_min=pay_min,
            pay_max=pay_max,
            pay_type=pay_type,
            client_info=ClientInfo(
                rating=to_float(client.get("feedback")),
                total_spent=to_float(client.get("total_spent")),
                hire_rate=to_float(client.get("hire_rate")),
                location=safe_str(client.get("location")) or None,
                payment_verified=client.get("payment_verified"),
            ),
            metadata={
                "duration": job.get("duration"),
                "workload": job.get("workload"),
                "posted_on": job.get("date_created"),
                "proposals": job.get("proposals"),
            },
            discovered_at=discovered,
            expires_at=discovered + LISTING_TTL if job.get("date_posted") else None,
        )

    def client_score(self, client: ClientInfo) -> float:
        return counterpart_score(
            client.rating,
            proven=(client.total_spent or 0) > BIG_SPENDER,
            trusted=(client.hire_rate or 0) > GOOD_HIRE_RATE,
        )

    def score_breakdown(self, listing: Listing, skills: Sequence[Skill]) -> ScoreBreakdown:
        cfg = self.config
        workload: Optional[str] = listing.metadata.get("workload")
        return weighted_score(
            self.weights,
            {
                "skill": lambda: skill_match(listing.required_skills, skills),
                "pay": lambda: linear_score(listing.pay_min, cfg.min_hourly_rate, cfg.target_hourly_rate),
                "client": lambda: self.client_score(listing.client_info),
                "workload": lambda: workload_score(workload, cfg.max_hours_per_week),
                "base": lambda: BASE_SUCCESS_PROBABILITY,
            },
            context=self._context(listing),
        )
