# opportunity_hunter/sources/freelancer.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

from opportunity_hunter.config import FreelancerSourceCfg
from opportunity_hunter.exceptions import QueryBuildError
from opportunity_hunter.models import ClientInfo, Listing, Skill
from opportunity_hunter.scoring import (
    ScoreBreakdown,
    competition_score,
    counterpart_score,
    linear_score,
    scope_score,
    skill_match,
    weighted_score,
)
from opportunity_hunter.skills import top_skills
from opportunity_hunter.sources.base import QuerySource
from opportunity_hunter.utils import safe_str, to_float

PROJECT_URL = "https://www.freelancer.com/projects/{seo_url}"
LISTING_TTL = timedelta(days=30)

WEIGHTS: Dict[str, float] = {
    "skill": 0.40,
    "budget": 0.25,
    "client": 0.20,
    "competition": 0.10,
    "scope": 0.05,
}

EXPERIENCED_CLIENT_PROJECTS = 10

# Freelancer "job" (category) ids for common skills
SKILL_JOB_IDS: Dict[str, int] = {
    "python": 3,
    "javascript": 17,
    "php": 4,
    "java": 1,
    "c++": 2,
    "ruby": 7,
    "go": 237,
    "rust": 372,
    "react": 124,
    "node.js": 124,
    "vue": 341,
    "angular": 341,
    "django": 3,
    "fastapi": 3,
    "postgresql": 8,
    "mongodb": 286,
    "docker": 329,
    "aws": 262,
    "machine learning": 132,
    "data science": 132,
    "technical writing": 12,
    "content writing": 11,
    "api": 149,
    "web scraping": 141,
}


def job_id_for_skill(name: str) -> Optional[int]:
    return SKILL_JOB_IDS.get((name or "").strip().lower())


@dataclass(frozen=True)
class FreelancerQuery:
    query: str
    job_ids: List[int] = field(default_factory=list)


def _get(d: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(d, dict):
            return None
        d = d.get(key)
    return d


class FreelancerSource(QuerySource[FreelancerSourceCfg, FreelancerQuery]):
    """Fixed-price and hourly projects from Freelancer.com's projects API."""

    name = "freelancer-scanner"
    platform = "freelancer"
    weights = WEIGHTS

    def build_queries(self, skills: Sequence[Skill]) -> List[FreelancerQuery]:
        top = top_skills(skills)
        if not top:
            raise QueryBuildError("no skill with proficiency >= 7")

        queries: List[FreelancerQuery] = []
        for s in top:
            job_id = job_id_for_skill(s.name)
            queries.append(FreelancerQuery(s.name, [job_id] if job_id else []))

        if len(top) >= 2:
            ids = [job_id_for_skill(top[0].name), job_id_for_skill(top[1].name)]
            queries.append(FreelancerQuery(f"{top[0].name} {top[1].name}", [i for i in ids if i]))
        return queries

    def fetch(self, query: FreelancerQuery) -> List[Listing]:
        url = f"{self.config.base_url}/projects/0.1/projects/active/"
        params: Dict[str, Any] = {
            "query": query.query,
            "min_avg_price": self.config.min_budget,
            "project_types": "fixed,hourly",
            "compact": "true",
            "limit": self.config.page_size,
        }
        if query.job_ids:
            params["jobs[]"] = query.job_ids

        headers = {"Accept": "application/json", **self.signer.sign("GET", url, params)}
        data = self.http.get_json(self.platform, url, params=params, headers=headers, timeout=self.config.timeout_s)
        projects = _get(data, "result", "projects") or []
        return self.parse_items(projects, self.parse_project)

    def parse_project(self, project: Dict[str, Any]) -> Listing:
        project_id = str(project["id"])
        seo_url = safe_str(project.get("seo_url")) or project_id

        budget = project.get("budget") or {}
        submitted = project.get("time_submitted")
        expires_at = None
        if submitted:
            expires_at = datetime.fromtimestamp(int(submitted), tz=timezone.utc) + LISTING_TTL

        history = _get(project, "owner_reputation", "entire_history") or {}
        completed = history.get("complete")

        return Listing(
            platform=self.platform,
            external_id=project_id,
            url=PROJECT_URL.format(seo_url=seo_url),
            title=safe_str(project.get("title")),
            description=safe_str(project.get("description")),
            required_skills=[safe_str(j.get("name")) for j in project.get("jobs") or [] if safe_str(j.get("name"))],
            pay_min=to_float(budget.get("minimum")),
            pay_max=to_float(budget.get("maximum")),
            pay_type="fixed" if project.get("type") == "fixed" else "hourly",
            client_info=ClientInfo(
                rating=to_float(history.get("overall")),
                projects_completed=int(completed) if completed is not None else None,
                payment_verified=_get(project, "owner", "status", "payment_verified"),
                location=_get(project, "owner", "location", "country", "name"),
                member_since=str(_get(project, "owner", "registration_date") or "") or None,
            ),
            metadata={
                "bid_count": _get(project, "bid_stats", "bid_count") or 0,
                "avg_bid": _get(project, "bid_stats", "bid_avg"),
                "currency": _get(project, "currency", "code") or "USD",
                "posted_on": submitted,
                "upgrades": project.get("upgrades"),
                "featured": project.get("featured"),
            },
            expires_at=expires_at,
        )

    def client_score(self, client: ClientInfo) -> float:
        return counterpart_score(
            client.rating,
            proven=(client.projects_completed or 0) > EXPERIENCED_CLIENT_PROJECTS,
            trusted=bool(client.payment_verified),
        )

    def score_breakdown(self, listing: Listing, skills: Sequence[Skill]) -> ScoreBreakdown:
        cfg = self.config
        budget = listing.pay_max or listing.pay_min or 0
        return weighted_score(
            self.weights,
            {
                "skill": lambda: skill_match(listing.required_skills, skills),
                "budget": lambda: linear_score(budget, cfg.min_budget, cfg.target_budget),
                "client": lambda: self.client_score(listing.client_info),
                "competition": lambda: competition_score(listing.metadata.get("bid_count"), cfg.max_competition),
                "scope": lambda: scope_score(listing.description),
            },
            context=self._context(listing),
        )
