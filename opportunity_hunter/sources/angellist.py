# opportunity_hunter/sources/angellist.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from opportunity_hunter.config import AngelListSourceCfg
from opportunity_hunter.exceptions import QueryBuildError
from opportunity_hunter.models import ClientInfo, Listing, Skill
from opportunity_hunter.scoring import ScoreBreakdown, skill_match, weighted_score
from opportunity_hunter.sources.base import QuerySource
from opportunity_hunter.sources.roles import Rule, map_skills
from opportunity_hunter.sources.wellfound import parse_money
from opportunity_hunter.utils import safe_str, to_float

JOB_URL = "https://wellfound.com/company/{slug}/jobs/{id}"

WEIGHTS: Dict[str, float] = {
    "skill": 0.35,
    "equity": 0.30,
    "startup": 0.20,
    "salary": 0.15,
}
DEFAULT_SKILL_SCORE = 0.6

ROLE_RULES: List[Rule] = [
    (["python", "javascript", "react", "node"], ["engineer", "full-stack"]),
    (["product", "pm", "management"], ["product-manager"]),
    (["design", "ux", "ui"], ["designer"]),
    (["sales", "business development"], ["sales"]),
    (["marketing", "growth"], ["marketing"]),
]

# earlier stages are riskier, so the same equity is worth more
STAGE_EQUITY_MULTIPLIER = {
    "seed": 1.5,
    "series-a": 1.3,
    "series-b": 1.1,
    "series-c": 1.0,
    "series-d": 0.9,
}
# later stages are more stable
STAGE_STABILITY_BONUS = {
    "seed": 0.0,
    "series-a": 0.1,
    "series-b": 0.2,
    "series-c": 0.3,
}
FULL_EQUITY_PCT = 0.5
SALARY_TARGET_FACTOR = 1.3


def normalize_stage(stage: Optional[str]) -> str:
    """"Series A" / "series_a" / "series-a" -> "series-a"."""
    s = (stage or "").strip().lower()
    return "-".join(s.replace("_", " ").split())


def _parse_deadline(value: Any) -> Optional[datetime]:
    s = safe_str(value)
    if not s:
        return None
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None


def _names(items: Any) -> List[str]:
    out: List[str] = []
    for x in items or []:
        name = safe_str(x.get("name")) if isinstance(x, dict) else safe_str(x)
        if name:
            out.append(name)
    return out


class AngelListSource(QuerySource[AngelListSourceCfg, str]):
    """
    Equity-first startup jobs through the AngelList (now Wellfound) talent
    API. Scoring leans on equity and the startup's funding and stage.
    """

    name = "angellist-scanner"
    platform = "angellist"
    weights = WEIGHTS

    def build_queries(self, skills: Sequence[Skill]) -> List[str]:
        roles = map_skills(skills, ROLE_RULES)
        if not roles:
            raise QueryBuildError("no skill maps to an AngelList role")
        return roles

    def fetch(self, role: str) -> List[Listing]:
        url = f"{self.config.base_url}/jobs"
        params = {
            "role": role,
            "remote": str(self.config.remote_only).lower(),
            "equity": "true",
        }
        headers = self.signer.sign("GET", url, params)
        data = self.http.get_json(self.platform, url, params=params, headers=headers, timeout=self.config.timeout_s)
        return self.parse_items(data.get("jobs") or [], self.parse_opportunity)

    def parse_opportunity(self, job: Dict[str, Any]) -> Listing:
        job_id = str(job["id"])
        startup = job.get("startup") or {}
        slug = safe_str(startup.get("slug")) or "unknown"

        return Listing(
            platform=self.platform,
            external_id=job_id,
            url=JOB_URL.format(slug=slug, id=job_id),
            title=safe_str(job.get("title")),
            description=safe_str(job.get("description")),
            required_skills=_names(job.get("skills")),
            pay_min=to_float(job.get("salary_min")),
            pay_max=to_float(job.get("salary_max")),
            pay_type="annual",
            client_info=ClientInfo(
                name=safe_str(startup.get("name")) or None,
                stage=safe_str(startup.get("stage")) or None,
                size=safe_str(str(startup.get("company_size") or "")) or None,
                funding=parse_money(startup.get("total_funding")),
                investors=_names(startup.get("investors")),
                location=safe_str(startup.get("location")) or None,
            ),
            metadata={
                "company": safe_str(startup.get("name")) or None,
                "markets": startup.get("markets"),
                "equity_min": to_float(job.get("equity_min")),
                "equity_max": to_float(job.get("equity_max")),
                "experience_required": job.get("min_experience"),
                "remote": job.get("remote_ok"),
                "visa_sponsor": job.get("visa_sponsored"),
                "relocate_assistance": job.get("relocate_assistance"),
                "benefits": job.get("benefits"),
                "culture": startup.get("culture_tags"),
            },
            expires_at=_parse_deadline(job.get("application_deadline")),
        )

    def equity_score(self, listing: Listing) -> float:
        equity = listing.metadata.get("equity_max") or listing.metadata.get("equity_min") or 0
        multiplier = STAGE_EQUITY_MULTIPLIER.get(normalize_stage(listing.client_info.stage), 1.0)
        return min((equity / FULL_EQUITY_PCT) * multiplier, 1.0)

    def startup_score(self, client: ClientInfo) -> float:
        score = 0.5
        funding = client.funding or 0
        if funding > 1_000_000:
            score += 0.2
        if funding > 10_000_000:
            score += 0.1
        if client.investors:
            score += 0.1
        score += STAGE_STABILITY_BONUS.get(normalize_stage(client.stage), 0.0)
        return min(score, 1.0)

    def salary_score(self, listing: Listing) -> float:
        floor = self.config.min_salary
        target = floor * SALARY_TARGET_FACTOR
        salary = listing.pay_max or listing.pay_min or floor
        if salary < floor:
            # equity matters more than cash here, so a low salary is not fatal
            return 0.3
        if salary >= target:
            return 1.0
        return 0.5 + (salary - floor) / (target - floor) * 0.5

    def score_breakdown(self, listing: Listing, skills: Sequence[Skill]) -> ScoreBreakdown:
        return weighted_score(
            self.weights,
            {
                "skill": lambda: skill_match(listing.required_skills, skills, default=DEFAULT_SKILL_SCORE),
                "equity": lambda: self.equity_score(listing),
                "startup": lambda: self.startup_score(listing.client_info),
                "salary": lambda: self.salary_score(listing),
            },
            context=self._context(listing),
        )
