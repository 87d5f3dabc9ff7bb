# opportunity_hunter/sources/wellfound.py
from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Sequence

from opportunity_hunter.config import WellfoundSourceCfg
from opportunity_hunter.exceptions import QueryBuildError
from opportunity_hunter.models import ClientInfo, Listing, Skill
from opportunity_hunter.scoring import ScoreBreakdown, text_skill_match, weighted_score
from opportunity_hunter.sources.base import QuerySource
from opportunity_hunter.sources.roles import Rule, map_skills
from opportunity_hunter.utils import safe_str, to_float

JOB_URL = "https://wellfound.com/jobs/{id}"

WEIGHTS: Dict[str, float] = {
    "skill": 0.35,
    "equity": 0.25,
    "stage": 0.20,
    "salary": 0.20,
}

ROLE_RULES: List[Rule] = [
    (["python", "javascript", "react", "node"], ["software-engineer"]),
    (["product", "pm"], ["product-manager"]),
    (["design", "ui", "ux"], ["designer"]),
    (["marketing", "growth"], ["marketing"]),
    (["sales", "business development"], ["sales"]),
]

_NUMBER_RE = re.compile(r"([\d.]+)")
_MONEY_RE = re.compile(r"\$?\s*([\d.,]+)\s*([kKmMbB])?")
_SCALE = {"k": 1e3, "m": 1e6, "b": 1e9}


def parse_money(value: Any) -> Optional[float]:
    """Funding amounts arrive as numbers or as strings like "$10M"."""
    if isinstance(value, str):
        m = _MONEY_RE.search(value)
        if not m:
            return None
        amount = to_float(m.group(1))
        if amount is None:
            return None
        return amount * _SCALE.get((m.group(2) or "").lower(), 1.0)
    return to_float(value)


def equity_score(equity: Optional[str]) -> float:
    """Tiered on the low end of a range like "0.1-0.5%"."""
    if not equity:
        return 0.3
    m = _NUMBER_RE.search(str(equity))
    if not m:
        return 0.5
    pct = float(m.group(1))
    if pct >= 1.0:
        return 1.0
    if pct >= 0.5:
        return 0.85
    if pct >= 0.25:
        return 0.70
    if pct >= 0.1:
        return 0.60
    return 0.50


def stage_score(stage: Optional[str]) -> float:
    s = (stage or "").lower()
    if "seed" in s:
        return 0.90
    if "series a" in s:
        return 0.85
    if "series b" in s:
        return 0.75
    if "series c" in s or "series d" in s or "series e" in s:
        return 0.60
    return 0.70


def salary_tier_score(pay_min: Optional[float], pay_max: Optional[float]) -> float:
    avg = ((pay_min or 0) + (pay_max or 0)) / 2
    if avg >= 150_000:
        return 1.0
    if avg >= 120_000:
        return 0.85
    if avg >= 100_000:
        return 0.75
    if avg >= 80_000:
        return 0.65
    return 0.50


class WellfoundSource(QuerySource[WellfoundSourceCfg, str]):
    """Startup roles with equity from Wellfound's job search, one role per query."""

    name = "wellfound-scanner"
    platform = "wellfound"
    weights = WEIGHTS

    def build_queries(self, skills: Sequence[Skill]) -> List[str]:
        roles = map_skills(skills, ROLE_RULES)
        if not roles:
            raise QueryBuildError("no skill maps to a Wellfound role")
        return roles

    def fetch(self, role: str) -> List[Listing]:
        url = f"{self.config.base_url}/jobs"
        params = {"role": role}
        headers = self.signer.sign("GET", url, params)
        data = self.http.get_json(self.platform, url, params=params, headers=headers, timeout=self.config.timeout_s)
        return self.parse_items(data.get("jobs") or [], self.parse_job)

    def parse_job(self, job: Dict[str, Any]) -> Listing:
        job_id = safe_str(str(job.get("id") or ""))
        if not job_id:
            raise ValueError("job without id")

        company = job.get("company") or {}
        salary = job.get("salary") or {}
        equity = safe_str(salary.get("equity")) or None

        return Listing(
            platform=self.platform,
            external_id=job_id,
            url=JOB_URL.format(id=job_id),
            title=safe_str(job.get("title")),
            description=safe_str(job.get("description")),
            required_skills=[safe_str(s) for s in job.get("skills") or [] if safe_str(s)],
            pay_min=to_float(salary.get("min")),
            pay_max=to_float(salary.get("max")),
            pay_type="annual",
            client_info=ClientInfo(
                name=safe_str(company.get("name")) or None,
                stage=safe_str(company.get("stage")) or None,
                funding=parse_money(company.get("funding")),
                size=safe_str(str(company.get("size") or "")) or None,
            ),
            metadata={
                "remote_type": "remote" if job.get("remote") else "onsite",
                "job_type": "full-time",
                "equity": equity,
                "equity_available": bool(equity),
            },
        )

    def score_breakdown(self, listing: Listing, skills: Sequence[Skill]) -> ScoreBreakdown:
        return weighted_score(
            self.weights,
            {
                "skill": lambda: text_skill_match(f"{listing.title} {listing.description}", skills),
                "equity": lambda: equity_score(listing.metadata.get("equity")),
                "stage": lambda: stage_score(listing.client_info.stage),
                "salary": lambda: salary_tier_score(listing.pay_min, listing.pay_max),
            },
            context=self._context(listing),
        )
