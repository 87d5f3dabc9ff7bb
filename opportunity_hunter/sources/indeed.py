# opportunity_hunter/sources/indeed.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from opportunity_hunter.config import IndeedSourceCfg
from opportunity_hunter.exceptions import QueryBuildError
from opportunity_hunter.models import ClientInfo, Listing, Skill
from opportunity_hunter.scoring import ScoreBreakdown, linear_score, skill_match, weighted_score
from opportunity_hunter.skills import top_skills
from opportunity_hunter.sources.base import QuerySource
from opportunity_hunter.utils import html_to_text, safe_str, stable_fallback_id, to_float

SITE_ROOT = "https://www.indeed.com"

WEIGHTS: Dict[str, float] = {
    "skill": 0.40,
    "salary": 0.30,
    "company": 0.15,
    "location": 0.10,
    "benefits": 0.05,
}
DEFAULT_BENEFITS_SCORE = 0.5
HOURS_PER_YEAR = 2080

SKILL_PATTERNS = [
    "Python", "JavaScript", "Java", "React", "Node.js", "AWS",
    "Docker", "Kubernetes", "SQL", "MongoDB", "PostgreSQL",
    "TypeScript", "Go", "Rust", "Machine Learning", "AI",
    "Data Science", "DevOps", "Agile", "Scrum",
]
_SKILL_RES = [
    (name, re.compile(rf"(?<![a-z0-9]){re.escape(name.lower())}(?![a-z0-9+#])"))
    for name in SKILL_PATTERNS
]

_MONEY_RE = re.compile(r"\$?\s*(\d[\d,]*(?:\.\d+)?)\s*([kK])?")


@dataclass(frozen=True)
class IndeedQuery:
    query: str
    job_types: str
    location: str


def extract_skills(text: str) -> List[str]:
    t = (text or "").lower()
    return [name for name, rx in _SKILL_RES if rx.search(t)]


def detect_remote_type(text: str) -> str:
    t = (text or "").lower()
    if "remote" in t or "work from home" in t:
        return "hybrid" if "hybrid" in t else "remote"
    return "onsite"


def parse_salary(text: Optional[str], default_min: float) -> Tuple[float, float]:
    """
    Pull an annual (min, max) out of free text like "$90,000 - $120,000 a year"
    or "$45 an hour". Falls back to (default_min, 1.5 * default_min).
    """
    fallback = (default_min, default_min * 1.5)
    if not text:
        return fallback

    values: List[float] = []
    for number, k in _MONEY_RE.findall(text):
        v = float(number.replace(",", ""))
        if k:
            v *= 1000
        if v > 0:
            values.append(v)
    if not values:
        return fallback

    if "hour" in text.lower():
        values = [v * HOURS_PER_YEAR for v in values]
    return min(values), max(values)


class IndeedSource(QuerySource[IndeedSourceCfg, IndeedQuery]):
    """
    Indeed job search. Uses the publisher API when a publisher key is
    configured, otherwise falls back to scraping the public results page.
    """

    name = "indeed-scanner"
    platform = "indeed"
    weights = WEIGHTS

    def build_queries(self, skills: Sequence[Skill]) -> List[IndeedQuery]:
        top = top_skills(skills)
        if not top:
            raise QueryBuildError("no skill with proficiency >= 7")
        return [IndeedQuery(s.name, self.config.job_types, self.config.location) for s in top]

    def fetch(self, query: IndeedQuery) -> List[Listing]:
        if self.config.publisher_key:
            return self.search_api(query)
        return self.search_page(query)

    def search_api(self, query: IndeedQuery) -> List[Listing]:
        params = {
            "publisher": self.config.publisher_key,
            "q": query.query,
            "l": query.location,
            "jt": query.job_types,
            "limit": self.config.page_size,
            "format": "json",
            "v": "2",
        }
        data = self.http.get_json(self.platform, self.config.api_url, params=params, timeout=self.config.timeout_s)
        return self.parse_items(data.get("results") or [], self.parse_job)

    def search_page(self, query: IndeedQuery) -> List[Listing]:
        html = self.http.get_text(
            self.platform,
            self.config.search_url,
            params={"q": query.query, "l": query.location},
            timeout=self.config.timeout_s,
        )
        return self.parse_items(parse_result_cards(html), self.parse_job)

    def parse_job(self, job: Dict[str, Any]) -> Listing:
        url = safe_str(job.get("url"))
        title = safe_str(job.get("jobtitle") or job.get("title"))
        if not url or not title:
            raise ValueError("job without url or title")

        company = safe_str(job.get("company"))
        snippet = html_to_text(safe_str(job.get("snippet")))
        location = safe_str(job.get("formattedLocation") or job.get("location"))
        pay_min, pay_max = parse_salary(job.get("formattedSalary") or job.get("salary"), self.config.min_salary)

        return Listing(
            platform=self.platform,
            external_id=safe_str(job.get("jobkey")) or stable_fallback_id(title, company, location),
            url=url,
            title=title,
            description=snippet,
            required_skills=extract_skills(snippet),
            pay_min=pay_min,
            pay_max=pay_max,
            pay_type="annual",
            client_info=ClientInfo(
                name=company or None,
                rating=to_float(job.get("companyRating")),
                location=location or None,
            ),
            metadata={
                "job_type": job.get("jobType"),
                "remote_type": detect_remote_type(f"{snippet} {location}"),
                "posted_date": job.get("date"),
            },
        )

    def salary_score(self, listing: Listing) -> float:
        avg = (listing.pay_min + listing.pay_max) / 2
        return linear_score(avg, self.config.min_salary, self.config.min_salary * 2)

    def location_score(self, remote_type: Optional[str]) -> float:
        if self.config.remote_only:
            return 1.0 if remote_type == "remote" else 0.0
        if remote_type == "remote":
            return 1.0
        if remote_type == "hybrid":
            return 0.7
        return 0.5

    def score_breakdown(self, listing: Listing, skills: Sequence[Skill]) -> ScoreBreakdown:
        rating = listing.client_info.rating
        return weighted_score(
            self.weights,
            {
                "skill": lambda: skill_match(listing.required_skills, skills, exact=True),
                "salary": lambda: self.salary_score(listing),
                "company": lambda: rating / 5.0 if rating else 0.5,
                "location": lambda: self.location_score(listing.metadata.get("remote_type")),
                "benefits": lambda: DEFAULT_BENEFITS_SCORE,
            },
            context=self._context(listing),
        )


def parse_result_cards(html: str) -> List[Dict[str, Any]]:
    """Turn an Indeed results page into API-shaped job dicts."""
    soup = BeautifulSoup(html or "", "html.parser")
    jobs: List[Dict[str, Any]] = []

    for card in soup.select(".job_seen_beacon"):
        title_el = card.select_one(".jobTitle")
        link = card.find("a", href=True)
        title = title_el.get_text(" ", strip=True) if title_el else ""
        if not title or link is None:
            continue

        def text(selector: str) -> str:
            el = card.select_one(selector)
            return el.get_text(" ", strip=True) if el else ""

        jobs.append(
            {
                "jobkey": link.get("data-jk") or "",
                "title": title,
                "company": text(".companyName"),
                "location": text(".companyLocation"),
                "salary": text(".salary-snippet"),
                "snippet": text(".job-snippet"),
                "url": urljoin(SITE_ROOT, link["href"]),
            }
        )
    return jobs
