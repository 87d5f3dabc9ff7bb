# opportunity_hunter/sources/weworkremotely.py
from __future__ import annotations

from typing import Any, Dict, List, Sequence

from bs4 import BeautifulSoup

from opportunity_hunter.config import WeWorkRemotelySourceCfg
from opportunity_hunter.exceptions import QueryBuildError
from opportunity_hunter.models import ClientInfo, Listing, Skill
from opportunity_hunter.scoring import ScoreBreakdown, text_skill_match, weighted_score
from opportunity_hunter.sources.base import QuerySource
from opportunity_hunter.sources.roles import Rule, map_skills

WEIGHTS: Dict[str, float] = {
    "skill": 0.50,
    "remote": 0.30,
    "category": 0.20,
}

CATEGORY_RULES: List[Rule] = [
    (["python", "javascript", "react", "node", "java"], ["programming"]),
    (["design", "ui", "ux", "figma"], ["design"]),
    (["marketing", "seo", "content"], ["marketing"]),
    (["devops", "aws", "docker", "kubernetes"], ["devops"]),
]


def category_bonus(category: str, skills: Sequence[Skill]) -> float:
    category = (category or "").lower()
    relevant = [
        s for s in skills
        if (s.category or "").lower() == category or (category and category in s.name.lower())
    ]
    return 1.0 if relevant else 0.5


class WeWorkRemotelySource(QuerySource[WeWorkRemotelySourceCfg, str]):
    """Scrapes We Work Remotely category pages. Every listing there is remote."""

    name = "weworkremotely-scanner"
    platform = "weworkremotely"
    weights = WEIGHTS

    def build_queries(self, skills: Sequence[Skill]) -> List[str]:
        categories = map_skills(skills, CATEGORY_RULES)
        if not categories:
            raise QueryBuildError("no skill maps to a We Work Remotely category")
        return categories

    def fetch(self, category: str) -> List[Listing]:
        url = f"{self.config.base_url}/categories/remote-{category}-jobs"
        html = self.http.get_text(self.platform, url, headers=self.signer.sign("GET", url, {}), timeout=self.config.timeout_s)
        cards = parse_category_page(html)
        return self.parse_items(cards, lambda card: self.parse_card(card, category))

    def parse_card(self, card: Dict[str, Any], category: str) -> Listing:
        href = card["href"]
        company = card.get("company") or None
        return Listing(
            platform=self.platform,
            external_id=href,
            url=f"{self.config.base_url.rstrip('/')}{href}",
            title=card["title"],
            description=card.get("region") or "",
            pay_type="annual",
            client_info=ClientInfo(name=company, location="Remote (Worldwide)"),
            metadata={
                "category": category,
                "company": company,
                "remote_type": "remote",
                "job_type": "full-time",
            },
        )

    def score_breakdown(self, listing: Listing, skills: Sequence[Skill]) -> ScoreBreakdown:
        return weighted_score(
            self.weights,
            {
                "skill": lambda: text_skill_match(f"{listing.title} {listing.description}", skills),
                "remote": lambda: 1.0,
                "category": lambda: category_bonus(listing.metadata.get("category"), skills),
            },
            context=self._context(listing),
        )


def parse_category_page(html: str) -> List[Dict[str, str]]:
    soup = BeautifulSoup(html or "", "html.parser")
    cards: List[Dict[str, str]] = []
    for li in soup.select("li.feature"):
        link = li.find("a", href=True)
        title_el = li.select_one(".title")
        if link is None or title_el is None:
            continue
        title = title_el.get_text(" ", strip=True)
        if not title:
            continue

        company_el = li.select_one(".company")
        region_el = li.select_one(".region")
        cards.append(
            {
                "href": link["href"],
                "title": title,
                "company": company_el.get_text(" ", strip=True) if company_el else "",
                "region": region_el.get_text(" ", strip=True) if region_el else "",
            }
        )
    return cards
