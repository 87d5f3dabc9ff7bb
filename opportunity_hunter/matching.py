# opportunity_hunter/matching.py
from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Sequence

from opportunity_hunter.models import Listing, Opportunity, Skill

logger = logging.getLogger(__name__)

DEFAULT_MATCH_THRESHOLD = 0.65

ScoreFn = Callable[[Listing, Sequence[Skill]], float]


def match_listings(
    listings: Iterable[Listing],
    skills: Sequence[Skill],
    score: ScoreFn,
    threshold: float = DEFAULT_MATCH_THRESHOLD,
) -> List[Opportunity]:
    """
    Score every listing, keep those at or above `threshold` and order them by
    score, best first. The sort is stable: listings with equal scores keep the
    order they were discovered in, which downstream consumers rely on.
    """
    matched: List[Opportunity] = []
    total = 0
    for listing in listings:
        total += 1
        s = score(listing, skills)
        if s >= threshold:
            matched.append(listing.to_opportunity(s))

    matched.sort(key=lambda o: o.match_score, reverse=True)
    logger.debug("Matched %d/%d listings at threshold %.2f", len(matched), total, threshold)
    return matched
