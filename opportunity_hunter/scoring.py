# opportunity_hunter/scoring.py
"""
Sub-scores shared by the source adapters.

Every sub-score is normalized to 0..1 on its own; adapters combine them with a
fixed weight vector through `weighted_score`. A sub-score that blows up on a
malformed listing contributes 0 instead of failing the whole score, and the
failure is logged.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from opportunity_hunter.exceptions import ScoringError
from opportunity_hunter.models import Skill
from opportunity_hunter.utils import first_int, normalize_text

logger = logging.getLogger(__name__)

SubScore = Callable[[], float]

_SCORING_FAILURES = (TypeError, ValueError, AttributeError, KeyError, ZeroDivisionError)


@dataclass
class ScoreBreakdown:
    total: float
    components: Dict[str, float]
    failed: List[str] = field(default_factory=list)


def clamp01(x: float) -> float:
    return max(0.0, min(1.0, x))


def check_weights(weights: Mapping[str, float]) -> None:
    total = sum(weights.values())
    if any(w < 0 for w in weights.values()) or total > 1.0 + 1e-9:
        raise ValueError(f"Weights must be non-negative and sum to <= 1.0 (got {total})")


def weighted_score(
    weights: Mapping[str, float],
    components: Mapping[str, SubScore],
    context: str = "",
) -> ScoreBreakdown:
    """
    Evaluate each component lazily and combine them with `weights`.

    `components` and `weights` must have the same keys. `context` only feeds
    the log line written when a component fails.
    """
    values: Dict[str, float] = {}
    failed: List[str] = []

    for name, weight in weights.items():
        try:
            value = float(components[name]())
            if math.isnan(value):
                raise ValueError("sub-score is NaN")
        except _SCORING_FAILURES as e:
            err = ScoringError(name, e)
            logger.warning("Sub-score defaulted to 0 for %s: %s", context or "listing", err)
            failed.append(name)
            value = 0.0
        values[name] = clamp01(value)

    total = sum(weights[k] * values[k] for k in weights)
    return ScoreBreakdown(total=clamp01(total), components=values, failed=failed)


# ----------------------------
# Skill match
# ----------------------------

def skill_match(
    required_skills: Optional[Sequence[str]],
    skills: Iterable[Skill],
    default: float = 0.5,
    exact: bool = False,
) -> float:
    """
    Fraction of required skills covered by the user's skills.

    Matching is case-insensitive; by default either name may contain the other
    ("React" covers "React Native" and vice versa). `exact` requires equality.
    """
    if not required_skills:
        return default

    names = [s.name.lower() for s in skills]
    hits = 0
    for req in required_skills:
        r = (req or "").strip().lower()
        if not r:
            continue
        if exact:
            ok = r in names
        else:
            ok = any(n in r or r in n for n in names)
        if ok:
            hits += 1
    return hits / len(required_skills)


def text_skill_match(text: str, skills: Sequence[Skill], default: float = 0.5) -> float:
    """Share of the user's skills that are mentioned anywhere in `text`."""
    if not skills:
        return default
    haystack = normalize_text(text)
    hits = [s for s in skills if s.name.lower() in haystack]
    return len(hits) / len(skills)


# ----------------------------
# Pay
# ----------------------------

def linear_score(value: Optional[float], floor: float, target: float) -> float:
    """0 below `floor` (or missing), 1 at/above `target`, linear in between."""
    if not value or value < floor:
        return 0.0
    if value >= target:
        return 1.0
    return (value - floor) / (target - floor)


# ----------------------------
# Counterpart / competition / scope
# ----------------------------

def counterpart_score(rating: Optional[float], proven: bool, trusted: bool) -> float:
    """
    Blend of rating (out of 5), a track-record flag (spend or completed
    projects over a threshold) and a trust flag (verification, hire rate).
    Flags that are not met still count half.
    """
    rating_score = (rating or 0.0) / 5.0
    proven_score = 1.0 if proven else 0.5
    trusted_score = 1.0 if trusted else 0.5
    return 0.5 * rating_score + 0.3 * proven_score + 0.2 * trusted_score


def competition_score(bid_count: Optional[int], max_competition: float) -> float:
    if not bid_count:
        return 1.0
    ceiling = max_competition * 2
    if bid_count >= ceiling:
        return 0.0
    return 1.0 - (bid_count / ceiling)


def scope_score(description: Optional[str]) -> float:
    """Detailed but not sprawling descriptions (50-500 words) score best."""
    if not description:
        return 0.5
    words = len(description.split())
    if words < 50:
        return 0.3
    if words > 500:
        return 0.7
    return 0.9


def workload_score(workload: Optional[str], max_hours_per_week: float) -> float:
    """Parses strings like "Less than 10 hrs/week"; unknown workload is 0.75."""
    if not workload:
        return 0.75
    hours = first_int(workload)
    if hours is None:
        hours = 10
    if hours <= max_hours_per_week:
        return 1.0
    if hours > max_hours_per_week * 2:
        return 0.0
    return 1.0 - ((hours - max_hours_per_week) / max_hours_per_week)
