# opportunity_hunter/skills.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List

import yaml
from pydantic import ValidationError

from opportunity_hunter.exceptions import ConfigError
from opportunity_hunter.models import Skill, SkillEvidence


def _merge_pair(a: Skill, b: Skill) -> Skill:
    """Same skill reported twice: keep the stronger entry, union the evidence."""
    primary, other = (a, b) if a.proficiency >= b.proficiency else (b, a)
    return primary.model_copy(
        update={
            "proficiency": max(a.proficiency, b.proficiency),
            "market_demand": max(a.market_demand, b.market_demand),
            "avg_hourly_rate": primary.avg_hourly_rate
            if primary.avg_hourly_rate is not None
            else other.avg_hourly_rate,
            "evidence": [*a.evidence, *b.evidence],
        }
    )


def merge_skills(skills: Iterable[Skill]) -> List[Skill]:
    """
    Collapse skills by case-insensitive name and order them by proficiency,
    then market demand (both descending). Ties keep input order.
    """
    by_key: Dict[str, Skill] = {}
    for s in skills:
        prev = by_key.get(s.key)
        by_key[s.key] = s if prev is None else _merge_pair(prev, s)

    merged = list(by_key.values())
    merged.sort(key=lambda s: (s.proficiency, s.market_demand), reverse=True)
    return merged


def _skill_from_entry(entry: Dict[str, Any]) -> Skill:
    data = dict(entry)
    source = str(data.pop("source", "manual") or "manual")
    if not data.get("evidence"):
        data["evidence"] = [SkillEvidence(source=source, proficiency=data.get("proficiency", 1))]
    return Skill(**data)


def load_skills(path: str) -> List[Skill]:
    """
    Load a skills YAML file:

        skills:
          - {name: Python, proficiency: 9, category: programming, source: github}
    """
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Skills file not found: {p}")

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    entries = raw.get("skills") if isinstance(raw, dict) else None
    if not isinstance(entries, list):
        raise ConfigError(f"Skills file must contain a 'skills' list: {p}")

    skills: List[Skill] = []
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ConfigError(f"Skill #{i} in {p} must be a mapping")
        try:
            skills.append(_skill_from_entry(entry))
        except ValidationError as e:
            raise ConfigError(f"Invalid skill #{i} in {p}: {e}") from e

    return merge_skills(skills)


def top_skills(skills: Iterable[Skill], min_proficiency: int = 7, limit: int = 5) -> List[Skill]:
    """Strongest skills in profile order, used to seed search queries."""
    return [s for s in skills if s.proficiency >= min_proficiency][:limit]
