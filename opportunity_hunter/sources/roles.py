# opportunity_hunter/sources/roles.py
"""Keyword rules that map free-text skill names onto board roles/categories."""
from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from opportunity_hunter.models import Skill

Rule = Tuple[Sequence[str], Sequence[str]]   # (keywords, targets)


def map_skills(skills: Iterable[Skill], rules: Sequence[Rule]) -> List[str]:
    """
    Every target whose keywords appear in any skill name, in first-seen order.
    """
    out: List[str] = []
    for skill in skills:
        name = skill.name.lower()
        for keywords, targets in rules:
            if any(k in name for k in keywords):
                for t in targets:
                    if t not in out:
                        out.append(t)
    return out
