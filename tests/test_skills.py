import pytest

from opportunity_hunter.exceptions import ConfigError
from opportunity_hunter.models import Skill, SkillEvidence
from opportunity_hunter.skills import load_skills, merge_skills, top_skills


def test_merge_is_case_insensitive_and_keeps_strongest():
    merged = merge_skills(
        [
            Skill(name="python", proficiency=6, evidence=[SkillEvidence(source="linkedin", proficiency=6)]),
            Skill(name="Python", proficiency=9, evidence=[SkillEvidence(source="github", proficiency=9)]),
            Skill(name="SQL", proficiency=7),
        ]
    )

    assert [s.name for s in merged] == ["Python", "SQL"]
    assert merged[0].proficiency == 9
    assert {e.source for e in merged[0].evidence} == {"linkedin", "github"}


def test_order_is_proficiency_then_demand():
    merged = merge_skills(
        [
            Skill(name="A", proficiency=7, market_demand=0.2),
            Skill(name="B", proficiency=9, market_demand=0.1),
            Skill(name="C", proficiency=7, market_demand=0.9),
            Skill(name="D", proficiency=7, market_demand=0.2),
        ]
    )
    assert [s.name for s in merged] == ["B", "C", "A", "D"]


def test_top_skills():
    skills = [Skill(name=n, proficiency=p) for n, p in [("a", 9), ("b", 8), ("c", 6), ("d", 7)]]
    assert [s.name for s in top_skills(skills)] == ["a", "b", "d"]
    assert [s.name for s in top_skills(skills, limit=1)] == ["a"]


def test_load_skills(tmp_path):
    p = tmp_path / "skills.yaml"
    p.write_text(
        """
skills:
  - {name: Django, proficiency: 8, source: github}
  - {name: " Python ", proficiency: 9, category: programming, market_demand: 0.9}
  - {name: django, proficiency: 5, source: linkedin}
""",
        encoding="utf-8",
    )

    skills = load_skills(str(p))

    assert [s.name for s in skills] == ["Python", "Django"]
    assert skills[0].evidence[0].source == "manual"
    assert sorted(e.source for e in skills[1].evidence) == ["github", "linkedin"]


@pytest.mark.parametrize(
    "text",
    [
        "skills: nope\n",
        "skills:\n  - just a string\n",
        "skills:\n  - {name: Python, proficiency: 11}\n",
        "skills:\n  - {name: '', proficiency: 5}\n",
    ],
)
def test_invalid_skills_file(tmp_path, text):
    p = tmp_path / "skills.yaml"
    p.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_skills(str(p))
