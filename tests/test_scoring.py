import logging

import pytest

from opportunity_hunter.models import Skill
from opportunity_hunter.scoring import (
    check_weights,
    competition_score,
    counterpart_score,
    linear_score,
    scope_score,
    skill_match,
    text_skill_match,
    weighted_score,
    workload_score,
)


def test_weighted_score_combines_components():
    out = weighted_score({"a": 0.6, "b": 0.4}, {"a": lambda: 1.0, "b": lambda: 0.5})
    assert out.total == pytest.approx(0.8)
    assert out.components == {"a": 1.0, "b": 0.5}
    assert out.failed == []


def test_failing_component_counts_as_zero_and_is_logged(caplog):
    def boom():
        raise ZeroDivisionError("no bids")

    with caplog.at_level(logging.WARNING, logger="opportunity_hunter.scoring"):
        out = weighted_score({"a": 0.5, "b": 0.5}, {"a": lambda: 1.0, "b": boom}, context="upwork:1")

    assert out.total == pytest.approx(0.5)
    assert out.failed == ["b"]
    assert "upwork:1" in caplog.text


def test_nan_and_out_of_range_components_are_bounded():
    out = weighted_score(
        {"a": 0.5, "b": 0.3, "c": 0.2},
        {"a": lambda: float("nan"), "b": lambda: 7.0, "c": lambda: -3.0},
    )
    assert out.components == {"a": 0.0, "b": 1.0, "c": 0.0}
    assert 0.0 <= out.total <= 1.0
    assert out.failed == ["a"]


def test_check_weights():
    check_weights({"a": 0.4, "b": 0.6})
    with pytest.raises(ValueError):
        check_weights({"a": 0.7, "b": 0.6})
    with pytest.raises(ValueError):
        check_weights({"a": -0.1})


def test_skill_match():
    skills = [Skill(name="Python", proficiency=9), Skill(name="React", proficiency=6)]

    assert skill_match([], skills) == 0.5
    assert skill_match(None, skills, default=0.6) == 0.6
    assert skill_match(["python", "COBOL"], skills) == 0.5
    # containment in either direction
    assert skill_match(["React Native"], skills) == 1.0
    assert skill_match(["React Native"], skills, exact=True) == 0.0


def test_text_skill_match():
    skills = [Skill(name="Python", proficiency=9), Skill(name="Go", proficiency=7)]
    assert text_skill_match("Senior PYTHON engineer", skills) == 0.5
    assert text_skill_match("anything", []) == 0.5


def test_linear_score():
    assert linear_score(None, 50, 100) == 0.0
    assert linear_score(40, 50, 100) == 0.0
    assert linear_score(75, 50, 100) == pytest.approx(0.5)
    assert linear_score(150, 50, 100) == 1.0


def test_counterpart_score():
    assert counterpart_score(5.0, proven=True, trusted=True) == pytest.approx(1.0)
    assert counterpart_score(None, proven=False, trusted=False) == pytest.approx(0.25)


def test_competition_score():
    assert competition_score(None, 20) == 1.0
    assert competition_score(10, 20) == pytest.approx(0.75)
    assert competition_score(40, 20) == 0.0


def test_scope_score():
    assert scope_score("") == 0.5
    assert scope_score("short brief") == 0.3
    assert scope_score(" ".join(["word"] * 100)) == 0.9
    assert scope_score(" ".join(["word"] * 600)) == 0.7


def test_workload_score():
    assert workload_score(None, 20) == 0.75
    assert workload_score("Less than 10 hrs/week", 20) == 1.0
    assert workload_score("30+ hrs/week", 20) == pytest.approx(0.5)
    assert workload_score("More than 50 hrs/week", 20) == 0.0
    # no number: assume 10 hours
    assert workload_score("As needed", 20) == 1.0
