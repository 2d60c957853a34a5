"""Tests for score increment policies."""

import random

import pytest

from src.api.services.scoring import (
    LengthScoringPolicy,
    RandomScoringPolicy,
    get_scoring_policy,
)


def test_length_policy_thresholds():
    policy = LengthScoringPolicy()
    rng = random.Random(0)

    assert policy.increment("short line", rng) == 1
    assert policy.increment("x" * 41, rng) == 2
    assert policy.increment("x" * 81, rng) == 3


def test_random_policy_stays_in_bounds():
    policy = RandomScoringPolicy(low=2, high=4)
    rng = random.Random(9)

    values = {policy.increment("anything", rng) for _ in range(200)}

    assert values == {2, 3, 4}


def test_random_policy_rejects_zero_floor():
    with pytest.raises(ValueError):
        RandomScoringPolicy(low=0, high=3)


def test_get_scoring_policy_by_name():
    assert isinstance(get_scoring_policy("length"), LengthScoringPolicy)
    assert isinstance(get_scoring_policy("random"), RandomScoringPolicy)
    with pytest.raises(ValueError):
        get_scoring_policy("applause")
