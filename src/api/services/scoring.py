"""Pluggable score increments for persona utterances."""

from __future__ import annotations

import random
from abc import ABC, abstractmethod


class ScoringPolicy(ABC):
    """Maps one utterance to a score increment of at least 1."""

    name: str = "unknown"

    @abstractmethod
    def increment(self, text: str, rng: random.Random) -> int:
        raise NotImplementedError


class LengthScoringPolicy(ScoringPolicy):
    """Rewards substantive output: 3 above 80 chars, 2 above 40, else 1."""

    name = "length"

    def __init__(self, thresholds: tuple[int, int] = (40, 80)):
        self.medium, self.long = thresholds

    def increment(self, text: str, rng: random.Random) -> int:
        length = len(text or "")
        if length > self.long:
            return 3
        if length > self.medium:
            return 2
        return 1


class RandomScoringPolicy(ScoringPolicy):
    """Bounded pseudo-random increment."""

    name = "random"

    def __init__(self, low: int = 1, high: int = 5):
        if low < 1 or high < low:
            raise ValueError("RandomScoringPolicy requires 1 <= low <= high")
        self.low = low
        self.high = high

    def increment(self, text: str, rng: random.Random) -> int:
        return rng.randint(self.low, self.high)


_POLICIES = {
    LengthScoringPolicy.name: LengthScoringPolicy,
    RandomScoringPolicy.name: RandomScoringPolicy,
}


def get_scoring_policy(name: str) -> ScoringPolicy:
    policy_cls = _POLICIES.get(name)
    if policy_cls is None:
        raise ValueError(f"Unknown scoring policy: {name}")
    return policy_cls()
