"""Turn-taking for the debate: who answers whom."""

from __future__ import annotations

import random
from typing import Dict, Mapping, Optional, Sequence

DEFAULT_ADJACENCY: Dict[str, Dict[str, float]] = {
    "luna": {"rex": 0.5, "alex": 0.5},   # idealism gets challenged
    "alex": {"luna": 0.5, "rex": 0.5},   # numbers get questioned or idealized
    "rex": {"sage": 0.5, "luna": 0.5},   # skepticism gets mediated or countered
}


def next_speaker(
    last_speaker: Optional[str],
    recent_history: Sequence[str],
    *,
    persona_ids: Sequence[str],
    adjacency: Mapping[str, Mapping[str, float]],
    rng: random.Random,
) -> str:
    """Pick the next persona from a static weighted-adjacency table.

    With no prior speaker the pick is uniform over all personas. Speakers
    without a table entry (the mediator) are followed by anyone, uniformly.
    """
    if not persona_ids:
        raise ValueError("next_speaker requires at least one persona")

    if last_speaker is None and recent_history:
        last_speaker = recent_history[-1]
    if last_speaker is None:
        return rng.choice(list(persona_ids))

    responders = {
        persona_id: weight
        for persona_id, weight in (adjacency.get(last_speaker) or {}).items()
        if persona_id in persona_ids and weight > 0
    }
    if not responders:
        return rng.choice(list(persona_ids))

    # Sorted so the same seed maps to the same speaker regardless of dict order
    candidates = sorted(responders)
    weights = [responders[persona_id] for persona_id in candidates]
    return rng.choices(candidates, weights=weights, k=1)[0]


class SpeakerSelector:
    """Binds the persona set and adjacency table for the orchestrator."""

    def __init__(
        self,
        persona_ids: Sequence[str],
        adjacency: Optional[Mapping[str, Mapping[str, float]]] = None,
    ):
        self.persona_ids = list(persona_ids)
        self.adjacency = dict(DEFAULT_ADJACENCY if adjacency is None else adjacency)

    def next(
        self,
        last_speaker: Optional[str],
        recent_history: Sequence[str],
        rng: random.Random,
    ) -> str:
        return next_speaker(
            last_speaker,
            recent_history,
            persona_ids=self.persona_ids,
            adjacency=self.adjacency,
            rng=rng,
        )
