"""Static per-persona lines used as the last link of the fallback chain."""

from __future__ import annotations

import logging
import random
import re
from typing import Dict, List, Mapping, Optional

from ..models.arena_config import CannedResponses

logger = logging.getLogger(__name__)

DEFAULT_LINE = "Let's slow down and look at what the evidence actually tells us here."


class CannedResponsePool:
    """Picks a line for a persona, preferring lines that fit the moment.

    Topic-keyword lines and replies aimed at the previous speaker are mixed
    into the general pool, then one line is drawn uniformly.
    """

    def __init__(self, responses: Mapping[str, CannedResponses]):
        self._responses: Dict[str, CannedResponses] = dict(responses)

    def candidates(
        self,
        persona_id: str,
        *,
        topic: str = "",
        last_speaker: Optional[str] = None,
    ) -> List[str]:
        entry = self._responses.get(persona_id)
        if entry is None:
            return [DEFAULT_LINE]

        pool: List[str] = []
        topic_lower = (topic or "").lower()
        for keyword, lines in entry.topic_keywords.items():
            if re.search(rf"\b{re.escape(keyword.lower())}\b", topic_lower):
                pool.extend(lines)
        if last_speaker and last_speaker in entry.replies_to:
            pool.extend(entry.replies_to[last_speaker])
        pool.extend(entry.general)

        pool = [line for line in pool if line and line.strip()]
        if not pool:
            logger.warning("No canned lines configured for persona %s", persona_id)
            return [DEFAULT_LINE]
        return pool

    def pick(
        self,
        persona_id: str,
        rng: random.Random,
        *,
        topic: str = "",
        last_speaker: Optional[str] = None,
    ) -> str:
        return rng.choice(self.candidates(persona_id, topic=topic, last_speaker=last_speaker))
