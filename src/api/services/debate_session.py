"""Mutable state of the single running debate."""

from __future__ import annotations

import itertools
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional, Sequence

from ..models.arena_config import SessionLimits
from ..models.debate import SYSTEM_SPEAKER, DebateSnapshot, DebateStatus, PersonaInfo, Utterance

_utterance_ids: Iterator[int] = itertools.count(1)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class DebateSession:
    """Session record owned and mutated only by the orchestrator."""

    persona_ids: List[str]
    topic: str
    limits: SessionLimits = field(default_factory=SessionLimits)
    topic_duration_seconds: int = 1800
    topic_context: Optional[str] = None
    status: DebateStatus = DebateStatus.STOPPED
    transcript: List[Utterance] = field(default_factory=list)
    scores: Dict[str, int] = field(default_factory=dict)
    viewer_count: int = 0
    countdown: int = 0

    def __post_init__(self) -> None:
        self.scores = {persona_id: 0 for persona_id in self.persona_ids}
        self.viewer_count = self._clamp_viewers(self.limits.viewer_initial)
        self.countdown = self.topic_duration_seconds

    @property
    def is_live(self) -> bool:
        return self.status == DebateStatus.LIVE

    def reset(self, topic: str, topic_context: Optional[str] = None) -> None:
        """Start a fresh debate on a new topic."""
        self.topic = topic
        self.topic_context = topic_context
        self.transcript = []
        self.scores = {persona_id: 0 for persona_id in self.persona_ids}
        self.countdown = self.topic_duration_seconds

    def zero_scores(self) -> None:
        self.scores = {persona_id: 0 for persona_id in self.persona_ids}

    def new_utterance(
        self,
        speaker: str,
        text: str,
        *,
        reaction_count: int = 0,
        is_chat_response: bool = False,
        reply_to: Optional[str] = None,
    ) -> Utterance:
        return Utterance(
            id=next(_utterance_ids),
            speaker=speaker,
            text=text,
            timestamp=_utc_now_iso(),
            reaction_count=reaction_count,
            is_chat_response=is_chat_response,
            reply_to=reply_to,
        )

    def append(self, utterance: Utterance) -> Utterance:
        """Append and trim to the bounded window; the newest entry always survives."""
        self.transcript.append(utterance)
        if len(self.transcript) > self.limits.max_messages:
            self.transcript = self.transcript[-self.limits.keep_messages:]
        return utterance

    def append_system(self, text: str) -> Utterance:
        return self.append(self.new_utterance(SYSTEM_SPEAKER, text))

    def add_score(self, speaker: str, increment: int) -> int:
        if speaker not in self.scores:
            raise KeyError(f"Unknown persona: {speaker}")
        self.scores[speaker] += max(0, increment)
        return self.scores[speaker]

    def _clamp_viewers(self, value: int) -> int:
        return max(self.limits.viewer_min, min(self.limits.viewer_max, value))

    def walk_viewers(self, rng: random.Random) -> int:
        """Bounded random walk of the simulated viewer gauge."""
        step = self.limits.viewer_step
        self.viewer_count = self._clamp_viewers(self.viewer_count + rng.randint(-step, step))
        return self.viewer_count

    def tick_countdown(self) -> int:
        self.countdown = max(0, self.countdown - 1)
        return self.countdown

    def rotate_topic(self, topic: str, topic_context: Optional[str] = None) -> None:
        self.topic = topic
        self.topic_context = topic_context
        self.countdown = self.topic_duration_seconds

    def recent_utterances(self, limit: int) -> List[Utterance]:
        """Last `limit` non-system utterances, oldest first."""
        spoken = [item for item in self.transcript if not item.is_system]
        return spoken[-limit:] if limit > 0 else []

    def snapshot(self, personas: Sequence[PersonaInfo] = ()) -> DebateSnapshot:
        return DebateSnapshot(
            topic=self.topic,
            topic_context=self.topic_context,
            status=self.status,
            is_live=self.is_live,
            messages=list(self.transcript),
            scores=dict(self.scores),
            viewers=self.viewer_count,
            topic_timer=self.countdown,
            personas=list(personas),
        )
