"""
Debate Orchestrator

Owns the single debate session and everything that mutates it:

- the utterance loop (jittered period): speaker selection, fallback chain,
  transcript/score/viewer updates, ``new_message`` events
- the countdown loop (1s): ``timer_update`` events and topic rotation
- the chat worker: one-shot delayed replies to viewer messages

All three run as asyncio tasks on the server loop. Session mutations happen
in the synchronous sections between awaits, so they never interleave; after
every await the run id is re-checked so a stopped or restarted debate never
receives stale output.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections import deque
from dataclasses import dataclass
from typing import Awaitable, Callable, Deque, Dict, List, Optional

from ..models.arena_config import ArenaConfig, Persona
from ..models.debate import (
    ChatAck,
    DebateSnapshot,
    DebateStatus,
    PersonaInfo,
    Utterance,
)
from .debate_events import (
    AiChatResponseEvent,
    DebateStoppedEvent,
    DebateUpdateEvent,
    InitialStateEvent,
    NewMessageEvent,
    TimerUpdateEvent,
    TopicChangeEvent,
)
from .debate_session import DebateSession
from .fallback_chain import FallbackChain, UtteranceRequest
from .publisher import Publisher, Subscriber
from .scoring import LengthScoringPolicy, ScoringPolicy
from .speaker_selector import SpeakerSelector
from .topic_source import TopicSource

logger = logging.getLogger(__name__)

PROCESSING_PLACEHOLDER = "⏳ Processing updates… the debaters will be right back."
_RECENT_SPEAKER_MEMORY = 8

SleepFn = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class _ChatRequest:
    run_id: int
    message: str


class DebateOrchestrator:
    """Runs one debate session: start/stop lifecycle, loops and chat replies."""

    def __init__(
        self,
        *,
        config: ArenaConfig,
        chain: FallbackChain,
        topic_source: TopicSource,
        publisher: Publisher,
        scoring: Optional[ScoringPolicy] = None,
        selector: Optional[SpeakerSelector] = None,
        rng: Optional[random.Random] = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.config = config
        self.chain = chain
        self.topic_source = topic_source
        self.publisher = publisher
        self.scoring = scoring or LengthScoringPolicy()
        self.rng = rng or random.Random()
        self._sleep = sleep

        self.personas: Dict[str, Persona] = config.persona_map()
        self.persona_ids: List[str] = [persona.id for persona in config.personas]
        self.selector = selector or SpeakerSelector(
            self.persona_ids, config.adjacency or None
        )

        self.session = DebateSession(
            persona_ids=self.persona_ids,
            topic=topic_source.default_topic,
            limits=config.limits,
            topic_duration_seconds=config.timing.topic_duration_seconds,
        )
        self._recent_speakers: Deque[str] = deque(maxlen=_RECENT_SPEAKER_MEMORY)
        self._tasks: Dict[str, asyncio.Task] = {}
        self._chat_queue: Optional[asyncio.Queue] = None
        self._run_id = 0
        self._lifecycle_lock = asyncio.Lock()

    # ==================== State ====================

    @property
    def status(self) -> DebateStatus:
        return self.session.status

    @property
    def is_live(self) -> bool:
        return self.session.is_live

    @property
    def recent_speakers(self) -> List[str]:
        return list(self._recent_speakers)

    def persona_infos(self) -> List[PersonaInfo]:
        return [
            PersonaInfo(
                id=persona.id,
                display_name=persona.display_name,
                role=persona.role,
                avatar=persona.avatar,
                color=persona.color,
            )
            for persona in self.config.personas
        ]

    def snapshot(self) -> DebateSnapshot:
        return self.session.snapshot(self.persona_infos())

    def _is_current(self, run_id: int) -> bool:
        return self.session.is_live and run_id == self._run_id

    def _publish_message(self, utterance: Utterance) -> None:
        self.publisher.publish(
            NewMessageEvent(
                message=utterance,
                scores=dict(self.session.scores),
                viewers=self.session.viewer_count,
            )
        )

    # ==================== Viewers ====================

    def connect_viewer(self, subscriber: Subscriber) -> str:
        """Register a viewer and queue the current snapshot ahead of any update."""
        subscriber_id = self.publisher.subscribe(subscriber)
        self.publisher.send_to(subscriber_id, InitialStateEvent(debate=self.snapshot()))
        return subscriber_id

    def disconnect_viewer(self, subscriber_id: str) -> None:
        self.publisher.unsubscribe(subscriber_id)

    # ==================== Lifecycle ====================

    async def start(self) -> bool:
        """Start the debate; returns False when it was already starting or live."""
        async with self._lifecycle_lock:
            if self.session.status != DebateStatus.STOPPED:
                logger.info("Debate already %s, ignoring start", self.session.status.value)
                return False

            self.session.status = DebateStatus.STARTING
            try:
                choice = await self.topic_source.next_topic(current=self.session.topic)
            except BaseException:
                self.session.status = DebateStatus.STOPPED
                raise

            self._run_id += 1
            run_id = self._run_id
            self.session.reset(choice.topic, choice.context)
            self._recent_speakers.clear()
            self.session.append_system(f'🔴 LIVE: Debate on "{choice.topic}"')
            self.session.status = DebateStatus.LIVE
            self.publisher.publish(DebateUpdateEvent(debate=self.snapshot()))

            self._chat_queue = asyncio.Queue(maxsize=self.config.chat.queue_size)
            self._tasks = {
                "utterance": asyncio.create_task(self._utterance_loop(run_id), name="debate-utterance-loop"),
                "countdown": asyncio.create_task(self._countdown_loop(run_id), name="debate-countdown-loop"),
                "chat": asyncio.create_task(self._chat_worker(run_id, self._chat_queue), name="debate-chat-worker"),
            }
            logger.info("🎬 Debate started on %r (run %s)", choice.topic, run_id)
            return True

    async def stop(self) -> bool:
        """Stop the debate; returns False when it was already stopped."""
        async with self._lifecycle_lock:
            if self.session.status == DebateStatus.STOPPED:
                return False

            self._run_id += 1
            self.session.status = DebateStatus.STOPPED
            tasks = list(self._tasks.values())
            self._tasks = {}
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

            self._chat_queue = None
            self.session.zero_scores()
            self.publisher.publish(DebateStoppedEvent(debate=self.snapshot()))
            logger.info("Debate stopped")
            return True

    async def shutdown(self) -> None:
        await self.stop()

    def active_task_names(self) -> List[str]:
        return [name for name, task in self._tasks.items() if not task.done()]

    # ==================== Utterance loop ====================

    async def _utterance_loop(self, run_id: int) -> None:
        timing = self.config.timing
        while self._is_current(run_id):
            await self._sleep(self.rng.uniform(timing.utterance_min_seconds, timing.utterance_max_seconds))
            try:
                await self.run_utterance_tick(run_id)
            except Exception as e:
                logger.error(f"Utterance tick failed: {e}", exc_info=True)

    def _build_request(self, persona: Persona, last_speaker: Optional[str]) -> UtteranceRequest:
        recent = self.session.recent_utterances(self.config.limits.context_window)
        context_lines = [
            f"{self.personas[item.speaker].display_name if item.speaker in self.personas else item.speaker}: {item.text}"
            for item in recent
        ]
        return UtteranceRequest(
            persona=persona,
            topic=self.session.topic,
            topic_context=self.session.topic_context,
            context_lines=tuple(context_lines),
            last_speaker=last_speaker,
        )

    async def run_utterance_tick(self, run_id: Optional[int] = None) -> Optional[Utterance]:
        """Generate, append and publish one persona utterance."""
        run_id = self._run_id if run_id is None else run_id
        if not self._is_current(run_id):
            return None

        last_speaker = self._recent_speakers[-1] if self._recent_speakers else None
        speaker_id = self.selector.next(last_speaker, list(self._recent_speakers), self.rng)
        persona = self.personas[speaker_id]
        logger.info(f"🎤 {speaker_id} is generating a response")

        try:
            text = await self.chain.resolve(self._build_request(persona, last_speaker))
        except Exception as e:
            logger.error(f"Line generation failed for {speaker_id}: {e}")
            if not self._is_current(run_id):
                return None
            placeholder = self.session.append_system(PROCESSING_PLACEHOLDER)
            self._publish_message(placeholder)
            return placeholder

        if not self._is_current(run_id):
            logger.info(f"Discarding line from {speaker_id}: debate no longer live")
            return None

        utterance = self.session.append(
            self.session.new_utterance(speaker_id, text, reaction_count=self.rng.randint(10, 59))
        )
        self._recent_speakers.append(speaker_id)
        self.session.add_score(speaker_id, self.scoring.increment(text, self.rng))
        self.session.walk_viewers(self.rng)
        self._publish_message(utterance)
        return utterance

    # ==================== Countdown loop ====================

    async def _countdown_loop(self, run_id: int) -> None:
        while self._is_current(run_id):
            await self._sleep(1.0)
            try:
                await self.run_countdown_tick(run_id)
            except Exception as e:
                logger.error(f"Countdown tick failed: {e}", exc_info=True)

    async def run_countdown_tick(self, run_id: Optional[int] = None) -> None:
        """Decrement the countdown; rotate the topic when it reaches zero."""
        run_id = self._run_id if run_id is None else run_id
        if not self._is_current(run_id):
            return

        remaining = self.session.tick_countdown()
        if remaining > 0:
            self.publisher.publish(TimerUpdateEvent(timer=remaining))
            return

        choice = await self.topic_source.next_topic(current=self.session.topic)
        if not self._is_current(run_id):
            return

        self.session.rotate_topic(choice.topic, choice.context)
        self._recent_speakers.clear()
        message = self.session.append_system(f"🔄 New debate topic: {choice.topic}")
        self.publisher.publish(
            TopicChangeEvent(
                topic=choice.topic,
                topic_context=choice.context,
                timer=self.session.countdown,
                message=message,
            )
        )
        logger.info("Topic rotated to %r", choice.topic)

    # ==================== Viewer chat ====================

    def handle_chat_message(self, text: Optional[str]) -> ChatAck:
        """Accept a viewer message; the reply, if any, arrives via the publisher."""
        if not self.session.is_live or self._chat_queue is None:
            return ChatAck(success=False, reason="debate_not_live")

        message = (text or "").strip()
        if not message:
            return ChatAck(success=False, reason="empty_message")
        message = message[: self.config.chat.max_message_chars]

        if self.rng.random() >= self.config.chat.response_probability:
            return ChatAck(success=True, queued=False, reason="no_response")

        try:
            self._chat_queue.put_nowait(_ChatRequest(run_id=self._run_id, message=message))
        except asyncio.QueueFull:
            logger.warning("Chat queue full, dropping viewer message")
            return ChatAck(success=True, queued=False, reason="queue_full")
        return ChatAck(success=True, queued=True)

    async def _chat_worker(self, run_id: int, queue: asyncio.Queue) -> None:
        timing = self.config.timing
        while self._is_current(run_id):
            request: _ChatRequest = await queue.get()
            try:
                if request.run_id != run_id:
                    continue
                await self._sleep(self.rng.uniform(timing.chat_delay_min_seconds, timing.chat_delay_max_seconds))
                await self.run_chat_request(request.message, run_id)
            except Exception as e:
                logger.error(f"Chat response failed: {e}", exc_info=True)
            finally:
                queue.task_done()

    async def run_chat_request(self, message: str, run_id: Optional[int] = None) -> Optional[Utterance]:
        """Answer one viewer message with a tagged chat-response utterance."""
        run_id = self._run_id if run_id is None else run_id
        if not self._is_current(run_id):
            return None

        persona = self.personas[self.rng.choice(self.persona_ids)]
        request = UtteranceRequest(
            persona=persona,
            topic=self.session.topic,
            topic_context=self.session.topic_context,
            viewer_message=message,
        )
        try:
            reply = await self.chain.resolve(request)
        except Exception as e:
            logger.error(f"Chat reply generation failed for {persona.id}: {e}")
            if not self._is_current(run_id):
                return None
            placeholder = self.session.append_system(PROCESSING_PLACEHOLDER)
            self.publisher.publish(AiChatResponseEvent(message=placeholder))
            return placeholder

        if not self._is_current(run_id):
            return None

        utterance = self.session.append(
            self.session.new_utterance(
                persona.id,
                f"@Chat: {reply}",
                reaction_count=self.rng.randint(20, 49),
                is_chat_response=True,
                reply_to=message,
            )
        )
        self._recent_speakers.append(persona.id)
        self.publisher.publish(AiChatResponseEvent(message=utterance))
        return utterance
