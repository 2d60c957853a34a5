"""
Fallback chain for debate lines.

Tries each configured provider in order and stops at the first usable line.
When all of them fail, the persona's canned pool answers instead, so a
debate tick always has something to say.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence

from ...providers.output_cleanup import clean_utterance, is_substantive
from ...providers.types import (
    GenerationRequest,
    ProviderConfig,
    ProviderEmptyOutputError,
    ProviderError,
    ProviderTimeoutError,
)
from ...utils.llm_logger import ProviderCallLogger, get_provider_logger
from ..models.arena_config import Persona
from .canned_responses import CannedResponsePool

logger = logging.getLogger(__name__)

CANNED_SOURCE_ID = "canned"
_CONTEXT_CHARS = 600


class TextProvider(Protocol):
    """Anything that can turn a rendered prompt into one line."""

    id: str

    async def generate(self, request: GenerationRequest) -> str:
        ...


class AllProvidersExhaustedError(Exception):
    """Raised in strict mode when no provider produced a usable line."""

    def __init__(self, persona_id: str, attempts: int):
        self.persona_id = persona_id
        self.attempts = attempts
        super().__init__(f"All {attempts} provider(s) failed for persona {persona_id}")


@dataclass(frozen=True)
class UtteranceRequest:
    """What the orchestrator needs a line for."""

    persona: Persona
    topic: str
    topic_context: Optional[str] = None
    context_lines: Sequence[str] = field(default_factory=tuple)
    last_speaker: Optional[str] = None
    viewer_message: Optional[str] = None


def render_prompt(request: UtteranceRequest) -> str:
    """Render topic, background and recent lines into the user prompt."""
    name = request.persona.display_name
    parts = [f"Topic: {request.topic}"]
    if request.topic_context:
        context = request.topic_context.strip()
        if len(context) > _CONTEXT_CHARS:
            context = context[:_CONTEXT_CHARS].rsplit(" ", 1)[0] + "…"
        parts.append(f"Background: {context}")

    if request.viewer_message:
        parts.append(f"A viewer in the live chat says: {request.viewer_message}")
        parts.append(f"Reply to the viewer directly as {name}, in 1-2 sentences.")
    else:
        if request.context_lines:
            parts.append("Recent conversation:\n" + "\n".join(request.context_lines))
        parts.append(f"Continue the debate as {name}, in 1-2 sentences.")
    return "\n\n".join(parts)


class FallbackChain:
    """Ordered provider candidates followed by the canned pool."""

    def __init__(
        self,
        providers: Sequence[TextProvider],
        canned: CannedResponsePool,
        *,
        speaker_names: Sequence[str] = (),
        rng: Optional[random.Random] = None,
        strict: bool = False,
        default_timeout: float = 15.0,
        max_tokens: int = 120,
        max_chars: int = 280,
        call_logger: Optional[ProviderCallLogger] = None,
    ):
        self.providers = list(providers)
        self.canned = canned
        self.speaker_names = list(speaker_names)
        self.rng = rng or random.Random()
        self.strict = strict
        self.default_timeout = default_timeout
        self.max_tokens = max_tokens
        self.max_chars = max_chars
        self.call_logger = call_logger or get_provider_logger()

    def _provider_config(self, provider: TextProvider) -> Optional[ProviderConfig]:
        config = getattr(provider, "config", None)
        return config if isinstance(config, ProviderConfig) else None

    def _timeout_for(self, provider: TextProvider) -> float:
        config = self._provider_config(provider)
        return config.timeout_seconds if config is not None else self.default_timeout

    def _names_for(self, persona: Persona) -> list[str]:
        names = [persona.display_name, *self.speaker_names]
        return list(dict.fromkeys(name for name in names if name))

    def build_generation_request(self, request: UtteranceRequest, timeout: float) -> GenerationRequest:
        return GenerationRequest(
            persona_id=request.persona.id,
            persona_name=request.persona.display_name,
            system_prompt=request.persona.system_prompt,
            prompt=render_prompt(request),
            speaker_names=self._names_for(request.persona),
            max_tokens=self.max_tokens,
            timeout=timeout,
        )

    async def _try_provider(self, provider: TextProvider, request: UtteranceRequest) -> str:
        timeout = self._timeout_for(provider)
        generation_request = self.build_generation_request(request, timeout)
        try:
            raw = await asyncio.wait_for(provider.generate(generation_request), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise ProviderTimeoutError(provider.id, f"no response within {timeout:.1f}s") from e

        text = clean_utterance(raw, speaker_names=self._names_for(request.persona), max_chars=self.max_chars)
        if not is_substantive(text):
            raise ProviderEmptyOutputError(provider.id, "output empty after cleanup")
        return text

    def _canned_line(self, request: UtteranceRequest) -> str:
        raw = self.canned.pick(
            request.persona.id,
            self.rng,
            topic=request.topic,
            last_speaker=request.last_speaker,
        )
        text = clean_utterance(raw, speaker_names=self._names_for(request.persona), max_chars=self.max_chars)
        return text or raw

    async def resolve(self, request: UtteranceRequest) -> str:
        """
        Return one line for the persona.

        Providers are tried in order; the first success short-circuits the
        rest. Never raises unless the chain is strict.

        Raises:
            AllProvidersExhaustedError: strict mode only
        """
        persona_id = request.persona.id
        for provider in self.providers:
            config = self._provider_config(provider)
            model = config.model if config is not None else None
            started = time.monotonic()
            try:
                text = await self._try_provider(provider, request)
            except ProviderError as e:
                self.call_logger.log_attempt(
                    persona_id=persona_id,
                    source_id=provider.id,
                    model=model,
                    outcome=e.kind.value,
                    latency_ms=int((time.monotonic() - started) * 1000),
                    error=e,
                )
                continue
            except Exception as e:
                logger.error(f"Unexpected error from provider {provider.id}: {e}", exc_info=True)
                self.call_logger.log_attempt(
                    persona_id=persona_id,
                    source_id=provider.id,
                    model=model,
                    outcome="unexpected",
                    latency_ms=int((time.monotonic() - started) * 1000),
                    error=e,
                )
                continue

            self.call_logger.log_attempt(
                persona_id=persona_id,
                source_id=provider.id,
                model=model,
                outcome="ok",
                latency_ms=int((time.monotonic() - started) * 1000),
                text=text,
            )
            return text

        if self.strict:
            raise AllProvidersExhaustedError(persona_id, len(self.providers))

        if self.providers:
            logger.info(f"All providers failed for {persona_id}, using canned line")
        text = self._canned_line(request)
        self.call_logger.log_attempt(
            persona_id=persona_id,
            source_id=CANNED_SOURCE_ID,
            outcome="ok",
            latency_ms=0,
            text=text,
        )
        return text
