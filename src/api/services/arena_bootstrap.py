"""Dependency bootstrap helpers for the debate orchestrator."""

from __future__ import annotations

import logging
import random
from typing import Optional

import httpx

from ...providers.registry import build_provider_clients
from ...utils.llm_logger import ProviderCallLogger, get_provider_logger
from ..models.arena_config import ArenaConfig
from .canned_responses import CannedResponsePool
from .debate_orchestrator import DebateOrchestrator
from .fallback_chain import FallbackChain
from .publisher import Publisher
from .scoring import get_scoring_policy
from .speaker_selector import SpeakerSelector
from .topic_source import TopicSource

logger = logging.getLogger(__name__)


def build_orchestrator(
    config: ArenaConfig,
    *,
    publisher: Optional[Publisher] = None,
    rng: Optional[random.Random] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    call_logger: Optional[ProviderCallLogger] = None,
) -> DebateOrchestrator:
    """Wire providers, topics and the canned pool into one orchestrator.

    Keeping wiring here lets tests swap the HTTP transport and RNG without
    touching the orchestrator itself.
    """
    rng = rng or random.Random()
    clients = build_provider_clients(config.providers, transport=transport)
    chain = FallbackChain(
        clients,
        CannedResponsePool(config.canned_responses),
        speaker_names=[persona.display_name for persona in config.personas],
        rng=rng,
        strict=config.strict_providers,
        call_logger=call_logger or get_provider_logger(),
    )
    topic_source = TopicSource.from_config(config.topics, rng=rng, transport=transport)

    logger.info(
        "Arena wired: %s provider(s) %s, %s feed(s), scoring=%s, strict=%s",
        len(clients),
        [client.id for client in clients],
        len(topic_source.feeds),
        config.scoring_policy,
        config.strict_providers,
    )
    return DebateOrchestrator(
        config=config,
        chain=chain,
        topic_source=topic_source,
        publisher=publisher or Publisher(),
        scoring=get_scoring_policy(config.scoring_policy),
        selector=SpeakerSelector([persona.id for persona in config.personas], config.adjacency or None),
        rng=rng,
    )
