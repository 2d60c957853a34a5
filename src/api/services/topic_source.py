"""
Topic Source

Supplies debate topics: live RSS/Atom feeds first, then a curated list that
always has an answer.
"""

from __future__ import annotations

import html
import logging
import os
import random
import re
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Sequence
from xml.etree import ElementTree as ET

import httpx

from ..models.arena_config import FeedConfig, TopicSourceConfig

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")
_ATOM_NS = "{http://www.w3.org/2005/Atom}"
_MAX_CONTEXT_CHARS = 800


class NoTopicAvailableError(Exception):
    """Raised when a feed yields no usable topic."""


@dataclass(frozen=True)
class TopicChoice:
    topic: str
    context: Optional[str] = None
    source: str = "curated"


@dataclass(frozen=True)
class FeedItem:
    title: str
    summary: Optional[str] = None


def _plain_text(value: Optional[str]) -> str:
    if not value:
        return ""
    text = html.unescape(_TAG_RE.sub(" ", value))
    return _WHITESPACE_RE.sub(" ", text).strip()


def _child_text(node: ET.Element, tag: str) -> str:
    # itertext keeps text nested in inline markup (<b>, <i>) inside titles
    child = node.find(tag)
    if child is None:
        return ""
    return "".join(child.itertext())


def parse_feed(content: bytes | str) -> List[FeedItem]:
    """Extract titles and summaries from RSS 2.0 or Atom XML."""
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise NoTopicAvailableError(f"feed is not valid XML: {e}") from e

    items: List[FeedItem] = []
    for node in root.iter("item"):
        title = _plain_text(_child_text(node, "title"))
        if title:
            summary = _plain_text(_child_text(node, "description")) or None
            items.append(FeedItem(title=title, summary=summary))

    for node in root.iter(f"{_ATOM_NS}entry"):
        title = _plain_text(_child_text(node, f"{_ATOM_NS}title"))
        if title:
            summary = _plain_text(
                _child_text(node, f"{_ATOM_NS}summary") or _child_text(node, f"{_ATOM_NS}content")
            ) or None
            items.append(FeedItem(title=title, summary=summary))
    return items


def to_question(title: str, template: str = "{title}: progress or problem?") -> str:
    """Turn a headline into a debate question unless it already is one."""
    cleaned = title.strip().rstrip(".!:;")
    if cleaned.endswith("?"):
        return cleaned
    return template.format(title=cleaned)


class FeedTopicProvider:
    """One feed endpoint; raises NoTopicAvailableError on any failure."""

    def __init__(
        self,
        config: FeedConfig,
        *,
        question_template: str = "{title}: progress or problem?",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.question_template = question_template
        self.transport = transport

    @property
    def id(self) -> str:
        return self.config.id

    def _headers(self) -> dict:
        headers = {"Accept": "application/rss+xml, application/atom+xml, application/xml, text/xml"}
        if self.config.api_key_env:
            api_key = os.getenv(self.config.api_key_env, "").strip()
            if api_key:
                headers["Authorization"] = f"Bearer {api_key}"
        return headers

    async def fetch_items(self) -> List[FeedItem]:
        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout_seconds,
                transport=self.transport,
                follow_redirects=True,
            ) as client:
                response = await client.get(self.config.url, headers=self._headers())
                response.raise_for_status()
        except httpx.TimeoutException as e:
            raise NoTopicAvailableError(f"{self.id}: timeout") from e
        except httpx.HTTPStatusError as e:
            raise NoTopicAvailableError(f"{self.id}: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise NoTopicAvailableError(f"{self.id}: {e}") from e
        return parse_feed(response.content)

    async def next_topic(self, rng: random.Random, exclude: Sequence[str] = ()) -> TopicChoice:
        items = (await self.fetch_items())[: self.config.max_items]
        choices = [
            TopicChoice(
                topic=to_question(item.title, self.question_template),
                context=(item.summary or "")[:_MAX_CONTEXT_CHARS] or None,
                source=self.id,
            )
            for item in items
        ]
        fresh = [choice for choice in choices if choice.topic not in exclude]
        if not fresh:
            raise NoTopicAvailableError(f"{self.id}: no new items")
        return rng.choice(fresh)


class TopicSource:
    """Feeds in order, then the curated list. next_topic() never fails."""

    def __init__(
        self,
        curated: Sequence[str],
        feeds: Sequence[FeedTopicProvider] = (),
        *,
        rng: Optional[random.Random] = None,
        recent_memory: int = 3,
    ):
        if not curated:
            raise ValueError("TopicSource requires at least one curated topic")
        self.curated = list(curated)
        self.feeds = list(feeds)
        self.rng = rng or random.Random()
        self._recent: Deque[str] = deque(maxlen=max(1, recent_memory))

    @classmethod
    def from_config(
        cls,
        config: TopicSourceConfig,
        *,
        rng: Optional[random.Random] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "TopicSource":
        feeds = [
            FeedTopicProvider(feed, question_template=config.question_template, transport=transport)
            for feed in config.feeds
            if feed.enabled
        ]
        return cls(config.curated, feeds, rng=rng, recent_memory=config.recent_topic_memory)

    @property
    def default_topic(self) -> str:
        return self.curated[0]

    def _remember(self, choice: TopicChoice) -> TopicChoice:
        self._recent.append(choice.topic)
        return choice

    def pick_curated(self, current: Optional[str] = None) -> TopicChoice:
        avoid = set(self._recent)
        if current:
            avoid.add(current)
        pool = [topic for topic in self.curated if topic not in avoid]
        if not pool:
            pool = [topic for topic in self.curated if topic != current] or list(self.curated)
        return TopicChoice(topic=self.rng.choice(pool))

    async def next_topic(self, current: Optional[str] = None) -> TopicChoice:
        exclude = [*self._recent, *([current] if current else [])]
        for feed in self.feeds:
            try:
                choice = await feed.next_topic(self.rng, exclude=exclude)
            except NoTopicAvailableError as e:
                logger.warning(f"Topic feed failed, trying next source: {e}")
                continue
            logger.info(f"Topic from feed {feed.id}: {choice.topic}")
            return self._remember(choice)

        return self._remember(self.pick_curated(current))
