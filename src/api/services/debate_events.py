"""Wire event models for the viewer channel and validation helpers."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Type, Union

from pydantic import BaseModel, ConfigDict

from ..models.debate import DebateSnapshot, Utterance


class _EventBase(BaseModel):
    """Common base for all viewer events."""

    model_config = ConfigDict(extra="forbid")
    type: str


class InitialStateEvent(_EventBase):
    type: str = "initial_state"
    debate: DebateSnapshot


class DebateUpdateEvent(_EventBase):
    type: str = "debate_update"
    debate: DebateSnapshot


class NewMessageEvent(_EventBase):
    type: str = "new_message"
    message: Utterance
    scores: Dict[str, int]
    viewers: int


class TimerUpdateEvent(_EventBase):
    type: str = "timer_update"
    timer: int


class TopicChangeEvent(_EventBase):
    type: str = "topic_change"
    topic: str
    topic_context: Optional[str] = None
    timer: int
    message: Utterance


class AiChatResponseEvent(_EventBase):
    type: str = "ai_chat_response"
    message: Utterance


class DebateStoppedEvent(_EventBase):
    type: str = "debate_stopped"
    debate: DebateSnapshot


class PingEvent(_EventBase):
    type: str = "ping"


DebateEventModel = Union[
    InitialStateEvent,
    DebateUpdateEvent,
    NewMessageEvent,
    TimerUpdateEvent,
    TopicChangeEvent,
    AiChatResponseEvent,
    DebateStoppedEvent,
    PingEvent,
]


_EVENT_MODEL_BY_TYPE: Dict[str, Type[_EventBase]] = {
    "initial_state": InitialStateEvent,
    "debate_update": DebateUpdateEvent,
    "new_message": NewMessageEvent,
    "timer_update": TimerUpdateEvent,
    "topic_change": TopicChangeEvent,
    "ai_chat_response": AiChatResponseEvent,
    "debate_stopped": DebateStoppedEvent,
    "ping": PingEvent,
}


def normalize_debate_event(event: Union[_EventBase, Mapping[str, Any]]) -> Dict[str, Any]:
    """Validate and normalize one event into a JSON-ready dict payload."""
    if isinstance(event, _EventBase):
        return event.model_dump(mode="json")

    payload = dict(event)
    event_type = payload.get("type")
    if not isinstance(event_type, str) or not event_type:
        raise ValueError("debate event must include non-empty string field 'type'")

    model_cls = _EVENT_MODEL_BY_TYPE.get(event_type)
    if model_cls is None:
        raise ValueError(f"unsupported debate event type: {event_type}")

    return model_cls.model_validate(payload).model_dump(mode="json")
