"""Tests for viewer event normalization."""

import pytest

from src.api.models.debate import DebateSnapshot, DebateStatus, Utterance
from src.api.services.debate_events import (
    InitialStateEvent,
    NewMessageEvent,
    TopicChangeEvent,
    normalize_debate_event,
)


def _utterance(**overrides) -> Utterance:
    data = {"id": 1, "speaker": "alex", "text": "Numbers first.", "timestamp": "2026-01-01T00:00:00+00:00"}
    data.update(overrides)
    return Utterance(**data)


def test_new_message_payload_shape():
    payload = normalize_debate_event(
        NewMessageEvent(message=_utterance(reaction_count=12), scores={"alex": 2}, viewers=1250)
    )

    assert payload["type"] == "new_message"
    assert payload["message"]["speaker"] == "alex"
    assert payload["message"]["reaction_count"] == 12
    assert payload["message"]["is_chat_response"] is False
    assert payload["scores"] == {"alex": 2}
    assert payload["viewers"] == 1250


def test_initial_state_serializes_status_enum():
    snapshot = DebateSnapshot(
        topic="Is AI good for jobs?",
        status=DebateStatus.LIVE,
        is_live=True,
        messages=[_utterance()],
        scores={"alex": 0},
        viewers=1247,
        topic_timer=1800,
    )

    payload = normalize_debate_event(InitialStateEvent(debate=snapshot))

    assert payload["debate"]["status"] == "live"
    assert payload["debate"]["messages"][0]["text"] == "Numbers first."


def test_mapping_events_are_validated():
    payload = normalize_debate_event({
        "type": "topic_change",
        "topic": "Should we tax robots?",
        "timer": 1800,
        "message": _utterance(speaker="system", text="New topic").model_dump(),
    })

    assert payload["topic"] == "Should we tax robots?"
    assert payload["topic_context"] is None
    assert TopicChangeEvent.model_validate(payload).timer == 1800


def test_missing_or_unknown_type_rejected():
    with pytest.raises(ValueError, match="non-empty string field 'type'"):
        normalize_debate_event({"timer": 3})
    with pytest.raises(ValueError, match="unsupported debate event type"):
        normalize_debate_event({"type": "confetti"})


def test_extra_fields_rejected():
    with pytest.raises(ValueError):
        normalize_debate_event({"type": "timer_update", "timer": 3, "color": "red"})
