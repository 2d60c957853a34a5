"""
Debate session data models

Utterances and the session snapshot sent to viewers.
"""
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

SYSTEM_SPEAKER = "system"


class DebateStatus(str, Enum):
    """Orchestrator lifecycle state"""
    STOPPED = "stopped"
    STARTING = "starting"
    LIVE = "live"


class Utterance(BaseModel):
    """One published unit of dialogue; immutable once created"""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Monotonic id, unique per process")
    speaker: str = Field(..., description="Persona id or 'system'")
    text: str
    timestamp: str = Field(..., description="ISO-8601 UTC creation time")
    reaction_count: int = Field(default=0, ge=0)
    is_chat_response: bool = False
    reply_to: Optional[str] = Field(None, description="Viewer message answered by a chat response")

    @property
    def is_system(self) -> bool:
        return self.speaker == SYSTEM_SPEAKER


class PersonaInfo(BaseModel):
    """Public persona fields (prompt text is not exposed)"""
    id: str
    display_name: str
    role: str = ""
    avatar: str = ""
    color: str = ""


class DebateSnapshot(BaseModel):
    """Full session state replayed to viewers"""
    topic: str
    topic_context: Optional[str] = None
    status: DebateStatus
    is_live: bool
    messages: List[Utterance]
    scores: Dict[str, int]
    viewers: int
    topic_timer: int
    personas: List[PersonaInfo] = Field(default_factory=list)


class ChatMessageRequest(BaseModel):
    """Viewer chat message posted to the control surface"""
    message: str = Field(..., description="Viewer chat text")


class ChatAck(BaseModel):
    """Immediate acknowledgement for a viewer chat message"""
    success: bool
    queued: bool = False
    reason: Optional[str] = None


class ControlAck(BaseModel):
    """Immediate acknowledgement for start/stop requests"""
    success: bool
    message: str
    status: DebateStatus
