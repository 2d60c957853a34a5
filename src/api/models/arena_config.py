"""
Debate arena configuration data models

Defines Pydantic models for personas, canned responses, turn-taking weights,
topic sources and loop timing, loaded from arena_config.yaml.
"""
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...providers.types import ProviderConfig


class Persona(BaseModel):
    """One scripted debater"""
    id: str = Field(..., description="Persona identifier used as speaker id")
    display_name: str = Field(..., description="Name shown to viewers")
    role: str = Field(default="", description="Short role label (e.g., The Skeptic)")
    avatar: str = Field(default="", description="Avatar glyph")
    color: str = Field(default="", description="Front-end color class")
    system_prompt: str = Field(..., description="Persona instructions sent to providers")

    @field_validator("id")
    @classmethod
    def validate_id(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Persona id must not be empty")
        if stripped == "system":
            raise ValueError("Persona id 'system' is reserved")
        return stripped


class CannedResponses(BaseModel):
    """Static lines for one persona, used when every provider fails"""
    general: List[str] = Field(default_factory=list, description="Lines usable for any topic")
    topic_keywords: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Lines used when the keyword appears in the topic",
    )
    replies_to: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Lines used when answering a specific persona",
    )


class FeedConfig(BaseModel):
    """One RSS/Atom feed used as a live topic source"""
    id: str
    url: str
    api_key_env: Optional[str] = Field(None, description="Optional bearer credential for enhanced access")
    timeout_seconds: float = Field(default=10.0, gt=0)
    max_items: int = Field(default=10, ge=1)
    enabled: bool = True


class TopicSourceConfig(BaseModel):
    """Topic acquisition settings"""
    curated: List[str] = Field(..., min_length=1, description="Fallback topics, never empty")
    feeds: List[FeedConfig] = Field(default_factory=list)
    question_template: str = Field(default="{title}: progress or problem?")
    recent_topic_memory: int = Field(default=3, ge=0, description="Recently used topics to avoid")

    @field_validator("question_template")
    @classmethod
    def validate_template(cls, value: str) -> str:
        if "{title}" not in value:
            raise ValueError("question_template must contain {title}")
        return value


class TimingConfig(BaseModel):
    """Loop timing"""
    utterance_min_seconds: float = Field(default=8.0, gt=0)
    utterance_max_seconds: float = Field(default=12.0, gt=0)
    topic_duration_seconds: int = Field(default=1800, ge=1)
    chat_delay_min_seconds: float = Field(default=1.5, ge=0)
    chat_delay_max_seconds: float = Field(default=3.0, ge=0)

    @model_validator(mode="after")
    def validate_ranges(self) -> "TimingConfig":
        if self.utterance_max_seconds < self.utterance_min_seconds:
            raise ValueError("utterance_max_seconds must be >= utterance_min_seconds")
        if self.chat_delay_max_seconds < self.chat_delay_min_seconds:
            raise ValueError("chat_delay_max_seconds must be >= chat_delay_min_seconds")
        return self


class SessionLimits(BaseModel):
    """Bounds on session state"""
    max_messages: int = Field(default=50, ge=1, description="Transcript size that triggers trimming")
    keep_messages: int = Field(default=40, ge=1, description="Transcript size after trimming")
    context_window: int = Field(default=4, ge=1, description="Non-system utterances sent as context")
    viewer_initial: int = 1247
    viewer_min: int = 800
    viewer_max: int = 4000
    viewer_step: int = Field(default=12, ge=0)

    @model_validator(mode="after")
    def validate_bounds(self) -> "SessionLimits":
        if self.keep_messages > self.max_messages:
            raise ValueError("keep_messages must be <= max_messages")
        if self.viewer_min > self.viewer_max:
            raise ValueError("viewer_min must be <= viewer_max")
        return self


class ChatConfig(BaseModel):
    """Viewer chat handling"""
    response_probability: float = Field(default=0.5, ge=0.0, le=1.0)
    queue_size: int = Field(default=8, ge=1)
    max_message_chars: int = Field(default=500, ge=1)


class GatewayConfig(BaseModel):
    """Viewer connection housekeeping"""
    ping_interval_seconds: float = Field(default=20.0, gt=0)
    idle_timeout_seconds: float = Field(default=60.0, gt=0)
    subscriber_queue_size: int = Field(default=256, ge=1)


class ArenaConfig(BaseModel):
    """Complete debate arena configuration"""
    personas: List[Persona] = Field(..., min_length=1)
    canned_responses: Dict[str, CannedResponses] = Field(default_factory=dict)
    adjacency: Dict[str, Dict[str, float]] = Field(
        default_factory=dict,
        description="Weighted likely responders per persona; missing entries mean anyone",
    )
    providers: List[ProviderConfig] = Field(default_factory=list)
    strict_providers: bool = Field(
        default=False,
        description="Raise instead of falling back to canned lines when every provider fails",
    )
    scoring_policy: Literal["length", "random"] = "length"
    topics: TopicSourceConfig
    timing: TimingConfig = Field(default_factory=TimingConfig)
    limits: SessionLimits = Field(default_factory=SessionLimits)
    chat: ChatConfig = Field(default_factory=ChatConfig)
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)

    @model_validator(mode="after")
    def validate_persona_references(self) -> "ArenaConfig":
        ids = [persona.id for persona in self.personas]
        if len(ids) != len(set(ids)):
            raise ValueError("Persona ids must be unique")
        known = set(ids)

        for speaker, responders in self.adjacency.items():
            if speaker not in known:
                raise ValueError(f"Adjacency references unknown persona '{speaker}'")
            if not responders:
                raise ValueError(f"Adjacency entry for '{speaker}' is empty")
            for responder, weight in responders.items():
                if responder not in known:
                    raise ValueError(f"Adjacency references unknown persona '{responder}'")
                if weight <= 0:
                    raise ValueError(f"Adjacency weight for '{speaker}' -> '{responder}' must be positive")

        for persona_id in self.canned_responses:
            if persona_id not in known:
                raise ValueError(f"Canned responses reference unknown persona '{persona_id}'")
        return self

    def persona_map(self) -> Dict[str, Persona]:
        return {persona.id: persona for persona in self.personas}
