"""Shared pytest fixtures for all tests."""

import pytest
import random
import shutil
import uuid
from pathlib import Path

from src.api.models.arena_config import (
    ArenaConfig,
    CannedResponses,
    ChatConfig,
    Persona,
    TimingConfig,
    TopicSourceConfig,
)
from src.utils.llm_logger import ProviderCallLogger


def _create_workspace_temp_dir(kind: str) -> Path:
    """Create a temporary directory under repository-local .pytest_work."""
    repo_root = Path(__file__).resolve().parents[1]
    root_dir = repo_root / ".pytest_work" / kind
    root_dir.mkdir(parents=True, exist_ok=True)
    temp_dir = root_dir / f"{kind}_{uuid.uuid4().hex[:8]}"
    temp_dir.mkdir(parents=True, exist_ok=True)
    return temp_dir


@pytest.fixture
def tmp_path():
    """Workspace-local replacement for pytest's tmp_path fixture."""
    temp_dir = _create_workspace_temp_dir("tmp_path")
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def temp_config_dir():
    """Create temporary directory for config files."""
    temp_dir = _create_workspace_temp_dir("config")
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def rng():
    """Seeded random source so loop decisions are reproducible."""
    return random.Random(1234)


@pytest.fixture
def call_logger():
    """Provider call logger that never touches the filesystem."""
    return ProviderCallLogger(write_file=False)


@pytest.fixture
def sample_personas():
    """Four debaters with distinct names."""
    return [
        Persona(id="alex", display_name="Alex", role="The Pragmatist", system_prompt="You are Alex, a pragmatist."),
        Persona(id="luna", display_name="Luna", role="The Idealist", system_prompt="You are Luna, an idealist."),
        Persona(id="rex", display_name="Rex", role="The Skeptic", system_prompt="You are Rex, a skeptic."),
        Persona(id="sage", display_name="Sage", role="The Mediator", system_prompt="You are Sage, a mediator."),
    ]


@pytest.fixture
def sample_arena_config(sample_personas):
    """Arena config with no providers: every line comes from the canned pool."""
    return ArenaConfig(
        personas=sample_personas,
        canned_responses={
            "alex": CannedResponses(general=["Let's look at what actually works in practice."]),
            "luna": CannedResponses(general=["We should aim for a fairer future for everyone."]),
            "rex": CannedResponses(general=["Show me the evidence before we celebrate."]),
            "sage": CannedResponses(general=["Both sides raise points worth weighing here."]),
        },
        adjacency={
            "luna": {"rex": 0.5, "alex": 0.5},
            "alex": {"luna": 0.5, "rex": 0.5},
            "rex": {"sage": 0.5, "luna": 0.5},
        },
        providers=[],
        topics=TopicSourceConfig(curated=["Is AI good for jobs?", "Should we tax robots?"]),
        timing=TimingConfig(
            utterance_min_seconds=0.01,
            utterance_max_seconds=0.02,
            topic_duration_seconds=5,
            chat_delay_min_seconds=0.0,
            chat_delay_max_seconds=0.0,
        ),
        chat=ChatConfig(response_probability=1.0, queue_size=2),
    )
