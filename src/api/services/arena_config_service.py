"""
Debate arena configuration service
"""
import logging
from pathlib import Path
from typing import Optional

import aiofiles
import yaml
from pydantic import ValidationError

from ..models.arena_config import ArenaConfig
from ..paths import arena_config_defaults_path, arena_config_local_path, resolve_layered_read_path

logger = logging.getLogger(__name__)


class ArenaConfigError(Exception):
    """Raised when the arena configuration cannot be read or validated."""


class ArenaConfigService:
    """Loads personas, topics and loop settings from YAML."""

    def __init__(self, config_path: Optional[Path] = None):
        if config_path is None:
            config_path = resolve_layered_read_path(
                local_path=arena_config_local_path(),
                defaults_path=arena_config_defaults_path(),
            )
        self.config_path = Path(config_path)

    @staticmethod
    def parse(content: str, source: str = "<string>") -> ArenaConfig:
        try:
            data = yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ArenaConfigError(f"Invalid YAML in {source}: {e}") from e
        if not isinstance(data, dict):
            raise ArenaConfigError(f"Arena config {source} must be a mapping")
        try:
            return ArenaConfig(**data)
        except ValidationError as e:
            raise ArenaConfigError(f"Invalid arena config {source}: {e}") from e

    async def load_config(self) -> ArenaConfig:
        if not self.config_path.exists():
            raise ArenaConfigError(f"Arena config not found: {self.config_path}")
        async with aiofiles.open(self.config_path, 'r', encoding='utf-8') as f:
            content = await f.read()
        config = self.parse(content, source=str(self.config_path))
        logger.info(
            "Loaded arena config from %s: %s personas, %s providers, %s curated topics",
            self.config_path,
            len(config.personas),
            len(config.providers),
            len(config.topics.curated),
        )
        return config
