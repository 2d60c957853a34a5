"""Provider call logger for debugging and auditing."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union


class ProviderCallLogger:
    """Logger for provider attempts made while resolving debate lines."""

    def __init__(self, log_dir: Union[str, Path] = "logs", write_file: bool = True):
        """Initialize provider call logger.

        Args:
            log_dir: Directory to store log files
            write_file: Whether to attach the daily JSON file handler
        """
        self.log_dir = Path(log_dir)

        self.logger = logging.getLogger("llm_interactions")
        self.logger.setLevel(logging.DEBUG)

        # Prevent duplicate handlers
        if write_file and not self.logger.handlers:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            log_file = self.log_dir / f"llm_interactions_{datetime.now().strftime('%Y%m%d')}.log"
            fh = logging.FileHandler(log_file, encoding='utf-8')
            fh.setLevel(logging.DEBUG)
            fh.setFormatter(logging.Formatter('%(message)s'))
            self.logger.addHandler(fh)

    def log_attempt(
        self,
        *,
        persona_id: str,
        source_id: str,
        outcome: str,
        latency_ms: int,
        model: Optional[str] = None,
        text: Optional[str] = None,
        error: Optional[BaseException] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Log one candidate attempt of the fallback chain.

        Args:
            persona_id: Persona the line was requested for
            source_id: Provider id or "canned"
            outcome: "ok" or the error kind
            latency_ms: Wall time of the attempt
            model: Model name when the source is a provider
            text: Returned text (previewed)
            error: Exception raised by the source
            extra: Additional fields
        """
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now().isoformat(),
            "type": "PROVIDER_ATTEMPT",
            "persona": persona_id,
            "source": source_id,
            "model": model,
            "outcome": outcome,
            "latency_ms": latency_ms,
        }
        if text is not None:
            log_entry["preview"] = text[:120]
        if error is not None:
            log_entry["error"] = {
                "type": error.__class__.__name__,
                "message": str(error),
            }
        if extra:
            log_entry.update(extra)

        self.logger.debug(json.dumps(log_entry, ensure_ascii=False))

        if error is None:
            self.logger.info(
                f"Provider call | {persona_id} via {source_id} | {outcome} | {latency_ms} ms"
            )
        else:
            self.logger.warning(
                f"Provider call | {persona_id} via {source_id} | {outcome} | {latency_ms} ms | {error}"
            )


# Global logger instance
_provider_logger = None


def get_provider_logger(log_dir: Optional[Path] = None) -> ProviderCallLogger:
    """Get or create the global provider call logger instance.

    Args:
        log_dir: Directory for the daily file; defaults to settings.logs_dir

    Returns:
        ProviderCallLogger instance
    """
    global _provider_logger
    if _provider_logger is None:
        if log_dir is None:
            from ..api.config import settings
            log_dir = settings.logs_dir
        _provider_logger = ProviderCallLogger(log_dir=log_dir)
    return _provider_logger
