"""
Base Text Adapter

Abstract base class for text-generation provider adapters and the client
that binds one adapter to one configured endpoint.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from .output_cleanup import clean_utterance, is_substantive
from .types import (
    GenerationRequest,
    ProviderConfig,
    ProviderEmptyOutputError,
    ProviderMalformedResponseError,
    ProviderRejectedError,
    ProviderTimeoutError,
)

logger = logging.getLogger(__name__)


class BaseTextAdapter(ABC):
    """
    Abstract base class for text adapters.

    Each adapter knows one wire protocol: how to build the request body and
    where the generated text sits in the response. Transport, error mapping
    and output cleanup are shared.
    """

    min_chars: int = 6
    min_words: int = 2
    max_chars: int = 280

    @abstractmethod
    def build_url(self, provider: ProviderConfig) -> str:
        """Return the endpoint URL for a generation call."""
        pass

    @abstractmethod
    def build_payload(self, provider: ProviderConfig, request: GenerationRequest) -> Dict[str, Any]:
        """
        Build the JSON request body.

        Args:
            provider: Endpoint configuration
            request: Rendered persona prompt

        Returns:
            JSON-serializable body
        """
        pass

    @abstractmethod
    def parse_response(self, provider: ProviderConfig, payload: Any) -> str:
        """
        Extract raw generated text from a decoded response.

        Raises:
            ProviderMalformedResponseError: payload does not have the expected shape
        """
        pass

    def echoed_prompt(self, request: GenerationRequest) -> Optional[str]:
        """Prompt text the endpoint may echo back; None when it never does."""
        return None

    def build_headers(self, provider: ProviderConfig) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if provider.api_key:
            headers["Authorization"] = f"Bearer {provider.api_key}"
        return headers

    async def generate(
        self,
        provider: ProviderConfig,
        request: GenerationRequest,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> str:
        """
        Invoke the endpoint once and return a cleaned utterance.

        No retries here; callers decide whether to try another provider.

        Raises:
            ProviderTimeoutError, ProviderRejectedError,
            ProviderMalformedResponseError, ProviderEmptyOutputError
        """
        timeout = min(request.timeout, provider.timeout_seconds)
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
                response = await client.post(
                    self.build_url(provider),
                    headers=self.build_headers(provider),
                    json=self.build_payload(provider, request),
                )
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(provider.id, f"no response within {timeout:.1f}s") from e
        except httpx.HTTPError as e:
            raise ProviderRejectedError(provider.id, f"transport error: {e}") from e

        if response.status_code < 200 or response.status_code >= 300:
            raise ProviderRejectedError(
                provider.id,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderMalformedResponseError(provider.id, "response is not valid JSON") from e

        raw_text = self.parse_response(provider, payload)
        text = clean_utterance(
            raw_text,
            speaker_names=request.speaker_names or [request.persona_name],
            echoed_prompt=self.echoed_prompt(request),
            max_chars=self.max_chars,
        )
        if not is_substantive(text, min_chars=self.min_chars, min_words=self.min_words):
            raise ProviderEmptyOutputError(provider.id, f"output too short: {raw_text!r:.80}")
        logger.debug("%s (%s) returned %s chars", provider.id, provider.model, len(text))
        return text


class ProviderClient:
    """One configured endpoint bound to its protocol adapter."""

    def __init__(
        self,
        config: ProviderConfig,
        adapter: BaseTextAdapter,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.adapter = adapter
        self.transport = transport

    @property
    def id(self) -> str:
        return self.config.id

    async def generate(self, request: GenerationRequest) -> str:
        return await self.adapter.generate(self.config, request, transport=self.transport)

    def __repr__(self) -> str:
        return f"ProviderClient(id={self.config.id!r}, model={self.config.model!r})"
