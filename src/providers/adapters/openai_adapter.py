"""
OpenAI-compatible Adapter

Adapter for any endpoint speaking the OpenAI /chat/completions protocol
(OpenAI, Groq, OpenRouter, DeepSeek, local gateways).
"""
from typing import Any, Dict

from ..base import BaseTextAdapter
from ..types import GenerationRequest, ProviderConfig, ProviderMalformedResponseError


class OpenAIAdapter(BaseTextAdapter):
    """
    Adapter for OpenAI-compatible chat completion APIs.

    The persona instructions go in the system message and the rendered debate
    prompt in a single user message.
    """

    def build_url(self, provider: ProviderConfig) -> str:
        url = provider.base_url.rstrip('/')
        if url.endswith('/chat/completions'):
            return url
        return f"{url}/chat/completions"

    def build_payload(self, provider: ProviderConfig, request: GenerationRequest) -> Dict[str, Any]:
        return {
            "model": provider.model,
            "messages": [
                {"role": "system", "content": request.system_prompt},
                {"role": "user", "content": request.prompt},
            ],
            "max_tokens": min(request.max_tokens, provider.max_tokens),
            "temperature": provider.temperature,
        }

    def parse_response(self, provider: ProviderConfig, payload: Any) -> str:
        """Read choices[0].message.content."""
        try:
            content = payload["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderMalformedResponseError(
                provider.id, "missing choices[0].message.content"
            ) from e
        if content is None:
            return ""
        if not isinstance(content, str):
            raise ProviderMalformedResponseError(provider.id, "message content is not a string")
        return content
