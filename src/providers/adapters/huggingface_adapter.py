"""
Hugging Face Inference Adapter

Adapter for the hosted text-generation inference API. These models continue
a raw prompt, so the prompt is often echoed back in generated_text.
"""
from typing import Any, Dict, Optional

from ..base import BaseTextAdapter
from ..types import (
    GenerationRequest,
    ProviderConfig,
    ProviderMalformedResponseError,
    ProviderRejectedError,
)


class HuggingFaceAdapter(BaseTextAdapter):
    """Adapter for POST {base_url}/models/{model} text generation."""

    def build_url(self, provider: ProviderConfig) -> str:
        return f"{provider.base_url.rstrip('/')}/models/{provider.model}"

    @staticmethod
    def render_inputs(request: GenerationRequest) -> str:
        return f"{request.system_prompt}\n\n{request.prompt}"

    def build_payload(self, provider: ProviderConfig, request: GenerationRequest) -> Dict[str, Any]:
        return {
            "inputs": self.render_inputs(request),
            "parameters": {
                "max_new_tokens": min(request.max_tokens, provider.max_tokens),
                "temperature": provider.temperature,
                "do_sample": True,
                "return_full_text": False,
            },
        }

    def echoed_prompt(self, request: GenerationRequest) -> Optional[str]:
        return self.render_inputs(request)

    def parse_response(self, provider: ProviderConfig, payload: Any) -> str:
        """Accept [{generated_text}] or {generated_text}; {error} is a rejection."""
        if isinstance(payload, dict) and payload.get("error"):
            # Model loading / rate limit errors come back as 200 on some deployments
            raise ProviderRejectedError(provider.id, f"provider error: {payload['error']}")

        if isinstance(payload, list) and payload and isinstance(payload[0], dict):
            text = payload[0].get("generated_text")
        elif isinstance(payload, dict):
            text = payload.get("generated_text")
        else:
            text = None

        if text is None:
            raise ProviderMalformedResponseError(provider.id, "missing generated_text")
        if not isinstance(text, str):
            raise ProviderMalformedResponseError(provider.id, "generated_text is not a string")
        return text
