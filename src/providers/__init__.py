"""
Text Provider Abstraction Layer

This package provides a uniform interface over the external text-generation
services that voice the debate personas.

Key components:
- types: Data models, enums and the provider error taxonomy
- output_cleanup: Post-processing shared by every text source
- registry: Adapter lookup by protocol
- adapters: Protocol-specific request/response handling

Usage:
    from src.providers import AdapterRegistry, ProviderConfig, GenerationRequest

    client = AdapterRegistry.create_client(ProviderConfig(
        id="groq",
        base_url="https://api.groq.com/openai/v1",
        model="llama-3.1-8b-instant",
        api_key_env="GROQ_API_KEY",
    ))
    text = await client.generate(request)
"""
from .types import (
    ApiProtocol,
    ProviderConfig,
    GenerationRequest,
    ProviderErrorKind,
    ProviderError,
    ProviderTimeoutError,
    ProviderRejectedError,
    ProviderMalformedResponseError,
    ProviderEmptyOutputError,
)
from .base import BaseTextAdapter, ProviderClient
from .registry import AdapterRegistry, build_provider_clients

__all__ = [
    # Types
    "ApiProtocol",
    "ProviderConfig",
    "GenerationRequest",
    "ProviderErrorKind",
    # Errors
    "ProviderError",
    "ProviderTimeoutError",
    "ProviderRejectedError",
    "ProviderMalformedResponseError",
    "ProviderEmptyOutputError",
    # Adapters
    "BaseTextAdapter",
    "ProviderClient",
    "AdapterRegistry",
    "build_provider_clients",
]
