"""
Adapter Registry

Maps provider configurations to their protocol adapters without text matching.
"""
import logging
import os
from typing import Dict, Iterable, List, Optional, Type

import httpx

from .adapters import HuggingFaceAdapter, OpenAIAdapter
from .base import BaseTextAdapter, ProviderClient
from .types import ApiProtocol, ProviderConfig

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """
    Protocol adapter registry.

    Uses lookup tables instead of URL sniffing for reliability.
    """

    _protocol_adapters: Dict[ApiProtocol, Type[BaseTextAdapter]] = {
        ApiProtocol.OPENAI: OpenAIAdapter,
        ApiProtocol.HUGGINGFACE: HuggingFaceAdapter,
    }

    @classmethod
    def get(cls, protocol: ApiProtocol) -> BaseTextAdapter:
        """
        Get an adapter instance by protocol.

        Args:
            protocol: Wire protocol of the endpoint

        Returns:
            Adapter instance

        Raises:
            ValueError: If no adapter is registered for the protocol
        """
        adapter_class = cls._protocol_adapters.get(protocol)
        if adapter_class is None:
            raise ValueError(f"No adapter registered for protocol: {protocol}")
        return adapter_class()

    @classmethod
    def register(cls, protocol: ApiProtocol, adapter_class: Type[BaseTextAdapter]) -> None:
        """Register or replace the adapter used for a protocol."""
        cls._protocol_adapters[protocol] = adapter_class
        logger.debug(f"Registered adapter {adapter_class.__name__} for {protocol.value}")

    @classmethod
    def create_client(
        cls,
        provider: ProviderConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> ProviderClient:
        """Bind a provider configuration to its adapter, resolving the credential."""
        if provider.api_key is None and provider.api_key_env:
            api_key = os.getenv(provider.api_key_env, "").strip()
            if api_key:
                provider = provider.model_copy(update={"api_key": api_key})
            else:
                logger.warning(
                    f"Provider {provider.id}: {provider.api_key_env} is not set, calling without credential"
                )
        return ProviderClient(provider, cls.get(provider.protocol), transport=transport)


def build_provider_clients(
    providers: Iterable[ProviderConfig],
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[ProviderClient]:
    """Create clients for enabled providers, preserving configured order."""
    clients = []
    for provider in providers:
        if not provider.enabled:
            logger.info(f"Provider {provider.id} disabled, skipping")
            continue
        clients.append(AdapterRegistry.create_client(provider, transport=transport))
    return clients
