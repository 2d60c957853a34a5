"""Tests for the Hugging Face inference adapter."""

import json

import httpx
import pytest

from src.providers.adapters.huggingface_adapter import HuggingFaceAdapter
from src.providers.types import (
    ApiProtocol,
    GenerationRequest,
    ProviderConfig,
    ProviderMalformedResponseError,
    ProviderRejectedError,
)


def _provider() -> ProviderConfig:
    return ProviderConfig(
        id="hf",
        protocol=ApiProtocol.HUGGINGFACE,
        base_url="https://api-inference.huggingface.co/",
        model="microsoft/DialoGPT-medium",
        max_tokens=60,
    )


def _request() -> GenerationRequest:
    return GenerationRequest(
        persona_id="luna",
        persona_name="Luna",
        system_prompt="You are Luna.",
        prompt="Topic: Should we tax robots?",
        speaker_names=["Luna"],
    )


def test_build_url_and_payload():
    adapter = HuggingFaceAdapter()

    assert adapter.build_url(_provider()) == (
        "https://api-inference.huggingface.co/models/microsoft/DialoGPT-medium"
    )
    payload = adapter.build_payload(_provider(), _request())
    assert payload["inputs"] == "You are Luna.\n\nTopic: Should we tax robots?"
    assert payload["parameters"]["max_new_tokens"] == 60
    assert payload["parameters"]["return_full_text"] is False


@pytest.mark.asyncio
async def test_generate_strips_echoed_prompt():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        echoed = seen["body"]["inputs"]
        return httpx.Response(200, json=[{"generated_text": echoed + " Luna: Fair taxes fund a fairer future."}])

    text = await HuggingFaceAdapter().generate(_provider(), _request(), transport=httpx.MockTransport(handler))

    assert text == "Fair taxes fund a fairer future."
    assert seen["auth"] is None


@pytest.mark.asyncio
async def test_generate_accepts_object_payload():
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, json={"generated_text": "Robots should pay their share."})
    )

    text = await HuggingFaceAdapter().generate(_provider(), _request(), transport=transport)

    assert text == "Robots should pay their share."


@pytest.mark.asyncio
async def test_error_payload_is_rejection():
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, json={"error": "Model is currently loading"})
    )

    with pytest.raises(ProviderRejectedError) as exc:
        await HuggingFaceAdapter().generate(_provider(), _request(), transport=transport)
    assert not isinstance(exc.value, ProviderMalformedResponseError)


@pytest.mark.asyncio
async def test_missing_generated_text_is_malformed():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=[{"text": "nope"}]))

    with pytest.raises(ProviderMalformedResponseError):
        await HuggingFaceAdapter().generate(_provider(), _request(), transport=transport)
