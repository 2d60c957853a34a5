"""
Provider Types and Data Models

Defines enums, request models and the error taxonomy for the text-generation
provider layer.
"""
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class ApiProtocol(str, Enum):
    """Supported API protocol types"""
    OPENAI = "openai"             # OpenAI-compatible /chat/completions
    HUGGINGFACE = "huggingface"   # Hugging Face Inference API


class ProviderConfig(BaseModel):
    """One configured text-generation endpoint."""
    id: str = Field(..., description="Provider entry ID (e.g., groq-llama)")
    protocol: ApiProtocol = ApiProtocol.OPENAI
    base_url: str
    model: str
    api_key_env: Optional[str] = Field(default=None, description="Environment variable holding the bearer token")
    api_key: Optional[str] = Field(default=None, exclude=True)
    max_tokens: int = Field(default=120, ge=1)
    temperature: float = Field(default=0.9, ge=0.0, le=2.0)
    timeout_seconds: float = Field(default=15.0, gt=0)
    enabled: bool = True


class GenerationRequest(BaseModel):
    """Fully rendered prompt for one utterance."""

    model_config = ConfigDict(frozen=True)

    persona_id: str
    persona_name: str
    system_prompt: str
    prompt: str
    speaker_names: List[str] = Field(default_factory=list)
    max_tokens: int = 120
    temperature: float = 0.9
    timeout: float = 15.0


class ProviderErrorKind(str, Enum):
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    MALFORMED_RESPONSE = "malformed_response"
    EMPTY = "empty"


class ProviderError(Exception):
    """Base error for one failed provider call."""

    kind: ProviderErrorKind = ProviderErrorKind.HTTP_STATUS

    def __init__(self, provider_id: str, message: str = ""):
        self.provider_id = provider_id
        super().__init__(f"{provider_id}: {message}" if message else provider_id)


class ProviderTimeoutError(ProviderError):
    """Raised when the provider did not answer within the timeout."""

    kind = ProviderErrorKind.TIMEOUT


class ProviderRejectedError(ProviderError):
    """Raised on non-2xx responses and transport failures."""

    kind = ProviderErrorKind.HTTP_STATUS

    def __init__(self, provider_id: str, message: str = "", status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(provider_id, message)


class ProviderMalformedResponseError(ProviderRejectedError):
    """Raised when the payload is not JSON or lacks the expected shape."""

    kind = ProviderErrorKind.MALFORMED_RESPONSE


class ProviderEmptyOutputError(ProviderError):
    """Raised when the cleaned output is below the minimum length."""

    kind = ProviderErrorKind.EMPTY
