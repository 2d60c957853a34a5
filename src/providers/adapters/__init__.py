"""
Text Adapters

This package contains protocol adapters for different text-generation providers.
"""
from .openai_adapter import OpenAIAdapter
from .huggingface_adapter import HuggingFaceAdapter

__all__ = [
    "OpenAIAdapter",
    "HuggingFaceAdapter",
]
