"""LLM backend abstraction layer."""

from .base import BaseLLMClient, GenerationOptions, LLMProfile, LLMResponse
from .ollama import OllamaClient
from .openai_compat import OpenAICompatibleClient
from .factory import get_llm_client

__all__ = [
    "BaseLLMClient",
    "GenerationOptions",
    "LLMProfile",
    "LLMResponse",
    "OllamaClient",
    "OpenAICompatibleClient",
    "get_llm_client",
]
