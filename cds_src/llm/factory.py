"""Select the configured text-generation backend."""

import logging

from ..config import Config
from .base import BaseLLMClient
from .ollama import OllamaClient
from .openai_compat import OpenAICompatibleClient

logger = logging.getLogger(__name__)


def get_llm_client(backend: str | None = None) -> BaseLLMClient:
    """Create an LLM client.

    Args:
        backend: "ollama" or "openai". Uses Config.LLM_BACKEND if None.

    Returns:
        A configured BaseLLMClient
    """
    backend = (backend or Config.LLM_BACKEND).lower()

    if backend == "openai":
        if not Config.is_openai_configured():
            logger.warning("OpenAI backend selected but OPENAI_API_KEY is not set")
        return OpenAICompatibleClient()

    if backend != "ollama":
        raise ValueError(f"Unknown LLM backend: {backend}")

    return OllamaClient()
