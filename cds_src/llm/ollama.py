"""Ollama LLM client for local inference.

Ollama keeps patient data on-premise, so it is the default backend.
"""

import logging
from typing import Any

import requests

from ..config import Config
from .base import BaseLLMClient, LLMProfile, LLMResponse, upstream_failure

logger = logging.getLogger(__name__)


def _extract_profile(data: dict[str, Any]) -> LLMProfile:
    """Extract profiling data from an Ollama response.

    Ollama returns timing in nanoseconds, we convert to milliseconds.
    """
    ns_to_ms = 1_000_000

    return LLMProfile(
        input_tokens=data.get("prompt_eval_count", 0),
        output_tokens=data.get("eval_count", 0),
        total_ms=data.get("total_duration", 0) / ns_to_ms,
    )


class OllamaClient(BaseLLMClient):
    """Ollama API client for local LLM inference."""

    def __init__(
        self,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        num_ctx: int = 8192,  # Context window size
    ):
        """Initialize Ollama client.

        Args:
            base_url: Ollama API base URL. Uses config if None.
            model: Model to use. Uses config if None.
            timeout: Default request timeout in seconds. Uses config if None.
            num_ctx: Context window size in tokens.
        """
        self.base_url = (base_url or Config.OLLAMA_BASE_URL).rstrip("/")
        self.model = model or Config.OLLAMA_MODEL
        self.timeout = timeout or Config.GENERATION_TIMEOUT_SECONDS
        self.num_ctx = num_ctx
        self.session = requests.Session()

    def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.0,
        max_tokens: int = 4096,
        model: str | None = None,
        timeout: float | None = None,
    ) -> LLMResponse:
        """Generate a response using Ollama's chat endpoint."""
        messages = []

        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})

        messages.append({"role": "user", "content": prompt})

        model = model or self.model
        payload = {
            "model": model,
            "messages": messages,
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens,
                "num_ctx": self.num_ctx,
            },
        }

        try:
            response = self.session.post(
                f"{self.base_url}/api/chat",
                json=payload,
                timeout=timeout or self.timeout,
            )
            response.raise_for_status()

            data = response.json()

        except (requests.RequestException, ValueError) as e:
            logger.error(f"Ollama request failed: {e}")
            raise upstream_failure(e, "Ollama") from e

        profile = _extract_profile(data)
        logger.info(f"LLM generate [{model}]: {profile.summary()}")

        return LLMResponse(
            content=data.get("message", {}).get("content", ""),
            raw_response=data,
            model=model,
            finish_reason=data.get("done_reason"),
            profile=profile,
        )

    def is_available(self) -> bool:
        """Check if Ollama is running and the model is pulled."""
        try:
            response = self.session.get(f"{self.base_url}/api/tags", timeout=5)
            response.raise_for_status()

            models = [m.get("name") for m in response.json().get("models", [])]

            # Handle model names with and without tags
            model_base = self.model.split(":")[0]
            return any(m == self.model or m.startswith(model_base) for m in models)

        except requests.RequestException:
            return False

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self.model
