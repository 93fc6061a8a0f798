"""Abstract base class for text-generation clients."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import requests

from ..errors import GenerationTimeout, UpstreamGenerationFailure

logger = logging.getLogger(__name__)


@dataclass
class GenerationOptions:
    """Per-call generation settings."""
    model: str | None = None
    temperature: float = 0.2
    max_tokens: int = 2000
    timeout: float = 30.0  # seconds
    system_prompt: str | None = None


@dataclass
class LLMProfile:
    """Token counts and timing from an LLM call.

    All durations are in milliseconds.
    """
    input_tokens: int = 0
    output_tokens: int = 0
    total_ms: float = 0.0

    def summary(self) -> str:
        """Human-readable summary."""
        return f"in={self.input_tokens}tok | out={self.output_tokens}tok | total={self.total_ms:.0f}ms"


@dataclass
class LLMResponse:
    """Response from an LLM call."""
    content: str
    raw_response: dict[str, Any] | None = None
    model: str = ""
    finish_reason: str | None = None
    profile: LLMProfile | None = None


def upstream_failure(error: Exception, backend: str) -> UpstreamGenerationFailure:
    """Map a requests exception onto the upstream failure taxonomy."""
    if isinstance(error, requests.Timeout):
        return GenerationTimeout(f"{backend} request timed out: {error}")

    if isinstance(error, requests.HTTPError):
        status = error.response.status_code if error.response is not None else None
        if status == 429:
            return UpstreamGenerationFailure(f"{backend} quota exceeded: {error}", kind="quota")
        return UpstreamGenerationFailure(f"{backend} returned HTTP {status}: {error}", kind="http")

    if isinstance(error, ValueError):
        return UpstreamGenerationFailure(
            f"{backend} returned an invalid response: {error}", kind="invalid_response"
        )

    return UpstreamGenerationFailure(f"{backend} request failed: {error}", kind="network")


class BaseLLMClient(ABC):
    """Abstract base class for LLM API clients."""

    @abstractmethod
    def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.0,
        max_tokens: int = 4096,
        model: str | None = None,
        timeout: float | None = None,
    ) -> LLMResponse:
        """Generate a response from the LLM.

        Args:
            prompt: The user prompt
            system_prompt: Optional system prompt
            temperature: Sampling temperature (0.0 = deterministic)
            max_tokens: Maximum tokens in response
            model: Model override for this call
            timeout: Request timeout in seconds

        Returns:
            LLMResponse with content and metadata

        Raises:
            UpstreamGenerationFailure: On network, quota, timeout or HTTP errors
        """
        pass

    def complete(self, prompt: str, options: GenerationOptions) -> str:
        """Return the completion text for a prompt.

        Args:
            prompt: The user prompt
            options: Model, sampling and timeout settings

        Returns:
            Completion text, possibly empty
        """
        response = self.generate(
            prompt,
            system_prompt=options.system_prompt,
            temperature=options.temperature,
            max_tokens=options.max_tokens,
            model=options.model,
            timeout=options.timeout,
        )
        return response.content

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the LLM backend is available."""
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name being used."""
        pass
