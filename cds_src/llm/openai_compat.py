"""Client for OpenAI-compatible chat completion endpoints."""

import logging

import requests

from ..config import Config
from .base import BaseLLMClient, LLMProfile, LLMResponse, upstream_failure

logger = logging.getLogger(__name__)


class OpenAICompatibleClient(BaseLLMClient):
    """Chat completions client for OpenAI and API-compatible servers."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: API base URL including the version path. Uses config if None.
            api_key: Bearer token. Uses config if None.
            model: Model to use. Uses config if None.
            timeout: Default request timeout in seconds. Uses config if None.
        """
        self.base_url = (base_url or Config.OPENAI_BASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else Config.OPENAI_API_KEY
        self.model = model or Config.OPENAI_MODEL
        self.timeout = timeout or Config.GENERATION_TIMEOUT_SECONDS
        self.session = requests.Session()
        if self.api_key:
            self.session.headers["Authorization"] = f"Bearer {self.api_key}"

    def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.0,
        max_tokens: int = 4096,
        model: str | None = None,
        timeout: float | None = None,
    ) -> LLMResponse:
        """Generate a response using the chat completions endpoint."""
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        model = model or self.model
        payload = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        try:
            response = self.session.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                timeout=timeout or self.timeout,
            )
            response.raise_for_status()
            data = response.json()
            choice = data["choices"][0]
            content = choice.get("message", {}).get("content") or ""

        except (requests.RequestException, ValueError) as e:
            logger.error(f"Chat completion request failed: {e}")
            raise upstream_failure(e, "OpenAI") from e
        except (KeyError, IndexError, TypeError) as e:
            logger.error(f"Unexpected chat completion payload: {e}")
            raise upstream_failure(ValueError(f"missing choices: {e}"), "OpenAI") from e

        usage = data.get("usage") or {}
        profile = LLMProfile(
            input_tokens=usage.get("prompt_tokens", 0),
            output_tokens=usage.get("completion_tokens", 0),
        )
        logger.info(f"LLM generate [{model}]: {profile.summary()}")

        return LLMResponse(
            content=content,
            raw_response=data,
            model=data.get("model", model),
            finish_reason=choice.get("finish_reason"),
            profile=profile,
        )

    def is_available(self) -> bool:
        """Check that the endpoint answers a model listing with our credentials."""
        try:
            response = self.session.get(f"{self.base_url}/models", timeout=5)
            response.raise_for_status()
            return True
        except requests.RequestException:
            return False

    @property
    def model_name(self) -> str:
        return self.model
