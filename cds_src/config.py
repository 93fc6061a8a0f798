"""Configuration for the clinical decision support core.

Values are read from environment variables at import time. Tests and scripts
may override attributes on ``Config`` directly.
"""

import os


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    return float(value)


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    return int(value)


class Config:
    """Environment-backed settings."""

    # Text generation backend: "ollama" or "openai"
    LLM_BACKEND = os.environ.get("CDS_LLM_BACKEND", "ollama")

    OLLAMA_BASE_URL = os.environ.get("OLLAMA_BASE_URL", "http://localhost:11434")
    OLLAMA_MODEL = os.environ.get("CDS_OLLAMA_MODEL", "llama3.1:8b")

    OPENAI_BASE_URL = os.environ.get("OPENAI_API_ENDPOINT", "https://api.openai.com/v1")
    OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY", "")
    OPENAI_MODEL = os.environ.get("CDS_OPENAI_MODEL", "gpt-4")

    # Prescription suggestion generation
    GENERATION_TEMPERATURE = _env_float("CDS_GENERATION_TEMPERATURE", 0.2)
    GENERATION_MAX_TOKENS = _env_int("CDS_GENERATION_MAX_TOKENS", 2000)
    GENERATION_TIMEOUT_SECONDS = _env_float("CDS_GENERATION_TIMEOUT_SECONDS", 30.0)

    # Medication catalog
    CATALOG_DB_PATH = os.environ.get("CDS_CATALOG_DB_PATH", "~/.cds/catalog.db")
    CATALOG_CACHE_DB_PATH = os.environ.get("CDS_CATALOG_CACHE_DB_PATH", "~/.cds/catalog_cache.db")
    CATALOG_CACHE_TTL_SECONDS = _env_int("CDS_CATALOG_CACHE_TTL_SECONDS", 86400)  # 24 hours

    # Per-suggestion enrichment thread pool
    ENRICHMENT_WORKERS = _env_int("CDS_ENRICHMENT_WORKERS", 4)

    @classmethod
    def is_openai_configured(cls) -> bool:
        """Check if an OpenAI-compatible endpoint has credentials."""
        return bool(cls.OPENAI_API_KEY)

    @classmethod
    def generation_options(cls):
        """Build default generation options for the configured backend."""
        from .llm.base import GenerationOptions

        model = cls.OPENAI_MODEL if cls.LLM_BACKEND == "openai" else cls.OLLAMA_MODEL
        return GenerationOptions(
            model=model,
            temperature=cls.GENERATION_TEMPERATURE,
            max_tokens=cls.GENERATION_MAX_TOKENS,
            timeout=cls.GENERATION_TIMEOUT_SECONDS,
        )
