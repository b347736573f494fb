"""Configuration management via environment variables."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float | None) -> float | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass
class Config:
    """Application configuration loaded from environment."""

    gemini_api_key: str | None = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    openai_api_key: str | None = None
    deepseek_api_key: str | None = None
    deepseek_base_url: str = "https://api.deepseek.com"
    openrouter_api_key: str | None = None
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    groq_api_key: str | None = None
    groq_base_url: str = "https://api.groq.com/openai/v1"
    ollama_host: str | None = None
    opensubtitles_api_key: str | None = None

    provider: str = "gemini"
    model: str | None = None
    batch_size: int = 10
    cache_ttl: int = 24 * 60 * 60
    translation_timeout: float | None = None
    max_workers: int = 4
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        load_dotenv()
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY"),
            gemini_base_url=os.getenv(
                "GEMINI_BASE_URL",
                "https://generativelanguage.googleapis.com/v1beta/openai/",
            ),
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            deepseek_api_key=os.getenv("DEEPSEEK_API_KEY"),
            deepseek_base_url=os.getenv(
                "DEEPSEEK_BASE_URL", "https://api.deepseek.com"
            ),
            openrouter_api_key=os.getenv("OPENROUTER_API_KEY"),
            openrouter_base_url=os.getenv(
                "OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1"
            ),
            groq_api_key=os.getenv("GROQ_API_KEY"),
            groq_base_url=os.getenv(
                "GROQ_BASE_URL", "https://api.groq.com/openai/v1"
            ),
            ollama_host=os.getenv("OLLAMA_HOST"),
            opensubtitles_api_key=os.getenv("OPENSUBTITLES_API_KEY"),
            provider=os.getenv("SUBBRIDGE_PROVIDER", "gemini"),
            model=os.getenv("SUBBRIDGE_MODEL") or None,
            batch_size=_env_int("SUBBRIDGE_BATCH_SIZE", 10),
            cache_ttl=_env_int("SUBBRIDGE_CACHE_TTL", 24 * 60 * 60),
            translation_timeout=_env_float("SUBBRIDGE_TRANSLATION_TIMEOUT", None),
            max_workers=_env_int("SUBBRIDGE_MAX_WORKERS", 4),
            log_level=os.getenv("SUBBRIDGE_LOG_LEVEL", "INFO").upper(),
        )

    def has_gemini(self) -> bool:
        """Check if Gemini API key is configured."""
        return bool(self.gemini_api_key)

    def has_openai(self) -> bool:
        """Check if OpenAI API key is configured."""
        return bool(self.openai_api_key)

    def has_deepseek(self) -> bool:
        """Check if DeepSeek API key is configured."""
        return bool(self.deepseek_api_key)

    def has_openrouter(self) -> bool:
        """Check if OpenRouter API key is configured."""
        return bool(self.openrouter_api_key)

    def has_groq(self) -> bool:
        """Check if Groq API key is configured."""
        return bool(self.groq_api_key)

    def has_opensubtitles(self) -> bool:
        return bool(self.opensubtitles_api_key)
