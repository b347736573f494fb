"""Language model clients used for subtitle translation."""

import logging
from dataclasses import dataclass

import httpx
import ollama
import openai
from openai import OpenAI

from .config import Config
from .errors import ConfigurationError, ModelCallError

logger = logging.getLogger(__name__)

DEFAULT_MODELS = {
    "gemini": "gemini-2.0-flash",
    "openai": "gpt-4o",
    "deepseek": "deepseek-chat",
    "openrouter": "openai/gpt-4o-mini",
    "groq": "llama-3.3-70b-versatile",
    "ollama": "llama3.1:8b",
}

PROVIDERS = tuple(DEFAULT_MODELS)


@dataclass(frozen=True)
class GenerationSettings:
    """Sampling configuration favoring deterministic output."""

    temperature: float = 0.2
    top_p: float = 0.95
    top_k: int = 40
    max_output_tokens: int = 8192


class ModelClient:
    """Request/response contract for the external language model."""

    model: str = ""

    def generate(self, prompt: str) -> str:
        """Send a prompt and return the model's text response.

        Raises:
            ModelCallError: On network, auth or malformed response failures
        """
        raise NotImplementedError


class OpenAICompatibleClient(ModelClient):
    """Chat completions against any OpenAI-compatible endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        settings: GenerationSettings | None = None,
        client: OpenAI | None = None,
    ):
        self.model = model
        self.settings = settings or GenerationSettings()
        self._client = client or OpenAI(api_key=api_key, base_url=base_url)

    def generate(self, prompt: str) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.settings.temperature,
                top_p=self.settings.top_p,
                max_tokens=self.settings.max_output_tokens,
            )
        except openai.OpenAIError as e:
            raise ModelCallError(f"{self.model} request failed: {e}") from e

        if not response.choices:
            raise ModelCallError(f"Invalid response from {self.model}: no choices")
        content = response.choices[0].message.content
        if not content:
            raise ModelCallError(f"Invalid response from {self.model}: empty content")
        return content


class OllamaClient(ModelClient):
    """Chat with a local Ollama server."""

    def __init__(
        self,
        model: str = DEFAULT_MODELS["ollama"],
        host: str | None = None,
        settings: GenerationSettings | None = None,
        client: ollama.Client | None = None,
    ):
        self.model = model
        self.settings = settings or GenerationSettings()
        self._client = client or ollama.Client(host=host)

    def generate(self, prompt: str) -> str:
        try:
            response = self._client.chat(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                options={
                    "temperature": self.settings.temperature,
                    "top_p": self.settings.top_p,
                    "top_k": self.settings.top_k,
                    "num_predict": self.settings.max_output_tokens,
                },
            )
        except (ollama.ResponseError, httpx.HTTPError, ConnectionError) as e:
            raise ModelCallError(f"Ollama {self.model} request failed: {e}") from e

        try:
            content = response["message"]["content"]
        except (KeyError, TypeError) as e:
            raise ModelCallError(f"Invalid response from Ollama {self.model}") from e
        if not content:
            raise ModelCallError(f"Invalid response from Ollama {self.model}: empty content")
        return content


def create_client(
    provider: str,
    config: Config,
    model: str | None = None,
    settings: GenerationSettings | None = None,
) -> ModelClient:
    """Build the model client for a provider name."""
    model = model or config.model or DEFAULT_MODELS.get(provider)
    logger.debug("Creating %s client for model %s", provider, model)

    if provider == "ollama":
        return OllamaClient(model=model, host=config.ollama_host, settings=settings)

    endpoints = {
        "gemini": (config.gemini_api_key, config.gemini_base_url, "GEMINI_API_KEY"),
        "openai": (config.openai_api_key, None, "OPENAI_API_KEY"),
        "deepseek": (config.deepseek_api_key, config.deepseek_base_url, "DEEPSEEK_API_KEY"),
        "openrouter": (config.openrouter_api_key, config.openrouter_base_url, "OPENROUTER_API_KEY"),
        "groq": (config.groq_api_key, config.groq_base_url, "GROQ_API_KEY"),
    }
    if provider not in endpoints:
        raise ValueError(f"Unknown translation provider: {provider}")

    api_key, base_url, env_name = endpoints[provider]
    if not api_key:
        raise ConfigurationError(f"{env_name} environment variable required for {provider}")
    return OpenAICompatibleClient(
        api_key=api_key, model=model, base_url=base_url, settings=settings
    )
