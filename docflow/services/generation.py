"""Text generation through an upstream model with a local fallback.

The provider is chosen once, when the application is built, from
``GenerationConfig``. Any failure talking to the provider (transport error,
timeout, non-2xx status, unusable payload) degrades to the local
rule-based synthesizer, so callers always get text back. The single
exception is an upstream 401 when ``surface_auth_errors`` is set.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from docflow.config import Settings
from docflow.core.exceptions import UpstreamAuthError
from docflow.services.synthesizer import synthesize

logger = logging.getLogger(__name__)

LOCAL_FALLBACK_SOURCE = "local_fallback"

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
HUGGINGFACE_BASE_URL = "https://api-inference.huggingface.co/models"

PROMPT_PREFIXES = {
    "paraphrase": "Paraphrase the following text in a formal tone suitable for official college documents: ",
    "summarize": "Summarize the following text in a concise and formal manner: ",
    "formal": "Rewrite the following text in a formal tone suitable for official college documents: ",
    "expand": "Expand on the following text with more details while maintaining a formal tone: ",
}


class Provider(str, Enum):
    GEMINI = "gemini"
    HUGGINGFACE = "huggingface"
    OLLAMA = "ollama"
    NONE = "none"


class ProviderResponseError(Exception):
    """The provider answered 2xx but without usable text."""


@dataclass(frozen=True)
class GenerationConfig:
    """Everything needed to reach one generation backend."""

    provider: Provider = Provider.NONE
    api_key: str = ""
    model: str = ""
    base_url: str = ""
    timeout_ms: int = 15000
    surface_auth_errors: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "GenerationConfig":
        """Resolve the provider from settings.

        An explicit ``GENERATION_PROVIDER`` wins; otherwise the first provider
        with credentials configured (Gemini, Hugging Face, Ollama) is used.
        """
        if settings.GENERATION_PROVIDER:
            provider = Provider(settings.GENERATION_PROVIDER)
        elif settings.GEMINI_API_KEY:
            provider = Provider.GEMINI
        elif settings.HUGGINGFACE_API_KEY:
            provider = Provider.HUGGINGFACE
        elif settings.OLLAMA_API_URL:
            provider = Provider.OLLAMA
        else:
            provider = Provider.NONE

        common = {
            "timeout_ms": settings.GENERATION_TIMEOUT_MS,
            "surface_auth_errors": settings.GENERATION_SURFACE_AUTH_ERRORS,
        }
        if provider == Provider.GEMINI:
            return cls(provider, settings.GEMINI_API_KEY, settings.GEMINI_MODEL, GEMINI_BASE_URL, **common)
        if provider == Provider.HUGGINGFACE:
            return cls(
                provider,
                settings.HUGGINGFACE_API_KEY,
                settings.HUGGINGFACE_MODEL,
                HUGGINGFACE_BASE_URL,
                **common,
            )
        if provider == Provider.OLLAMA:
            return cls(provider, "", settings.OLLAMA_MODEL, settings.OLLAMA_API_URL, **common)
        return cls(Provider.NONE, **common)


@dataclass(frozen=True)
class GenerationResult:
    text: str
    source: str


def format_prompt(prompt: str, generation_type: str) -> str:
    """Wrap the user's prompt in the instruction for the requested mode."""
    return PROMPT_PREFIXES.get(generation_type, "") + prompt


class GenerationService:
    """Generate document text via the configured provider."""

    def __init__(self, config: GenerationConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout_ms / 1000),
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    def available_models(self) -> list[dict[str, str]]:
        """Describe the configured backends, local synthesizer included."""
        models = []
        if self.config.provider == Provider.GEMINI:
            models.append({"id": "gemini", "name": self.config.model, "type": "api", "provider": "Google Gemini"})
        elif self.config.provider == Provider.HUGGINGFACE:
            models.append({"id": "huggingface", "name": self.config.model, "type": "api", "provider": "Hugging Face"})
        elif self.config.provider == Provider.OLLAMA:
            models.append({"id": "ollama", "name": self.config.model, "type": "local", "provider": "Ollama"})
        models.append({"id": LOCAL_FALLBACK_SOURCE, "name": "rule-based", "type": "local", "provider": "Docflow"})
        return models

    async def generate(
        self,
        prompt: str,
        generation_type: str = "generate",
        max_length: int = 500,
        temperature: float = 0.7,
    ) -> GenerationResult:
        """Generate text, falling back to the local synthesizer on any provider failure."""
        if self.config.provider == Provider.NONE:
            return self._fallback(prompt, generation_type)

        instruction = format_prompt(prompt, generation_type)
        try:
            text = await self._call_provider(instruction, max_length, temperature)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 401 and self.config.surface_auth_errors:
                raise UpstreamAuthError(f"{self.config.provider.value} rejected the configured credentials")
            logger.warning(
                "%s returned HTTP %s, using local synthesizer",
                self.config.provider.value,
                e.response.status_code,
            )
            return self._fallback(prompt, generation_type)
        except (httpx.HTTPError, ProviderResponseError, ValueError) as e:
            logger.warning("%s request failed (%s), using local synthesizer", self.config.provider.value, e)
            return self._fallback(prompt, generation_type)

        return GenerationResult(text=text, source=self.config.provider.value)

    def _fallback(self, prompt: str, generation_type: str) -> GenerationResult:
        return GenerationResult(text=synthesize(prompt, generation_type), source=LOCAL_FALLBACK_SOURCE)

    async def _call_provider(self, instruction: str, max_length: int, temperature: float) -> str:
        if self.config.provider == Provider.GEMINI:
            response = await self._client.post(
                f"{self.config.base_url}/models/{self.config.model}:generateContent",
                params={"key": self.config.api_key},
                json={
                    "contents": [{"parts": [{"text": instruction}]}],
                    "generationConfig": {"temperature": temperature, "maxOutputTokens": max_length},
                },
            )
            response.raise_for_status()
            return _gemini_text(response.json())

        if self.config.provider == Provider.HUGGINGFACE:
            response = await self._client.post(
                f"{self.config.base_url}/{self.config.model}",
                headers={"Authorization": f"Bearer {self.config.api_key}"},
                json={
                    "inputs": instruction,
                    "parameters": {
                        "max_new_tokens": max_length,
                        "temperature": temperature,
                        "return_full_text": False,
                    },
                },
            )
            response.raise_for_status()
            return _huggingface_text(response.json())

        response = await self._client.post(
            self.config.base_url,
            json={
                "model": self.config.model,
                "prompt": instruction,
                "stream": False,
                "options": {"temperature": temperature, "num_predict": max_length},
            },
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ProviderResponseError("unexpected Ollama response shape")
        return _require_text(payload.get("response"))


def _require_text(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ProviderResponseError("empty generation")
    return value.strip()


def _gemini_text(payload: dict[str, Any]) -> str:
    try:
        parts = payload["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        raise ProviderResponseError("no candidates in Gemini response")
    if not isinstance(parts, list):
        raise ProviderResponseError("unexpected Gemini response shape")
    return _require_text(
        "".join(
            part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)
        )
    )


def _huggingface_text(payload: Any) -> str:
    if isinstance(payload, list) and payload and isinstance(payload[0], dict):
        return _require_text(payload[0].get("generated_text"))
    raise ProviderResponseError("unexpected Hugging Face response shape")
