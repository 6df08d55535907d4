"""AI provider interface and implementations (Gemini, Groq, Anthropic, HuggingFace)."""

from __future__ import annotations

import base64
import io
import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx
from PIL import Image

from elphub.errors import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)

GROQ_BASE_URL = "https://api.groq.com/openai/v1"
HF_INFERENCE_URL = "https://router.huggingface.co/hf-inference/models"
FIRECRAWL_SEARCH_URL = "https://api.firecrawl.dev/v1/search"

HF_IMAGE_MODEL = "black-forest-labs/FLUX.1-schnell"
HF_CLASSIFY_MODEL = "facebook/bart-large-mnli"
HF_EMBED_MODEL = "sentence-transformers/all-MiniLM-L6-v2"
HF_SENTIMENT_MODEL = "nlptown/bert-base-multilingual-uncased-sentiment"

WHISPER_MODEL = "whisper-large-v3-turbo"


class TextProvider(ABC):
    """Base interface for chat/text completion providers."""

    provider_name: str = "base"
    default_model: str = ""

    @abstractmethod
    def complete(
        self,
        prompt: str,
        *,
        model: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.7,
        system: str | None = None,
        json_mode: bool = False,
    ) -> str:
        ...

    def _empty(self, model: str) -> ProviderError:
        return ProviderError(self.provider_name, f"Empty response from {model}", retryable=True)


class GeminiTextProvider(TextProvider):
    """Google Gemini through the google-genai SDK. One instance per API key."""

    provider_name = "gemini"
    default_model = "gemini-2.0-flash"

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        timeout: float | None = None,
        client: Any = None,
    ) -> None:
        if not api_key and client is None:
            raise ConfigurationError("Gemini API key is required. Set GEMINI_API_KEY.")
        self.api_key = api_key
        self.model = model or self.default_model
        self.timeout = timeout
        self._client = client

    def _get_client(self):
        if self._client is None:
            from google import genai

            http_options = {"timeout": int(self.timeout * 1000)} if self.timeout else None
            self._client = genai.Client(api_key=self.api_key, http_options=http_options)
        return self._client

    def complete(
        self,
        prompt: str,
        *,
        model: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.7,
        system: str | None = None,
        json_mode: bool = False,
    ) -> str:
        from google.genai import errors as genai_errors

        model = model or self.model
        config: dict[str, Any] = {"temperature": temperature, "max_output_tokens": max_tokens}
        if system:
            config["system_instruction"] = system
        if json_mode:
            config["response_mime_type"] = "application/json"

        try:
            response = self._get_client().models.generate_content(
                model=model, contents=prompt, config=config,
            )
        except genai_errors.APIError as e:
            raise ProviderError(self.provider_name, e.message or str(e), status=e.code) from e
        except httpx.TimeoutException as e:
            raise ProviderError(self.provider_name, "Timeout", retryable=False) from e
        except httpx.HTTPError as e:
            raise ProviderError(self.provider_name, str(e)) from e

        text = (response.text or "").strip()
        if not text:
            raise self._empty(model)
        return text


class GroqTextProvider(TextProvider):
    """Groq's OpenAI-compatible endpoint through the openai SDK."""

    provider_name = "groq"
    default_model = "llama-3.3-70b-versatile"

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        timeout: float | None = None,
        client: Any = None,
    ) -> None:
        if not api_key and client is None:
            raise ConfigurationError("Groq API key is required. Set GROQ_API_KEY.")
        self.api_key = api_key
        self.model = model or self.default_model
        self.timeout = timeout
        self._client = client

    def _get_client(self):
        if self._client is None:
            from openai import OpenAI

            self._client = OpenAI(
                api_key=self.api_key,
                base_url=GROQ_BASE_URL,
                timeout=self.timeout or 120.0,
                max_retries=0,
            )
        return self._client

    def complete(
        self,
        prompt: str,
        *,
        model: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.7,
        system: str | None = None,
        json_mode: bool = False,
    ) -> str:
        import openai

        model = model or self.model
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        kwargs: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = self._get_client().chat.completions.create(**kwargs)
        except openai.APITimeoutError as e:
            raise ProviderError(self.provider_name, "Timeout", retryable=False) from e
        except openai.APIStatusError as e:
            raise ProviderError(self.provider_name, e.message, status=e.status_code) from e
        except openai.APIConnectionError as e:
            raise ProviderError(self.provider_name, str(e)) from e

        choices = response.choices or []
        text = (choices[0].message.content or "").strip() if choices else ""
        if not text:
            raise self._empty(model)
        return text


class AnthropicTextProvider(TextProvider):
    """Anthropic Messages API through the anthropic SDK."""

    provider_name = "anthropic"
    default_model = "claude-3-haiku-20240307"

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        timeout: float | None = None,
        client: Any = None,
    ) -> None:
        if not api_key and client is None:
            raise ConfigurationError("Anthropic API key is required. Set ANTHROPIC_API_KEY.")
        self.api_key = api_key
        self.model = model or self.default_model
        self.timeout = timeout
        self._client = client
        self.last_usage: dict[str, int] = {}

    def _get_client(self):
        if self._client is None:
            import anthropic

            self._client = anthropic.Anthropic(
                api_key=self.api_key, timeout=self.timeout or 120.0, max_retries=0,
            )
        return self._client

    def complete(
        self,
        prompt: str,
        *,
        model: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.7,
        system: str | None = None,
        json_mode: bool = False,
    ) -> str:
        import anthropic

        model = model or self.model
        kwargs: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system

        try:
            response = self._get_client().messages.create(**kwargs)
        except anthropic.APITimeoutError as e:
            raise ProviderError(self.provider_name, "Timeout", retryable=False) from e
        except anthropic.APIStatusError as e:
            raise ProviderError(self.provider_name, e.message, status=e.status_code) from e
        except anthropic.APIConnectionError as e:
            raise ProviderError(self.provider_name, str(e)) from e

        usage = getattr(response, "usage", None)
        if usage is not None:
            self.last_usage = {
                "input_tokens": getattr(usage, "input_tokens", 0),
                "output_tokens": getattr(usage, "output_tokens", 0),
            }

        text = "".join(
            getattr(block, "text", "") for block in response.content
            if getattr(block, "type", "text") == "text"
        ).strip()
        if not text:
            raise self._empty(model)
        return text


class HuggingFaceClient:
    """HuggingFace hosted inference: image, classification, embeddings, sentiment."""

    provider_name = "huggingface"

    def __init__(self, api_key: str, timeout: float = 120.0, http: httpx.Client | None = None) -> None:
        if not api_key:
            raise ConfigurationError("Hugging Face API key not configured")
        self.api_key = api_key
        self._http = http or httpx.Client(timeout=timeout)

    def _post(self, model: str, payload: dict[str, Any]) -> httpx.Response:
        try:
            resp = self._http.post(
                f"{HF_INFERENCE_URL}/{model}",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=payload,
            )
        except httpx.TimeoutException as e:
            raise ProviderError(self.provider_name, "Timeout", retryable=False) from e
        except httpx.HTTPError as e:
            raise ProviderError(self.provider_name, str(e)) from e

        if resp.status_code >= 400:
            logger.error("HuggingFace %s error %d: %s", model, resp.status_code, resp.text[:200])
            raise ProviderError(self.provider_name, resp.text[:200] or model, status=resp.status_code)
        return resp

    def generate_image(self, prompt: str) -> Image.Image:
        logger.info("Generating image via HuggingFace model=%s", HF_IMAGE_MODEL)
        resp = self._post(HF_IMAGE_MODEL, {"inputs": prompt})
        try:
            return Image.open(io.BytesIO(resp.content)).convert("RGB")
        except OSError as e:
            raise ProviderError(self.provider_name, "Response was not an image", retryable=False) from e

    @staticmethod
    def image_to_base64(image: Image.Image, fmt: str = "PNG") -> str:
        buf = io.BytesIO()
        image.save(buf, format=fmt)
        return base64.b64encode(buf.getvalue()).decode("ascii")

    def classify(self, text: str, labels: list[str]) -> list[dict[str, Any]]:
        resp = self._post(HF_CLASSIFY_MODEL, {
            "inputs": text[:2000],
            "parameters": {"candidate_labels": labels, "multi_label": True},
        })
        data = resp.json()
        # Legacy pipeline shape is {"labels": [...], "scores": [...]};
        # the router returns [{"label": ..., "score": ...}].
        if isinstance(data, dict):
            scores = data.get("scores") or []
            return [
                {"label": label, "score": scores[i] if i < len(scores) else 0.0}
                for i, label in enumerate(data.get("labels") or [])
            ]
        return [item for item in data if isinstance(item, dict) and "label" in item]

    def embed(self, text: str) -> list[float]:
        resp = self._post(HF_EMBED_MODEL, {"inputs": text[:512]})
        data = resp.json()
        while isinstance(data, list) and data and isinstance(data[0], list):
            data = data[0]
        return [float(x) for x in data]

    def sentiment(self, text: str) -> list[dict[str, Any]]:
        resp = self._post(HF_SENTIMENT_MODEL, {"inputs": text[:512]})
        data = resp.json()
        if isinstance(data, list) and data and isinstance(data[0], list):
            return data[0]
        return data if isinstance(data, list) else []


class WhisperTranscriber:
    """Audio transcription with Groq-hosted Whisper through the openai SDK."""

    provider_name = "groq-whisper"

    def __init__(
        self,
        api_key: str,
        language: str = "pt",
        http: httpx.Client | None = None,
        client: Any = None,
    ) -> None:
        if not api_key and client is None:
            raise ConfigurationError("Groq API key not configured for transcription")
        self.api_key = api_key
        self.language = language
        self._http = http or httpx.Client(timeout=120, follow_redirects=True)
        self._client = client

    def _get_client(self):
        if self._client is None:
            from openai import OpenAI

            self._client = OpenAI(api_key=self.api_key, base_url=GROQ_BASE_URL, max_retries=0)
        return self._client

    def transcribe_url(self, audio_url: str) -> str:
        import openai

        try:
            audio = self._http.get(audio_url)
            audio.raise_for_status()
        except httpx.HTTPError as e:
            raise ProviderError(self.provider_name, "Failed to fetch audio file", retryable=False) from e

        logger.info("Transcribing %d bytes with %s", len(audio.content), WHISPER_MODEL)
        try:
            result = self._get_client().audio.transcriptions.create(
                file=("audio.mp3", audio.content),
                model=WHISPER_MODEL,
                language=self.language,
                response_format="text",
            )
        except openai.APIStatusError as e:
            raise ProviderError(self.provider_name, e.message, status=e.status_code) from e
        except openai.APIConnectionError as e:
            raise ProviderError(self.provider_name, str(e)) from e

        return result if isinstance(result, str) else getattr(result, "text", "")


class FirecrawlSearch:
    """Web search used to ground generated documents. Failures yield ``""``."""

    def __init__(self, api_key: str, limit: int = 3, http: httpx.Client | None = None) -> None:
        self.api_key = api_key
        self.limit = limit
        self._http = http or httpx.Client(timeout=30)

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    def search(self, query: str) -> str:
        if not self.available:
            return ""
        try:
            resp = self._http.post(
                FIRECRAWL_SEARCH_URL,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={"query": query, "limit": self.limit, "scrapeOptions": {"formats": ["markdown"]}},
            )
            if resp.status_code >= 400:
                logger.warning("Firecrawl search failed: HTTP %d", resp.status_code)
                return ""
            results = resp.json().get("data") or []
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Firecrawl search failed: %s", e)
            return ""

        snippets = [(r.get("markdown") or "")[:300] for r in results if isinstance(r, dict)]
        return "\n\n".join(s for s in snippets if s)


def get_text_provider(name: str, **kwargs) -> TextProvider:
    """Factory function to get a text provider by name."""
    providers: dict[str, type[TextProvider]] = {
        "gemini": GeminiTextProvider,
        "groq": GroqTextProvider,
        "anthropic": AnthropicTextProvider,
    }
    if name not in providers:
        raise ValueError(f"Unknown provider: {name}. Available: {list(providers.keys())}")
    return providers[name](**kwargs)
