"""Multi-provider text generation with key rotation, retries and fallback."""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

from elphub.config import Settings
from elphub.errors import AllProvidersFailed, ProviderError
from elphub.keypool import KeyPool
from elphub.models import ProviderName, TextResult
from elphub.providers import (
    AnthropicTextProvider,
    GeminiTextProvider,
    GroqTextProvider,
    TextProvider,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ORDER: tuple[str, ...] = (
    ProviderName.GEMINI.value,
    ProviderName.GROQ.value,
    ProviderName.ANTHROPIC.value,
)
ANTHROPIC_MAX_TOKENS = 4000
GROQ_MAX_TOKENS = 32000
# Statuses that mean the key itself is unusable right now.
KEY_REJECTED_STATUSES = frozenset({400, 401, 403})


def retry_with_backoff(
    fn: Callable[[], T],
    max_retries: int = 2,
    base_delay: float = 1.0,
    retry_on: Callable[[ProviderError], bool] = lambda e: e.overloaded,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``fn``, retrying ProviderErrors accepted by ``retry_on``.

    Waits ``base_delay * 2**attempt`` between attempts; the last error is
    re-raised once retries are exhausted.
    """
    for attempt in range(max_retries + 1):
        try:
            return fn()
        except ProviderError as e:
            if attempt == max_retries or not retry_on(e):
                raise
            delay = base_delay * (2 ** attempt)
            logger.info("Retrying %s in %.1fs (attempt %d/%d)", e.provider, delay, attempt + 1, max_retries)
            sleep(delay)
    raise AssertionError("unreachable")


def provider_order(preference: str | None) -> list[str]:
    if not preference or preference == "auto":
        return list(DEFAULT_ORDER)
    order = [preference]
    order.extend(p for p in DEFAULT_ORDER if p != preference)
    return order


class TextRouter:
    """Routes a prompt through Gemini (rotating keys), Groq and Anthropic."""

    def __init__(
        self,
        gemini_pool: KeyPool | None = None,
        groq: TextProvider | None = None,
        anthropic: TextProvider | None = None,
        gemini_factory: Callable[[str], TextProvider] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        temperature: float = 0.7,
    ) -> None:
        self.gemini_pool = gemini_pool or KeyPool([])
        self.groq = groq
        self.anthropic = anthropic
        self._gemini_factory = gemini_factory or (lambda key: GeminiTextProvider(api_key=key))
        self._gemini_providers: dict[str, TextProvider] = {}
        self._sleep = sleep
        self.temperature = temperature

    @classmethod
    def from_settings(cls, settings: Settings, gemini_pool: KeyPool | None = None) -> TextRouter:
        timeout = settings.request_timeout_s
        return cls(
            gemini_pool=gemini_pool or KeyPool(settings.gemini_keys),
            groq=GroqTextProvider(settings.groq_api_key, timeout=timeout) if settings.groq_api_key else None,
            anthropic=(
                AnthropicTextProvider(settings.anthropic_api_key, timeout=timeout)
                if settings.anthropic_api_key else None
            ),
            gemini_factory=lambda key: GeminiTextProvider(api_key=key, timeout=timeout),
        )

    def gemini_for(self, key: str) -> TextProvider:
        provider = self._gemini_providers.get(key)
        if provider is None:
            provider = self._gemini_factory(key)
            self._gemini_providers[key] = provider
        return provider

    @property
    def available_providers(self) -> list[str]:
        names = []
        if len(self.gemini_pool):
            names.append("gemini")
        if self.groq is not None:
            names.append("groq")
        if self.anthropic is not None:
            names.append("anthropic")
        return names

    def generate(self, prompt: str, preference: str | None = "auto", max_tokens: int = 2048) -> TextResult:
        for name in provider_order(preference):
            try:
                if name == "gemini":
                    result = self._try_gemini(prompt, max_tokens)
                elif name == "groq":
                    result = self._try_groq(prompt, max_tokens)
                elif name == "anthropic":
                    result = self._try_anthropic(prompt, max_tokens)
                else:
                    logger.warning("Unknown provider preference %r ignored", name)
                    continue
            except ProviderError as e:
                logger.warning("Provider %s failed: %s", name, e)
                continue
            if result is not None:
                return result

        raise AllProvidersFailed("All AI providers failed")

    def _try_gemini(self, prompt: str, max_tokens: int) -> TextResult | None:
        pool = self.gemini_pool
        if not len(pool):
            return None

        for _ in range(len(pool)):
            slot = pool.acquire()
            if slot is None:
                break
            provider = self.gemini_for(slot.key)
            logger.info("Trying Gemini key %s (%s)", slot.label, pool.status())
            try:
                content = retry_with_backoff(
                    lambda: provider.complete(prompt, max_tokens=max_tokens, temperature=self.temperature),
                    max_retries=1,
                    base_delay=1.0,
                    retry_on=lambda e: e.retryable,
                    sleep=self._sleep,
                )
            except ProviderError as e:
                if e.overloaded or e.status in KEY_REJECTED_STATUSES:
                    pool.mark_failed(slot.index)
                logger.warning("Gemini key %s failed: %s", slot.label, e)
                continue
            logger.info("Gemini key %s succeeded", slot.label)
            return TextResult(content, f"gemini-{slot.label} (gratuito)")

        logger.warning("All %d Gemini keys exhausted, falling back", len(pool))
        return None

    def _try_groq(self, prompt: str, max_tokens: int) -> TextResult | None:
        if self.groq is None:
            return None
        groq = self.groq
        content = retry_with_backoff(
            lambda: groq.complete(prompt, max_tokens=min(max_tokens, GROQ_MAX_TOKENS), temperature=self.temperature),
            max_retries=2,
            base_delay=1.5,
            sleep=self._sleep,
        )
        return TextResult(content, "groq (gratuito)")

    def _try_anthropic(self, prompt: str, max_tokens: int) -> TextResult | None:
        if self.anthropic is None:
            return None
        anthropic = self.anthropic
        content = retry_with_backoff(
            lambda: anthropic.complete(
                prompt, max_tokens=min(max_tokens, ANTHROPIC_MAX_TOKENS), temperature=self.temperature,
            ),
            max_retries=2,
            base_delay=2.0,
            sleep=self._sleep,
        )
        return TextResult(content, "anthropic (pago)")
