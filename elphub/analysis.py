"""Competitor intelligence: long-context analysis of scraped competitor sites.

Each analysis runs under a request deadline. The deadline is checked between
provider calls, and each provider call is bounded by the SDK timeout.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from elphub.config import Settings
from elphub.errors import (
    AllProvidersFailed,
    ConfigurationError,
    DeadlineExceeded,
    HubError,
    ProviderError,
    ValidationError,
)
from elphub.keypool import KeyPool
from elphub.postprocess import parse_json_object, truncate
from elphub.prompts.templates import (
    COMPETITOR_ANALYSIS,
    COMPLEMENT_ANALYSIS,
    COMPLEMENT_WITH_ADDITIONAL_TEXT,
    GROQ_ANALYST_SYSTEM,
    STRUCTURED_COMPETITOR_ANALYSIS,
)
from elphub.providers import (
    AnthropicTextProvider,
    GeminiTextProvider,
    GroqTextProvider,
    TextProvider,
)

logger = logging.getLogger(__name__)

GEMINI_MAX_CHARS = 190_000
GROQ_MAX_CHARS = 100_000
GROQ_AGGRESSIVE_MAX_CHARS = 25_000
CLAUDE_MAX_CHARS = 140_000
COMPLEMENT_MAX_CHARS = 190_000

ANALYSIS_DEADLINE_S = 90.0
GROQ_DEADLINE_S = 60.0

GEMINI_ANALYSIS_MODELS = ("gemini-2.0-flash", "gemini-1.5-flash", "gemini-1.5-pro")
GROQ_FALLBACK_MODELS = ("llama-3.3-70b-versatile", "llama-3.1-70b-versatile", "mixtral-8x7b-32768")
GROQ_ANALYSIS_MODELS = {
    "fast": ("llama-3.1-8b-instant", "gemma2-9b-it"),
    "full": ("llama-3.3-70b-versatile", "mixtral-8x7b-32768"),
}
CLAUDE_MODELS = {
    "fast": ("claude-3-5-haiku-20241022", "claude-3-haiku"),
    "full": ("claude-sonnet-4-20250514", "claude-3.5-sonnet"),
}
COMPLEMENT_GEMINI_MODELS = {
    "fast": ("gemini-2.0-flash", "gemini-1.5-flash", "gemini-1.5-flash-8b"),
    "full": ("gemini-1.5-pro", "gemini-2.0-flash", "gemini-1.5-flash"),
}
COMPLEMENT_GROQ_MODELS = ("llama-3.3-70b-versatile", "mixtral-8x7b-32768")

CLAUDE_TRUNCATION_MARKER = "\n\n[... conteúdo truncado por limite de tokens ...]"
TIMEOUT_MESSAGE = "Timeout: A análise demorou muito."


class Deadline:
    """Wall-clock budget for one request."""

    def __init__(self, budget_s: float, message: str = TIMEOUT_MESSAGE,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self.budget_s = budget_s
        self.message = message
        self._clock = clock
        self.started = clock()

    @property
    def elapsed_ms(self) -> int:
        return int((self._clock() - self.started) * 1000)

    def check(self) -> None:
        if self._clock() - self.started > self.budget_s:
            raise DeadlineExceeded(self.message)


def _require_text(value: Any, field: str) -> str:
    if not value or not isinstance(value, str):
        raise ValidationError(f"{field} é obrigatório")
    return value


def _is_timeout(error: ProviderError) -> bool:
    return error.status is None and error.message == "Timeout"


class CompetitorAnalyst:
    """Runs the analisar-com-* and complementar-com-gemini flows."""

    def __init__(
        self,
        gemini_pool: KeyPool | None = None,
        groq: TextProvider | None = None,
        anthropic: TextProvider | None = None,
        gemini_factory: Callable[[str], TextProvider] | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.gemini_pool = gemini_pool or KeyPool([])
        self.groq = groq
        self.anthropic = anthropic
        self._gemini_factory = gemini_factory or (lambda key: GeminiTextProvider(api_key=key))
        self._gemini_providers: dict[str, TextProvider] = {}
        self._clock = clock
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings, gemini_pool: KeyPool | None = None) -> CompetitorAnalyst:
        timeout = min(settings.request_timeout_s, ANALYSIS_DEADLINE_S)
        return cls(
            gemini_pool=gemini_pool or KeyPool(settings.gemini_keys),
            groq=GroqTextProvider(settings.groq_api_key, timeout=timeout) if settings.groq_api_key else None,
            anthropic=(
                AnthropicTextProvider(settings.anthropic_api_key, timeout=timeout)
                if settings.anthropic_api_key else None
            ),
            gemini_factory=lambda key: GeminiTextProvider(api_key=key, timeout=timeout),
        )

    def _gemini(self, key: str) -> TextProvider:
        provider = self._gemini_providers.get(key)
        if provider is None:
            provider = self._gemini_factory(key)
            self._gemini_providers[key] = provider
        return provider

    # ------------------------------------------------------------------
    # analisar-com-gemini
    # ------------------------------------------------------------------

    def analyze_with_gemini(self, text: Any, prompt: str | None = None, fast: bool = False) -> dict[str, Any]:
        text = _require_text(text, "texto_completo")
        if not len(self.gemini_pool) and self.groq is None:
            raise ConfigurationError("Configure pelo menos uma GEMINI_API_KEY ou GROQ_API_KEY")

        truncated = truncate(text, GEMINI_MAX_CHARS)
        content = f"{prompt or COMPETITOR_ANALYSIS}\n\nConteúdo dos sites:\n{truncated}"
        temperature = 0.5 if fast else 0.3
        max_tokens = 2000 if fast else 4000
        deadline = Deadline(ANALYSIS_DEADLINE_S, clock=self._clock)
        logger.info(
            "Analyzing with %d Gemini keys + Groq fallback. Text: %d chars, fast=%s",
            len(self.gemini_pool), len(truncated), fast,
        )

        last_error = ""
        pool = self.gemini_pool
        for _ in range(len(pool)):
            slot = pool.acquire()
            if slot is None:
                break
            provider = self._gemini(slot.key)
            for model in GEMINI_ANALYSIS_MODELS:
                deadline.check()
                logger.info("Trying Gemini key %s with %s", slot.label, model)
                try:
                    insights = provider.complete(content, model=model, max_tokens=max_tokens, temperature=temperature)
                except ProviderError as e:
                    if _is_timeout(e):
                        raise DeadlineExceeded(TIMEOUT_MESSAGE) from e
                    last_error = e.message
                    if e.rate_limited:
                        pool.mark_failed(slot.index)
                        break
                    if e.retryable:
                        self._sleep(0.3)
                    continue
                logger.info("Completed with Gemini key %s (%s) in %dms", slot.label, model, deadline.elapsed_ms)
                return {
                    "insights": insights,
                    "model": model,
                    "provider": f"gemini-key-{slot.index + 1}",
                    "keys_status": pool.status(),
                    "elapsed_ms": deadline.elapsed_ms,
                    "cost": "free",
                }
        if len(pool):
            logger.warning("All %d Gemini keys exhausted. Last error: %s", len(pool), last_error)

        if self.groq is not None:
            for model in GROQ_FALLBACK_MODELS:
                deadline.check()
                logger.info("Fallback: trying Groq %s", model)
                try:
                    insights = self.groq.complete(content, model=model, max_tokens=max_tokens, temperature=temperature)
                except ProviderError as e:
                    if _is_timeout(e):
                        raise DeadlineExceeded(TIMEOUT_MESSAGE) from e
                    last_error = e.message
                    if not e.retryable:
                        break
                    self._sleep(0.5)
                    continue
                return {
                    "insights": insights,
                    "model": model,
                    "provider": "groq-fallback",
                    "elapsed_ms": deadline.elapsed_ms,
                    "cost": "free",
                }

        logger.error("All providers failed. Last error: %s", last_error)
        raise AllProvidersFailed(f"Todos os provedores gratuitos falharam: {last_error}")

    # ------------------------------------------------------------------
    # analisar-com-groq
    # ------------------------------------------------------------------

    def analyze_with_groq(self, text: Any, prompt: str | None = None, fast: bool = False) -> dict[str, Any]:
        text = _require_text(text, "texto_completo")
        if self.groq is None:
            raise ConfigurationError(
                "Configure GROQ_API_KEY no Supabase Secrets. Obtenha grátis em console.groq.com"
            )

        models = GROQ_ANALYSIS_MODELS["fast" if fast else "full"]
        deadline = Deadline(GROQ_DEADLINE_S, clock=self._clock)
        final_prompt = prompt or STRUCTURED_COMPETITOR_ANALYSIS
        max_chars = GROQ_MAX_CHARS
        last_error = ""
        logger.info("Groq analysis: input %d chars, models %s", len(text), ", ".join(models))

        for attempt in range(2):
            content = f"{final_prompt}\n{truncate(text, max_chars)}"
            logger.info("Groq attempt %d, content size %d chars", attempt + 1, len(content))
            too_large = False
            for model in models:
                deadline.check()
                try:
                    insights = self.groq.complete(
                        content,
                        model=model,
                        max_tokens=2000 if fast else 4000,
                        temperature=0.3,
                        system=GROQ_ANALYST_SYSTEM,
                        json_mode=True,
                    )
                except ProviderError as e:
                    if _is_timeout(e):
                        raise DeadlineExceeded(TIMEOUT_MESSAGE) from e
                    if e.request_too_large:
                        last_error = "REQUEST_TOO_LARGE"
                        too_large = True
                        break
                    last_error = e.message
                    if not e.retryable:
                        break
                    self._sleep(0.3)
                    continue

                parsed = parse_json_object(insights)
                if parsed is None:
                    logger.warning("Groq response is not valid JSON, returning as text")
                return {
                    "insights": insights,
                    "insights_parsed": parsed,
                    "model": model,
                    "provider": "groq",
                    "elapsed_ms": deadline.elapsed_ms,
                    "cost": "FREE",
                }

            if too_large and max_chars > GROQ_AGGRESSIVE_MAX_CHARS:
                max_chars = GROQ_AGGRESSIVE_MAX_CHARS
                logger.info("Request too large, retrying with %d chars", max_chars)
                continue
            break

        logger.error("Groq analysis failed. Last error: %s", last_error)
        raise AllProvidersFailed(f"Análise Groq falhou: {last_error}. Verifique sua chave em console.groq.com")

    # ------------------------------------------------------------------
    # analisar-com-claude
    # ------------------------------------------------------------------

    def analyze_with_claude(self, text: Any, prompt: str | None = None, fast: bool = False) -> dict[str, Any]:
        text = _require_text(text, "texto_completo")
        if self.anthropic is None:
            raise ConfigurationError("Configure a ANTHROPIC_API_KEY nas configurações do Supabase Secrets")

        truncated = truncate(text, CLAUDE_MAX_CHARS, CLAUDE_TRUNCATION_MARKER)
        content = f"{prompt or COMPETITOR_ANALYSIS}\n\nConteúdo dos sites:\n{truncated}"
        model, model_label = CLAUDE_MODELS["fast" if fast else "full"]
        deadline = Deadline(ANALYSIS_DEADLINE_S, clock=self._clock)
        logger.info("Analyzing with Claude. Text: %d chars, fast=%s", len(truncated), fast)

        try:
            insights = self.anthropic.complete(
                content,
                model=model,
                max_tokens=2000 if fast else 4000,
                temperature=0.5 if fast else 0.3,
            )
        except ProviderError as e:
            if _is_timeout(e):
                raise DeadlineExceeded("Timeout: A análise demorou muito. Tente com menos URLs.") from e
            if e.rate_limited:
                raise HubError("Rate limit atingido. Tente novamente em alguns segundos.", 429) from e
            raise HubError(e.message or f"Claude API error: {e.status}", e.status or 502) from e

        logger.info("Claude analysis completed in %dms, %d chars", deadline.elapsed_ms, len(insights))
        return {
            "insights_claude": insights,
            "model": model_label,
            "tokens_used": getattr(self.anthropic, "last_usage", None),
            "elapsed_ms": deadline.elapsed_ms,
        }

    # ------------------------------------------------------------------
    # complementar-com-gemini
    # ------------------------------------------------------------------

    def complement_with_gemini(
        self,
        insights: Any,
        prompt: str | None = None,
        fast: bool = False,
        additional_text: str | None = None,
    ) -> dict[str, Any]:
        insights = _require_text(insights, "insights_claude")
        if not len(self.gemini_pool) and self.groq is None:
            raise ConfigurationError("Configure GEMINI_API_KEY ou GROQ_API_KEY")

        if additional_text and additional_text.strip():
            logger.info("Processing additional text (%d chars)", len(additional_text))
            final_prompt = COMPLEMENT_WITH_ADDITIONAL_TEXT.safe_substitute(additional_text=additional_text)
        else:
            final_prompt = prompt or COMPLEMENT_ANALYSIS
        content = f"{final_prompt}\n\nAnálise Anterior:\n{truncate(insights, COMPLEMENT_MAX_CHARS)}"

        temperature = 0.6 if fast else 0.3
        max_tokens = 2500 if fast else 6000
        deadline = Deadline(ANALYSIS_DEADLINE_S, "Timeout: O complemento demorou muito.", clock=self._clock)
        last_error = ""

        slot = self.gemini_pool.acquire()
        if slot is not None:
            provider = self._gemini(slot.key)
            for model in COMPLEMENT_GEMINI_MODELS["fast" if fast else "full"]:
                deadline.check()
                logger.info("Trying Gemini model %s (key %s)", model, slot.label)
                try:
                    text = provider.complete(content, model=model, max_tokens=max_tokens, temperature=temperature)
                except ProviderError as e:
                    if _is_timeout(e):
                        raise DeadlineExceeded(deadline.message) from e
                    last_error = e.message
                    if e.rate_limited:
                        self.gemini_pool.mark_failed(slot.index)
                    if not e.retryable:
                        break
                    self._sleep(0.5)
                    continue
                return {
                    "complemento_gemini": text,
                    "model": model,
                    "provider": "gemini",
                    "elapsed_ms": deadline.elapsed_ms,
                }
            logger.warning("All Gemini models failed. Last error: %s", last_error)

        if self.groq is not None:
            logger.info("Falling back to Groq")
            for model in COMPLEMENT_GROQ_MODELS:
                deadline.check()
                try:
                    text = self.groq.complete(content, model=model, max_tokens=max_tokens, temperature=temperature)
                except ProviderError as e:
                    if _is_timeout(e):
                        raise DeadlineExceeded(deadline.message) from e
                    logger.warning("Groq %s failed: %s", model, e)
                    last_error = e.message
                    continue
                return {
                    "complemento_gemini": text,
                    "model": model,
                    "provider": "groq",
                    "elapsed_ms": deadline.elapsed_ms,
                }

        logger.error("All providers failed. Last error: %s", last_error)
        raise AllProvidersFailed(
            f"Todos os provedores falharam: {last_error}. Tente novamente em alguns minutos."
        )
