from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from elphub.errors import AllProvidersFailed, ProviderError
from elphub.keypool import KeyPool
from elphub.router import TextRouter, provider_order, retry_with_backoff

from fakes import FakeClock, ScriptedProvider


def _router(gemini=None, groq=None, anthropic=None, sleeps=None):
    gemini = gemini or {}
    return TextRouter(
        gemini_pool=KeyPool(list(gemini), clock=FakeClock()),
        groq=groq,
        anthropic=anthropic,
        gemini_factory=lambda key: gemini[key],
        sleep=(sleeps.append if sleeps is not None else lambda s: None),
    )


def test_provider_order():
    assert provider_order("auto") == ["gemini", "groq", "anthropic"]
    assert provider_order(None) == ["gemini", "groq", "anthropic"]
    assert provider_order("groq") == ["groq", "gemini", "anthropic"]
    assert provider_order("anthropic") == ["anthropic", "gemini", "groq"]


def test_retry_with_backoff_waits_exponentially():
    sleeps = []
    provider = ScriptedProvider(
        ProviderError("groq", "busy", status=429),
        ProviderError("groq", "busy", status=503),
        "done",
    )
    result = retry_with_backoff(lambda: provider.complete("p"), max_retries=2, base_delay=1.0, sleep=sleeps.append)
    assert result == "done"
    assert sleeps == [1.0, 2.0]


def test_retry_with_backoff_does_not_retry_client_errors():
    sleeps = []
    provider = ScriptedProvider(ProviderError("groq", "bad request", status=400), "never")
    with pytest.raises(ProviderError):
        retry_with_backoff(lambda: provider.complete("p"), sleep=sleeps.append)
    assert sleeps == []


def test_gemini_first_key_success():
    router = _router(gemini={"k1": ScriptedProvider("hello"), "k2": ScriptedProvider("other")})
    result = router.generate("prompt")
    assert result.content == "hello"
    assert result.provider == "gemini-1/2 (gratuito)"


def test_gemini_rate_limited_key_is_parked_and_next_key_used():
    sleeps = []
    k1 = ScriptedProvider(ProviderError("gemini", "quota", status=429))
    k2 = ScriptedProvider("from key two")
    router = _router(gemini={"k1": k1, "k2": k2}, sleeps=sleeps)

    result = router.generate("prompt")

    assert result.provider == "gemini-2/2 (gratuito)"
    assert router.gemini_pool.available == 1
    assert len(k1.calls) == 2
    assert sleeps == [1.0]


def test_gemini_single_key_retries_rate_limit_before_falling_back():
    sleeps = []
    k1 = ScriptedProvider(ProviderError("gemini", "quota", status=429), "after retry")
    groq = ScriptedProvider("groq text")
    router = _router(gemini={"k1": k1}, groq=groq, sleeps=sleeps)

    result = router.generate("prompt")

    assert result.content == "after retry"
    assert result.provider == "gemini-1/1 (gratuito)"
    assert sleeps == [1.0]
    assert router.gemini_pool.available == 1
    assert groq.calls == []


def test_gemini_rejected_key_is_not_retried():
    sleeps = []
    k1 = ScriptedProvider(ProviderError("gemini", "API key not valid", status=400), "never")
    router = _router(gemini={"k1": k1}, groq=ScriptedProvider("groq text"), sleeps=sleeps)

    assert router.generate("prompt").provider == "groq (gratuito)"
    assert sleeps == []
    assert router.gemini_pool.available == 0


def test_gemini_transport_error_retried_once_on_same_key():
    sleeps = []
    k1 = ScriptedProvider(ProviderError("gemini", "connection reset"), "recovered")
    router = _router(gemini={"k1": k1}, sleeps=sleeps)

    result = router.generate("prompt")

    assert result.content == "recovered"
    assert sleeps == [1.0]


def test_falls_back_to_groq_with_token_cap():
    groq = ScriptedProvider("groq text")
    router = _router(gemini={"k1": ScriptedProvider(ProviderError("gemini", "down", status=500))}, groq=groq)

    result = router.generate("prompt", max_tokens=65536)

    assert result.provider == "groq (gratuito)"
    assert groq.calls[0]["max_tokens"] == 32000
    assert groq.calls[0]["temperature"] == 0.7


def test_groq_overload_backs_off_before_retry():
    sleeps = []
    groq = ScriptedProvider(ProviderError("groq", "overloaded", status=503), "ok")
    router = _router(groq=groq, sleeps=sleeps)

    assert router.generate("prompt", preference="groq").content == "ok"
    assert sleeps == [1.5]


def test_anthropic_preference_caps_tokens():
    anthropic = ScriptedProvider("paid answer")
    groq = ScriptedProvider("free answer")
    router = _router(groq=groq, anthropic=anthropic)

    result = router.generate("prompt", preference="anthropic", max_tokens=8000)

    assert result.provider == "anthropic (pago)"
    assert anthropic.calls[0]["max_tokens"] == 4000
    assert groq.calls == []


def test_all_providers_failed():
    router = _router(
        gemini={"k1": ScriptedProvider(ProviderError("gemini", "no", status=500))},
        groq=ScriptedProvider(ProviderError("groq", "no", status=500)),
        anthropic=ScriptedProvider(ProviderError("anthropic", "no", status=500)),
    )
    with pytest.raises(AllProvidersFailed) as exc:
        router.generate("prompt")
    assert exc.value.status_code == 503
    assert exc.value.message == "All AI providers failed"


def test_no_providers_configured():
    router = TextRouter()
    assert router.available_providers == []
    with pytest.raises(AllProvidersFailed):
        router.generate("prompt")
