from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from elphub.analysis import (
    CLAUDE_TRUNCATION_MARKER,
    GEMINI_MAX_CHARS,
    GROQ_AGGRESSIVE_MAX_CHARS,
    CompetitorAnalyst,
    Deadline,
)
from elphub.errors import (
    AllProvidersFailed,
    ConfigurationError,
    DeadlineExceeded,
    HubError,
    ProviderError,
    ValidationError,
)
from elphub.keypool import KeyPool

from fakes import FakeClock, ScriptedProvider


def _analyst(gemini=None, groq=None, anthropic=None, clock=None):
    gemini = gemini or {}
    clock = clock or FakeClock()
    return CompetitorAnalyst(
        gemini_pool=KeyPool(list(gemini), clock=clock),
        groq=groq,
        anthropic=anthropic,
        gemini_factory=lambda key: gemini[key],
        clock=clock,
        sleep=lambda s: None,
    )


def test_deadline():
    clock = FakeClock()
    deadline = Deadline(90, clock=clock)
    clock.advance(30)
    deadline.check()
    assert deadline.elapsed_ms == 30000
    clock.advance(61)
    with pytest.raises(DeadlineExceeded) as exc:
        deadline.check()
    assert exc.value.status_code == 408


@pytest.mark.parametrize("text", [None, "", 42])
def test_main_text_is_required(text):
    analyst = _analyst(groq=ScriptedProvider("x"))
    with pytest.raises(ValidationError) as exc:
        analyst.analyze_with_gemini(text)
    assert exc.value.message == "texto_completo é obrigatório"


def test_gemini_analysis_requires_some_key():
    with pytest.raises(ConfigurationError):
        _analyst().analyze_with_gemini("site")


def test_gemini_analysis_success_and_truncation():
    k1 = ScriptedProvider("insights")
    result = _analyst(gemini={"k1": k1}).analyze_with_gemini("x" * (GEMINI_MAX_CHARS + 10), fast=True)

    assert result["insights"] == "insights"
    assert result["model"] == "gemini-2.0-flash"
    assert result["provider"] == "gemini-key-1"
    assert result["keys_status"] == "1/1 available"
    assert result["cost"] == "free"
    call = k1.calls[0]
    assert call["temperature"] == 0.5
    assert call["max_tokens"] == 2000
    assert call["prompt"].endswith("[... conteúdo truncado ...]")


def test_gemini_rate_limit_moves_to_next_key():
    k1 = ScriptedProvider(ProviderError("gemini", "quota", status=429))
    k2 = ScriptedProvider("ok")
    analyst = _analyst(gemini={"k1": k1, "k2": k2})

    result = analyst.analyze_with_gemini("site")

    assert result["provider"] == "gemini-key-2"
    assert result["keys_status"] == "1/2 available"
    assert len(k1.calls) == 1


def test_gemini_model_error_moves_to_next_model():
    k1 = ScriptedProvider(ProviderError("gemini", "model not found", status=404), "ok")
    result = _analyst(gemini={"k1": k1}).analyze_with_gemini("site")
    assert result["model"] == "gemini-1.5-flash"


def test_gemini_analysis_falls_back_to_groq():
    k1 = ScriptedProvider(ProviderError("gemini", "quota", status=429))
    groq = ScriptedProvider(ProviderError("groq", "gone", status=400), "never")
    analyst = _analyst(gemini={"k1": k1}, groq=ScriptedProvider("groq insights"))
    result = analyst.analyze_with_gemini("site")
    assert result["provider"] == "groq-fallback"
    assert result["model"] == "llama-3.3-70b-versatile"

    failing = _analyst(gemini={"k1": k1}, groq=groq)
    with pytest.raises(AllProvidersFailed) as exc:
        failing.analyze_with_gemini("site")
    assert exc.value.message == "Todos os provedores gratuitos falharam: gone"


def test_gemini_analysis_deadline():
    clock = FakeClock()

    class SlowProvider(ScriptedProvider):
        def complete(self, prompt, **kwargs):
            clock.advance(50)
            return super().complete(prompt, **kwargs)

    slow = SlowProvider(ProviderError("gemini", "busy", status=503))
    analyst = _analyst(gemini={"k1": slow}, clock=clock)
    with pytest.raises(DeadlineExceeded):
        analyst.analyze_with_gemini("site")
    assert len(slow.calls) == 2


def test_groq_analysis_parses_json():
    groq = ScriptedProvider('{"perfil_empresa": "recicladora"}')
    result = _analyst(groq=groq).analyze_with_groq("site", fast=True)

    assert result["insights_parsed"] == {"perfil_empresa": "recicladora"}
    assert result["model"] == "llama-3.1-8b-instant"
    assert result["cost"] == "FREE"
    assert groq.calls[0]["json_mode"] is True
    assert groq.calls[0]["system"]


def test_groq_analysis_non_json_reply():
    result = _analyst(groq=ScriptedProvider("texto livre")).analyze_with_groq("site")
    assert result["insights_parsed"] is None


def test_groq_analysis_retries_smaller_on_request_too_large():
    groq = ScriptedProvider(ProviderError("groq", "Request too large for model", status=413), "{}")
    result = _analyst(groq=groq).analyze_with_groq("y" * 60000)

    assert result["insights"] == "{}"
    assert len(groq.calls) == 2
    assert len(groq.calls[1]["prompt"]) < GROQ_AGGRESSIVE_MAX_CHARS + 3000


def test_groq_analysis_requires_key():
    with pytest.raises(ConfigurationError):
        _analyst().analyze_with_groq("site")


def test_claude_analysis():
    anthropic = ScriptedProvider("análise")
    result = _analyst(anthropic=anthropic).analyze_with_claude("z" * 150000)

    assert result["insights_claude"] == "análise"
    assert result["model"] == "claude-3.5-sonnet"
    assert result["tokens_used"] == {"input_tokens": 1, "output_tokens": 2}
    assert anthropic.calls[0]["model"] == "claude-sonnet-4-20250514"
    assert anthropic.calls[0]["prompt"].endswith(CLAUDE_TRUNCATION_MARKER)


def test_claude_rate_limit_surfaces_as_429():
    anthropic = ScriptedProvider(ProviderError("anthropic", "rate", status=429))
    with pytest.raises(HubError) as exc:
        _analyst(anthropic=anthropic).analyze_with_claude("site")
    assert exc.value.status_code == 429


def test_claude_timeout_is_deadline():
    anthropic = ScriptedProvider(ProviderError("anthropic", "Timeout", retryable=False))
    with pytest.raises(DeadlineExceeded):
        _analyst(anthropic=anthropic).analyze_with_claude("site", fast=True)


def test_complement_prefers_additional_text():
    k1 = ScriptedProvider("complemento")
    result = _analyst(gemini={"k1": k1}).complement_with_gemini(
        "análise anterior", prompt="ignored", additional_text="Empresa X | https://x.example",
    )

    assert result["complemento_gemini"] == "complemento"
    assert result["model"] == "gemini-1.5-pro"
    prompt = k1.calls[0]["prompt"]
    assert "Empresa X | https://x.example" in prompt
    assert "ignored" not in prompt
    assert prompt.endswith("Análise Anterior:\nanálise anterior")


def test_complement_custom_prompt_and_groq_fallback():
    k1 = ScriptedProvider(ProviderError("gemini", "bad", status=400))
    groq = ScriptedProvider(ProviderError("groq", "rate", status=429), "via groq")
    result = _analyst(gemini={"k1": k1}, groq=groq).complement_with_gemini("análise", prompt="Meu prompt", fast=True)

    assert result["provider"] == "groq"
    assert result["model"] == "mixtral-8x7b-32768"
    assert k1.calls[0]["prompt"].startswith("Meu prompt")
    assert k1.calls[0]["max_tokens"] == 2500


def test_complement_requires_insights():
    with pytest.raises(ValidationError) as exc:
        _analyst(groq=ScriptedProvider("x")).complement_with_gemini(None)
    assert exc.value.message == "insights_claude é obrigatório"


def test_groq_analysis_parses_fenced_json():
    groq = ScriptedProvider('```json\n{"ameacas": ["preço"]}\n```')
    result = _analyst(groq=groq).analyze_with_groq("site")
    assert result["insights_parsed"] == {"ameacas": ["preço"]}
