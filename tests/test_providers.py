from pathlib import Path
from types import SimpleNamespace
import base64
import io
import json
import sys

import httpx
import pytest
from PIL import Image

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from elphub.errors import ConfigurationError, ProviderError
from elphub.providers import (
    AnthropicTextProvider,
    FirecrawlSearch,
    GeminiTextProvider,
    GroqTextProvider,
    HuggingFaceClient,
    WhisperTranscriber,
    get_text_provider,
)


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _openai_client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def _http(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


# ---------------------------------------------------------------------------
# SDK-backed text providers
# ---------------------------------------------------------------------------


def test_groq_complete_builds_messages():
    completions = FakeCompletions(content="  resposta  ")
    provider = GroqTextProvider(api_key="", client=_openai_client(completions))

    text = provider.complete("olá", system="be brief", json_mode=True, max_tokens=100)

    assert text == "resposta"
    assert completions.kwargs["model"] == "llama-3.3-70b-versatile"
    assert completions.kwargs["messages"][0] == {"role": "system", "content": "be brief"}
    assert completions.kwargs["response_format"] == {"type": "json_object"}
    assert completions.kwargs["max_tokens"] == 100


def test_groq_empty_reply_is_retryable_error():
    provider = GroqTextProvider(api_key="", client=_openai_client(FakeCompletions(content="")))
    with pytest.raises(ProviderError) as exc:
        provider.complete("olá")
    assert exc.value.retryable is True


def test_groq_status_error_is_mapped():
    import openai

    response = httpx.Response(429, request=httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions"))
    error = openai.RateLimitError("Rate limit exceeded", response=response, body=None)
    provider = GroqTextProvider(api_key="", client=_openai_client(FakeCompletions(error=error)))

    with pytest.raises(ProviderError) as exc:
        provider.complete("olá")

    assert exc.value.status == 429
    assert exc.value.rate_limited is True
    assert exc.value.provider == "groq"


def test_groq_requires_key():
    with pytest.raises(ConfigurationError):
        GroqTextProvider(api_key="")


def test_gemini_complete_passes_generation_config():
    calls = {}

    def generate_content(**kwargs):
        calls.update(kwargs)
        return SimpleNamespace(text="gerado")

    client = SimpleNamespace(models=SimpleNamespace(generate_content=generate_content))
    provider = GeminiTextProvider(api_key="k", client=client)

    assert provider.complete("p", model="gemini-1.5-pro", max_tokens=300, temperature=0.3) == "gerado"
    assert calls["model"] == "gemini-1.5-pro"
    assert calls["config"]["max_output_tokens"] == 300
    assert calls["config"]["temperature"] == 0.3


def test_gemini_api_error_is_mapped():
    from google.genai import errors as genai_errors

    def generate_content(**kwargs):
        raise genai_errors.ClientError(
            429, {"error": {"code": 429, "message": "quota", "status": "RESOURCE_EXHAUSTED"}},
        )

    client = SimpleNamespace(models=SimpleNamespace(generate_content=generate_content))
    provider = GeminiTextProvider(api_key="k", client=client)

    with pytest.raises(ProviderError) as exc:
        provider.complete("p")
    assert exc.value.status == 429
    assert exc.value.overloaded is True


def test_anthropic_joins_text_blocks_and_records_usage():
    def create(**kwargs):
        return SimpleNamespace(
            content=[SimpleNamespace(type="text", text="a"), SimpleNamespace(type="text", text="b")],
            usage=SimpleNamespace(input_tokens=10, output_tokens=20),
        )

    client = SimpleNamespace(messages=SimpleNamespace(create=create))
    provider = AnthropicTextProvider(api_key="k", client=client)

    assert provider.complete("p") == "ab"
    assert provider.last_usage == {"input_tokens": 10, "output_tokens": 20}


def test_get_text_provider():
    provider = get_text_provider("groq", api_key="k")
    assert isinstance(provider, GroqTextProvider)
    with pytest.raises(ValueError):
        get_text_provider("cohere", api_key="k")


# ---------------------------------------------------------------------------
# HuggingFace
# ---------------------------------------------------------------------------


def test_huggingface_classify_handles_both_shapes():
    replies = [
        {"labels": ["investimento", "busca informações"], "scores": [0.9, 0.1]},
        [{"label": "investimento", "score": 0.8}],
    ]

    def handler(request):
        assert request.headers["Authorization"] == "Bearer hf"
        assert json.loads(request.content)["parameters"]["multi_label"] is True
        return httpx.Response(200, json=replies.pop(0))

    hf = HuggingFaceClient("hf", http=_http(handler))
    assert hf.classify("texto", ["investimento", "busca informações"])[0] == {"label": "investimento", "score": 0.9}
    assert hf.classify("texto", ["investimento"]) == [{"label": "investimento", "score": 0.8}]


def test_huggingface_embed_unwraps_nested_list_and_caps_input():
    def handler(request):
        assert len(json.loads(request.content)["inputs"]) == 512
        return httpx.Response(200, json=[[0.1, 0.2, 0.3]])

    hf = HuggingFaceClient("hf", http=_http(handler))
    assert hf.embed("x" * 2000) == [0.1, 0.2, 0.3]


def test_huggingface_sentiment_unwraps_batch():
    scores = [{"label": "1 star", "score": 0.7}, {"label": "5 stars", "score": 0.3}]
    hf = HuggingFaceClient("hf", http=_http(lambda r: httpx.Response(200, json=[scores])))
    assert hf.sentiment("péssimo") == scores


def test_huggingface_error_status_raises():
    hf = HuggingFaceClient("hf", http=_http(lambda r: httpx.Response(503, text="Model is loading")))
    with pytest.raises(ProviderError) as exc:
        hf.embed("x")
    assert exc.value.status == 503
    assert exc.value.overloaded is True


def test_huggingface_image_round_trip():
    buf = io.BytesIO()
    Image.new("RGB", (8, 4), "green").save(buf, format="PNG")
    hf = HuggingFaceClient("hf", http=_http(lambda r: httpx.Response(200, content=buf.getvalue())))

    image = hf.generate_image("a recycling plant")

    assert image.size == (8, 4)
    assert base64.b64decode(hf.image_to_base64(image)).startswith(b"\x89PNG")


def test_huggingface_requires_key():
    with pytest.raises(ConfigurationError):
        HuggingFaceClient("")


# ---------------------------------------------------------------------------
# Whisper and Firecrawl
# ---------------------------------------------------------------------------


def test_whisper_fetches_audio_and_transcribes():
    seen = {}

    def create(**kwargs):
        seen.update(kwargs)
        return "olá mundo"

    client = SimpleNamespace(audio=SimpleNamespace(transcriptions=SimpleNamespace(create=create)))
    http = _http(lambda r: httpx.Response(200, content=b"ID3audio"))
    transcriber = WhisperTranscriber("k", http=http, client=client)

    assert transcriber.transcribe_url("https://files.example/a.mp3") == "olá mundo"
    assert seen["file"] == ("audio.mp3", b"ID3audio")
    assert seen["language"] == "pt"


def test_whisper_audio_fetch_failure():
    transcriber = WhisperTranscriber("k", http=_http(lambda r: httpx.Response(404)), client=object())
    with pytest.raises(ProviderError):
        transcriber.transcribe_url("https://files.example/missing.mp3")


def test_firecrawl_search_truncates_results():
    def handler(request):
        body = json.loads(request.content)
        assert body["limit"] == 3
        return httpx.Response(200, json={"data": [{"markdown": "a" * 500}, {"markdown": "b" * 10}, {}]})

    search = FirecrawlSearch("fc", http=_http(handler))
    assert search.search("pirólise de pneus") == "a" * 300 + "\n\n" + "b" * 10


def test_firecrawl_search_failures_return_empty():
    def explode(request):
        raise AssertionError("should not be called")

    assert FirecrawlSearch("", http=_http(explode)).search("q") == ""
    assert FirecrawlSearch("fc", http=_http(lambda r: httpx.Response(500))).search("q") == ""
