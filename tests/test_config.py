from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from elphub.config import GEMINI_KEY_ENV_NAMES, Settings, gemini_key_pool, resolve_api_key


def _clear_gemini_env(monkeypatch):
    for name in GEMINI_KEY_ENV_NAMES + ("GOOGLE_API_KEY",):
        monkeypatch.delenv(name, raising=False)


def test_resolve_api_key_prefers_explicit(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "env-value")
    assert resolve_api_key(" explicit ", "GROQ_API_KEY") == "explicit"


def test_resolve_api_key_falls_back_to_first_non_empty_env(monkeypatch):
    monkeypatch.setenv("HUGGINGFACE_API_KEY", "   ")
    monkeypatch.setenv("HF_TOKEN", "hf-value")
    assert resolve_api_key(None, "HUGGINGFACE_API_KEY", "HF_TOKEN") == "hf-value"


def test_resolve_api_key_returns_empty_when_nothing_set(monkeypatch):
    monkeypatch.delenv("RESEND_API_KEY", raising=False)
    assert resolve_api_key("", "RESEND_API_KEY") == ""


def test_gemini_key_pool_keeps_order_and_drops_duplicates(monkeypatch):
    _clear_gemini_env(monkeypatch)
    monkeypatch.setenv("GEMINI_API_KEY", "k1")
    monkeypatch.setenv("GEMINI_API_KEY_3", "k3")
    monkeypatch.setenv("GEMINI_API_KEY_4", "k1")
    monkeypatch.setenv("GEMINI_API_KEY_7", "k7")
    assert gemini_key_pool() == ["k1", "k3", "k7"]


def test_gemini_key_pool_uses_google_api_key_when_pool_empty(monkeypatch):
    _clear_gemini_env(monkeypatch)
    monkeypatch.setenv("GOOGLE_API_KEY", "google-value")
    assert gemini_key_pool() == ["google-value"]


def test_settings_from_env(monkeypatch):
    _clear_gemini_env(monkeypatch)
    monkeypatch.setenv("GEMINI_API_KEY", "g1")
    monkeypatch.setenv("GROQ_API_KEY", "groq")
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.setenv("URL_SUPABASE", "https://db.example.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service")
    monkeypatch.setenv("SITE_URL", "https://elp.example/")
    monkeypatch.delenv("EMAIL_FROM", raising=False)
    monkeypatch.setenv("ADMIN_EMAIL", "ops@elpgreen.com")
    monkeypatch.setenv("ELPHUB_REQUEST_TIMEOUT", "45")

    settings = Settings.from_env()

    assert settings.gemini_keys == ["g1"]
    assert settings.supabase_url == "https://db.example.co"
    assert settings.supabase_configured is True
    assert settings.site_url == "https://elp.example"
    assert settings.email_from == "ELP Green Technology <info@elpgreen.com>"
    assert settings.request_timeout_s == 45.0
    assert settings.admin_email == "ops@elpgreen.com"
    status = settings.key_status()
    assert status["gemini_keys"] == 1
    assert status["groq"] is True
    assert status["anthropic"] is False
    assert "g1" not in str(status)
