"""Environment-driven configuration for the hub."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

GEMINI_KEY_ENV_NAMES: tuple[str, ...] = (
    "GEMINI_API_KEY",
    "GEMINI_API_KEY_2",
    "GEMINI_API_KEY_3",
    "GEMINI_API_KEY_4",
    "GEMINI_API_KEY_5",
    "GEMINI_API_KEY_6",
    "GEMINI_API_KEY_7",
)

DEFAULT_EMAIL_FROM = "ELP Green Technology <info@elpgreen.com>"
DEFAULT_SITE_URL = "https://www.elpgreen.com"
DEFAULT_ADMIN_EMAIL = "info@elpgreen.com"


def resolve_api_key(explicit: str | None, *env_names: str) -> str:
    """Return the explicit key if given, else the first non-empty env var."""
    if explicit and explicit.strip():
        return explicit.strip()
    for name in env_names:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return ""


def gemini_key_pool() -> list[str]:
    """Collect the Gemini keys configured for rotation, in order."""
    keys: list[str] = []
    for name in GEMINI_KEY_ENV_NAMES:
        value = os.environ.get(name, "").strip()
        if value and value not in keys:
            keys.append(value)
    if not keys:
        fallback = os.environ.get("GOOGLE_API_KEY", "").strip()
        if fallback:
            keys.append(fallback)
    return keys


@dataclass
class Settings:
    gemini_keys: list[str] = field(default_factory=list)
    groq_api_key: str = ""
    anthropic_api_key: str = ""
    huggingface_api_key: str = ""
    firecrawl_api_key: str = ""
    resend_api_key: str = ""
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    email_from: str = DEFAULT_EMAIL_FROM
    site_url: str = DEFAULT_SITE_URL
    admin_email: str = DEFAULT_ADMIN_EMAIL
    request_timeout_s: float = 120.0

    @classmethod
    def from_env(cls) -> Settings:
        timeout_raw = os.environ.get("ELPHUB_REQUEST_TIMEOUT", "").strip()
        return cls(
            gemini_keys=gemini_key_pool(),
            groq_api_key=resolve_api_key(None, "GROQ_API_KEY"),
            anthropic_api_key=resolve_api_key(None, "ANTHROPIC_API_KEY"),
            huggingface_api_key=resolve_api_key(None, "HUGGINGFACE_API_KEY", "HF_TOKEN"),
            firecrawl_api_key=resolve_api_key(None, "FIRECRAWL_API_KEY"),
            resend_api_key=resolve_api_key(None, "RESEND_API_KEY"),
            supabase_url=resolve_api_key(None, "SUPABASE_URL", "URL_SUPABASE"),
            supabase_service_role_key=resolve_api_key(None, "SUPABASE_SERVICE_ROLE_KEY"),
            email_from=resolve_api_key(None, "EMAIL_FROM") or DEFAULT_EMAIL_FROM,
            site_url=(resolve_api_key(None, "SITE_URL") or DEFAULT_SITE_URL).rstrip("/"),
            admin_email=resolve_api_key(None, "ADMIN_EMAIL") or DEFAULT_ADMIN_EMAIL,
            request_timeout_s=float(timeout_raw) if timeout_raw else 120.0,
        )

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)

    def key_status(self) -> dict[str, bool | int]:
        """Which providers are usable. Never exposes the keys themselves."""
        return {
            "gemini_keys": len(self.gemini_keys),
            "groq": bool(self.groq_api_key),
            "anthropic": bool(self.anthropic_api_key),
            "huggingface": bool(self.huggingface_api_key),
            "firecrawl": bool(self.firecrawl_api_key),
            "resend": bool(self.resend_api_key),
            "supabase": self.supabase_configured,
        }
