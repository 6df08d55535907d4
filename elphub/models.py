"""Data models shared across the hub."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class ProviderName(str, Enum):
    GEMINI = "gemini"
    GROQ = "groq"
    ANTHROPIC = "anthropic"
    HUGGINGFACE = "huggingface"


class Action(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    TRANSCRIBE = "transcribe"
    SUMMARIZE_NEWS = "summarize_news"
    TRANSLATE = "translate"
    TRANSLATE_DOCUMENT = "translate_document"
    CLASSIFY = "classify"
    EMBEDDINGS = "embeddings"
    SENTIMENT = "sentiment"
    CORRECT_GRAMMAR = "correct_grammar"
    GENERATE_SUMMARY = "generate_summary"
    GENERATE_DOCUMENT = "generate_document"
    CORRECT_DOCUMENT = "correct_document"


class DocumentType(str, Enum):
    PROPOSAL = "proposal"
    REPORT = "report"
    CONTRACT = "contract"
    LOI = "loi"
    MOU = "mou"
    ANALYSIS = "analysis"
    CUSTOM = "custom"


class ReplyType(str, Enum):
    CONTACT = "contact"
    MARKETPLACE = "marketplace"
    DOCUMENT_RECEIVED = "document_received"
    DOCUMENT_SIGNED = "document_signed"
    CUSTOM = "custom"
    FORM_CONFIRMATION = "form_confirmation"


# Providers that cost nothing on their free tier.
FREE_PROVIDERS = frozenset({"gemini", "groq", "huggingface"})

SUPPORTED_LANGUAGES: tuple[str, ...] = ("pt", "en", "es", "it", "zh")


@dataclass
class TextResult:
    content: str
    provider: str

    def to_dict(self) -> dict[str, Any]:
        return {"content": self.content, "provider": self.provider}


@dataclass
class LabelScore:
    label: str
    score: float

    @classmethod
    def from_dict(cls, item: dict[str, Any]) -> LabelScore:
        return cls(label=str(item.get("label", "")), score=float(item.get("score") or 0.0))


@dataclass
class SearchHit:
    id: str
    content: str
    similarity: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Lead:
    id: str
    type: str
    message: str | None = None

    @property
    def table(self) -> str:
        return "marketplace_registrations" if self.type == "marketplace" else "contacts"


@dataclass
class LeadAssessment:
    id: str
    type: str
    urgency_score: int
    suggested_priority: str
    suggested_level: str
    top_classification: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "urgencyScore": self.urgency_score,
            "suggestedPriority": self.suggested_priority,
            "suggestedLevel": self.suggested_level,
            "topClassification": self.top_classification,
        }


@dataclass
class Signer:
    name: str
    email: str
    order: int = 0
    status: str = "pending"

    @classmethod
    def from_dict(cls, item: dict[str, Any]) -> Signer:
        return cls(
            name=item.get("name", ""),
            email=item.get("email", ""),
            order=int(item.get("order") or 0),
            status=item.get("status", "pending"),
        )


@dataclass
class SignatureSettings:
    sender_name: str = ""
    sender_position: str = ""
    sender_phone: str = ""
    company_name: str = "ELP Alliance S/A"
    company_slogan: str = "Transformando resíduos em recursos"
    company_website: str = "www.elpgreen.com"
    company_email: str = "info@elpgreen.com"
    company_phone: str = "+39 350 102 1359"
    company_locations: str = "São Paulo, Brasil | Milão, Itália"

    @classmethod
    def from_row(cls, row: dict[str, Any] | None) -> SignatureSettings:
        """Overlay non-empty database values on top of the defaults."""
        settings = cls()
        if not row:
            return settings
        for name in settings.__dataclass_fields__:
            value = row.get(name)
            if value:
                setattr(settings, name, value)
        return settings


@dataclass
class CRUDResponse:
    data: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class EmailAttachment:
    name: str
    url: str


@dataclass
class ProviderCall:
    action: str
    provider: str
    elapsed_s: float


@dataclass
class ScrapeResult:
    url: str
    markdown: str = ""
    success: bool = False
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if self.error is None:
            del data["error"]
        return data
