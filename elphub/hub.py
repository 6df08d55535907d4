"""AI hub: one entry point for every text, image and NLP action the admin panel uses."""

from __future__ import annotations

import logging
import math
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable

from elphub.analytics import UsageAnalytics
from elphub.config import Settings
from elphub.errors import ConfigurationError, HubError, ProviderError, ValidationError
from elphub.legal import DOCUMENT_LANGUAGES, framework_for, type_addon
from elphub.models import Action
from elphub.postprocess import clamp_expansion, clean_translation, extract_json_array
from elphub.prompts.templates import (
    CLASSIFY_FALLBACK,
    COMPANY_PROFILE,
    CORRECT_DOCUMENT,
    CORRECT_GRAMMAR,
    EXECUTIVE_SUMMARY,
    EXPAND_DOCUMENT,
    GENERATE_DOCUMENT,
    NEWS_SUMMARY,
    TRANSLATE_DOCUMENT,
    TRANSLATE_FORMATTING_RULES,
    TRANSLATE_TEXT,
    WEB_RESEARCH_BLOCK,
)
from elphub.providers import FirecrawlSearch, HuggingFaceClient, WhisperTranscriber
from elphub.router import TextRouter

logger = logging.getLogger(__name__)

COST_INFO = "HuggingFace e Groq são gratuitos. Anthropic é cobrado apenas como último recurso."

TRANSLATE_LANGUAGES: dict[str, str] = {
    "pt": "português brasileiro",
    "en": "inglês",
    "es": "espanhol",
    "it": "italiano",
    "zh": "chinês simplificado",
}

DOCUMENT_TRANSLATION_LANGUAGES: dict[str, str] = {
    "pt": "Português Brasileiro",
    "en": "English",
    "es": "Español",
    "it": "Italiano",
    "zh": "繁體中文 (Traditional Chinese)",
}

DOCUMENT_TRANSLATION_INSTRUCTIONS: dict[str, str] = {
    "pt": "Use Brazilian Portuguese with formal business tone.",
    "en": "Use formal American English.",
    "es": "Use formal Latin American Spanish.",
    "it": "Use formal Italian.",
    "zh": (
        "Use Traditional Chinese (繁體中文). Write ALL text using Chinese characters. "
        "Do NOT use pinyin or romanization. Maintain formal business tone."
    ),
}

DOCUMENT_TEMPLATES: dict[str, str] = {
    "proposal": "proposta comercial profissional com termos, condições, valores e escopo",
    "report": "relatório executivo com análise, dados, conclusões e recomendações",
    "contract": "contrato comercial com cláusulas jurídicas, obrigações e direitos das partes",
    "loi": "Letter of Intent (Carta de Intenções) formal para parcerias comerciais",
    "mou": "Memorandum of Understanding com termos de cooperação e responsabilidades",
    "analysis": "análise técnica detalhada com metodologia, dados e insights",
    "custom": "documento personalizado conforme especificação",
}

GENERATION_LANGUAGES: dict[str, str] = {
    "pt": "português brasileiro formal e jurídico",
    "en": "formal business English",
    "es": "español formal empresarial",
    "it": "italiano formale commerciale",
    "zh": "正式商务中文",
}


def _require(payload: dict[str, Any], *names: str) -> None:
    missing = [n for n in names if not payload.get(n)]
    if missing:
        raise ValidationError(f"Missing {' or '.join(names)}")


def _positive_int(payload: dict[str, Any], name: str, default: int) -> int:
    """Read an optional integer field; numeric strings are accepted."""
    value = payload.get(name)
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a positive integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a positive integer") from None
    if number <= 0:
        raise ValidationError(f"{name} must be a positive integer")
    return number


class AIHub:
    """Dispatches hub actions to the text router and the HuggingFace/Groq helpers."""

    def __init__(
        self,
        router: TextRouter,
        huggingface: HuggingFaceClient | None = None,
        transcriber: WhisperTranscriber | None = None,
        web_search: FirecrawlSearch | None = None,
        analytics: UsageAnalytics | None = None,
    ) -> None:
        self.router = router
        self.huggingface = huggingface
        self.transcriber = transcriber
        self.web_search = web_search
        self.analytics = analytics or UsageAnalytics()

    @classmethod
    def from_settings(cls, settings: Settings, router: TextRouter | None = None) -> AIHub:
        return cls(
            router=router or TextRouter.from_settings(settings),
            huggingface=HuggingFaceClient(settings.huggingface_api_key) if settings.huggingface_api_key else None,
            transcriber=WhisperTranscriber(settings.groq_api_key) if settings.groq_api_key else None,
            web_search=FirecrawlSearch(settings.firecrawl_api_key),
        )

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(self, payload: dict[str, Any]) -> dict[str, Any]:
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")
        action = payload.get("action")
        logger.info("AI hub request: %s", action)

        handlers: dict[str, Callable[[dict[str, Any]], dict[str, Any]]] = {
            Action.TEXT.value: self._handle_text,
            Action.IMAGE.value: self._handle_image,
            Action.TRANSCRIBE.value: self._handle_transcribe,
            Action.SUMMARIZE_NEWS.value: self._handle_summarize_news,
            Action.TRANSLATE.value: self._handle_translate,
            Action.TRANSLATE_DOCUMENT.value: self._handle_translate_document,
            Action.CLASSIFY.value: self._handle_classify,
            Action.EMBEDDINGS.value: self._handle_embeddings,
            Action.SENTIMENT.value: self._handle_sentiment,
            Action.CORRECT_GRAMMAR.value: self._handle_correct_grammar,
            Action.GENERATE_SUMMARY.value: self._handle_generate_summary,
            Action.GENERATE_DOCUMENT.value: self._handle_generate_document,
            Action.CORRECT_DOCUMENT.value: self._handle_correct_document,
        }
        handler = handlers.get(action)
        if handler is None:
            raise ValidationError(f"Unknown action: {action}")

        start = time.time()
        try:
            result = handler(payload)
        except HubError as e:
            self.analytics.record_error(action, str(e))
            raise
        provider = result.get("provider") or ", ".join(result.get("providers", []))
        self.analytics.record_call(action, provider, time.time() - start)
        return {"success": True, **result, "cost_info": COST_INFO}

    def _handle_text(self, p: dict[str, Any]) -> dict[str, Any]:
        _require(p, "prompt")
        max_tokens = p.get("max_tokens") or 2048
        if not isinstance(max_tokens, int) or max_tokens <= 0:
            raise ValidationError("max_tokens must be a positive integer")
        return self.generate_text(p["prompt"], p.get("model_preference") or "auto", max_tokens)

    def _handle_image(self, p: dict[str, Any]) -> dict[str, Any]:
        _require(p, "image_prompt")
        return self.generate_image(p["image_prompt"])

    def _handle_transcribe(self, p: dict[str, Any]) -> dict[str, Any]:
        _require(p, "audio_url")
        return self.transcribe(p["audio_url"])

    def _handle_summarize_news(self, p: dict[str, Any]) -> dict[str, Any]:
        _require(p, "news_topic")
        return self.summarize_news(p["news_topic"])

    def _handle_translate(self, p: dict[str, Any]) -> dict[str, Any]:
        _require(p, "text_to_translate", "target_language")
        return self.translate(p["text_to_translate"], p["target_language"])

    def _handle_translate_document(self, p: dict[str, Any]) -> dict[str, Any]:
        _require(p, "text", "targetLanguage")
        return self.translate_document(
            p["text"],
            p["targetLanguage"],
            p.get("sourceLanguage") or "auto",
            p.get("preserveFormatting") is not False,
        )

    def _handle_classify(self, p: dict[str, Any]) -> dict[str, Any]:
        _require(p, "text_to_classify", "labels")
        if not isinstance(p["labels"], list):
            raise ValidationError("labels must be a list")
        return self.classify(p["text_to_classify"], [str(label) for label in p["labels"]])

    def _handle_embeddings(self, p: dict[str, Any]) -> dict[str, Any]:
        _require(p, "text_for_embeddings")
        return self.embeddings(p["text_for_embeddings"])

    def _handle_sentiment(self, p: dict[str, Any]) -> dict[str, Any]:
        _require(p, "text_for_sentiment")
        return self.sentiment(p["text_for_sentiment"])

    def _handle_correct_grammar(self, p: dict[str, Any]) -> dict[str, Any]:
        _require(p, "text")
        return self.correct_grammar(p["text"], p.get("language") or "pt-BR", p.get("style") or "formal_business")

    def _handle_generate_summary(self, p: dict[str, Any]) -> dict[str, Any]:
        _require(p, "text")
        max_lines = _positive_int(p, "maxLines", 8)
        return self.generate_summary(p["text"], max_lines, p.get("language") or "pt-BR")

    def _handle_generate_document(self, p: dict[str, Any]) -> dict[str, Any]:
        _require(p, "documentDescription")
        return self.generate_document(
            p["documentDescription"],
            p.get("documentType") or "report",
            p.get("targetLanguage") or p.get("language") or "pt",
            p.get("companyContext") or "",
            p.get("includeWebResearch") is not False,
        )

    def _handle_correct_document(self, p: dict[str, Any]) -> dict[str, Any]:
        _require(p, "text")
        return self.correct_document(
            p["text"],
            p.get("documentType") or "contract",
            p.get("country") or "brazil",
            p.get("language") or "pt",
            p.get("countryLaws") or "",
            p.get("documentTypeName") or "Documento",
            _positive_int(p, "minimumCharacters", 50000),
        )

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _require_huggingface(self) -> HuggingFaceClient:
        if self.huggingface is None:
            raise ConfigurationError("Hugging Face API key not configured")
        return self.huggingface

    def generate_text(self, prompt: str, preference: str = "auto", max_tokens: int = 2048) -> dict[str, Any]:
        return self.router.generate(prompt, preference, max_tokens).to_dict()

    def generate_image(self, prompt: str) -> dict[str, Any]:
        hf = self._require_huggingface()
        image = hf.generate_image(prompt)
        logger.info("Image generated: %dx%d", image.width, image.height)
        return {"image_base64": hf.image_to_base64(image), "provider": "huggingface-flux (gratuito)"}

    def transcribe(self, audio_url: str) -> dict[str, Any]:
        if self.transcriber is None:
            raise ConfigurationError("Groq API key not configured for transcription")
        text = self.transcriber.transcribe_url(audio_url)
        return {"text": text, "provider": "groq-whisper (gratuito)"}

    def summarize_news(self, topic: str) -> dict[str, Any]:
        result = self.router.generate(NEWS_SUMMARY.safe_substitute(topic=topic), "auto", 3000)
        return {"summary": result.content, "provider": result.provider}

    def translate(self, text: str, target_language: str) -> dict[str, Any]:
        language = TRANSLATE_LANGUAGES.get(target_language, target_language)
        result = self.router.generate(TRANSLATE_TEXT.safe_substitute(language=language, text=text), "groq", 2000)
        return {"translated": result.content, "provider": result.provider}

    def correct_grammar(self, text: str, language: str = "pt-BR", style: str = "formal_business") -> dict[str, Any]:
        if style == "formal_business":
            style_guide = "formal empresarial brasileiro, com linguagem jurídica quando apropriado"
        else:
            style_guide = "profissional e objetivo"
        prompt = CORRECT_GRAMMAR.safe_substitute(style_guide=style_guide, text=text)
        result = self.router.generate(prompt, "groq", 4000)
        return {"correctedText": result.content.strip(), "provider": result.provider}

    def generate_summary(self, text: str, max_lines: int = 8, language: str = "pt-BR") -> dict[str, Any]:
        prompt = EXECUTIVE_SUMMARY.safe_substitute(
            max_lines=max_lines,
            language="português brasileiro" if language == "pt-BR" else "inglês",
            text=text,
        )
        result = self.router.generate(prompt, "groq", 1000)
        return {"summary": result.content.strip(), "provider": result.provider}

    def translate_document(
        self,
        text: str,
        target_language: str,
        source_language: str = "auto",
        preserve_formatting: bool = True,
    ) -> dict[str, Any]:
        trimmed = text.strip()
        if len(trimmed) < 5:
            return {"translatedText": trimmed, "provider": "passthrough"}

        language = DOCUMENT_TRANSLATION_LANGUAGES.get(target_language, target_language)
        instructions = DOCUMENT_TRANSLATION_INSTRUCTIONS.get(target_language, f"Translate to {language}.")
        if source_language and source_language != "auto":
            instructions += f" Source language: {source_language}."
        prompt = TRANSLATE_DOCUMENT.safe_substitute(
            instructions=instructions,
            formatting_rules=TRANSLATE_FORMATTING_RULES if preserve_formatting else "",
            language=language,
            text=trimmed,
        )
        result = self.router.generate(prompt, "gemini", 8000)
        cleaned = clamp_expansion(clean_translation(result.content), trimmed)
        return {"translatedText": cleaned.strip(), "provider": result.provider}

    def classify(self, text: str, labels: list[str]) -> dict[str, Any]:
        if self.huggingface is not None:
            try:
                classifications = self.huggingface.classify(text, labels)
                if classifications:
                    return {"classifications": classifications, "provider": "huggingface-bart (gratuito)"}
                logger.info("HuggingFace classification empty, falling back to Gemini")
            except ProviderError as e:
                logger.warning("HuggingFace classification failed (%s), falling back to Gemini", e)

        prompt = CLASSIFY_FALLBACK.safe_substitute(labels=", ".join(labels), text=text)
        try:
            result = self.router.generate(prompt, "gemini", 512)
        except HubError as e:
            logger.warning("Classification fallback failed: %s", e)
        else:
            parsed = extract_json_array(result.content)
            if parsed:
                return {"classifications": parsed, "provider": result.provider}

        return {"classifications": [{"label": label, "score": 0} for label in labels], "provider": "fallback"}

    def embeddings(self, text: str) -> dict[str, Any]:
        vector = self._require_huggingface().embed(text)
        logger.info("Embeddings generated, dimensions: %d", len(vector))
        return {"embeddings": vector, "provider": "huggingface-minilm (gratuito)"}

    def sentiment(self, text: str) -> dict[str, Any]:
        scores = self._require_huggingface().sentiment(text)
        return {"sentiment": scores, "provider": "huggingface-sentiment (gratuito)"}

    def research(self, description: str) -> str:
        """Run the three background searches for a document in parallel."""
        if self.web_search is None or not self.web_search.available:
            return ""
        queries = [
            description,
            f"{description} legislação regulamentação",
            f"{description} melhores práticas mercado",
        ]
        with ThreadPoolExecutor(max_workers=len(queries)) as pool:
            results = list(pool.map(self.web_search.search, queries))
        return "\n\n".join(r for r in results if r)

    def generate_document(
        self,
        description: str,
        document_type: str = "report",
        target_language: str = "pt",
        company_context: str = "",
        include_web_research: bool = True,
    ) -> dict[str, Any]:
        template = DOCUMENT_TEMPLATES.get(document_type, DOCUMENT_TEMPLATES["custom"])
        research = self.research(description) if include_web_research else ""
        if research:
            logger.info("Web research found %d chars of context", len(research))

        prompt = GENERATE_DOCUMENT.safe_substitute(
            template=template,
            description=description,
            company=company_context or COMPANY_PROFILE,
            research=WEB_RESEARCH_BLOCK.safe_substitute(research=research) if research else "",
            language=GENERATION_LANGUAGES.get(target_language, "português brasileiro formal"),
        )
        result = self.router.generate(prompt, "gemini", 8000)
        response: dict[str, Any] = {"generatedDocument": result.content.strip(), "provider": result.provider}
        if research:
            response["webResearchSummary"] = "Pesquisa web realizada com sucesso"
        return response

    def correct_document(
        self,
        text: str,
        document_type: str = "contract",
        country: str = "brazil",
        language: str = "pt",
        country_laws: str = "",
        document_type_name: str = "Documento",
        minimum_characters: int = 50000,
    ) -> dict[str, Any]:
        framework = framework_for(country)
        laws_text = country_laws or "; ".join(
            [framework.governing_law, framework.data_protection, *framework.specific_laws[:10]]
        )
        law_list = "\n".join(f"   {i}. {law}" for i, law in enumerate(framework.specific_laws, start=1))

        prompt = CORRECT_DOCUMENT.safe_substitute(
            type_name=document_type_name,
            text=text,
            min_chars=f"{minimum_characters:,}",
            pages=math.ceil(minimum_characters / 5000),
            type_addon=type_addon(document_type, framework),
            data_protection=framework.data_protection,
            governing_law=framework.governing_law,
            arbitration=framework.arbitration,
            country=country.upper(),
            signature_requirements=framework.signature_requirements,
            esg_framework=framework.esg_framework,
            tax_id=framework.tax_id,
            currency=framework.currency,
            laws_text=laws_text,
            law_list=law_list,
            language=DOCUMENT_LANGUAGES.get(language, DOCUMENT_LANGUAGES["pt"]),
        )

        logger.info("Correcting document: target %d chars, country=%s, type=%s",
                    minimum_characters, country, document_type)
        providers: list[str] = []
        result = self.router.generate(prompt, "gemini", 65536)
        providers.append(result.provider)
        corrected = result.content.strip()

        if len(corrected) < minimum_characters * 0.8:
            logger.info("Document too short (%d chars), requesting expansion", len(corrected))
            expansion = self.router.generate(
                EXPAND_DOCUMENT.safe_substitute(
                    min_chars=f"{minimum_characters:,}",
                    current_chars=f"{len(corrected):,}",
                    document=corrected,
                ),
                "gemini",
                65536,
            )
            providers.append(expansion.provider)
            if len(expansion.content.strip()) > len(corrected):
                corrected = expansion.content.strip()

        return {"correctedDocument": corrected, "providers": providers}
