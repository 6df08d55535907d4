"""Vercel serverless entrypoint exposing the hub functions under ``/api/<function>``.

Each function mirrors one of the site's edge functions and returns JSON with
CORS headers so the admin front end can call it directly.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
import sys
from typing import Any, Callable

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from dotenv import load_dotenv

from elphub.analysis import CompetitorAnalyst
from elphub.config import Settings
from elphub.crud import SupabaseCRUD
from elphub.errors import HubError, NotFoundError, ValidationError
from elphub.hub import AIHub
from elphub.keypool import KeyPool
from elphub.leads import LeadAnalyzer
from elphub.mailer import EmailService
from elphub.models import Lead
from elphub.router import TextRouter
from elphub.scraper import CompetitorScraper
from elphub.search import SemanticSearch, relevance_label

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


@dataclass
class Services:
    hub: AIHub
    analyst: CompetitorAnalyst
    emails: EmailService
    crud: SupabaseCRUD | None = None
    scraper: CompetitorScraper = field(default_factory=CompetitorScraper)


@lru_cache(maxsize=1)
def get_services() -> Services:
    """Build the services once per process so the Gemini key pool is shared."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO)
    settings = Settings.from_env()
    pool = KeyPool(settings.gemini_keys)
    crud = SupabaseCRUD.from_settings(settings) if settings.supabase_configured else None
    logger.info("Hub services ready: %s", settings.key_status())
    return Services(
        hub=AIHub.from_settings(settings, router=TextRouter.from_settings(settings, gemini_pool=pool)),
        analyst=CompetitorAnalyst.from_settings(settings, gemini_pool=pool),
        emails=EmailService.from_settings(settings),
        crud=crud,
    )


def _response(status: int, body: dict[str, Any] | None) -> dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {**CORS_HEADERS, "content-type": "application/json"},
        "body": json.dumps(body, ensure_ascii=False) if body is not None else "",
    }


def _semantic_search(services: Services, body: dict[str, Any]) -> dict[str, Any]:
    query = body.get("query")
    documents = body.get("documents")
    if not query or not isinstance(documents, list):
        raise ValidationError("Missing query or documents")
    hits = SemanticSearch(services.hub).search(query, documents)
    return {
        "success": True,
        "results": [{**h.to_dict(), "relevance": relevance_label(h.similarity)} for h in hits],
    }


def _analyze_leads(services: Services, body: dict[str, Any]) -> dict[str, Any]:
    raw = body.get("leads")
    if not isinstance(raw, list):
        raise ValidationError("Missing leads")
    leads = []
    for item in raw:
        if not isinstance(item, dict) or item.get("id") in (None, ""):
            logger.warning("Skipping lead without id")
            continue
        leads.append(Lead(id=str(item["id"]), type=item.get("type") or "contact", message=item.get("message")))
    analyzer = LeadAnalyzer(services.hub, services.crud)
    results = analyzer.analyze_batch(leads, apply=body.get("apply") is not False)
    return {"success": True, "results": [r.to_dict() for r in results]}


def _success(result: dict[str, Any]) -> dict[str, Any]:
    return {"success": True, **result}


ROUTES: dict[str, Callable[[Services, dict[str, Any]], dict[str, Any]]] = {
    "ai-hub": lambda s, b: s.hub.dispatch(b),
    "coletar-dados-concorrentes": lambda s, b: s.scraper.collect(b.get("urls")),
    "analisar-com-gemini": lambda s, b: _success(s.analyst.analyze_with_gemini(
        b.get("texto_completo"), b.get("prompt_analise"), bool(b.get("modo_rapido")))),
    "analisar-com-groq": lambda s, b: _success(s.analyst.analyze_with_groq(
        b.get("texto_completo"), b.get("prompt_analise"), bool(b.get("modo_rapido")))),
    "analisar-com-claude": lambda s, b: _success(s.analyst.analyze_with_claude(
        b.get("texto_completo"), b.get("prompt_claude"), bool(b.get("modo_rapido")))),
    "complementar-com-gemini": lambda s, b: _success(s.analyst.complement_with_gemini(
        b.get("insights_claude"), b.get("prompt_gemini"), bool(b.get("modo_rapido")), b.get("additionalText"))),
    "semantic-search": _semantic_search,
    "analyze-leads": _analyze_leads,
    "send-reply-email": lambda s, b: s.emails.send_reply_email(b),
    "notify-next-signer": lambda s, b: s.emails.notify_next_signer(b),
    "send-signature-confirmation": lambda s, b: s.emails.send_signature_confirmation(b),
}


def route(method: str, path: str, raw_body: str | bytes | None, services: Services | None = None) -> dict[str, Any]:
    if method.upper() == "OPTIONS":
        return _response(200, None)

    name = path.split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1]
    try:
        fn = ROUTES.get(name)
        if fn is None:
            raise NotFoundError(f"Unknown function: {name}")
        try:
            body = json.loads(raw_body or "{}")
        except (TypeError, ValueError) as e:
            raise ValidationError("Invalid JSON body") from e
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")
        return _response(200, fn(services or get_services(), body))
    except HubError as e:
        logger.warning("%s failed (%d): %s", name, e.status_code, e.message)
        return _response(e.status_code, {"success": False, "error": e.message})
    except Exception as e:
        logger.exception("Unhandled error in %s", name)
        return _response(500, {"success": False, "error": str(e) or "Internal error"})


def handler(request):
    """Vercel Python serverless function handler."""
    if isinstance(request, dict):
        method, path, body = request.get("method", "POST"), request.get("path", "/"), request.get("body")
    else:
        method = getattr(request, "method", "POST")
        path = getattr(request, "path", "/")
        body = getattr(request, "body", None)
    return route(method, path, body)
