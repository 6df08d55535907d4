"""Lead triage: sentiment-based urgency and intent-based priority."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from elphub.crud import SupabaseCRUD
from elphub.errors import HubError
from elphub.hub import AIHub
from elphub.models import LabelScore, Lead, LeadAssessment

logger = logging.getLogger(__name__)

DEFAULT_LEAD_LABELS: list[str] = [
    "interesse urgente em comprar",
    "busca informações",
    "parceria estratégica",
    "investimento",
    "reclamação ou problema",
    "fornecedor de matéria-prima",
    "concorrente pesquisando",
]

# 1 star is the angriest message, so the most urgent.
STAR_URGENCY: dict[str, int] = {"1": 95, "2": 75, "3": 50, "4": 30, "5": 15}

# First matching keyword wins; (priority, level).
PRIORITY_RULES: list[tuple[tuple[str, ...], tuple[str, str]]] = [
    (("urgente", "investimento"), ("urgent", "qualified")),
    (("parceria",), ("high", "qualified")),
    (("fornecedor",), ("high", "initial")),
    (("reclamação",), ("urgent", "initial")),
    (("concorrente",), ("low", "initial")),
]


def urgency_from_sentiment(scores: list[dict[str, Any]]) -> int:
    """Map the highest-scoring star label (``"1 star"`` .. ``"5 stars"``) to 0-100."""
    best = LabelScore(label="", score=0.0)
    for item in scores:
        candidate = LabelScore.from_dict(item)
        if candidate.score > best.score:
            best = candidate
    for star, urgency in STAR_URGENCY.items():
        if star in best.label:
            return urgency
    return 50


def suggest_priority(classifications: list[dict[str, Any]]) -> tuple[str, str]:
    """Return ``(priority, lead_level)`` from the top classification."""
    if not classifications:
        return "medium", "initial"
    top = LabelScore.from_dict(classifications[0])
    if top.score > 0.5:
        for keywords, suggestion in PRIORITY_RULES:
            if any(k in top.label for k in keywords):
                return suggestion
    return "medium", "initial"


class LeadAnalyzer:
    def __init__(self, hub: AIHub, crud: SupabaseCRUD | None = None, labels: list[str] | None = None) -> None:
        self.hub = hub
        self.crud = crud
        self.labels = labels or DEFAULT_LEAD_LABELS

    def analyze(self, lead: Lead) -> LeadAssessment:
        message = lead.message or ""
        with ThreadPoolExecutor(max_workers=2) as pool:
            sentiment_future = pool.submit(self.hub.sentiment, message)
            classify_future = pool.submit(self.hub.classify, message, self.labels)
            sentiment = sentiment_future.result()
            classification = classify_future.result()

        classifications = classification.get("classifications") or []
        priority, level = suggest_priority(classifications)
        top = classifications[0].get("label") if classifications else None
        return LeadAssessment(
            id=lead.id,
            type=lead.type,
            urgency_score=urgency_from_sentiment(sentiment.get("sentiment") or []),
            suggested_priority=priority,
            suggested_level=level,
            top_classification=top or "não classificado",
        )

    def analyze_batch(self, leads: list[Lead], apply: bool = True) -> list[LeadAssessment]:
        """Assess every lead with a message; optionally write the suggested priority back.

        Only ``priority`` is written so manual ``lead_level`` decisions are kept.
        """
        results: list[LeadAssessment] = []
        for lead in leads:
            if not lead.message:
                continue
            try:
                assessment = self.analyze(lead)
            except HubError as e:
                logger.error("Error analyzing lead %s: %s", lead.id, e)
                continue
            results.append(assessment)

            if apply and self.crud is not None:
                resp = self.crud.update_rows(lead.table, {"id": lead.id}, {"priority": assessment.suggested_priority})
                if not resp.ok:
                    logger.error("Failed to update priority for lead %s: %s", lead.id, resp.error)

        logger.info("%d leads analyzed", len(results))
        return results
