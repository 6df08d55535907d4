"""Semantic search over documents using HuggingFace sentence embeddings."""

from __future__ import annotations

import logging
import math
from typing import Any

from elphub.hub import AIHub
from elphub.models import SearchHit

logger = logging.getLogger(__name__)

DOCUMENT_EMBED_CHARS = 500


def cosine_similarity(a: list[float], b: list[float]) -> float:
    if len(a) != len(b):
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


def relevance_label(similarity: float) -> str:
    if similarity >= 0.8:
        return "Muito Relevante"
    if similarity >= 0.6:
        return "Relevante"
    if similarity >= 0.4:
        return "Parcialmente Relevante"
    return "Pouco Relevante"


class SemanticSearch:
    def __init__(self, hub: AIHub) -> None:
        self.hub = hub

    def embed(self, text: str) -> list[float]:
        return self.hub.embeddings(text)["embeddings"]

    def search(self, query: str, documents: list[dict[str, Any]]) -> list[SearchHit]:
        """Rank ``documents`` (``{"id", "content"}``) by similarity to ``query``."""
        query_vector = self.embed(query)
        hits = []
        for doc in documents:
            content = str(doc.get("content") or "")
            vector = self.embed(content[:DOCUMENT_EMBED_CHARS])
            hits.append(SearchHit(
                id=str(doc.get("id", "")),
                content=content,
                similarity=cosine_similarity(query_vector, vector),
            ))
        hits.sort(key=lambda h: h.similarity, reverse=True)
        logger.info("Semantic search over %d documents for %r", len(documents), query[:60])
        return hits
