from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from elphub.hub import AIHub
from elphub.search import SemanticSearch, cosine_similarity, relevance_label

from fakes import FakeHuggingFace, FakeRouter


def test_cosine_similarity():
    assert cosine_similarity([1, 0], [1, 0]) == pytest.approx(1.0)
    assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.0)
    assert cosine_similarity([1, 2], [1, 2, 3]) == 0.0
    assert cosine_similarity([0, 0], [1, 1]) == 0.0


@pytest.mark.parametrize("similarity, label", [
    (0.95, "Muito Relevante"),
    (0.8, "Muito Relevante"),
    (0.6, "Relevante"),
    (0.45, "Parcialmente Relevante"),
    (0.1, "Pouco Relevante"),
])
def test_relevance_label(similarity, label):
    assert relevance_label(similarity) == label


def test_search_ranks_by_similarity_and_embeds_prefix():
    long_doc = "cláusula de rescisão " * 40
    hf = FakeHuggingFace(embeddings={
        "rescisão": [1.0, 0.0],
        long_doc[:500]: [0.9, 0.1],
        "pagamento": [0.0, 1.0],
    })
    search = SemanticSearch(AIHub(FakeRouter("x"), huggingface=hf))

    hits = search.search("rescisão", [
        {"id": "a", "content": "pagamento"},
        {"id": "b", "content": long_doc},
    ])

    assert [h.id for h in hits] == ["b", "a"]
    assert hits[0].content == long_doc
    assert hf.embedded == ["rescisão", "pagamento", long_doc[:500]]
