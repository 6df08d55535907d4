from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from elphub.errors import ProviderError
from elphub.hub import AIHub
from elphub.leads import LeadAnalyzer, suggest_priority, urgency_from_sentiment
from elphub.models import CRUDResponse, Lead

from fakes import FakeHuggingFace, FakeRouter


class RecordingCRUD:
    def __init__(self, error=None):
        self.updates = []
        self.error = error

    def update_rows(self, table, match, changes):
        self.updates.append((table, match, changes))
        return CRUDResponse(error=self.error)


@pytest.mark.parametrize("label, urgency", [
    ("1 star", 95),
    ("2 stars", 75),
    ("3 stars", 50),
    ("4 stars", 30),
    ("5 stars", 15),
])
def test_urgency_from_top_star(label, urgency):
    scores = [{"label": "3 stars", "score": 0.1}, {"label": label, "score": 0.6}]
    assert urgency_from_sentiment(scores) == urgency


def test_urgency_defaults_to_medium():
    assert urgency_from_sentiment([]) == 50


@pytest.mark.parametrize("label, expected", [
    ("interesse urgente em comprar", ("urgent", "qualified")),
    ("investimento", ("urgent", "qualified")),
    ("parceria estratégica", ("high", "qualified")),
    ("fornecedor de matéria-prima", ("high", "initial")),
    ("reclamação ou problema", ("urgent", "initial")),
    ("concorrente pesquisando", ("low", "initial")),
    ("busca informações", ("medium", "initial")),
])
def test_suggest_priority_rules(label, expected):
    assert suggest_priority([{"label": label, "score": 0.8}]) == expected


def test_suggest_priority_needs_confident_top_label():
    assert suggest_priority([{"label": "investimento", "score": 0.5}]) == ("medium", "initial")
    assert suggest_priority([]) == ("medium", "initial")


def _hub(hf):
    return AIHub(FakeRouter("sem json"), huggingface=hf)


def test_analyze_lead():
    hf = FakeHuggingFace(
        classifications=[{"label": "parceria estratégica", "score": 0.83}],
        sentiment=[{"label": "2 stars", "score": 0.9}],
    )
    assessment = LeadAnalyzer(_hub(hf)).analyze(Lead(id="c1", type="contact", message="Queremos uma parceria"))

    assert assessment.to_dict() == {
        "id": "c1",
        "type": "contact",
        "urgencyScore": 75,
        "suggestedPriority": "high",
        "suggestedLevel": "qualified",
        "topClassification": "parceria estratégica",
    }


def test_analyze_batch_skips_empty_and_applies_priority():
    hf = FakeHuggingFace(
        classifications=[{"label": "investimento", "score": 0.9}],
        sentiment=[{"label": "4 stars", "score": 0.9}],
    )
    crud = RecordingCRUD()
    leads = [
        Lead(id="m1", type="marketplace", message="Quero investir"),
        Lead(id="c2", type="contact", message=None),
    ]

    results = LeadAnalyzer(_hub(hf), crud).analyze_batch(leads)

    assert [r.id for r in results] == ["m1"]
    assert crud.updates == [("marketplace_registrations", {"id": "m1"}, {"priority": "urgent"})]


def test_analyze_batch_without_apply_does_not_write():
    hf = FakeHuggingFace(classifications=[], sentiment=[])
    crud = RecordingCRUD()
    results = LeadAnalyzer(_hub(hf), crud).analyze_batch([Lead(id="c1", type="contact", message="Olá")], apply=False)
    # No HF labels and no parsable model reply: zero-score fallback.
    assert results[0].top_classification == "interesse urgente em comprar"
    assert results[0].suggested_priority == "medium"
    assert crud.updates == []


def test_analyze_batch_skips_failed_leads():
    hf = FakeHuggingFace(error=ProviderError("huggingface", "down", status=500))
    results = LeadAnalyzer(_hub(hf), RecordingCRUD()).analyze_batch([Lead(id="c1", type="contact", message="Olá")])
    assert results == []
