"""Test doubles shared by the test modules."""

from __future__ import annotations

from elphub.errors import AllProvidersFailed
from elphub.models import TextResult
from elphub.providers import TextProvider


class ScriptedProvider(TextProvider):
    """Returns (or raises) the scripted outcomes in order; the last one repeats."""

    provider_name = "fake"

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []
        self.last_usage = {"input_tokens": 1, "output_tokens": 2}

    def complete(self, prompt, **kwargs):
        self.calls.append({"prompt": prompt, **kwargs})
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeClock:
    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRouter:
    """Stands in for TextRouter; replies come from a list or a callable."""

    def __init__(self, *replies, provider="groq (gratuito)"):
        self.replies = list(replies)
        self.provider = provider
        self.calls = []

    def generate(self, prompt, preference="auto", max_tokens=2048):
        self.calls.append({"prompt": prompt, "preference": preference, "max_tokens": max_tokens})
        if not self.replies:
            raise AllProvidersFailed("All AI providers failed")
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return TextResult(reply, self.provider)


class FakeHuggingFace:
    def __init__(self, classifications=None, embeddings=None, sentiment=None, error=None):
        self.classifications = classifications if classifications is not None else []
        self.embeddings = embeddings or {}
        self.sentiment_scores = sentiment or []
        self.error = error
        self.embedded = []

    def classify(self, text, labels):
        if self.error:
            raise self.error
        return self.classifications

    def embed(self, text):
        self.embedded.append(text)
        return self.embeddings.get(text, [0.0, 0.0])

    def sentiment(self, text):
        if self.error:
            raise self.error
        return self.sentiment_scores
