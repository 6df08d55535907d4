"""Usage tracking for AI provider calls."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any

from elphub.models import FREE_PROVIDERS, ProviderCall


def provider_family(label: str) -> str:
    """Reduce a provider label like ``gemini-2/7 (gratuito)`` to ``gemini``."""
    head = label.split(" ", 1)[0]
    return head.split("-", 1)[0] if head else "unknown"


@dataclass
class UsageAnalytics:
    """Tracks analytics for the calls handled by this process."""

    call_log: list[dict[str, Any]] = field(default_factory=list)
    provider_counts: dict[str, int] = field(default_factory=dict)
    provider_times: dict[str, list[float]] = field(default_factory=dict)
    action_counts: dict[str, int] = field(default_factory=dict)
    errors: list[dict[str, Any]] = field(default_factory=list)
    session_start: float = field(default_factory=time.time)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record_call(self, action: str, provider: str, elapsed_s: float) -> None:
        call = ProviderCall(action=action, provider=provider or "unknown", elapsed_s=elapsed_s)
        family = provider_family(call.provider)
        with self._lock:
            self.provider_counts[family] = self.provider_counts.get(family, 0) + 1
            self.provider_times.setdefault(family, []).append(elapsed_s)
            self.action_counts[action] = self.action_counts.get(action, 0) + 1
            self.call_log.append({
                "action": action,
                "provider": call.provider,
                "time_s": round(elapsed_s, 3),
                "timestamp": time.time(),
            })

    def record_error(self, action: str, error: str) -> None:
        with self._lock:
            self.errors.append({"action": action, "error": error, "timestamp": time.time()})

    @property
    def total_calls(self) -> int:
        return sum(self.provider_counts.values())

    @property
    def free_calls(self) -> int:
        return sum(n for p, n in self.provider_counts.items() if p in FREE_PROVIDERS)

    @property
    def paid_calls(self) -> int:
        return self.provider_counts.get("anthropic", 0)

    def provider_avg_time(self, provider: str) -> float:
        times = self.provider_times.get(provider, [])
        if not times:
            return 0.0
        return sum(times) / len(times)

    def get_summary(self) -> dict[str, Any]:
        return {
            "total_calls": self.total_calls,
            "free_calls": self.free_calls,
            "paid_calls": self.paid_calls,
            "session_duration_s": round(time.time() - self.session_start, 2),
            "providers": {
                p: {"count": n, "avg_time_s": round(self.provider_avg_time(p), 2)}
                for p, n in self.provider_counts.items()
            },
            "actions": dict(self.action_counts),
            "errors": len(self.errors),
        }

    def to_dataframe_records(self) -> list[dict[str, Any]]:
        """Return the call log as records suitable for a pandas DataFrame."""
        return list(self.call_log)
