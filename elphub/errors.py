"""Exception types shared by the hub, each mapped to an HTTP status."""

from __future__ import annotations

OVERLOAD_STATUSES = frozenset({429, 503, 529})


class HubError(Exception):
    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(HubError):
    status_code = 400


class ConfigurationError(HubError):
    status_code = 500


class NotFoundError(HubError):
    status_code = 404


class DeadlineExceeded(HubError):
    status_code = 408


class AllProvidersFailed(HubError):
    status_code = 503


class ProviderError(HubError):
    """A single upstream provider call failed.

    ``status`` is the upstream HTTP status when there was one. ``retryable``
    defaults to True for overloads, transport failures (no status) and empty
    replies.
    """

    status_code = 502

    def __init__(
        self,
        provider: str,
        message: str,
        status: int | None = None,
        retryable: bool | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status = status
        if retryable is None:
            retryable = status is None or status in OVERLOAD_STATUSES
        self.retryable = retryable

    @property
    def rate_limited(self) -> bool:
        return self.status == 429

    @property
    def overloaded(self) -> bool:
        return self.status in OVERLOAD_STATUSES

    @property
    def request_too_large(self) -> bool:
        return (
            self.status == 413
            or "Request too large" in self.message
            or "TPM" in self.message
        )

    def __str__(self) -> str:
        if self.status is not None:
            return f"{self.provider} HTTP {self.status}: {self.message}"
        return f"{self.provider}: {self.message}"
