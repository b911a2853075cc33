"""Errors raised by the sync core."""

from __future__ import annotations

from collections.abc import Mapping


class SyncError(RuntimeError):
    """Base class for failures while syncing an order to the CRM."""


class ValidationError(SyncError):
    """Raised when the inputs or configuration cannot produce a valid request."""


class ConsistencyError(SyncError):
    """Raised when CRM configuration needed to compute amounts is missing."""


class ApiError(SyncError):
    """Raised when a remote CRM call fails or returns an error payload."""

    def __init__(
        self,
        message: str,
        *,
        entity: str,
        action: str,
        params: Mapping[str, object] | None = None,
        result: Mapping[str, object] | None = None,
        code: str | int | None = None,
    ) -> None:
        super().__init__(message)
        self.entity = entity
        self.action = action
        self.params = dict(params or {})
        self.result = dict(result or {})
        self.code = code

    @property
    def method(self) -> str:
        return f"{self.entity}.{self.action}"

    def context(self) -> dict[str, object]:
        """Structured context for log records."""

        return {
            "method": self.method,
            "params": self.params,
            "result": self.result,
            "code": self.code,
        }
