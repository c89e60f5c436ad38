"""Error taxonomy shared by adapters and the import core."""

from __future__ import annotations


class CatalogSyncError(RuntimeError):
    """Base class for failures surfaced by catalog synchronisation."""


class AuthenticationError(CatalogSyncError):
    """Credentials or tokens were rejected; fatal to the whole run."""


class TransientNetworkError(CatalogSyncError):
    """Timeout, connection failure, or a rate limit that outlived its single retry."""


class PlatformAPIError(CatalogSyncError):
    """External platform answered with an unexpected status or payload."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UnsupportedIntegrationError(CatalogSyncError):
    """No adapter is registered for the requested integration source."""


class UnknownCategoryError(ValueError):
    """Internal category does not exist in the store."""
