"""
Catalog service access.

Pydantic contracts for the service's JSON and an async client
built on a common base with retries and structured logging.
"""

from catalog_explorer.client.base import (
    APIError,
    BaseServiceClient,
    CatalogServiceError,
    FetchResult,
    ResponseValidationError,
    ServerError,
)
from catalog_explorer.client.catalog import CatalogServiceClient
from catalog_explorer.client.contracts import (
    CatalogEntry,
    DiffEntry,
    DiffItem,
    DiffLookupResponse,
    DiffResult,
    DiffStatus,
    DiffSummary,
    TaxonomyOverrides,
    VersionInfo,
    VersionList,
)

__all__ = [
    # Base classes and errors
    "APIError",
    "BaseServiceClient",
    "CatalogServiceError",
    "FetchResult",
    "ResponseValidationError",
    "ServerError",
    # Client
    "CatalogServiceClient",
    # Contracts
    "CatalogEntry",
    "DiffEntry",
    "DiffItem",
    "DiffLookupResponse",
    "DiffResult",
    "DiffStatus",
    "DiffSummary",
    "TaxonomyOverrides",
    "VersionInfo",
    "VersionList",
]
