"""
Catalog service client.

Typed access to the search, version, diff and filter endpoints of
the catalog web service.
"""

from collections.abc import Iterable
from typing import Any

from pydantic import TypeAdapter

from catalog_explorer.client.base import BaseServiceClient, FetchResult
from catalog_explorer.client.contracts import (
    CatalogEntry,
    DiffItem,
    DiffLookupResponse,
    DiffResult,
    TaxonomyOverrides,
    VersionList,
)
from catalog_explorer.config import get_settings

_ENTRY_LIST = TypeAdapter(list[CatalogEntry])


class CatalogServiceClient(BaseServiceClient):
    """
    Client for the catalog web service.

    Example:
        >>> async with CatalogServiceClient() as client:
        ...     result = await client.fetch_diff("20250101", "20250201")
        ...     if result.success:
        ...         print(result.data.summary.total)
    """

    FILTERS_PATH = "/api/filters"
    SEARCH_PATH = "/api/search"
    VERSIONS_PATH = "/api/masterdata/versions"
    DIFF_PATH = "/api/masterdata/diff"
    LOOKUP_PATH = "/api/masterdata/diff/lookup"

    def __init__(self, **kwargs: Any) -> None:
        """
        Initialize the catalog client.

        Args:
            **kwargs: Arguments passed to BaseServiceClient
        """
        super().__init__(**kwargs)
        settings = get_settings()
        self._diff_limit = settings.catalog.diff_limit
        self._lookup_max_labels = settings.catalog.lookup_max_labels

    async def __aenter__(self) -> "CatalogServiceClient":
        return self

    async def fetch_filters(self) -> FetchResult[TaxonomyOverrides]:
        """Fetch the taxonomy override document."""
        return await self._fetch("GET", self.FILTERS_PATH, TaxonomyOverrides.model_validate)

    async def fetch_overrides(self) -> TaxonomyOverrides | None:
        """Override document, or None when it could not be loaded."""
        result = await self.fetch_filters()
        return result.data if result.success else None

    async def search(self, query: str = "", field: str = "all") -> FetchResult[list[CatalogEntry]]:
        """
        Search the live catalog.

        Args:
            query: Free-text query (empty lists everything)
            field: Field the query applies to

        Returns:
            FetchResult[list[CatalogEntry]]: Entries in service order
        """
        params = {"query": query, "field": field, "withModTime": "1", "withMeta": "1"}
        result = await self._fetch(
            "GET", self.SEARCH_PATH, _ENTRY_LIST.validate_python, params=params
        )
        if result.success:
            self._logger.info(
                "Search complete",
                query=query,
                entries=len(result.data or []),
            )
        return result

    async def fetch_versions(self) -> FetchResult[VersionList]:
        """Fetch the raw list of catalog snapshots."""
        return await self._fetch("GET", self.VERSIONS_PATH, VersionList.model_validate)

    async def fetch_diff(
        self,
        from_version: str,
        to_version: str,
        limit: int | None = None,
    ) -> FetchResult[DiffResult]:
        """
        Fetch the precomputed diff between two snapshots.

        Args:
            from_version: Older snapshot id
            to_version: Newer snapshot id
            limit: Item limit (settings default if None)

        Returns:
            FetchResult[DiffResult]: Possibly truncated diff
        """
        params = {
            "from": from_version,
            "to": to_version,
            "limit": str(limit or self._diff_limit),
        }
        result = await self._fetch("GET", self.DIFF_PATH, DiffResult.model_validate, params=params)
        if result.success and result.data is not None:
            self._logger.info(
                "Diff loaded",
                from_version=from_version,
                to_version=to_version,
                items=len(result.data.items),
                total=result.data.total,
                truncated=result.data.truncated,
            )
        return result

    async def lookup_diff(
        self,
        from_version: str,
        to_version: str,
        labels: Iterable[str],
    ) -> FetchResult[dict[str, DiffItem]]:
        """
        Look up the diff status of specific labels.

        Labels are trimmed and de-duplicated; blank labels are skipped.
        Large requests are split into chunks the service accepts.

        Returns:
            FetchResult[dict[str, DiffItem]]: Items keyed by label
        """
        unique: list[str] = []
        seen: set[str] = set()
        for raw in labels:
            label = raw.strip()
            if label and label not in seen:
                seen.add(label)
                unique.append(label)

        merged: dict[str, DiffItem] = {}
        last: FetchResult[dict[str, DiffItem]] = FetchResult(
            success=True, data=merged, endpoint=self.LOOKUP_PATH
        )
        for start in range(0, len(unique), self._lookup_max_labels):
            chunk = unique[start : start + self._lookup_max_labels]
            result = await self._fetch(
                "POST",
                self.LOOKUP_PATH,
                DiffLookupResponse.model_validate,
                json={"from": from_version, "to": to_version, "labels": chunk},
            )
            if not result.success or result.data is None:
                return FetchResult(
                    success=False,
                    error_message=result.error_message,
                    status_code=result.status_code,
                    endpoint=result.endpoint,
                    duration_ms=result.duration_ms,
                )
            merged.update(result.data.items)
            last = FetchResult(
                success=True,
                data=merged,
                status_code=result.status_code,
                endpoint=result.endpoint,
                duration_ms=result.duration_ms,
            )
        return last
