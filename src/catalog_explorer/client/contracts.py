"""
Data contracts for catalog service responses.

Pydantic models for the search, version, diff and filter endpoints.
Field aliases follow the service's camelCase JSON.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class DiffStatus(str, Enum):
    """Comparison outcome of one label between two snapshots."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    UNCHANGED = "unchanged"
    MISSING = "missing"


class _ServiceModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CatalogEntry(_ServiceModel):
    """
    One catalog entry as returned by the search endpoint.

    Endpoint: /api/search
    """

    label: str = Field(..., description="Unique entry label")
    name: str = Field(default="", description="Entry name (usually the label)")
    type: str = Field(default="", description="Entry type, e.g. 'assetbundle'")
    size: int = Field(default=0, ge=0, description="Size in bytes")
    resource_type: int = Field(default=0, alias="resourceType")
    real_name: str = Field(default="", alias="realName", description="Display name")
    categories: list[str] = Field(default_factory=list)
    content_types: list[str] = Field(default_factory=list, alias="contentTypes")
    modified_at: int = Field(
        default=0,
        alias="modifiedAt",
        description="Unix timestamp of last modification, 0 if unknown",
    )

    @property
    def search_fields(self) -> list[str]:
        """Texts matched against category rules, label first."""
        parts = [
            self.label,
            self.real_name,
            self.type,
            " ".join(self.content_types),
            " ".join(self.categories),
        ]
        return [part for part in parts if part]

    @property
    def search_text(self) -> str:
        """All searchable text joined with spaces."""
        return " ".join(self.search_fields)


class DiffEntry(_ServiceModel):
    """One side (from or to) of a diff item."""

    type: str = Field(default="")
    size: int = Field(default=0, ge=0)
    checksum: str | None = Field(default=None)
    resource_type: int = Field(default=0, alias="resourceType")
    real_name: str = Field(default="", alias="realName", description="Display name")

    @field_validator("checksum", mode="before")
    @classmethod
    def coerce_checksum(cls, v: Any) -> str | None:
        """Checksums may arrive as numbers."""
        if v is None:
            return None
        return str(v)


class DiffItem(_ServiceModel):
    """Comparison outcome for a single label."""

    label: str
    status: DiffStatus
    from_: DiffEntry | None = Field(default=None, alias="from")
    to: DiffEntry | None = Field(default=None)

    @model_validator(mode="after")
    def check_sides(self) -> "DiffItem":
        """Added items have no 'from', removed items have no 'to'."""
        if self.status == DiffStatus.ADDED and self.from_ is not None:
            raise ValueError(f"added item '{self.label}' must not carry 'from'")
        if self.status == DiffStatus.REMOVED and self.to is not None:
            raise ValueError(f"removed item '{self.label}' must not carry 'to'")
        if self.status in (DiffStatus.MODIFIED, DiffStatus.UNCHANGED) and (
            self.from_ is None or self.to is None
        ):
            raise ValueError(f"{self.status.value} item '{self.label}' needs 'from' and 'to'")
        return self


class DiffSummary(_ServiceModel):
    """Server-declared change counts."""

    total: int = Field(default=0, ge=0)
    added: int = Field(default=0, ge=0)
    removed: int = Field(default=0, ge=0)
    modified: int = Field(default=0, ge=0)


class DiffResult(_ServiceModel):
    """
    Complete response from the diff endpoint.

    Endpoint: /api/masterdata/diff
    """

    from_version: str = Field(default="", alias="from")
    to_version: str = Field(default="", alias="to")
    items: list[DiffItem] = Field(default_factory=list)
    summary: DiffSummary = Field(default_factory=DiffSummary)
    total: int = Field(default=0, ge=0, description="Change count before truncation")
    limit: int = Field(default=0, ge=0, description="Server-applied item limit")
    truncated: bool = Field(default=False)

    @property
    def is_complete(self) -> bool:
        """True only when every change is present in items."""
        return not self.truncated and len(self.items) >= self.total


class DiffLookupResponse(_ServiceModel):
    """
    Response from the per-label lookup endpoint.

    Endpoint: /api/masterdata/diff/lookup
    """

    from_version: str = Field(default="", alias="from")
    to_version: str = Field(default="", alias="to")
    items: dict[str, DiffItem] = Field(default_factory=dict)


class VersionInfo(_ServiceModel):
    """One catalog snapshot known to the service."""

    version: str | None = Field(default=None)
    current: bool = Field(default=False)
    source: str = Field(default="")


class VersionList(_ServiceModel):
    """
    Response from the version list endpoint.

    Endpoint: /api/masterdata/versions
    """

    current: str = Field(default="")
    versions: list[VersionInfo] = Field(default_factory=list)

    @field_validator("current", mode="before")
    @classmethod
    def coerce_current(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()

    @field_validator("versions", mode="before")
    @classmethod
    def drop_non_objects(cls, v: Any) -> list[Any]:
        """Malformed rows are dropped, not fatal."""
        if not isinstance(v, list):
            return []
        return [row for row in v if isinstance(row, dict)]


class TaxonomyOverrides(_ServiceModel):
    """
    Server-side extensions to the built-in taxonomy.

    Endpoint: /api/filters
    """

    media: dict[str, list[str]] = Field(default_factory=dict)
    characters: list[str] = Field(default_factory=list)

    @field_validator("media", mode="before")
    @classmethod
    def normalize_media(cls, v: Any) -> dict[str, list[str]]:
        if not isinstance(v, dict):
            return {}
        return {
            str(key): [str(t) for t in tokens if t] if isinstance(tokens, list) else []
            for key, tokens in v.items()
        }

    @field_validator("characters", mode="before")
    @classmethod
    def normalize_characters(cls, v: Any) -> list[str]:
        if not isinstance(v, list):
            return []
        return [str(t) for t in v if t]
