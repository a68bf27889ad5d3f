"""Pydantic models for control-plane wire payloads.

The API uses PascalCase keys and encodes 64-bit ids as strings; these models
accept both and convert to the frozen domain dataclasses.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from cloudprov.models.resources import (
    Availability,
    Resource,
    ResourceKind,
    SourceRef,
)


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SourcePayload(_WireModel):
    """``SourceDisk`` / ``SourceArchive`` reference."""

    id: int = Field(alias="ID")
    availability: str | None = Field(default=None, alias="Availability")


class InterfacePayload(_WireModel):
    id: int = Field(alias="ID")


class ResourcePayload(_WireModel):
    """Common shape of disk, archive, server and packet filter records."""

    id: int = Field(alias="ID")
    name: str = Field(default="", alias="Name")
    availability: str | None = Field(default=None, alias="Availability")
    tags: list[str] | None = Field(default=None, alias="Tags")
    bundle_info: dict[str, Any] | None = Field(default=None, alias="BundleInfo")
    source_disk: SourcePayload | None = Field(default=None, alias="SourceDisk")
    source_archive: SourcePayload | None = Field(default=None, alias="SourceArchive")
    interfaces: list[InterfacePayload] | None = Field(default=None, alias="Interfaces")
    migrated_mb: int | None = Field(default=None, alias="MigratedMB")

    def to_resource(self, kind: ResourceKind) -> Resource:
        return Resource(
            resource_id=self.id,
            kind=kind,
            name=self.name,
            availability=Availability.parse(self.availability),
            tags=frozenset(self.tags or ()),
            bundle_info=self.bundle_info,
            source_disk=_source_ref(ResourceKind.DISK, self.source_disk),
            source_archive=_source_ref(ResourceKind.ARCHIVE, self.source_archive),
            interface_ids=tuple(nic.id for nic in self.interfaces or ()),
            migrated_mb=self.migrated_mb,
        )


class SearchPayload(_WireModel):
    """Envelope of a list/search response; records live under a kind-specific key."""

    total: int = Field(default=0, alias="Total")
    count: int = Field(default=0, alias="Count")


class ResultFlagPayload(_WireModel):
    """Acknowledgement returned by mutation endpoints."""

    is_ok: bool = Field(default=False)
    success: bool | str | None = Field(default=None, alias="Success")


def _source_ref(kind: ResourceKind, payload: SourcePayload | None) -> SourceRef | None:
    if payload is None:
        return None
    # Source references omit Availability when the source is still active
    availability = Availability.parse(payload.availability) if payload.availability else Availability.AVAILABLE
    return SourceRef(kind=kind, resource_id=payload.id, availability=availability)
