"""Resource data structures and enumerations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from typing import Any


class ResourceKind(StrEnum):
    """Kinds of remote resources the gateway can read."""

    DISK = "disk"
    ARCHIVE = "archive"
    SERVER = "server"
    PACKET_FILTER = "packetfilter"
    INTERFACE = "interface"


class Availability(StrEnum):
    """Provider-reported availability marker."""

    AVAILABLE = "available"
    MIGRATING = "migrating"
    UPLOADING = "uploading"
    FAILED = "failed"
    DISCONTINUED = "discontinued"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | None) -> Availability:
        try:
            return cls((value or "").lower())
        except ValueError:
            return cls.UNKNOWN


class ResourceState(StrEnum):
    """Monitored lifecycle state.  AVAILABLE and FAILED are terminal."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    AVAILABLE = "available"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ResourceState.AVAILABLE, ResourceState.FAILED)


_STATE_BY_AVAILABILITY = {
    Availability.AVAILABLE: ResourceState.AVAILABLE,
    Availability.FAILED: ResourceState.FAILED,
    Availability.MIGRATING: ResourceState.IN_PROGRESS,
    Availability.UPLOADING: ResourceState.IN_PROGRESS,
}


class InterfaceSlot(IntEnum):
    """Position of a server network interface."""

    SHARED = 0
    PRIVATE = 1


@dataclass(frozen=True)
class SourceRef:
    """A provenance link to the resource this one was copied from."""

    kind: ResourceKind
    resource_id: int
    availability: Availability = Availability.AVAILABLE

    @property
    def is_discontinued(self) -> bool:
        return self.availability == Availability.DISCONTINUED


@dataclass(frozen=True)
class Resource:
    """Point-in-time view of a remote resource as returned by the gateway.

    A disk or archive carries at most one direct provenance link; when a
    provider reports both, ``source_disk`` is tried before ``source_archive``.
    """

    resource_id: int
    kind: ResourceKind
    name: str = ""
    availability: Availability = Availability.UNKNOWN
    tags: frozenset[str] = frozenset()
    bundle_info: dict[str, Any] | None = None
    source_disk: SourceRef | None = None
    source_archive: SourceRef | None = None
    interface_ids: tuple[int, ...] = ()
    migrated_mb: int | None = None

    @property
    def state(self) -> ResourceState:
        return _STATE_BY_AVAILABILITY.get(self.availability, ResourceState.PENDING)

    @property
    def is_available(self) -> bool:
        return self.state == ResourceState.AVAILABLE

    @property
    def is_failed(self) -> bool:
        return self.state == ResourceState.FAILED

    @property
    def has_bundle_info(self) -> bool:
        return self.bundle_info is not None

    @property
    def is_blank_sourced(self) -> bool:
        return self.source_disk is None and self.source_archive is None

    def nearest_source(self) -> SourceRef | None:
        """Return the nearest non-discontinued provenance link, source disk first.

        None when the resource is blank-sourced or every link is discontinued.
        """
        for source in (self.source_disk, self.source_archive):
            if source is not None and not source.is_discontinued:
                return source
        return None


@dataclass
class SearchResult:
    """Result of a name-prefix search."""

    count: int = 0
    resources: list[Resource] = field(default_factory=list)
