"""Shared fixtures for cloudprov tests.

Provides an in-memory ResourceGateway whose reads can be scripted per
resource, so monitor and resolver tests run without any HTTP traffic.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from collections.abc import Iterable

import pytest
import structlog

from cloudprov.errors import TransportError
from cloudprov.gateway.base import ResourceGateway
from cloudprov.models.resources import (
    Availability,
    Resource,
    ResourceKind,
    SearchResult,
    SourceRef,
)

# ---------------------------------------------------------------------------
# Factory helpers
# ---------------------------------------------------------------------------


def make_disk(
    resource_id: int = 113200000001,
    availability: Availability = Availability.AVAILABLE,
    tags: Iterable[str] = (),
    bundle_info: dict | None = None,
    source_disk: SourceRef | None = None,
    source_archive: SourceRef | None = None,
    kind: ResourceKind = ResourceKind.DISK,
    name: str = "",
    migrated_mb: int | None = None,
) -> Resource:
    """Create a disk (or archive) Resource with sensible defaults."""
    return Resource(
        resource_id=resource_id,
        kind=kind,
        name=name or f"{kind}-{resource_id}",
        availability=availability,
        tags=frozenset(tags),
        bundle_info=bundle_info,
        source_disk=source_disk,
        source_archive=source_archive,
        migrated_mb=migrated_mb,
    )


def from_disk(resource_id: int, availability: Availability = Availability.AVAILABLE) -> SourceRef:
    return SourceRef(kind=ResourceKind.DISK, resource_id=resource_id, availability=availability)


def from_archive(resource_id: int, availability: Availability = Availability.AVAILABLE) -> SourceRef:
    return SourceRef(kind=ResourceKind.ARCHIVE, resource_id=resource_id, availability=availability)


# ---------------------------------------------------------------------------
# Fake gateway
# ---------------------------------------------------------------------------


class FakeGateway(ResourceGateway):
    """In-memory gateway.

    * ``add`` registers a resource returned by every read.
    * ``script`` queues successive views (or exceptions) for one resource;
      the last entry repeats once the queue is drained.
    * Missing resources raise ``TransportError`` with status 404.
    """

    def __init__(self) -> None:
        self._resources: dict[tuple[ResourceKind, int], Resource] = {}
        self._scripts: dict[tuple[ResourceKind, int], deque[Resource | Exception]] = {}
        self.reads: list[tuple[ResourceKind, int]] = []
        self.searches: list[tuple[ResourceKind, str, int]] = []
        self.attachments: list[tuple[int, int]] = []
        self.attach_error: Exception | None = None
        self.read_counts: dict[int, int] = defaultdict(int)

    def add(self, *resources: Resource) -> FakeGateway:
        for resource in resources:
            self._resources[(resource.kind, resource.resource_id)] = resource
        return self

    def script(self, kind: ResourceKind, resource_id: int, views: Iterable[Resource | Exception]) -> FakeGateway:
        self._scripts[(kind, resource_id)] = deque(views)
        return self

    async def read_resource(self, kind: ResourceKind, resource_id: int) -> Resource:
        self.reads.append((kind, resource_id))
        self.read_counts[resource_id] += 1
        key = (kind, resource_id)
        script = self._scripts.get(key)
        if script:
            item = script.popleft() if len(script) > 1 else script[0]
            if isinstance(item, Exception):
                raise item
            return item
        if key not in self._resources:
            raise TransportError(f"{kind} {resource_id}: HTTP 404: not found", status_code=404)
        return self._resources[key]

    async def search_by_name_prefix(self, kind: ResourceKind, token: str, limit: int) -> SearchResult:
        self.searches.append((kind, token, limit))
        matches = [r for (k, _), r in self._resources.items() if k == kind and r.name.startswith(token)]
        matches = matches[:limit]
        return SearchResult(count=len(matches), resources=matches)

    async def attach_reference(self, target_id: int, reference_id: int) -> bool:
        if self.attach_error is not None:
            raise self.attach_error
        self.attachments.append((target_id, reference_id))
        return True

    async def __aenter__(self) -> FakeGateway:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture(autouse=True)
def _quiet_structlog():
    """Route log events to a ReturnLogger so nothing reaches stdout or stderr."""
    structlog.configure(
        processors=[structlog.processors.add_log_level, structlog.processors.KeyValueRenderer()],
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        context_class=dict,
        logger_factory=structlog.ReturnLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()
