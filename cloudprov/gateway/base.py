"""Abstract Resource API Gateway consumed by the monitor and resolvers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from cloudprov.models.resources import Resource, ResourceKind, SearchResult


class ResourceGateway(ABC):
    """Synchronous-semantics read/mutate operations on single resources.

    Implementations raise ``TransportError`` on any failed call and never
    retry internally on behalf of the core.  Instances must tolerate
    concurrent independent calls.
    """

    @abstractmethod
    async def read_resource(self, kind: ResourceKind, resource_id: int) -> Resource:
        """Return the current view of the resource, or raise TransportError."""

    @abstractmethod
    async def search_by_name_prefix(self, kind: ResourceKind, token: str, limit: int) -> SearchResult:
        """Return at most *limit* resources of *kind* whose name matches *token*."""

    @abstractmethod
    async def attach_reference(self, target_id: int, reference_id: int) -> bool:
        """Attach *reference_id* (e.g. a packet filter) to the interface *target_id*.

        The mutation is idempotent.  Returns the provider acknowledgement flag.
        """
