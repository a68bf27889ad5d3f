"""Core data structures for cloudprov."""

from cloudprov.models.config import CloudProvConfig
from cloudprov.models.resources import (
    Availability,
    InterfaceSlot,
    Resource,
    ResourceKind,
    ResourceState,
    SearchResult,
    SourceRef,
)

__all__ = [
    "Availability",
    "CloudProvConfig",
    "InterfaceSlot",
    "Resource",
    "ResourceKind",
    "ResourceState",
    "SearchResult",
    "SourceRef",
]
