"""Provenance-based edit capability resolution.

Only disks derived from a recognised installed operating system can be
edited in place (hostname, SSH keys, network settings).  The resolver walks
the "copied from" chain of a disk or archive until one of these rules
decides:

1. the resource carries ``BundleInfo``          -> not editable
2. the resource has no source disk or archive   -> not editable (blank)
3. any tag is in the allow-edit tag set         -> editable
4. every source link is discontinued            -> not editable
5. otherwise continue with the nearest non-discontinued source
   (source disk first, then source archive)

The chain is expected to be a simple list.  A visited set and an optional
depth cap end the walk with ``False`` if the provider ever reports a cycle
or an unexpectedly deep chain.
"""

from __future__ import annotations

from collections.abc import Iterable

from cloudprov.gateway.base import ResourceGateway
from cloudprov.models.config import DEFAULT_ALLOW_EDIT_TAGS
from cloudprov.models.resources import ResourceKind
from cloudprov.observability.logging import get_logger
from cloudprov.observability.metrics import provenance_fetches_total

_log = get_logger("core.provenance")


class ProvenanceResolver:
    """Decides whether a disk or archive may be edited in place.

    Args:
        gateway:         Gateway used to fetch each link of the chain.
        allow_edit_tags: Tags whose presence makes a resource editable
                         regardless of its lineage.
        max_depth:       Maximum number of ancestors to follow, or None for
                         no limit beyond chain termination.
    """

    def __init__(
        self,
        gateway: ResourceGateway,
        allow_edit_tags: Iterable[str] = DEFAULT_ALLOW_EDIT_TAGS,
        max_depth: int | None = None,
    ) -> None:
        self._gateway = gateway
        self._allow_edit_tags = frozenset(allow_edit_tags)
        self._max_depth = max_depth

    @property
    def allow_edit_tags(self) -> frozenset[str]:
        return self._allow_edit_tags

    async def can_edit(self, resource_id: int, kind: ResourceKind = ResourceKind.DISK) -> bool:
        """Return True if the resource may be edited in place.

        Nothing is cached; every call re-reads the whole chain.  Gateway
        errors propagate unchanged.
        """
        visited: set[tuple[ResourceKind, int]] = set()
        depth = 0
        current_kind, current_id = kind, resource_id

        while True:
            visited.add((current_kind, current_id))
            provenance_fetches_total.labels(kind=str(current_kind)).inc()
            resource = await self._gateway.read_resource(current_kind, current_id)

            if resource.has_bundle_info:
                return self._decide(resource_id, False, "bundle_info", current_kind, current_id, depth)

            if resource.is_blank_sourced:
                return self._decide(resource_id, False, "blank_source", current_kind, current_id, depth)

            if resource.tags & self._allow_edit_tags:
                return self._decide(resource_id, True, "allow_edit_tag", current_kind, current_id, depth)

            source = resource.nearest_source()
            if source is None:
                return self._decide(resource_id, False, "discontinued_source", current_kind, current_id, depth)

            if (source.kind, source.resource_id) in visited:
                _log.warning(
                    "provenance_cycle_detected",
                    resource_id=resource_id,
                    revisited_kind=str(source.kind),
                    revisited_id=source.resource_id,
                    depth=depth,
                )
                return self._decide(resource_id, False, "cycle", source.kind, source.resource_id, depth)

            depth += 1
            if self._max_depth is not None and depth > self._max_depth:
                _log.warning("provenance_depth_exceeded", resource_id=resource_id, max_depth=self._max_depth)
                return self._decide(resource_id, False, "max_depth", source.kind, source.resource_id, depth)

            current_kind, current_id = source.kind, source.resource_id

    @staticmethod
    def _decide(
        resource_id: int,
        editable: bool,
        reason: str,
        decided_kind: ResourceKind,
        decided_id: int,
        depth: int,
    ) -> bool:
        _log.debug(
            "edit_capability_resolved",
            resource_id=resource_id,
            editable=editable,
            reason=reason,
            decided_by=f"{decided_kind}/{decided_id}",
            depth=depth,
        )
        return editable
