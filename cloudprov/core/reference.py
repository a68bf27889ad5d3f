"""Id-or-name reference resolution and attachment.

A user may name a packet filter either by its numeric id or by its display
name.  Digit-only tokens are always ids and are read directly; a failed
read propagates and is never retried as a name search.  Any other token is
resolved by a name-prefix search capped at one match.
"""

from __future__ import annotations

import structlog

from cloudprov.errors import NotFoundError
from cloudprov.gateway.base import ResourceGateway
from cloudprov.ids import is_numeric_token
from cloudprov.models.resources import InterfaceSlot, Resource, ResourceKind
from cloudprov.observability.metrics import reference_resolutions_total

_log = structlog.get_logger(component="core.reference")


class ReferenceResolver:
    """Resolves id-or-name tokens to one resource id and attaches it.

    Args:
        gateway: Gateway used for lookups and the attach mutation.
        kind:    Kind of the referenced resource.
    """

    def __init__(self, gateway: ResourceGateway, kind: ResourceKind = ResourceKind.PACKET_FILTER) -> None:
        self._gateway = gateway
        self._kind = kind

    async def resolve(self, token: str) -> int | None:
        """Return the id *token* refers to, or None for an empty token.

        Raises:
            TransportError: the direct read of a numeric token failed.
            NotFoundError:  a name token matched nothing.
        """
        if not token:
            reference_resolutions_total.labels(path="empty").inc()
            return None

        if is_numeric_token(token):
            resource = await self._gateway.read_resource(self._kind, int(token))
            reference_resolutions_total.labels(path="id").inc()
            return resource.resource_id

        result = await self._gateway.search_by_name_prefix(self._kind, token, limit=1)
        if result.count == 0 or not result.resources:
            reference_resolutions_total.labels(path="not_found").inc()
            raise NotFoundError(str(self._kind), token)

        reference_resolutions_total.labels(path="name").inc()
        return result.resources[0].resource_id

    async def attach(self, target_id: int, token: str) -> int | None:
        """Resolve *token* and attach it to the interface *target_id*.

        Returns the attached id, or None when the token is empty and nothing
        was attached.  Mutation errors propagate unchanged.
        """
        reference_id = await self.resolve(token)
        if reference_id is None:
            return None

        await self._gateway.attach_reference(target_id, reference_id)
        _log.info(
            "reference_attached",
            kind=str(self._kind),
            target_id=target_id,
            reference_id=reference_id,
            token=token,
        )
        return reference_id

    async def attach_to_shared_nic(self, server: Resource, token: str) -> int | None:
        """Attach to the server's first (shared segment) interface."""
        return await self._attach_to_slot(server, InterfaceSlot.SHARED, token)

    async def attach_to_private_nic(self, server: Resource, token: str) -> int | None:
        """Attach to the server's second (private segment) interface."""
        return await self._attach_to_slot(server, InterfaceSlot.PRIVATE, token)

    async def _attach_to_slot(self, server: Resource, slot: InterfaceSlot, token: str) -> int | None:
        if len(server.interface_ids) <= slot:
            _log.debug(
                "interface_slot_missing",
                server_id=server.resource_id,
                slot=slot.name.lower(),
                interfaces=len(server.interface_ids),
            )
            return None
        return await self.attach(server.interface_ids[slot], token)
