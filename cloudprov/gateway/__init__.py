"""Resource API Gateway.

Exposes:
    ResourceGateway     -- abstract read/search/attach interface used by the core.
    HttpResourceGateway -- httpx implementation against the REST control plane.
"""

from cloudprov.gateway.base import ResourceGateway
from cloudprov.gateway.http import HttpResourceGateway

__all__ = ["HttpResourceGateway", "ResourceGateway"]
