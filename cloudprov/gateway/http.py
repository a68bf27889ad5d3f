"""httpx-backed Resource API Gateway.

Talks to a zone-scoped REST API of the form
``{endpoint}/{zone}/api/cloud/1.1/{collection}``.  Every transport failure or
non-2xx response surfaces as ``TransportError``; there is no retry here.
"""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote

import httpx
import structlog
from pydantic import ValidationError

from cloudprov.errors import TransportError
from cloudprov.gateway.base import ResourceGateway
from cloudprov.gateway.schemas import ResourcePayload, ResultFlagPayload, SearchPayload
from cloudprov.models.config import GatewayConfig
from cloudprov.models.resources import Resource, ResourceKind, SearchResult

_log = structlog.get_logger(component="gateway.http")

_API_PATH = "api/cloud/1.1"

# kind -> (collection path, single-record key, list key)
_COLLECTIONS: dict[ResourceKind, tuple[str, str, str]] = {
    ResourceKind.DISK: ("disk", "Disk", "Disks"),
    ResourceKind.ARCHIVE: ("archive", "Archive", "Archives"),
    ResourceKind.SERVER: ("server", "Server", "Servers"),
    ResourceKind.PACKET_FILTER: ("packetfilter", "PacketFilter", "PacketFilters"),
    ResourceKind.INTERFACE: ("interface", "Interface", "Interfaces"),
}


class HttpResourceGateway(ResourceGateway):
    """Resource gateway over HTTP basic-auth REST calls.

    Args:
        config: Endpoint, zone, credentials and request timeout.
        client: Optional pre-built ``httpx.AsyncClient`` (tests inject one
                with a ``MockTransport``).  When omitted the gateway owns
                its client and closes it in ``aclose``.
    """

    def __init__(self, config: GatewayConfig, client: httpx.AsyncClient | None = None) -> None:
        self._base_url = f"{config.endpoint.rstrip('/')}/{config.zone}/{_API_PATH}"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            auth=(config.access_token, config.access_token_secret),
            timeout=config.timeout_seconds,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> HttpResourceGateway:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def read_resource(self, kind: ResourceKind, resource_id: int) -> Resource:
        collection, record_key, _ = _COLLECTIONS[kind]
        body = await self._request("GET", f"{self._base_url}/{collection}/{resource_id}")
        record = body.get(record_key)
        if not isinstance(record, dict):
            raise TransportError(f"{kind} {resource_id}: response has no '{record_key}' record")
        return _parse_resource(kind, record)

    async def search_by_name_prefix(self, kind: ResourceKind, token: str, limit: int) -> SearchResult:
        collection, _, list_key = _COLLECTIONS[kind]
        # The API takes its find conditions as a JSON document in the query string
        query = json.dumps({"Filter": {"Name": token}, "Count": limit}, separators=(",", ":"))
        body = await self._request("GET", f"{self._base_url}/{collection}?{quote(query)}")
        try:
            envelope = SearchPayload.model_validate(body)
        except ValidationError as exc:
            raise TransportError(f"{kind} search: malformed response: {exc}") from exc
        records = body.get(list_key) or []
        resources = [_parse_resource(kind, record) for record in records[:limit]]
        return SearchResult(count=min(envelope.count, len(resources)), resources=resources)

    async def attach_reference(self, target_id: int, reference_id: int) -> bool:
        url = f"{self._base_url}/interface/{target_id}/to/packetfilter/{reference_id}"
        body = await self._request("PUT", url)
        try:
            return ResultFlagPayload.model_validate(body).is_ok
        except ValidationError as exc:
            raise TransportError(f"attach {reference_id} -> {target_id}: malformed response: {exc}") from exc

    async def _request(self, method: str, url: str) -> dict[str, Any]:
        try:
            response = await self._client.request(method, url)
        except httpx.TimeoutException as exc:
            _log.warning("gateway_request_timeout", method=method, url=url)
            raise TransportError(f"{method} {url}: request timed out") from exc
        except httpx.HTTPError as exc:
            _log.warning("gateway_http_error", method=method, url=url, error=str(exc))
            raise TransportError(f"{method} {url}: {exc}") from exc

        if not response.is_success:
            detail = _error_message(response)
            _log.warning(
                "gateway_non_2xx_response",
                method=method,
                url=url,
                status_code=response.status_code,
                detail=detail,
            )
            raise TransportError(
                f"{method} {url}: HTTP {response.status_code}: {detail}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise TransportError(f"{method} {url}: response is not JSON") from exc
        if not isinstance(body, dict):
            raise TransportError(f"{method} {url}: unexpected response body")
        return body


def _parse_resource(kind: ResourceKind, record: dict[str, Any]) -> Resource:
    try:
        return ResourcePayload.model_validate(record).to_resource(kind)
    except ValidationError as exc:
        raise TransportError(f"{kind}: malformed resource record: {exc}") from exc


def _error_message(response: httpx.Response) -> str:
    """Extract the provider's ``error_msg`` field, falling back to the raw body."""
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(payload, dict) and payload.get("error_msg"):
        return str(payload["error_msg"])
    return response.text[:200]
