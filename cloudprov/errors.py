"""Exception hierarchy for cloudprov.

TransportError is raised by gateways and always propagates unchanged.  The
remaining errors are generated by the monitor and resolvers and are terminal
for the operation that raised them.
"""

from __future__ import annotations


class CloudProvError(Exception):
    """Base class for every error raised by cloudprov."""


class TransportError(CloudProvError):
    """An underlying read or write against the control-plane API failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MonitorTimeoutError(CloudProvError, TimeoutError):
    """The deadline elapsed before the resource became available."""

    def __init__(self, resource_id: int, timeout: float) -> None:
        super().__init__(f"Timeout: resource {resource_id} not available after {timeout:g}s")
        self.resource_id = resource_id
        self.timeout = timeout


class ProvisioningFailedError(CloudProvError):
    """The resource reported a failed terminal state."""

    def __init__(self, resource_id: int, availability: str) -> None:
        super().__init__(f"Failed: resource {resource_id} reported availability '{availability}'")
        self.resource_id = resource_id
        self.availability = availability


class NotFoundError(CloudProvError):
    """Name resolution matched zero resources."""

    def __init__(self, kind: str, token: str) -> None:
        super().__init__(f"{kind} [{token}](name): Not Found")
        self.kind = kind
        self.token = token


class WatchCancelledError(CloudProvError):
    """A streaming watch was cancelled before reaching a terminal state."""

    def __init__(self, resource_id: int) -> None:
        super().__init__(f"Watch on resource {resource_id} was cancelled")
        self.resource_id = resource_id


class InvalidResourceIdError(CloudProvError, ValueError):
    """A resource id string is not a valid 64-bit numeric identifier."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Resource id is invalid: {value!r}")
        self.value = value
