"""Readiness monitoring and provenance/reference resolution.

Exposes:
    StateMonitor       -- blocking and streaming readiness waits.
    ReadinessWatch     -- handle returned by StateMonitor.watch_until_ready.
    ProvenanceResolver -- edit capability from a disk's provenance chain.
    ReferenceResolver  -- id-or-name resolution and attachment.
"""

from cloudprov.core.monitor import LatestValueChannel, ReadinessWatch, StateMonitor
from cloudprov.core.provenance import ProvenanceResolver
from cloudprov.core.reference import ReferenceResolver

__all__ = [
    "LatestValueChannel",
    "ProvenanceResolver",
    "ReadinessWatch",
    "ReferenceResolver",
    "StateMonitor",
]
