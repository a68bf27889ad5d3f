"""Prometheus counters for monitor and resolver activity."""

from __future__ import annotations

from prometheus_client import Counter

monitor_polls_total = Counter(
    "cloudprov_monitor_polls_total",
    "Resource reads issued by the state monitor",
    ["mode"],
)

monitor_outcomes_total = Counter(
    "cloudprov_monitor_outcomes_total",
    "Terminal outcomes of readiness waits",
    ["mode", "outcome"],
)

provenance_fetches_total = Counter(
    "cloudprov_provenance_fetches_total",
    "Resource reads issued while walking provenance chains",
    ["kind"],
)

reference_resolutions_total = Counter(
    "cloudprov_reference_resolutions_total",
    "Id-or-name token resolutions by resolution path",
    ["path"],
)
