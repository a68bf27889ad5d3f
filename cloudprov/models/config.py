"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_ALLOW_EDIT_TAGS: frozenset[str] = frozenset({"os-unix", "os-linux"})


@dataclass
class GatewayConfig:
    """Control-plane API connection settings."""

    endpoint: str = "https://secure.sakura.ad.jp/cloud/zone"
    zone: str = "is1a"
    access_token: str = ""
    access_token_secret: str = ""
    timeout_seconds: float = 30.0


@dataclass
class MonitorConfig:
    """State monitor settings."""

    poll_interval: float = 5.0
    default_timeout: float = 0.0
    fail_fast: bool = False


@dataclass
class ProvenanceConfig:
    """Provenance resolver settings."""

    allow_edit_tags: frozenset[str] = DEFAULT_ALLOW_EDIT_TAGS
    max_depth: int | None = None


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    format: str = "json"


@dataclass
class CloudProvConfig:
    """Top-level cloudprov configuration."""

    gateway: GatewayConfig = field(default_factory=GatewayConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    provenance: ProvenanceConfig = field(default_factory=ProvenanceConfig)
    log: LogConfig = field(default_factory=LogConfig)
