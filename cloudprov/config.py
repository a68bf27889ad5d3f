"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from cloudprov.models.config import (
    DEFAULT_ALLOW_EDIT_TAGS,
    CloudProvConfig,
    GatewayConfig,
    LogConfig,
    MonitorConfig,
    ProvenanceConfig,
)
from cloudprov.observability.logging import LOG_FORMATS


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"CLOUDPROV_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_float(key: str, default: float, min_val: float | None = None) -> float:
    val = float(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    return val


def _env_tags(key: str, default: frozenset[str]) -> frozenset[str]:
    raw = _env(key, "")
    if not raw.strip():
        return default
    return frozenset(tag.strip() for tag in raw.split(",") if tag.strip())


def _env_optional_depth(key: str) -> int | None:
    # 0 or unset disables the depth cap
    depth = _env_int(key, 0, min_val=0)
    return depth or None


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_log_format(value: str) -> str:
    if value.lower() not in LOG_FORMATS:
        raise ValueError(f"Invalid log format: {value}. Must be one of {LOG_FORMATS}")
    return value.lower()


def _validate_endpoint(value: str) -> str:
    if not value.startswith(("http://", "https://")):
        raise ValueError(f"Invalid API endpoint: {value}. Must be an http(s) URL")
    return value.rstrip("/")


def load_config() -> CloudProvConfig:
    """Load configuration from CLOUDPROV_* environment variables."""
    return CloudProvConfig(
        gateway=GatewayConfig(
            endpoint=_validate_endpoint(_env("API_ENDPOINT", "https://secure.sakura.ad.jp/cloud/zone")),
            zone=_env("ZONE", "is1a"),
            access_token=_env("ACCESS_TOKEN", ""),
            access_token_secret=_env("ACCESS_TOKEN_SECRET", ""),
            timeout_seconds=_env_float("HTTP_TIMEOUT", 30.0, min_val=1.0),
        ),
        monitor=MonitorConfig(
            poll_interval=_env_float("POLL_INTERVAL", 5.0, min_val=0.1),
            default_timeout=_env_float("WAIT_TIMEOUT", 0.0, min_val=0.0),
            fail_fast=_env_bool("FAIL_FAST", False),
        ),
        provenance=ProvenanceConfig(
            allow_edit_tags=_env_tags("ALLOW_EDIT_TAGS", DEFAULT_ALLOW_EDIT_TAGS),
            max_depth=_env_optional_depth("PROVENANCE_MAX_DEPTH"),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
            format=_validate_log_format(_env("LOG_FORMAT", "json")),
        ),
    )
