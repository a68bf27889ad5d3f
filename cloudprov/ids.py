"""Resource id parsing for user-facing inputs."""

from __future__ import annotations

import re
from collections.abc import Iterable

from cloudprov.errors import InvalidResourceIdError

_RE_NUMERIC_ID = re.compile(r"[0-9]+")
_MAX_ID = 2**63 - 1


def is_numeric_token(token: str) -> bool:
    """True when *token* consists only of ASCII digits."""
    return _RE_NUMERIC_ID.fullmatch(token) is not None


def parse_resource_id(value: str) -> int:
    """Parse a positive 64-bit resource id.

    Raises:
        InvalidResourceIdError: if *value* is not a decimal id in range.
    """
    text = value.strip()
    if not is_numeric_token(text):
        raise InvalidResourceIdError(value)
    resource_id = int(text)
    if resource_id <= 0 or resource_id > _MAX_ID:
        raise InvalidResourceIdError(value)
    return resource_id


def parse_resource_ids(values: Iterable[str]) -> list[int]:
    """Parse every id in *values*, failing on the first invalid one."""
    return [parse_resource_id(value) for value in values]
