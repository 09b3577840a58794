"""
Record identifiers.

Ids are 24 lowercase hex characters: a 4-byte big-endian seconds timestamp
followed by 8 random bytes.
"""

from __future__ import annotations

import re
import secrets
import time
from collections.abc import Iterable

from .errors import MalformedIdentifier

ID_LENGTH = 24

_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


def new_id() -> str:
    stamp = int(time.time()) & 0xFFFFFFFF
    return f"{stamp:08x}{secrets.token_hex(8)}"


def is_valid_id(value: object) -> bool:
    return isinstance(value, str) and _ID_RE.match(value) is not None


def normalize_id(value: str) -> str:
    return value.lower()


def validate_ids(ids: Iterable[object] | None) -> None:
    """
    Fail the whole batch if any token is malformed.

    `None` means no batch was attached and passes untouched. No report of which
    tokens failed is produced.
    """
    if ids is None:
        return None
    if not all(is_valid_id(value) for value in ids):
        raise MalformedIdentifier()
    return None
