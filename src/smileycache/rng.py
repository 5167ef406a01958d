"""Deterministic string-keyed random values."""

from __future__ import annotations

import hashlib
from typing import Callable

Luck = Callable[[str], float]

_DIGEST_SIZE = 8
_MODULUS = 2 ** (_DIGEST_SIZE * 8)


def luck(key: str) -> float:
    """Return a value in ``[0, 1)`` that depends only on ``key``."""
    digest = hashlib.blake2b(key.encode("utf-8"), digest_size=_DIGEST_SIZE).digest()
    return int.from_bytes(digest, "big") / _MODULUS


def luck_key(*parts: object) -> str:
    return ",".join(str(part) for part in parts)
