from __future__ import annotations

import hashlib
from decimal import Decimal, InvalidOperation
from typing import Tuple

from .errors import ValidationError
from .project_constants import WEI_DECIMALS

_WEI_PER_ETHER = Decimal(10**WEI_DECIMALS)


def to_ether(raw_amount: int) -> str:
    value = (Decimal(raw_amount) / _WEI_PER_ETHER).normalize()
    # normalize() turns 1000 into 1E+3
    return f"{value:f}"


def parse_ether(text: str) -> int:
    try:
        value = Decimal(str(text).strip())
    except InvalidOperation:
        raise ValidationError(f"Not an ether amount: {text!r}")
    if not value.is_finite():
        raise ValidationError(f"Not an ether amount: {text!r}")
    wei = value * _WEI_PER_ETHER
    if value < 0 or wei != wei.to_integral_value():
        raise ValidationError(f"Not an ether amount: {text!r}")
    return int(wei)


def compute_index(seed: bytes, count: int) -> Tuple[int, str, int]:
    """
    Map an entropy seed onto a participant index.

    The seed is hashed with SHA-256 and the digest, read as a big-endian
    integer, is reduced modulo `count`.
    """
    if count <= 0:
        raise ValueError("count must be positive")
    seed_hash_hex = hashlib.sha256(seed).hexdigest()
    seed_int = int(seed_hash_hex, 16)
    return seed_int % count, seed_hash_hex, seed_int
