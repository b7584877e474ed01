"""
Exceptions raised when a lottery operation is rejected.

Every rejection is all-or-nothing: when one of these is raised the round
state is exactly what it was before the call.

LottoError
 ├─ AuthorizationError : caller is not allowed to do this
 ├─ ValidationError    : bad input (amount, duplicate entry, address)
 ├─ StateError         : wrong paused/unpaused state, empty round, broken invariant
 └─ TransferError      : the ledger could not move value
"""

from __future__ import annotations


class LottoError(RuntimeError):
    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class AuthorizationError(LottoError):
    pass


class ValidationError(LottoError):
    pass


class StateError(LottoError):
    pass


class TransferError(LottoError):
    """Value could not be moved (insufficient funds, recipient rejects)."""


__all__ = [
    "LottoError",
    "AuthorizationError",
    "ValidationError",
    "StateError",
    "TransferError",
]
