"""
In-memory chain used to run the lottery contract locally.

Tracks native balances per address and the current block context. It plays
the part a local dev node plays for a real contract: accounts are derived
deterministically from a label, so repeated runs give the same addresses.

Transfers are atomic: either both balances change or neither does.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Set

from .errors import TransferError, ValidationError
from .project_constants import BLOCK_TIME_S

log = logging.getLogger(__name__)

GENESIS_TIMESTAMP = 1_700_000_000


def _sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def derive_address(label: str) -> str:
    """20-byte hex address derived from a label."""
    return "0x" + _sha256(b"account|" + label.encode("utf-8"))[:20].hex()


def normalize_address(address: str) -> str:
    if not isinstance(address, str):
        raise ValidationError(f"Address must be a string, got {type(address)}")
    a = address.strip().lower()
    body = a[2:] if a.startswith("0x") else a
    if len(body) != 40:
        raise ValidationError(f"Bad address: {address!r}")
    try:
        bytes.fromhex(body)
    except ValueError:
        raise ValidationError(f"Bad address: {address!r}")
    return "0x" + body


@dataclass(frozen=True)
class BlockContext:
    number: int
    timestamp: int
    prev_randao: bytes

    @staticmethod
    def genesis() -> "BlockContext":
        return BlockContext(
            number=0,
            timestamp=GENESIS_TIMESTAMP,
            prev_randao=_sha256(b"randao|0"),
        )

    def next(self, seconds: int = BLOCK_TIME_S) -> "BlockContext":
        number = self.number + 1
        return BlockContext(
            number=number,
            timestamp=self.timestamp + seconds,
            prev_randao=_sha256(self.prev_randao + number.to_bytes(8, "big")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "timestamp": self.timestamp,
            "prev_randao": "0x" + self.prev_randao.hex(),
        }

    @staticmethod
    def from_dict(obj: Dict[str, Any]) -> "BlockContext":
        randao = str(obj["prev_randao"])
        if randao.startswith("0x"):
            randao = randao[2:]
        return BlockContext(
            number=int(obj["number"]),
            timestamp=int(obj["timestamp"]),
            prev_randao=bytes.fromhex(randao),
        )


@dataclass
class SimulatedChain:
    block: BlockContext = field(default_factory=BlockContext.genesis)
    balances: Dict[str, int] = field(default_factory=dict)
    rejecting: Set[str] = field(default_factory=set)

    # ---- Accounts ----

    def create_account(self, label: str, balance: int = 0) -> str:
        address = derive_address(label)
        self.balances.setdefault(address, 0)
        if balance:
            self.fund(address, balance)
        return address

    def create_accounts(self, count: int, balance: int = 0) -> List[str]:
        return [self.create_account(f"signer-{i}", balance) for i in range(count)]

    def accounts(self) -> List[str]:
        return list(self.balances)

    def fund(self, address: str, amount: int) -> None:
        address = normalize_address(address)
        if amount < 0:
            raise ValidationError("amount must be non-negative")
        self.balances[address] = self.balances.get(address, 0) + amount

    def balance_of(self, address: str) -> int:
        return self.balances.get(normalize_address(address), 0)

    def reject_payments(self, address: str, reject: bool = True) -> None:
        """Make `address` refuse incoming value, like a contract without a receive hook."""
        address = normalize_address(address)
        if reject:
            self.rejecting.add(address)
        else:
            self.rejecting.discard(address)

    # ---- Value ----

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        sender = normalize_address(sender)
        recipient = normalize_address(recipient)
        if not isinstance(amount, int) or amount < 0:
            raise ValidationError("amount must be a non-negative int")

        available = self.balances.get(sender, 0)
        if available < amount:
            raise TransferError(
                f"Insufficient balance: {sender} has {available}, needs {amount}"
            )
        if recipient in self.rejecting:
            raise TransferError(f"Transfer failed: {recipient} rejected payment")

        self.balances[sender] = available - amount
        self.balances[recipient] = self.balances.get(recipient, 0) + amount
        log.debug("transfer %s -> %s: %d", sender, recipient, amount)

    # ---- Blocks ----

    def mine(self, seconds: int = BLOCK_TIME_S) -> BlockContext:
        self.block = self.block.next(seconds)
        return self.block

    # ---- Serialization ----

    def to_dict(self) -> Dict[str, Any]:
        return {
            "block": self.block.to_dict(),
            "balances": {a: str(b) for a, b in self.balances.items()},
            "rejecting": sorted(self.rejecting),
        }

    @staticmethod
    def from_dict(obj: Dict[str, Any]) -> "SimulatedChain":
        return SimulatedChain(
            block=BlockContext.from_dict(obj["block"]),
            balances={a: int(b) for a, b in obj.get("balances", {}).items()},
            rejecting=set(obj.get("rejecting", [])),
        )
