"""
Entropy sources for winner selection.

The lottery only needs an object with `seed(participants) -> bytes`. The
block-context sources below mix the block's prev_randao, timestamp and
number with the participant list. That is cheap and predictable: whoever
controls block production (or just waits for a favourable block) can steer
the result. Fine for a toy pool, not for real stakes, where a verifiable
randomness provider should be plugged in instead.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from .chain import SimulatedChain
from .rpc import BlockHeader, RpcClient


class EntropySource(Protocol):
    def seed(self, participants: Sequence[str]) -> bytes: ...


def block_seed(
    prev_randao: bytes, timestamp: int, number: int, participants: Sequence[str]
) -> bytes:
    parts = [
        prev_randao,
        timestamp.to_bytes(32, "big"),
        number.to_bytes(32, "big"),
    ]
    parts.extend(p.lower().encode("utf-8") for p in participants)
    return b"|".join(parts)


class BlockEntropy:
    """Seed from the simulated chain's current block."""

    def __init__(self, chain: SimulatedChain) -> None:
        self.chain = chain

    def seed(self, participants: Sequence[str]) -> bytes:
        b = self.chain.block
        return block_seed(b.prev_randao, b.timestamp, b.number, participants)


class RpcBlockEntropy:
    """Seed from the latest block of a live node."""

    def __init__(self, client: RpcClient, block: int | str = "latest") -> None:
        self.client = client
        self.block = block
        self.last_header: BlockHeader | None = None

    def seed(self, participants: Sequence[str]) -> bytes:
        header = self.client.get_block(self.block)
        self.last_header = header
        return block_seed(
            header.prev_randao, header.timestamp, header.number, participants
        )


class FixedEntropy:
    """Always returns the same seed. For tests and replays."""

    def __init__(self, value: bytes | str) -> None:
        self.value = value.encode("utf-8") if isinstance(value, str) else bytes(value)

    def seed(self, participants: Sequence[str]) -> bytes:
        return self.value


class HeaderEntropy:
    """Seed from a fixed block header, e.g. one loaded with `load_block_from_file`."""

    def __init__(self, header: BlockHeader) -> None:
        self.header = header

    def seed(self, participants: Sequence[str]) -> bytes:
        h = self.header
        return block_seed(h.prev_randao, h.timestamp, h.number, participants)
