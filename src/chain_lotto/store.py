"""
Save and load the single deployed round for the CLI.

The file holds the simulated chain (balances, current block), the contract
and manager addresses and the live round. There is no history: a draw or
emergency withdrawal resets the round in place.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict

from .chain import SimulatedChain
from .lotto import RoundState

FORMAT_VERSION = 1


@dataclass
class Deployment:
    chain: SimulatedChain
    contract: str
    manager: str
    minimum_entry_fee: int
    state: RoundState

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": FORMAT_VERSION,
            "contract": self.contract,
            "manager": self.manager,
            "minimum_entry_fee": str(self.minimum_entry_fee),
            "round": self.state.to_dict(),
            "chain": self.chain.to_dict(),
        }

    @staticmethod
    def from_dict(obj: Dict[str, Any]) -> "Deployment":
        version = int(obj.get("version", 0))
        if version != FORMAT_VERSION:
            raise RuntimeError(
                f"Unsupported state file version {version} (expected {FORMAT_VERSION})"
            )
        return Deployment(
            chain=SimulatedChain.from_dict(obj["chain"]),
            contract=obj["contract"],
            manager=obj["manager"],
            minimum_entry_fee=int(obj["minimum_entry_fee"]),
            state=RoundState.from_dict(obj["round"]),
        )


def save_deployment(path: str, deployment: Deployment) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(deployment.to_dict(), f, indent=2)


def load_deployment(path: str) -> Deployment:
    try:
        with open(path, "r", encoding="utf-8") as f:
            obj = json.load(f)
    except FileNotFoundError:
        raise RuntimeError(f"No deployment at {path}. Run `chain-lotto deploy` first.")
    except ValueError as e:
        raise RuntimeError(f"State file {path} is not valid JSON: {e}")
    return Deployment.from_dict(obj)
